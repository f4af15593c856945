"""
Shared

Code used by every carrier and by the order desk: surcharge base class,
database access, logging setup.
"""
