"""
POSTA Data

Reference data for the manual fee carrier.

Structure:
    - reference/: Static reference data (form defaults)
"""

from .reference.manual_fee import DEFAULT_NET_FEE, DEFAULT_PROFIT, FIXED_WEIGHT

__all__ = [
    "DEFAULT_NET_FEE",
    "DEFAULT_PROFIT",
    "FIXED_WEIGHT",
]
