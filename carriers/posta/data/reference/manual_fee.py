"""
Manual Fee Configuration

POSTA has no published tariff we can compute against. The net fee is read
off the POSTA receipt and typed in by the operator when the order is
dispatched, so the only reference data are the pre-filled form values.

Weight does not affect the POSTA fee; the order is recorded at FIXED_WEIGHT.
"""

DEFAULT_NET_FEE = 0           # Pre-filled net fee on the confirmation form
DEFAULT_PROFIT = 5            # Pre-filled shipping margin
FIXED_WEIGHT = 1              # Weight recorded on POSTA orders
