"""
Declared Value Surcharge - Flat (VAL_FLAT)

Flat insurance fee for orders below the VAL_PCT threshold. Listed as the
lower priority member of the "value" group so it only lands on orders
that VAL_PCT did not claim.
"""

from shared.surcharges import Surcharge


class VAL_FLAT(Surcharge):
    """Declared value surcharge - flat 5 EGP below 1,000."""

    # Identity
    name = "VAL_FLAT"

    # Pricing
    list_price = 5.0

    # Exclusivity
    exclusivity_group = "value"
    priority = 2

    # Uses default conditions() -> pl.lit(True)
