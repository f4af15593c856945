"""
Declared Value Surcharge - Percentage (VAL_PCT)

J&T insures the goods against loss. For orders worth 1,000 EGP or more the
insurance is billed as a share of the order value instead of the flat fee.

Mutually exclusive with VAL_FLAT (VAL_PCT wins).
"""

import polars as pl
from shared.surcharges import Surcharge, at_least


class VAL_PCT(Surcharge):
    """Declared value surcharge - 1% of total_amount at or above 1,000."""

    # Identity
    name = "VAL_PCT"

    # Pricing
    rate = 0.01
    value_col = "total_amount"

    # Exclusivity
    exclusivity_group = "value"
    priority = 1

    # Thresholds
    value_threshold = 1000

    @classmethod
    def conditions(cls) -> pl.Expr:
        return at_least(cls.value_threshold, cls.value_col)
