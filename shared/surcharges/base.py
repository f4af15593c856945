"""
Surcharge Base Class

Shared base class for all carrier surcharges.
"""

from abc import ABC
import polars as pl


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def at_least(threshold: float, value_col: str = "total_amount") -> pl.Expr:
    """
    Check if a value column reaches a threshold (inclusive).

    Nulls count as zero, so an order without a value never reaches a
    positive threshold.

    Args:
        threshold: Minimum value (inclusive)
        value_col: Column name containing the value

    Returns:
        Polars expression evaluating to True if value >= threshold
    """
    return pl.col(value_col).fill_null(0.0) >= threshold


# =============================================================================
# BASE CLASS
# =============================================================================

class Surcharge(ABC):
    """
    Base class for all surcharges.

    Attributes:
        IDENTITY
            name            - Short code (e.g., "VAL_FLAT", "VAL_PCT")

        PRICING
            list_price      - Flat amount charged when triggered
            rate            - Share of value_col charged instead (0.01 = 1%)
            value_col       - Column the rate applies to

        EXCLUSIVITY (for mutually exclusive surcharges)
            exclusivity_group - Group name (e.g., "value")
            priority          - Rank within group (1 = highest, wins ties)
    """

    # -------------------------------------------------------------------------
    # IDENTITY
    # -------------------------------------------------------------------------
    name: str

    # -------------------------------------------------------------------------
    # PRICING
    # -------------------------------------------------------------------------
    list_price: float = 0.0
    rate: float | None = None
    value_col: str = "total_amount"

    # -------------------------------------------------------------------------
    # EXCLUSIVITY
    # -------------------------------------------------------------------------
    exclusivity_group: str | None = None
    priority: int | None = None

    # -------------------------------------------------------------------------
    # METHODS
    # -------------------------------------------------------------------------

    @classmethod
    def is_value_based(cls) -> bool:
        """True if the surcharge scales with value_col."""
        return cls.rate is not None

    @classmethod
    def cost(cls) -> float | pl.Expr:
        """
        Cost per order.

        Flat surcharges return a float. Value-based surcharges return a
        Polars expression (rate * value_col, nulls as zero).
        """
        if cls.is_value_based():
            return pl.col(cls.value_col).fill_null(0.0) * cls.rate
        return cls.list_price

    @classmethod
    def conditions(cls) -> pl.Expr:
        """
        Polars expression for when this surcharge triggers.

        Default returns True (applies to every order).
        Override for surcharges with specific conditions.
        """
        return pl.lit(True)
