"""
POSTA Shipping Cost Calculator

DataFrame in, DataFrame out. POSTA fees are entered by hand, so the
calculator does not price anything: it carries the operator's net fee into
the same cost columns the other carriers produce.

REQUIRED INPUT COLUMNS
----------------------
    net_fee             - Net POSTA fee typed by the operator (null = DEFAULT_NET_FEE)

OUTPUT COLUMNS ADDED
--------------------
    calculate() adds:
        - billable_weight_kg (always FIXED_WEIGHT)
        - cost_base, cost_subtotal, cost_total
        - calculator_version

USAGE
-----
    from carriers.posta.calculate_costs import calculate_costs
    result = calculate_costs(df)
"""

import polars as pl

from .version import VERSION
from .data import DEFAULT_NET_FEE, FIXED_WEIGHT


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================

def calculate_costs(df: pl.DataFrame) -> pl.DataFrame:
    """
    Calculate POSTA shipping costs for an order DataFrame.

    Args:
        df: Order DataFrame with a net_fee column

    Returns:
        DataFrame with weight, costs, and version appended

    Raises:
        ValueError: If any net_fee is negative
    """
    df = _validate_net_fee(df)
    df = calculate(df)
    return df


def _validate_net_fee(df: pl.DataFrame) -> pl.DataFrame:
    """Fill missing fees with the default and reject negative ones."""
    df = df.with_columns(
        pl.col("net_fee").cast(pl.Float64).fill_null(float(DEFAULT_NET_FEE))
    )

    negative = df.filter(pl.col("net_fee") < 0)
    if len(negative) > 0:
        raise ValueError(
            f"{len(negative)} order(s) have a negative POSTA net fee. "
            f"Enter the fee from the POSTA receipt."
        )

    return df


# =============================================================================
# CALCULATE COSTS
# =============================================================================

def calculate(df: pl.DataFrame) -> pl.DataFrame:
    """
    Carry the manual fee into the cost columns.

    Processing order:
        1. Weight   - fixed, POSTA ignores the parcel weight
        2. Base     - the operator's net fee
        3. Totals   - no surcharges, no fuel
    """
    df = df.with_columns(pl.lit(float(FIXED_WEIGHT)).alias("billable_weight_kg"))
    df = df.with_columns(pl.col("net_fee").alias("cost_base"))
    df = df.with_columns(pl.col("cost_base").alias("cost_subtotal"))
    df = df.with_columns(pl.col("cost_subtotal").alias("cost_total"))
    df = df.with_columns(pl.lit(VERSION).alias("calculator_version"))
    return df


__all__ = [
    "calculate_costs",
    "calculate",
]
