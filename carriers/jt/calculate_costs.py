"""
J&T Express Shipping Cost Calculator

DataFrame in, DataFrame out. The input can come from any source (order
store, CSV, manual creation) as long as it contains the required columns.
The output is the same DataFrame with calculation columns and costs appended.

REQUIRED INPUT COLUMNS
----------------------
    city                - Destination governorate (zone lookup key)
    total_amount        - Product value of the order (value surcharge)
    weight_kg           - Shipment weight in kilograms (null = DEFAULT_WEIGHT)

OUTPUT COLUMNS ADDED
--------------------
    supplement_orders() adds:
        - shipping_zone, base_price, extra_per_kg
        - billable_weight_kg, extra_weight_kg

    calculate() adds:
        - surcharge_* flags (val_pct, val_flat)
        - cost_* amounts (base, extra_weight, val_pct, val_flat, subtotal, total)
        - calculator_version

USAGE
-----
    from carriers.jt.calculate_costs import calculate_costs
    result = calculate_costs(df)
"""

from typing import NamedTuple

import polars as pl

from .version import VERSION
from .data import (
    build_zone_table,
    load_rates,
    BASE_WEIGHT,
    DEFAULT_WEIGHT,
    DEFAULT_ZONE,
)
from .surcharges import (
    ALL,
    get_exclusivity_group,
    get_unique_exclusivity_groups,
)


class Zone(NamedTuple):
    """Pricing tier for a destination city."""
    zone: str
    base_price: float
    extra_per_kg: float


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================

def calculate_costs(
    df: pl.DataFrame,
    zones: pl.DataFrame | None = None,
    rates: pl.DataFrame | None = None,
) -> pl.DataFrame:
    """
    Calculate J&T shipping costs for an order DataFrame.

    This is the main entry point. Takes raw order data and returns
    the same DataFrame with all calculation columns and costs appended.

    Args:
        df: Order DataFrame with required columns (see module docstring)
        zones: City to zone mapping (loaded from zones.csv if not provided)
        rates: Zone prices (loaded from base_rates.csv if not provided)

    Returns:
        DataFrame with supplemented data, surcharge flags, and costs
    """
    df = supplement_orders(df, zones, rates)
    df = calculate(df)
    return df


def zone_for(
    city: str,
    zones: pl.DataFrame | None = None,
    rates: pl.DataFrame | None = None,
) -> Zone:
    """
    Look up the pricing tier for a single city.

    Never fails: cities that are not listed resolve to the remote tier.
    """
    df = _lookup_zones(pl.DataFrame({"city": [city]}), zones, rates)
    row = df.row(0, named=True)
    return Zone(row["shipping_zone"], row["base_price"], row["extra_per_kg"])


# =============================================================================
# SUPPLEMENT ORDERS
# =============================================================================

def supplement_orders(
    df: pl.DataFrame,
    zones: pl.DataFrame | None = None,
    rates: pl.DataFrame | None = None,
) -> pl.DataFrame:
    """
    Supplement order data with zone and weight calculations.

    Args:
        df: Raw order DataFrame
        zones: City to zone mapping (loaded if not provided)
        rates: Zone prices (loaded if not provided)

    Returns:
        DataFrame with added columns:
            - shipping_zone, base_price, extra_per_kg
            - billable_weight_kg, extra_weight_kg
    """
    df = _lookup_zones(df, zones, rates)
    df = _add_billable_weight(df)
    return df


def _lookup_zones(
    df: pl.DataFrame,
    zones: pl.DataFrame | None,
    rates: pl.DataFrame | None,
) -> pl.DataFrame:
    """
    Add zone and zone prices based on the destination city.

    EXACT MATCH
    -----------
    The city is trimmed and compared as-is. No case folding, no
    normalization of alternative spellings.

    FALLBACK
    --------
    Cities without a match get DEFAULT_ZONE and its prices.
    """
    if rates is None:
        rates = load_rates()
    table = build_zone_table(zones, rates)

    default = rates.filter(pl.col("zone") == DEFAULT_ZONE).row(0, named=True)

    df = df.with_row_index("_row_id").with_columns(
        pl.col("city").cast(pl.Utf8).str.strip_chars().alias("_city_key")
    )

    df = (
        df
        .join(
            table.rename({"city": "_city_key", "zone": "_zone"}),
            on="_city_key",
            how="left",
        )
        .sort("_row_id")
    )

    df = df.with_columns([
        pl.coalesce([pl.col("_zone"), pl.lit(DEFAULT_ZONE)]).alias("shipping_zone"),
        pl.coalesce([pl.col("base_price"), pl.lit(float(default["base_price"]))])
        .alias("base_price"),
        pl.coalesce([pl.col("extra_per_kg"), pl.lit(float(default["extra_per_kg"]))])
        .alias("extra_per_kg"),
    ])

    return df.drop(["_row_id", "_city_key", "_zone"])


def _add_billable_weight(df: pl.DataFrame) -> pl.DataFrame:
    """
    Calculate billable and extra weight.

    The first BASE_WEIGHT kilograms are included in the base price;
    anything above is billed per kg.
    """
    df = df.with_columns(
        pl.col("weight_kg").cast(pl.Float64).fill_null(float(DEFAULT_WEIGHT))
        .alias("billable_weight_kg")
    )

    return df.with_columns(
        pl.max_horizontal(
            pl.lit(0.0),
            pl.col("billable_weight_kg") - BASE_WEIGHT,
        ).alias("extra_weight_kg")
    )


# =============================================================================
# CALCULATE COSTS
# =============================================================================

def calculate(df: pl.DataFrame) -> pl.DataFrame:
    """
    Calculate shipping costs for supplemented orders.

    Args:
        df: Supplemented order DataFrame from supplement_orders

    Returns:
        DataFrame with surcharge flags, costs, and totals

    Processing order:
        1. Surcharges       - value surcharge group (VAL_PCT beats VAL_FLAT)
        2. Base rate        - zone base price
        3. Extra weight     - kilograms above BASE_WEIGHT at the zone rate
        4. Subtotal / total - no fuel surcharge on J&T
    """
    df = df.with_columns(pl.col("total_amount").cast(pl.Float64))

    # Phase 1: Apply surcharges
    df = _apply_surcharges(df, ALL)

    # Phase 2: Base rate from zone
    df = _lookup_base_rate(df)

    # Phase 3: Per-kg charge above base weight
    df = _apply_extra_weight(df)

    # Phase 4: Calculate costs
    df = _calculate_subtotal(df)
    df = _calculate_total(df)

    # Phase 5: Stamp version
    df = _stamp_version(df)

    return df


def _apply_surcharges(df: pl.DataFrame, surcharges: list) -> pl.DataFrame:
    """
    Apply surcharges, handling mutual exclusivity within exclusivity groups.

    Surcharges with the same exclusivity_group compete - only highest priority wins.
    Surcharges without exclusivity_group are applied independently.
    """
    standalone = [s for s in surcharges if s.exclusivity_group is None]
    exclusive = [s for s in surcharges if s.exclusivity_group is not None]

    for s in standalone:
        df = _apply_single_surcharge(df, s)

    for group_name in get_unique_exclusivity_groups(exclusive):
        df = _apply_exclusive_group(df, group_name)

    return df


def _cost_expr(surcharge) -> pl.Expr:
    # cost() may return float or pl.Expr (for value-based costs)
    cost_value = surcharge.cost()
    return cost_value if isinstance(cost_value, pl.Expr) else pl.lit(float(cost_value))


def _apply_single_surcharge(df: pl.DataFrame, surcharge) -> pl.DataFrame:
    """Apply a single surcharge without competition."""
    flag_col = f"surcharge_{surcharge.name.lower()}"
    cost_col = f"cost_{surcharge.name.lower()}"

    df = df.with_columns(surcharge.conditions().alias(flag_col))
    df = df.with_columns(
        pl.when(pl.col(flag_col))
        .then(_cost_expr(surcharge))
        .otherwise(pl.lit(0.0))
        .alias(cost_col)
    )

    return df


def _apply_exclusive_group(df: pl.DataFrame, group_name: str) -> pl.DataFrame:
    """
    Apply mutually exclusive surcharges within a group.

    Only the highest priority surcharge (lowest number) that matches wins.
    """
    group = get_exclusivity_group(group_name)
    exclusion_mask = pl.lit(False)

    for surcharge in group:
        flag_col = f"surcharge_{surcharge.name.lower()}"
        cost_col = f"cost_{surcharge.name.lower()}"

        # Applies only if: conditions met AND no higher priority already matched
        applies = surcharge.conditions() & ~exclusion_mask

        df = df.with_columns(applies.alias(flag_col))
        df = df.with_columns(
            pl.when(pl.col(flag_col))
            .then(_cost_expr(surcharge))
            .otherwise(pl.lit(0.0))
            .alias(cost_col)
        )

        exclusion_mask = exclusion_mask | pl.col(flag_col)

    return df


def _lookup_base_rate(df: pl.DataFrame) -> pl.DataFrame:
    """Base rate is the zone base price."""
    return df.with_columns(pl.col("base_price").alias("cost_base"))


def _apply_extra_weight(df: pl.DataFrame) -> pl.DataFrame:
    """Bill kilograms above BASE_WEIGHT at the zone's extra_per_kg rate."""
    return df.with_columns(
        (pl.col("extra_weight_kg") * pl.col("extra_per_kg")).alias("cost_extra_weight")
    )


def _calculate_subtotal(df: pl.DataFrame) -> pl.DataFrame:
    """Calculate cost_subtotal as sum of base rate, extra weight, and surcharges."""
    cost_cols = ["cost_base", "cost_extra_weight"] + [f"cost_{s.name.lower()}" for s in ALL]
    return df.with_columns(pl.sum_horizontal(cost_cols).alias("cost_subtotal"))


def _calculate_total(df: pl.DataFrame) -> pl.DataFrame:
    """Calculate cost_total (same as subtotal for J&T - no fuel surcharge)."""
    return df.with_columns(
        pl.col("cost_subtotal").alias("cost_total")
    )


def _stamp_version(df: pl.DataFrame) -> pl.DataFrame:
    """Stamp calculator version on output."""
    return df.with_columns(pl.lit(VERSION).alias("calculator_version"))


__all__ = [
    "Zone",
    "calculate_costs",
    "zone_for",
    "supplement_orders",
    "calculate",
]
