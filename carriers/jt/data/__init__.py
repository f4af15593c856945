"""
J&T Data

Reference data for zones, rates, and configuration.

Structure:
    - reference/: Static reference data (zones, rates, config)
"""

import polars as pl
from pathlib import Path

from .reference.billable_weight import BASE_WEIGHT, DEFAULT_WEIGHT
from .reference.margin import DEFAULT_PROFIT
from .reference.zone_config import DEFAULT_ZONE


REFERENCE_DIR = Path(__file__).parent / "reference"


def load_zones() -> pl.DataFrame:
    """
    Load city to zone mappings from CSV.

    City names are trimmed on load so lookups only need to trim the input.

    Returns:
        DataFrame with columns: city, zone
    """
    return (
        pl.read_csv(
            REFERENCE_DIR / "zones.csv",
            schema_overrides={"city": pl.Utf8, "zone": pl.Utf8},
        )
        .with_columns(pl.col("city").str.strip_chars())
    )


def load_rates() -> pl.DataFrame:
    """
    Load zone prices from CSV.

    Returns:
        DataFrame with columns:
            - zone: Zone name (capital, delta, upper_near, upper_far, remote)
            - base_price: Flat price covering the first BASE_WEIGHT kg
            - extra_per_kg: Price per kg above BASE_WEIGHT
    """
    return pl.read_csv(
        REFERENCE_DIR / "base_rates.csv",
        schema_overrides={
            "zone": pl.Utf8,
            "base_price": pl.Float64,
            "extra_per_kg": pl.Float64,
        },
    )


def build_zone_table(
    zones: pl.DataFrame | None = None,
    rates: pl.DataFrame | None = None,
) -> pl.DataFrame:
    """
    Join zone mappings with zone prices into one lookup table.

    Args:
        zones: City to zone mapping (loaded from zones.csv if not provided)
        rates: Zone prices (loaded from base_rates.csv if not provided)

    Returns:
        DataFrame with columns: city, zone, base_price, extra_per_kg

    Raises:
        ValueError: If a zone has no price or DEFAULT_ZONE is not priced
    """
    if zones is None:
        zones = load_zones()
    if rates is None:
        rates = load_rates()

    if DEFAULT_ZONE not in rates["zone"].to_list():
        raise ValueError(f"Rate table has no price for default zone '{DEFAULT_ZONE}'")

    duplicated = zones.filter(pl.col("city").is_duplicated())["city"].unique().to_list()
    if duplicated:
        raise ValueError(f"Cities mapped to more than one zone: {sorted(duplicated)}")

    table = zones.join(rates, on="zone", how="left")

    unpriced = table.filter(pl.col("base_price").is_null())["zone"].unique().to_list()
    if unpriced:
        raise ValueError(f"Zones without a price in the rate table: {sorted(unpriced)}")

    return table.select(["city", "zone", "base_price", "extra_per_kg"])


__all__ = [
    # Reference data loaders
    "load_zones",
    "load_rates",
    "build_zone_table",
    "REFERENCE_DIR",
    # Billable weight config
    "BASE_WEIGHT",
    "DEFAULT_WEIGHT",
    # Margin config
    "DEFAULT_PROFIT",
    # Zone config
    "DEFAULT_ZONE",
]
