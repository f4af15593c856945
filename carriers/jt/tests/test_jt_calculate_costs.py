"""
Unit Tests for J&T Cost Calculator

Tests zone lookup, weight billing, value surcharge and totals.

Run with: pytest carriers/jt/tests/ -v
"""

import pytest
import polars as pl

from carriers.jt.calculate_costs import (
    calculate_costs,
    supplement_orders,
    calculate,
    zone_for,
)
from carriers.jt.data import load_zones, load_rates, build_zone_table, DEFAULT_ZONE
from carriers.jt.surcharges import VAL_PCT, VAL_FLAT, ALL


CAPITAL_CITIES = ["القاهرة", "الجيزة", "القليوبية"]


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def base_order():
    """Cairo order, 1 kg, below the value threshold."""
    return pl.DataFrame({
        "order_id": ["ORD-TEST"],
        "city": ["القاهرة"],
        "total_amount": [500.0],
        "weight_kg": [1.0],
    })


def run_pipeline(df: pl.DataFrame) -> pl.DataFrame:
    """Helper to run full pipeline."""
    df = supplement_orders(df)
    df = calculate(df)
    return df


# =============================================================================
# ZONE TESTS
# =============================================================================

class TestZoneLookup:
    """Tests for city to zone resolution."""

    @pytest.mark.parametrize("city", CAPITAL_CITIES)
    def test_capital_zone(self, city):
        """Capital region cities price at 40 base, 5 per extra kg."""
        zone = zone_for(city)
        assert zone.zone == "capital"
        assert zone.base_price == 40
        assert zone.extra_per_kg == 5

    @pytest.mark.parametrize("city,expected", [
        ("الإسكندرية", (50, 7)),
        ("الدقهلية", (50, 7)),
        ("سوهاج", (65, 10)),
        ("أسوان", (80, 12)),
    ])
    def test_other_tiers(self, city, expected):
        zone = zone_for(city)
        assert (zone.base_price, zone.extra_per_kg) == expected

    @pytest.mark.parametrize("city", ["مطروح", "شمال سيناء", "Cairo", "", "Atlantis"])
    def test_unlisted_city_falls_back_to_remote(self, city):
        """Unlisted cities are not an error, they get the remote tier."""
        zone = zone_for(city)
        assert zone.zone == DEFAULT_ZONE
        assert (zone.base_price, zone.extra_per_kg) == (100, 15)

    def test_city_is_trimmed(self):
        assert zone_for("  الجيزة ").zone == "capital"

    def test_no_fuzzy_matching(self):
        """Alternative spelling (no hamza) is a different key."""
        assert zone_for("الاسكندرية").zone == DEFAULT_ZONE

    def test_injected_zone_table(self):
        """Zone and rate tables can be swapped."""
        zones = pl.DataFrame({"city": ["Springfield"], "zone": ["local"]})
        rates = pl.DataFrame({
            "zone": ["local", "remote"],
            "base_price": [10.0, 99.0],
            "extra_per_kg": [1.0, 9.0],
        })
        assert zone_for("Springfield", zones, rates).base_price == 10.0
        assert zone_for("القاهرة", zones, rates).base_price == 99.0

    def test_rate_table_without_default_zone_rejected(self):
        rates = load_rates().filter(pl.col("zone") != DEFAULT_ZONE)
        with pytest.raises(ValueError, match="default zone"):
            build_zone_table(load_zones(), rates)

    def test_unpriced_zone_rejected(self):
        zones = pl.DataFrame({"city": ["X"], "zone": ["nowhere"]})
        with pytest.raises(ValueError, match="nowhere"):
            build_zone_table(zones, load_rates())

    def test_duplicate_city_rejected(self):
        zones = pl.DataFrame({"city": ["X", "X"], "zone": ["capital", "delta"]})
        with pytest.raises(ValueError, match="more than one zone"):
            build_zone_table(zones, load_rates())

    def test_row_order_preserved(self):
        df = pl.DataFrame({
            "city": ["أسوان", "Atlantis", "القاهرة", "الغربية"],
            "total_amount": [100.0] * 4,
            "weight_kg": [1.0] * 4,
        })
        result = supplement_orders(df)
        assert result["shipping_zone"].to_list() == ["upper_far", "remote", "capital", "delta"]


# =============================================================================
# WEIGHT TESTS
# =============================================================================

class TestBillableWeight:
    """Tests for billable and extra weight."""

    def test_base_weight_has_no_extra(self, base_order):
        df = supplement_orders(base_order)
        assert df["extra_weight_kg"][0] == pytest.approx(0.0)

    def test_extra_weight(self, base_order):
        df = supplement_orders(base_order.with_columns(pl.lit(3.0).alias("weight_kg")))
        assert df["extra_weight_kg"][0] == pytest.approx(2.0)

    def test_fractional_weight_billed_pro_rata(self, base_order):
        df = supplement_orders(base_order.with_columns(pl.lit(2.5).alias("weight_kg")))
        assert df["extra_weight_kg"][0] == pytest.approx(1.5)

    def test_below_base_weight_never_negative(self, base_order):
        df = supplement_orders(base_order.with_columns(pl.lit(0.5).alias("weight_kg")))
        assert df["extra_weight_kg"][0] == pytest.approx(0.0)

    def test_missing_weight_defaults_to_one(self, base_order):
        shipment = base_order.with_columns(pl.lit(None, dtype=pl.Float64).alias("weight_kg"))
        df = supplement_orders(shipment)
        assert df["billable_weight_kg"][0] == pytest.approx(1.0)


# =============================================================================
# SURCHARGE TESTS
# =============================================================================

class TestValueSurcharge:
    """Tests for the declared value surcharge group."""

    def test_flat_below_threshold(self, base_order):
        df = run_pipeline(base_order)
        assert df["surcharge_val_flat"][0] == True
        assert df["surcharge_val_pct"][0] == False
        assert df["cost_val_flat"][0] == pytest.approx(5.0)
        assert df["cost_val_pct"][0] == pytest.approx(0.0)

    def test_percentage_at_threshold(self, base_order):
        df = run_pipeline(base_order.with_columns(pl.lit(1000.0).alias("total_amount")))
        assert df["surcharge_val_pct"][0] == True
        assert df["surcharge_val_flat"][0] == False
        assert df["cost_val_pct"][0] == pytest.approx(10.0)

    def test_percentage_above_threshold(self, base_order):
        df = run_pipeline(base_order.with_columns(pl.lit(2000.0).alias("total_amount")))
        assert df["cost_val_pct"][0] == pytest.approx(20.0)
        assert df["cost_val_flat"][0] == pytest.approx(0.0)

    def test_just_below_threshold_is_flat(self, base_order):
        df = run_pipeline(base_order.with_columns(pl.lit(999.99).alias("total_amount")))
        assert df["surcharge_val_flat"][0] == True

    def test_missing_value_is_flat(self, base_order):
        shipment = base_order.with_columns(pl.lit(None, dtype=pl.Float64).alias("total_amount"))
        df = run_pipeline(shipment)
        assert df["cost_val_flat"][0] == pytest.approx(5.0)

    def test_exactly_one_value_surcharge(self):
        df = run_pipeline(pl.DataFrame({
            "city": ["القاهرة"] * 4,
            "total_amount": [0.0, 500.0, 1000.0, 5000.0],
            "weight_kg": [1.0] * 4,
        }))
        flags = df.select(
            pl.col("surcharge_val_flat").cast(pl.Int32) + pl.col("surcharge_val_pct").cast(pl.Int32)
        ).to_series()
        assert flags.to_list() == [1, 1, 1, 1]

    def test_surcharge_configuration(self):
        assert VAL_PCT.priority < VAL_FLAT.priority
        assert VAL_PCT.is_value_based()
        assert not VAL_FLAT.is_value_based()
        assert {s.name for s in ALL} == {"VAL_PCT", "VAL_FLAT"}


# =============================================================================
# TOTAL COST TESTS
# =============================================================================

class TestTotals:
    """Tests for the full fee."""

    def test_base_weight_fee(self, base_order):
        """At 1 kg the fee is base price plus value surcharge."""
        df = calculate_costs(base_order)
        assert df["cost_total"][0] == pytest.approx(40 + 5)

    def test_three_kg_cairo(self, base_order):
        """40 base + (3-1)*5 extra + 5 flat = 55."""
        df = calculate_costs(base_order.with_columns(pl.lit(3.0).alias("weight_kg")))
        assert df["cost_extra_weight"][0] == pytest.approx(10.0)
        assert df["cost_total"][0] == pytest.approx(55.0)

    def test_remote_heavy_valuable(self):
        """100 base + (4-1)*15 extra + 1% of 2000 = 165."""
        df = calculate_costs(pl.DataFrame({
            "city": ["مطروح"],
            "total_amount": [2000.0],
            "weight_kg": [4.0],
        }))
        assert df["cost_total"][0] == pytest.approx(165.0)

    def test_total_equals_subtotal(self, base_order):
        df = calculate_costs(base_order)
        assert df["cost_total"][0] == df["cost_subtotal"][0]

    def test_input_columns_kept(self, base_order):
        df = calculate_costs(base_order)
        assert df["order_id"][0] == "ORD-TEST"
        assert len(df) == 1

    def test_version_stamped(self, base_order):
        df = calculate_costs(base_order)
        assert df["calculator_version"][0]
