"""
Unit Tests for POSTA Cost Calculator

Run with: pytest carriers/posta/tests/ -v
"""

import pytest
import polars as pl

from carriers.posta.calculate_costs import calculate_costs


@pytest.fixture
def base_order():
    return pl.DataFrame({
        "order_id": ["ORD-TEST"],
        "net_fee": [30.0],
        "weight_kg": [4.0],
    })


class TestManualFee:
    """The manual fee is carried unchanged."""

    def test_fee_carried_to_total(self, base_order):
        df = calculate_costs(base_order)
        assert df["cost_base"][0] == pytest.approx(30.0)
        assert df["cost_total"][0] == pytest.approx(30.0)

    def test_missing_fee_defaults_to_zero(self, base_order):
        df = calculate_costs(base_order.with_columns(pl.lit(None, dtype=pl.Float64).alias("net_fee")))
        assert df["cost_total"][0] == pytest.approx(0.0)

    def test_weight_is_ignored(self, base_order):
        df = calculate_costs(base_order)
        assert df["billable_weight_kg"][0] == pytest.approx(1.0)
        assert df["weight_kg"][0] == pytest.approx(4.0)

    def test_negative_fee_rejected(self, base_order):
        with pytest.raises(ValueError, match="negative"):
            calculate_costs(base_order.with_columns(pl.lit(-1.0).alias("net_fee")))

    def test_integer_fee_accepted(self):
        df = calculate_costs(pl.DataFrame({"net_fee": [25]}))
        assert df["cost_total"][0] == pytest.approx(25.0)
        assert df["calculator_version"][0]
