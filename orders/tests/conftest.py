"""Shared fixtures for order tests."""

from datetime import datetime

import pytest

from orders.models import Order
from orders.store import LocalOrderStore


CAIRO = "القاهرة"


@pytest.fixture
def store(tmp_path):
    """Empty parquet store in a temp directory."""
    return LocalOrderStore(tmp_path / "orders.parquet")


@pytest.fixture
def make_order():
    """Factory for undispatched orders; keyword arguments override fields."""
    def _make(order_id="ORD-1", **fields):
        values = dict(
            id=order_id,
            customer_name="Mona Ali",
            customer_phone="01001234567",
            city=CAIRO,
            total_amount=500,
            paid=200,
            sales_username="sara",
            created_at=datetime(2025, 3, 1, 12, 0),
        )
        values.update(fields)
        return Order(**values)
    return _make
