"""
Unit Tests for Order Stores

TableOrderStore tests replace shared.database calls with fakes.

Run with: pytest orders/tests/ -v
"""

import polars as pl
import pytest

from carriers import ShippingCompany
from orders.models import OrderNotFoundError
from orders.store import (
    ORDER_COLUMNS,
    LocalOrderStore,
    TableOrderStore,
    orders_to_frame,
)
from shared import database


def _fail(*args, **kwargs):
    raise RuntimeError("connection refused")


@pytest.fixture
def table_store(tmp_path):
    return TableOrderStore("crm.orders", cache=LocalOrderStore(tmp_path / "cache.parquet"))


# =============================================================================
# LOCAL STORE
# =============================================================================

class TestLocalOrderStore:

    def test_empty_when_missing(self, store):
        assert store.list() == []
        assert store.frame().columns == ORDER_COLUMNS

    def test_insert_and_get(self, store, make_order):
        store.upsert(make_order("ORD-1"))
        store.upsert(make_order("ORD-2", customer_name="Omar"))
        assert [o.id for o in store.list()] == ["ORD-1", "ORD-2"]
        assert store.get("ORD-2").customer_name == "Omar"

    def test_upsert_replaces_full_record(self, store, make_order):
        store.upsert(make_order("ORD-1"))
        store.upsert(make_order("ORD-1", paid=500, customer_name="Mona A."))
        orders = store.list()
        assert len(orders) == 1
        assert orders[0].paid == 500
        assert orders[0].customer_name == "Mona A."

    def test_last_write_wins(self, store, make_order):
        order = make_order("ORD-1")
        store.upsert(order.with_changes(shipping_company=ShippingCompany.JT, shipping_fee=55))
        store.upsert(order.with_changes(shipping_company=ShippingCompany.POSTA, shipping_fee=30))
        saved = store.get("ORD-1")
        assert saved.shipping_company == ShippingCompany.POSTA
        assert saved.shipping_fee == 30

    def test_get_unknown(self, store):
        with pytest.raises(OrderNotFoundError):
            store.get("ORD-404")

    def test_delete(self, store, make_order):
        store.upsert(make_order("ORD-1"))
        store.upsert(make_order("ORD-2"))
        store.delete("ORD-1")
        store.delete("ORD-404")
        assert [o.id for o in store.list()] == ["ORD-2"]

    def test_round_trip_keeps_types(self, store, make_order):
        order = make_order("ORD-1", shipping_company=ShippingCompany.JT, shipping_fee=55, weight=3)
        store.upsert(order)
        assert store.get("ORD-1") == order

    def test_stale_stored_remaining_rederived(self, store, make_order):
        df = orders_to_frame([make_order("ORD-1")]).with_columns(pl.lit(1234.0).alias("remaining"))
        df.write_parquet(store.path)
        assert store.frame()["remaining"][0] == 1234.0
        assert store.get("ORD-1").remaining == pytest.approx(300.0)


# =============================================================================
# TABLE STORE
# =============================================================================

class TestTableOrderStoreRead:

    def test_successful_read_refreshes_cache(self, monkeypatch, table_store, make_order):
        df = orders_to_frame([make_order("ORD-1"), make_order("ORD-2")])
        monkeypatch.setattr(database, "pull_data", lambda query: df)

        assert [o.id for o in table_store.list()] == ["ORD-1", "ORD-2"]
        assert [o.id for o in table_store.cache.list()] == ["ORD-1", "ORD-2"]

    def test_failed_read_falls_back_to_cache(self, monkeypatch, table_store, make_order, caplog):
        table_store.cache.upsert(make_order("ORD-CACHED"))
        monkeypatch.setattr(database, "pull_data", _fail)

        assert [o.id for o in table_store.list()] == ["ORD-CACHED"]
        assert "using cached snapshot" in caplog.text

    def test_empty_table(self, monkeypatch, table_store):
        monkeypatch.setattr(database, "pull_data", lambda query: pl.DataFrame())
        assert table_store.list() == []
        assert table_store.frame().columns == ORDER_COLUMNS


class TestTableOrderStoreWrite:

    def test_upsert_deletes_then_inserts(self, monkeypatch, table_store, make_order):
        calls = []
        monkeypatch.setattr(
            database, "execute_query",
            lambda query, commit=True: calls.append(("execute", query, commit)),
        )
        monkeypatch.setattr(
            database, "push_data",
            lambda data, table_name, **kwargs: calls.append(("push", table_name, len(data))),
        )

        order = make_order("ORD-1")
        assert table_store.upsert(order) == order

        assert calls[0] == ("execute", "DELETE FROM crm.orders WHERE id = 'ORD-1'", False)
        assert calls[1] == ("push", "crm.orders", 1)
        assert table_store.cache.get("ORD-1") == order

    def test_failed_write_keeps_last_known_good(self, monkeypatch, table_store, make_order, caplog):
        original = make_order("ORD-1")
        table_store.cache.upsert(original)
        monkeypatch.setattr(database, "execute_query", _fail)

        result = table_store.upsert(original.with_changes(paid=500))

        assert result == original
        assert table_store.cache.get("ORD-1").paid == 200
        assert "keeping last-known-good record" in caplog.text

    def test_failed_write_of_new_order(self, monkeypatch, table_store, make_order):
        monkeypatch.setattr(database, "execute_query", _fail)
        assert table_store.upsert(make_order("ORD-NEW")) is None

    def test_failed_delete_keeps_cache(self, monkeypatch, table_store, make_order):
        table_store.cache.upsert(make_order("ORD-1"))
        monkeypatch.setattr(database, "execute_query", _fail)
        table_store.delete("ORD-1")
        assert [o.id for o in table_store.cache.list()] == ["ORD-1"]

    def test_create_table_ddl(self, monkeypatch, table_store):
        queries = []
        monkeypatch.setattr(database, "execute_query", lambda query, commit=True: queries.append(query))
        table_store.create_table()
        assert queries[0].startswith("CREATE TABLE IF NOT EXISTS crm.orders")
        assert "id VARCHAR(1024) NOT NULL" in queries[0]
        assert "remaining DOUBLE PRECISION" in queries[0]
