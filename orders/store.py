"""
Order Store

Read/write access to order records, keyed by id. Every write rewrites the
full record (no partial field updates) and the last write wins: there is
no version check, so two desks dispatching the same order at the same time
both succeed and the later write is what stays.

Stores:
    - LocalOrderStore: parquet snapshot on disk
    - TableOrderStore: warehouse table, with a LocalOrderStore as cache

TableOrderStore never lets a database failure reach the caller. Reads fall
back to the last cached snapshot; a failed write is logged and the
previously persisted record stays the last-known-good one.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

import polars as pl

from shared import database
from shared.logging_config import get_logger

from .models import Order, OrderNotFoundError


log = get_logger(__name__)


# =============================================================================
# CONFIGURATION
# =============================================================================

TABLE_NAME = "crm.orders"
CACHE_PATH = Path(__file__).parent / "data" / "orders_cache.parquet"

# Column order matches the DDL in TableOrderStore.create_table()
ORDER_SCHEMA = {
    "id": pl.Utf8,
    "customer_name": pl.Utf8,
    "customer_phone": pl.Utf8,
    "whatsapp_phone": pl.Utf8,
    "city": pl.Utf8,
    "address": pl.Utf8,
    "order_details": pl.Utf8,
    "status": pl.Utf8,
    "sales_username": pl.Utf8,
    "created_at": pl.Utf8,
    "total_amount": pl.Float64,
    "paid": pl.Float64,
    "remaining": pl.Float64,
    "payment_method": pl.Utf8,
    "wallet_number": pl.Utf8,
    "weight": pl.Float64,
    "shipping_status": pl.Utf8,
    "shipping_fee": pl.Float64,
    "shipping_profit": pl.Float64,
    "shipping_company": pl.Utf8,
    "shipping_notes": pl.Utf8,
}

ORDER_COLUMNS = list(ORDER_SCHEMA)


def orders_to_frame(orders: list[Order]) -> pl.DataFrame:
    """Flatten orders into a DataFrame with ORDER_SCHEMA."""
    return pl.DataFrame([o.to_record() for o in orders], schema=ORDER_SCHEMA)


def frame_to_orders(df: pl.DataFrame) -> list[Order]:
    """Validate DataFrame rows into orders. Stored remaining values are re-derived."""
    return [Order.model_validate(row) for row in df.iter_rows(named=True)]


# =============================================================================
# BASE CLASS
# =============================================================================

class OrderStore(ABC):
    """
    Base class for order persistence.

    Subclasses implement list(), upsert() and delete(); get() and frame()
    are built on list().
    """

    @abstractmethod
    def list(self) -> list[Order]:
        """All orders, in insertion order."""

    @abstractmethod
    def upsert(self, order: Order) -> Order | None:
        """Insert or fully replace the order with the same id. Returns the persisted record."""

    @abstractmethod
    def delete(self, order_id: str) -> None:
        """Remove an order. Unknown ids are ignored."""

    def get(self, order_id: str) -> Order:
        """
        Fetch one order.

        Raises:
            OrderNotFoundError: If no order has this id
        """
        for order in self.list():
            if order.id == order_id:
                return order
        raise OrderNotFoundError(order_id)

    def frame(self) -> pl.DataFrame:
        """All orders as a DataFrame with ORDER_SCHEMA."""
        return orders_to_frame(self.list())


# =============================================================================
# LOCAL SNAPSHOT
# =============================================================================

class LocalOrderStore(OrderStore):
    """
    Orders kept in a parquet file.

    Used on its own for single-desk setups and tests, and as the fallback
    cache behind TableOrderStore.
    """

    def __init__(self, path: Path | str = CACHE_PATH):
        self.path = Path(path)

    def _read(self) -> pl.DataFrame:
        if not self.path.exists():
            return pl.DataFrame(schema=ORDER_SCHEMA)
        return pl.read_parquet(self.path)

    def _write(self, df: pl.DataFrame) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        df.write_parquet(self.path)

    def list(self) -> list[Order]:
        return frame_to_orders(self._read())

    def frame(self) -> pl.DataFrame:
        """Raw snapshot, including remaining exactly as it was stored."""
        return self._read()

    def replace_all(self, orders: list[Order]) -> None:
        """Overwrite the snapshot with a full order list."""
        self._write(orders_to_frame(orders))

    def upsert(self, order: Order) -> Order:
        orders = self.list()
        for i, existing in enumerate(orders):
            if existing.id == order.id:
                orders[i] = order
                break
        else:
            orders.append(order)
        self.replace_all(orders)
        return order

    def delete(self, order_id: str) -> None:
        self.replace_all([o for o in self.list() if o.id != order_id])


# =============================================================================
# WAREHOUSE TABLE
# =============================================================================

class TableOrderStore(OrderStore):
    """
    Orders kept in a warehouse table, read and written through shared.database.

    Every successful read refreshes the local cache. Upserts rewrite the
    whole row: delete and insert in one transaction.
    """

    def __init__(
        self,
        table_name: str = TABLE_NAME,
        cache: LocalOrderStore | None = None,
    ):
        self.table_name = table_name
        self.cache = cache if cache is not None else LocalOrderStore()

    @staticmethod
    def _quote(value: str) -> str:
        return database.format_value(value)

    def create_table(self) -> None:
        """Create the order table if it does not exist."""
        sql_types = {pl.Utf8: "VARCHAR(1024)", pl.Float64: "DOUBLE PRECISION"}
        columns = ",\n    ".join(
            f"{name} {sql_types[dtype]}" + (" NOT NULL" if name == "id" else "")
            for name, dtype in ORDER_SCHEMA.items()
        )
        database.execute_query(
            f"CREATE TABLE IF NOT EXISTS {self.table_name} (\n    {columns}\n)",
            commit=True,
        )

    def _pull(self) -> pl.DataFrame:
        df = database.pull_data(f"SELECT {', '.join(ORDER_COLUMNS)} FROM {self.table_name}")
        if len(df) == 0:
            return pl.DataFrame(schema=ORDER_SCHEMA)
        return df.select(
            [pl.col(name).cast(dtype) for name, dtype in ORDER_SCHEMA.items()]
        )

    def frame(self) -> pl.DataFrame:
        """Raw table contents, including remaining exactly as it was stored."""
        try:
            df = self._pull()
        except RuntimeError as e:
            log.error(f"Reading {self.table_name} failed, using cached snapshot: {e}")
            return self.cache.frame()

        self.cache.replace_all(frame_to_orders(df))
        return df

    def list(self) -> list[Order]:
        return frame_to_orders(self.frame())

    def upsert(self, order: Order) -> Order | None:
        """
        Rewrite one order row.

        Returns the order as persisted. If the write fails the failure is
        logged and the last cached version of the order is returned instead
        (None for an order that was never stored).
        """
        record = orders_to_frame([order])
        try:
            database.execute_query(
                f"DELETE FROM {self.table_name} WHERE id = {self._quote(order.id)}",
                commit=False,
            )
            database.push_data(record, self.table_name, verbose=False)
        except RuntimeError as e:
            log.error(f"[Order: {order.id}] Write to {self.table_name} failed, keeping last-known-good record: {e}")
            try:
                return self.cache.get(order.id)
            except OrderNotFoundError:
                return None

        self.cache.upsert(order)
        log.info(f"[Order: {order.id}] Saved to {self.table_name}")
        return order

    def delete(self, order_id: str) -> None:
        try:
            database.execute_query(
                f"DELETE FROM {self.table_name} WHERE id = {self._quote(order_id)}",
                commit=True,
            )
        except RuntimeError as e:
            log.error(f"[Order: {order_id}] Delete from {self.table_name} failed: {e}")
            return

        self.cache.delete(order_id)
        log.info(f"[Order: {order_id}] Deleted from {self.table_name}")


__all__ = [
    "OrderStore",
    "LocalOrderStore",
    "TableOrderStore",
    "ORDER_SCHEMA",
    "ORDER_COLUMNS",
    "TABLE_NAME",
    "CACHE_PATH",
    "orders_to_frame",
    "frame_to_orders",
]
