"""
Reconciliation

Polars view over the order book: what each customer still owes, what was
collected and what shipping cost and earned, per carrier.

remaining is always derived with the same formula as Order.remaining:

    remaining = (total_amount - paid) + (shipping_fee + shipping_profit if dispatched else 0)

Records written by older tools may carry a stale stored remaining;
stale_balances() lists them.
"""

import polars as pl

from carriers import ShippingCompany

from .models import Order
from .store import ORDER_SCHEMA, orders_to_frame


# Tolerance when comparing stored and derived remaining
BALANCE_TOLERANCE = 0.005

SUMMARY_SCHEMA = {
    "shipping_company": pl.Utf8,
    "orders": pl.UInt32,
    "collected": pl.Float64,
    "outstanding": pl.Float64,
    "shipping_cost": pl.Float64,
    "shipping_profit": pl.Float64,
}


def orders_frame(orders: list[Order]) -> pl.DataFrame:
    """Orders as a DataFrame with the store schema."""
    return orders_to_frame(orders)


def add_balances(df: pl.DataFrame) -> pl.DataFrame:
    """
    Add derived balance columns.

    Adds:
        - product_balance: total_amount - paid
        - shipping_charge: fee + profit once a carrier is set, else 0
        - derived_remaining: product_balance + shipping_charge

    Any stored remaining column is left untouched.
    """
    dispatched = (
        pl.col("shipping_company").is_not_null()
        & (pl.col("shipping_company") != ShippingCompany.NONE.value)
        & (pl.col("shipping_company") != "")
    )
    return (
        df
        .with_columns(
            (pl.col("total_amount").fill_null(0.0) - pl.col("paid").fill_null(0.0)).alias("product_balance"),
            pl.when(dispatched)
            .then(pl.col("shipping_fee").fill_null(0.0) + pl.col("shipping_profit").fill_null(0.0))
            .otherwise(0.0)
            .alias("shipping_charge"),
        )
        .with_columns(
            (pl.col("product_balance") + pl.col("shipping_charge")).alias("derived_remaining")
        )
    )


def summarize(df: pl.DataFrame) -> pl.DataFrame:
    """
    Per-carrier totals.

    Args:
        df: Orders frame (balances are added if missing)

    Returns:
        pl.DataFrame: One row per shipping company with orders, collected
            (sum of paid), outstanding (sum of derived remaining),
            shipping_cost (sum of fees) and shipping_profit. Undispatched
            orders are grouped under NONE and contribute no shipping.
    """
    if "derived_remaining" not in df.columns:
        df = add_balances(df)

    if len(df) == 0:
        return pl.DataFrame(schema=SUMMARY_SCHEMA)

    return (
        df
        .with_columns(
            pl.when(pl.col("shipping_company").fill_null("") == "")
            .then(pl.lit(ShippingCompany.NONE.value))
            .otherwise(pl.col("shipping_company"))
            .alias("shipping_company")
        )
        .group_by("shipping_company")
        .agg(
            pl.len().alias("orders"),
            pl.col("paid").fill_null(0.0).sum().alias("collected"),
            pl.col("derived_remaining").sum().alias("outstanding"),
            pl.when(pl.col("shipping_company") != ShippingCompany.NONE.value)
            .then(pl.col("shipping_fee").fill_null(0.0))
            .otherwise(0.0)
            .sum()
            .alias("shipping_cost"),
            pl.when(pl.col("shipping_company") != ShippingCompany.NONE.value)
            .then(pl.col("shipping_profit").fill_null(0.0))
            .otherwise(0.0)
            .sum()
            .alias("shipping_profit"),
        )
        .select(list(SUMMARY_SCHEMA))
        .cast(SUMMARY_SCHEMA)
        .sort("shipping_company")
    )


def stale_balances(df: pl.DataFrame, tolerance: float = BALANCE_TOLERANCE) -> pl.DataFrame:
    """
    Rows whose stored remaining disagrees with the derived one.

    Returns:
        pl.DataFrame: id, customer_name, shipping_company, remaining,
            derived_remaining and difference for each stale row
    """
    if "derived_remaining" not in df.columns:
        df = add_balances(df)

    return (
        df
        .with_columns(
            (pl.col("remaining").fill_null(0.0) - pl.col("derived_remaining")).alias("difference")
        )
        .filter(pl.col("difference").abs() > tolerance)
        .select(["id", "customer_name", "shipping_company", "remaining", "derived_remaining", "difference"])
    )


__all__ = [
    "orders_frame",
    "add_balances",
    "summarize",
    "stale_balances",
    "SUMMARY_SCHEMA",
    "ORDER_SCHEMA",
]
