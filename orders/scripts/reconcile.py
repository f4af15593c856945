"""
Reconciliation Report
=====================

Prints what customers still owe and what shipping cost and earned, per
carrier, and lists orders whose stored remaining is out of date.

Usage:
    python -m orders.scripts.reconcile
    python -m orders.scripts.reconcile --local orders/data/orders_cache.parquet
    python -m orders.scripts.reconcile --export reconciliation.parquet
"""

import argparse
from pathlib import Path

import polars as pl

from shared.logging_config import get_logger, setup_logging

from orders.reconciliation import add_balances, stale_balances, summarize
from orders.store import LocalOrderStore, TableOrderStore


log = get_logger(__name__)


# =============================================================================
# CONFIGURATION
# =============================================================================

# Stale rows listed in the console report
MAX_STALE_ROWS = 20


# =============================================================================
# REPORT
# =============================================================================

def print_summary(summary: pl.DataFrame) -> None:
    print("=" * 78)
    print("RECONCILIATION BY CARRIER")
    print("=" * 78)
    print(f"{'Carrier':<8} {'Orders':>7} {'Collected':>14} {'Outstanding':>14} {'Ship cost':>14} {'Ship profit':>14}")
    print("-" * 78)
    for row in summary.iter_rows(named=True):
        print(
            f"{row['shipping_company']:<8} {row['orders']:>7,} {row['collected']:>14,.2f} "
            f"{row['outstanding']:>14,.2f} {row['shipping_cost']:>14,.2f} {row['shipping_profit']:>14,.2f}"
        )
    print("-" * 78)
    if len(summary) > 0:
        print(
            f"{'TOTAL':<8} {summary['orders'].sum():>7,} {summary['collected'].sum():>14,.2f} "
            f"{summary['outstanding'].sum():>14,.2f} {summary['shipping_cost'].sum():>14,.2f} "
            f"{summary['shipping_profit'].sum():>14,.2f}"
        )


def print_stale(stale: pl.DataFrame) -> None:
    print(f"\nStale stored balances: {len(stale):,}")
    if len(stale) == 0:
        return
    for row in stale.head(MAX_STALE_ROWS).iter_rows(named=True):
        print(
            f"  {row['id']:<16} {str(row['customer_name'])[:22]:<22} "
            f"stored {row['remaining'] or 0:>10,.2f}  derived {row['derived_remaining']:>10,.2f}"
        )
    if len(stale) > MAX_STALE_ROWS:
        print(f"  ... and {len(stale) - MAX_STALE_ROWS:,} more")


def main():
    parser = argparse.ArgumentParser(description="Order balance reconciliation report")
    parser.add_argument(
        "--local",
        metavar="PATH",
        help="Read a parquet snapshot instead of the warehouse table",
    )
    parser.add_argument(
        "--export",
        type=Path,
        metavar="PATH",
        help="Write orders with derived balances to a parquet file",
    )
    args = parser.parse_args()
    setup_logging()

    store = LocalOrderStore(args.local) if args.local else TableOrderStore()
    df = add_balances(store.frame())
    log.info(f"Loaded {len(df):,} orders")

    print_summary(summarize(df))
    print_stale(stale_balances(df))

    if args.export:
        args.export.parent.mkdir(parents=True, exist_ok=True)
        df.write_parquet(args.export)
        print(f"\nExported {len(df):,} rows to {args.export}")


if __name__ == "__main__":
    main()
