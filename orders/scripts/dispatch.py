"""
Shipping Desk CLI
=================

List, create and dispatch orders from the command line.

Usage:
    python -m orders.scripts.dispatch list
    python -m orders.scripts.dispatch list --assigned --search cairo
    python -m orders.scripts.dispatch new --name "Mona" --phone 0100 --city Cairo --total 500
    python -m orders.scripts.dispatch dispatch ORD-ABC123 --company JT --weight 3
    python -m orders.scripts.dispatch dispatch ORD-ABC123 --company POSTA --net-fee 30
    python -m orders.scripts.dispatch dispatch ORD-ABC123 --company JT --weight 2 --force
    python -m orders.scripts.dispatch status ORD-ABC123 delivered
    python -m orders.scripts.dispatch delete ORD-ABC123
    python -m orders.scripts.dispatch create-table

Add --local PATH to work on a parquet snapshot instead of the warehouse table.
"""

import argparse
import sys

from pydantic import ValidationError

from shared.logging_config import setup_logging

from orders.intake import new_order
from orders.models import (
    AlreadyDispatchedError,
    InvalidAmountError,
    MissingCarrierError,
    OrderNotFoundError,
    ShippingCompany,
    ShippingStatus,
)
from orders.shipping import ShippingDesk
from orders.store import LocalOrderStore, TableOrderStore


# =============================================================================
# OUTPUT
# =============================================================================

def print_orders(orders) -> None:
    if not orders:
        print("No orders.")
        return

    print(f"{'ID':<16} {'Customer':<22} {'City':<14} {'Carrier':<7} {'Status':<11} {'Remaining':>10}")
    print("-" * 84)
    for o in orders:
        print(
            f"{o.id:<16} {o.customer_name[:22]:<22} {o.city[:14]:<14} "
            f"{o.shipping_company.value:<7} {o.shipping_status.value:<11} {o.remaining:>10,.2f}"
        )
    print(f"\n{len(orders)} order(s)")


def print_order(order) -> None:
    print(f"  Order:         {order.id}")
    print(f"  Customer:      {order.customer_name} ({order.city})")
    print(f"  Carrier:       {order.shipping_company.value}")
    print(f"  Weight:        {order.weight:g} kg")
    print(f"  Fee:           {order.shipping_fee:,.2f}")
    print(f"  Profit:        {order.shipping_profit:,.2f}")
    print(f"  Status:        {order.shipping_status.value}")
    print(f"  Remaining:     {order.remaining:,.2f}")


# =============================================================================
# COMMANDS
# =============================================================================

def cmd_list(desk: ShippingDesk, args) -> None:
    orders = desk.assigned(args.search) if args.assigned else desk.pending(args.search)
    print_orders(orders)


def cmd_new(desk: ShippingDesk, args) -> None:
    order = new_order(
        customer_name=args.name,
        customer_phone=args.phone,
        city=args.city,
        address=args.address,
        order_details=args.details,
        total_amount=args.total,
        paid=args.paid,
        sales_username=args.sales,
        payment_method=args.payment_method,
        weight=args.weight,
    )
    if desk.store.upsert(order) is None:
        print(f"Order {order.id} was NOT saved, see the log for the database error")
        sys.exit(1)
    print(f"Created {order.id}")


def cmd_dispatch(desk: ShippingDesk, args) -> None:
    order = desk.dispatch(
        args.order_id,
        args.company,
        weight=args.weight,
        profit=args.profit,
        net_fee=args.net_fee,
        force=args.force,
    )
    print_order(order)


def cmd_status(desk: ShippingDesk, args) -> None:
    order = desk.set_status(args.order_id, args.status)
    print_order(order)


def cmd_delete(desk: ShippingDesk, args) -> None:
    desk.store.delete(args.order_id)
    print(f"Deleted {args.order_id}")


def cmd_create_table(desk: ShippingDesk, args) -> None:
    if not isinstance(desk.store, TableOrderStore):
        print("create-table needs the warehouse store (drop --local)")
        return
    desk.store.create_table()
    print(f"Table {desk.store.table_name} ready")


# =============================================================================
# MAIN
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Shipping desk: list, create and dispatch orders",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--local",
        metavar="PATH",
        help="Use a parquet snapshot instead of the warehouse table",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("list", help="List pending (default) or assigned orders")
    p.add_argument("--assigned", action="store_true", help="Show dispatched orders")
    p.add_argument("--search", default="", help="Match customer name, order id or city")
    p.set_defaults(func=cmd_list)

    p = sub.add_parser("new", help="Create an order")
    p.add_argument("--name", required=True, help="Customer name")
    p.add_argument("--phone", required=True, help="Customer phone")
    p.add_argument("--city", required=True, help="Destination governorate")
    p.add_argument("--address", default="")
    p.add_argument("--details", default="", help="Order details")
    p.add_argument("--total", default="0", help="Product price")
    p.add_argument("--paid", default="0", help="Amount already collected")
    p.add_argument("--weight", default="1", help="Weight in kg (default: 1)")
    p.add_argument("--sales", default="", help="Sales username")
    p.add_argument("--payment-method", default="")
    p.set_defaults(func=cmd_new)

    p = sub.add_parser("dispatch", help="Assign a carrier and fix the fee")
    p.add_argument("order_id")
    p.add_argument(
        "--company",
        required=True,
        choices=[c.value for c in ShippingCompany if c != ShippingCompany.NONE],
    )
    p.add_argument("--weight", help="Weight in kg, JT only (default: 1)")
    p.add_argument("--profit", help="Shipping margin (default: carrier default)")
    p.add_argument("--net-fee", help="Fee from the POSTA receipt (default: 0)")
    p.add_argument(
        "--force",
        action="store_true",
        help="Re-dispatch an order that already has a carrier (corrects carrier and fee)",
    )
    p.set_defaults(func=cmd_dispatch)

    p = sub.add_parser("status", help="Set the shipping status")
    p.add_argument("order_id")
    p.add_argument("status", choices=[s.value for s in ShippingStatus])
    p.set_defaults(func=cmd_status)

    p = sub.add_parser("delete", help="Delete an order")
    p.add_argument("order_id")
    p.set_defaults(func=cmd_delete)

    p = sub.add_parser("create-table", help="Create the order table if missing")
    p.set_defaults(func=cmd_create_table)

    return parser


def main():
    args = build_parser().parse_args()
    setup_logging()

    store = LocalOrderStore(args.local) if args.local else TableOrderStore()

    try:
        desk = ShippingDesk(store)
        args.func(desk, args)
    except (
        MissingCarrierError,
        AlreadyDispatchedError,
        InvalidAmountError,
        OrderNotFoundError,
        ValidationError,
    ) as e:
        print(f"\nError: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
