"""
J&T Shipping Cost Calculator
============================

Interactive CLI tool to calculate the J&T fee for a single order.

Usage:
    python -m carriers.jt.scripts.calculator
"""

import polars as pl

from carriers.jt.calculate_costs import calculate_costs
from carriers.jt.data import DEFAULT_PROFIT
from carriers.jt.version import VERSION
from orders.models import parse_amount


def get_user_input() -> dict:
    """Prompt user for order details."""
    print("\n=== J&T Express Cost Calculator ===")
    print(f"Version: {VERSION}\n")

    city = input("Destination governorate: ").strip()
    total_amount = parse_amount(input("Order value (EGP): "), "total_amount")

    weight_input = input("Weight (kg) [default: 1]: ").strip()
    weight = parse_amount(weight_input, "weight") if weight_input else 1.0
    if weight < 1:
        print("\nWarning: weights below 1 kg are billed as the base weight")

    profit_input = input(f"Shipping profit (EGP) [default: {DEFAULT_PROFIT}]: ").strip()
    profit = parse_amount(profit_input, "profit") if profit_input else float(DEFAULT_PROFIT)

    return {
        "city": city,
        "total_amount": total_amount,
        "weight_kg": weight,
        "profit": profit,
    }


def create_order_df(order: dict) -> pl.DataFrame:
    """Create a single-row DataFrame from user input."""
    return pl.DataFrame([{
        "city": order["city"],
        "total_amount": order["total_amount"],
        "weight_kg": order["weight_kg"],
    }])


def print_results(df: pl.DataFrame, order: dict) -> None:
    """Print calculation results."""
    row = df.row(0, named=True)

    print("\n" + "=" * 50)
    print("CALCULATION RESULTS")
    print("=" * 50)

    # Input summary
    print(f"\nDestination: {order['city']} (Zone {row['shipping_zone']})")
    print(f"Order value: {order['total_amount']:.2f} EGP")
    print(f"Billable weight: {row['billable_weight_kg']:.2f} kg "
          f"({row['extra_weight_kg']:.2f} kg above base)")

    # Surcharges triggered
    if row["surcharge_val_pct"]:
        surcharge = "VAL_PCT (1% of order value)"
    elif row["surcharge_val_flat"]:
        surcharge = "VAL_FLAT (flat)"
    else:
        surcharge = "None"
    print(f"\nValue surcharge: {surcharge}")

    # Cost breakdown
    print("\n--- Cost Breakdown ---")
    print(f"Base rate:          {row['cost_base']:>8.2f}")
    if row["cost_extra_weight"] > 0:
        print(f"Extra weight:       {row['cost_extra_weight']:>8.2f}")
    if row["cost_val_pct"] > 0:
        print(f"VAL_PCT surcharge:  {row['cost_val_pct']:>8.2f}")
    if row["cost_val_flat"] > 0:
        print(f"VAL_FLAT surcharge: {row['cost_val_flat']:>8.2f}")

    print(f"                    {'-' * 9}")
    print(f"J&T fee:            {row['cost_total']:>8.2f}")
    print(f"Shipping profit:    {order['profit']:>8.2f}")
    print(f"                    {'=' * 9}")
    print(f"BILLED SHIPPING:    {row['cost_total'] + order['profit']:>8.2f}")
    print()


def main():
    """Main entry point."""
    try:
        order = get_user_input()
        df = create_order_df(order)
        df = calculate_costs(df)
        print_results(df, order)

    except KeyboardInterrupt:
        print("\n\nCancelled.")
    except Exception as e:
        print(f"\nError: {e}")
        raise


if __name__ == "__main__":
    main()
