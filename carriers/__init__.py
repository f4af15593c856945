"""
Carriers

Registry of the shipping companies an order can be dispatched with, and a
single-order entry point into their cost calculators.

    JT      - J&T Express, fee computed from zone, weight and order value
    POSTA   - Egypt Post, fee typed in by the operator
    NONE    - not dispatched yet
"""

from enum import Enum

import polars as pl

from . import jt, posta


class ShippingCompany(str, Enum):
    NONE = "NONE"
    JT = "JT"
    POSTA = "POSTA"


# Margin pre-filled on the desk when a carrier is selected
DEFAULT_PROFITS = {
    ShippingCompany.JT: float(jt.DEFAULT_PROFIT),
    ShippingCompany.POSTA: float(posta.DEFAULT_PROFIT),
}

# Carriers whose fee is entered by hand on a confirmation step
MANUAL_FEE_CARRIERS = {ShippingCompany.POSTA}


# =============================================================================
# HELPERS
# =============================================================================

def _require_carrier(company: ShippingCompany) -> ShippingCompany:
    company = ShippingCompany(company)
    if company == ShippingCompany.NONE:
        raise ValueError("No shipping company selected")
    return company


def default_profit(company: ShippingCompany) -> float:
    """Pre-filled shipping margin for a carrier."""
    return DEFAULT_PROFITS[_require_carrier(company)]


def is_manual_fee(company: ShippingCompany) -> bool:
    """True if the carrier's fee is typed in by the operator."""
    return ShippingCompany(company) in MANUAL_FEE_CARRIERS


def billable_weight(company: ShippingCompany, weight: float | None) -> float:
    """Weight recorded on the order for a carrier (POSTA ignores weight)."""
    company = _require_carrier(company)
    if company == ShippingCompany.POSTA:
        return float(posta.FIXED_WEIGHT)
    return float(weight) if weight is not None else float(jt.data.DEFAULT_WEIGHT)


def quote_fee(
    company: ShippingCompany,
    city: str,
    total_amount: float,
    weight: float | None = None,
    net_fee: float | None = None,
    zones: pl.DataFrame | None = None,
    rates: pl.DataFrame | None = None,
) -> float:
    """
    Calculate the net carrier fee for a single order.

    Runs a one-row DataFrame through the carrier's calculator and returns
    cost_total.

    Args:
        company: JT or POSTA
        city: Destination governorate (JT only)
        total_amount: Product value of the order (JT only)
        weight: Shipment weight in kg (JT only)
        net_fee: Fee from the POSTA receipt (POSTA only)
        zones: City to zone mapping override (JT only)
        rates: Zone price override (JT only)

    Raises:
        ValueError: If company is NONE or the POSTA fee is negative
    """
    company = _require_carrier(company)

    if company == ShippingCompany.POSTA:
        df = pl.DataFrame(
            {"net_fee": [net_fee]},
            schema={"net_fee": pl.Float64},
        )
        return float(posta.calculate_costs(df)["cost_total"][0])

    df = pl.DataFrame(
        {
            "city": [city],
            "total_amount": [total_amount],
            "weight_kg": [billable_weight(company, weight)],
        },
        schema={"city": pl.Utf8, "total_amount": pl.Float64, "weight_kg": pl.Float64},
    )
    return float(jt.calculate_costs(df, zones, rates)["cost_total"][0])


__all__ = [
    "ShippingCompany",
    "DEFAULT_PROFITS",
    "MANUAL_FEE_CARRIERS",
    "default_profit",
    "is_manual_fee",
    "billable_weight",
    "quote_fee",
]
