"""
Shipping Desk

Assigns a carrier to an order and fixes its shipping fee. The desk keeps
the order list in memory, with one editable draft per undispatched order
(carrier, weight, margin). Every save rewrites the full order record and
reloads the whole list from the store.

Flow:
    1. refresh()              - load orders, rebuild drafts
    2. select_company() etc.  - operator edits the draft
    3. execute_dispatch()     - JT saves immediately; POSTA returns a
                                ManualFeeConfirmation to fill in
    4. confirm_manual_fee()   - POSTA save

dispatch() is the single save path underneath both carriers.
"""

import polars as pl
from pydantic import BaseModel, ConfigDict, Field, field_validator

from carriers import (
    ShippingCompany,
    billable_weight,
    default_profit,
    is_manual_fee,
    quote_fee,
)
from carriers.jt import DEFAULT_PROFIT as JT_DEFAULT_PROFIT
from carriers.posta import DEFAULT_NET_FEE, DEFAULT_PROFIT as POSTA_DEFAULT_PROFIT
from shared.logging_config import get_logger

from .models import (
    AlreadyDispatchedError,
    MissingCarrierError,
    Order,
    OrderNotFoundError,
    ShippingStatus,
    parse_amount,
)
from .store import OrderStore


log = get_logger(__name__)


# =============================================================================
# DRAFTS
# =============================================================================

class DispatchDraft(BaseModel):
    """Unsaved carrier choice for one order, as shown on the desk."""

    model_config = ConfigDict(validate_assignment=True)

    order_id: str
    weight: float = Field(1.0, ge=1)
    profit: float = Field(float(JT_DEFAULT_PROFIT), ge=0)
    company: ShippingCompany = ShippingCompany.NONE

    @field_validator("weight", "profit", mode="before")
    @classmethod
    def parse_numbers(cls, v, info):
        return parse_amount(v, info.field_name)

    def select_company(self, company: ShippingCompany) -> None:
        """Choose a carrier. Profit is reset to that carrier's default."""
        company = ShippingCompany(company)
        self.company = company
        if company != ShippingCompany.NONE:
            self.profit = default_profit(company)

    def set_weight(self, weight) -> None:
        # POSTA ships at a fixed weight
        if self.company == ShippingCompany.POSTA:
            return
        self.weight = weight

    def set_profit(self, profit) -> None:
        self.profit = profit


class ManualFeeConfirmation(BaseModel):
    """
    Confirmation step for carriers whose fee is typed in (POSTA).

    The operator enters the net fee from the receipt and may adjust the
    margin before the order is saved.
    """

    order_id: str
    net_fee: float = Field(float(DEFAULT_NET_FEE), ge=0)
    profit: float = Field(float(POSTA_DEFAULT_PROFIT), ge=0)

    @field_validator("net_fee", "profit", mode="before")
    @classmethod
    def parse_numbers(cls, v, info):
        return parse_amount(v, info.field_name)

    @property
    def total_shipping(self) -> float:
        return self.net_fee + self.profit


# =============================================================================
# LISTING
# =============================================================================

def _matches(order: Order, search: str) -> bool:
    needle = search.strip().lower()
    if not needle:
        return True
    return (
        needle in order.customer_name.lower()
        or needle in order.id.lower()
        or needle in order.city.lower()
    )


def filter_orders(
    orders: list[Order],
    search: str = "",
    shipping_status: ShippingStatus | None = None,
    sales_username: str | None = None,
) -> list[Order]:
    """
    Order list filters.

    Args:
        orders: Orders to filter
        search: Case-insensitive match on name or city, substring match on phone
        shipping_status: Keep only this shipping status
        sales_username: Keep only orders taken by this sales rep

    Returns:
        list[Order]: Matching orders, original order kept
    """
    needle = search.strip().lower()
    result = []
    for order in orders:
        if needle and not (
            needle in order.customer_name.lower()
            or needle in order.city.lower()
            or needle in order.customer_phone
        ):
            continue
        if shipping_status is not None and order.shipping_status != ShippingStatus(shipping_status):
            continue
        if sales_username and order.sales_username != sales_username:
            continue
        result.append(order)
    return result


# =============================================================================
# DESK
# =============================================================================

class ShippingDesk:
    """
    Dispatch desk over an OrderStore.

    Args:
        store: Where orders are read from and written to
        zones: Optional J&T city to zone mapping override
        rates: Optional J&T zone price override
    """

    def __init__(
        self,
        store: OrderStore,
        zones: pl.DataFrame | None = None,
        rates: pl.DataFrame | None = None,
    ):
        self.store = store
        self.zones = zones
        self.rates = rates
        self.orders: list[Order] = []
        self.drafts: dict[str, DispatchDraft] = {}
        self.refresh()

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    def refresh(self, keep_drafts: bool = False) -> None:
        """
        Reload every order from the store and rebuild drafts.

        Unsaved draft edits are lost unless keep_drafts is set, in which
        case drafts of orders that are still undispatched survive.
        """
        self.orders = self.store.list()
        old = self.drafts if keep_drafts else {}
        self.drafts = {}
        for order in self.orders:
            if order.is_dispatched:
                continue
            if order.id in old:
                self.drafts[order.id] = old[order.id]
                continue
            self.drafts[order.id] = DispatchDraft(
                order_id=order.id,
                weight=order.weight or 1,
                profit=order.shipping_profit or JT_DEFAULT_PROFIT,
                company=ShippingCompany.NONE,
            )

    def get(self, order_id: str) -> Order:
        for order in self.orders:
            if order.id == order_id:
                return order
        raise OrderNotFoundError(order_id)

    def pending(self, search: str = "") -> list[Order]:
        """Orders without a carrier, filtered by name, id or city."""
        return [o for o in self.orders if not o.is_dispatched and _matches(o, search)]

    def assigned(self, search: str = "") -> list[Order]:
        """Orders with a carrier, filtered by name, id or city."""
        return [o for o in self.orders if o.is_dispatched and _matches(o, search)]

    # -------------------------------------------------------------------------
    # Draft editing
    # -------------------------------------------------------------------------

    def draft(self, order_id: str) -> DispatchDraft:
        """
        Raises:
            OrderNotFoundError: If the order is unknown
            AlreadyDispatchedError: If the order already has a carrier
        """
        if order_id not in self.drafts:
            order = self.get(order_id)
            raise AlreadyDispatchedError(order_id, order.shipping_company)
        return self.drafts[order_id]

    def select_company(self, order_id: str, company: ShippingCompany) -> DispatchDraft:
        draft = self.draft(order_id)
        draft.select_company(company)
        return draft

    def set_weight(self, order_id: str, weight) -> DispatchDraft:
        draft = self.draft(order_id)
        draft.set_weight(weight)
        return draft

    def set_profit(self, order_id: str, profit) -> DispatchDraft:
        draft = self.draft(order_id)
        draft.set_profit(profit)
        return draft

    def jt_fee(self, order_id: str) -> float:
        """J&T fee for the order at the draft weight."""
        order = self.get(order_id)
        draft = self.draft(order_id)
        return quote_fee(
            ShippingCompany.JT,
            order.city,
            order.total_amount,
            weight=draft.weight,
            zones=self.zones,
            rates=self.rates,
        )

    def preview_remaining(self, order_id: str) -> float:
        """
        Remaining as it would be after dispatching the current draft.

        POSTA shows the product balance only, since its fee is not known
        until the receipt is typed in.
        """
        order = self.get(order_id)
        draft = self.draft(order_id)
        if draft.company == ShippingCompany.POSTA:
            return order.product_balance
        return order.product_balance + self.jt_fee(order_id) + draft.profit

    # -------------------------------------------------------------------------
    # Saving
    # -------------------------------------------------------------------------

    def execute_dispatch(self, order_id: str) -> Order | ManualFeeConfirmation:
        """
        Dispatch an order with its draft.

        Returns:
            Order: The saved order (JT)
            ManualFeeConfirmation: Fee form to fill in and pass to
                confirm_manual_fee() (POSTA)

        Raises:
            MissingCarrierError: If no carrier is selected
            AlreadyDispatchedError: If the order already has a carrier
        """
        draft = self.draft(order_id)
        if draft.company == ShippingCompany.NONE:
            raise MissingCarrierError(order_id)

        if is_manual_fee(draft.company):
            return ManualFeeConfirmation(order_id=order_id)

        return self.dispatch(order_id, draft.company, weight=draft.weight, profit=draft.profit)

    def confirm_manual_fee(self, confirmation: ManualFeeConfirmation) -> Order:
        """
        Save a POSTA dispatch with the fee and margin the operator entered.

        Raises:
            AlreadyDispatchedError: If the order was dispatched since the
                confirmation was opened
        """
        return self.dispatch(
            confirmation.order_id,
            ShippingCompany.POSTA,
            profit=confirmation.profit,
            net_fee=confirmation.net_fee,
        )

    def dispatch(
        self,
        order_id: str,
        company: ShippingCompany,
        weight=None,
        profit=None,
        net_fee=None,
        force: bool = False,
    ) -> Order:
        """
        Assign a carrier, fix the fee and save the order.

        Args:
            order_id: Order to dispatch
            company: JT or POSTA
            weight: Shipment weight in kg (ignored for POSTA, default 1)
            profit: Margin; the carrier default when None
            net_fee: Fee from the POSTA receipt (default 0)
            force: Re-dispatch an order that already has a carrier, to
                correct a wrong carrier or fee

        Returns:
            Order: The order as reloaded from the store

        Raises:
            MissingCarrierError: If company is NONE (nothing is written)
            OrderNotFoundError: If the order is unknown
            AlreadyDispatchedError: If the order already has a carrier and
                force is not set (nothing is written)
            InvalidAmountError: If weight, profit or net_fee is not a number
        """
        company = ShippingCompany(company)
        if company == ShippingCompany.NONE:
            raise MissingCarrierError(order_id)

        order = self.store.get(order_id)
        if order.is_dispatched and not force:
            raise AlreadyDispatchedError(order_id, order.shipping_company)
        if order.is_dispatched:
            log.warning(
                f"[Order: {order_id}] Re-dispatching, replacing {order.shipping_company.value} "
                f"fee {order.shipping_fee:.2f}"
            )

        weight = billable_weight(company, None if weight is None else parse_amount(weight, "weight"))
        profit = default_profit(company) if profit is None else parse_amount(profit, "profit")
        if net_fee is not None:
            net_fee = parse_amount(net_fee, "net_fee")

        fee = quote_fee(
            company,
            order.city,
            order.total_amount,
            weight=weight,
            net_fee=net_fee,
            zones=self.zones,
            rates=self.rates,
        )

        updated = order.with_changes(
            shipping_company=company,
            weight=weight,
            shipping_fee=fee,
            shipping_profit=profit,
            shipping_status=ShippingStatus.PROCESSING,
        )
        persisted = self.store.upsert(updated)
        self.refresh(keep_drafts=True)

        saved = self.get(order_id)
        if persisted != updated:
            log.warning(f"[Order: {order_id}] Dispatch not saved, draft kept for retry")
            return saved

        log.info(
            f"[Order: {order_id}] Dispatched with {company.value}: "
            f"fee {fee:.2f}, profit {profit:.2f}, remaining {saved.remaining:.2f}"
        )
        return saved

    def set_status(self, order_id: str, status: ShippingStatus) -> Order:
        """Set the shipping status. Any transition is allowed."""
        status = ShippingStatus(status)
        order = self.store.get(order_id)
        self.store.upsert(order.with_changes(shipping_status=status))
        self.refresh(keep_drafts=True)
        log.info(f"[Order: {order_id}] Shipping status set to {status.value}")
        return self.get(order_id)


__all__ = [
    "ShippingDesk",
    "DispatchDraft",
    "ManualFeeConfirmation",
    "filter_orders",
]
