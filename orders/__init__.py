"""
Orders

Order book, shipping desk and reconciliation.

Modules:
    - models:          Order model, enums and errors
    - store:           parquet and warehouse persistence
    - intake:          new order creation
    - shipping:        carrier assignment and dispatch
    - reconciliation:  balances and per-carrier totals

Usage:
    from orders import ShippingDesk, LocalOrderStore

    desk = ShippingDesk(LocalOrderStore())
    desk.select_company("ORD-...", "JT")
    desk.execute_dispatch("ORD-...")
"""

from .models import (
    Order,
    OrderStatus,
    ShippingStatus,
    ShippingCompany,
    InvalidAmountError,
    MissingCarrierError,
    AlreadyDispatchedError,
    OrderNotFoundError,
    parse_amount,
)
from .store import OrderStore, LocalOrderStore, TableOrderStore
from .intake import new_order
from .shipping import ShippingDesk, DispatchDraft, ManualFeeConfirmation, filter_orders

__all__ = [
    "Order",
    "OrderStatus",
    "ShippingStatus",
    "ShippingCompany",
    "InvalidAmountError",
    "MissingCarrierError",
    "AlreadyDispatchedError",
    "OrderNotFoundError",
    "parse_amount",
    "OrderStore",
    "LocalOrderStore",
    "TableOrderStore",
    "new_order",
    "ShippingDesk",
    "DispatchDraft",
    "ManualFeeConfirmation",
    "filter_orders",
]
