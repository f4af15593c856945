"""
Order Models

Typed order record shared by the store, the shipping desk and the
reconciliation report. Pydantic validates amounts on construction, so a
negative price or a non-numeric weight fails loudly instead of turning into
a silent zero. Changes go through with_changes(), which validates again.

Models:
    - Order: one customer order with its shipping assignment
    - OrderStatus / ShippingStatus: status enums

Helpers:
    - parse_amount: parse operator input into a number or raise InvalidAmountError
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator

from carriers import ShippingCompany


# =============================================================================
# ERRORS
# =============================================================================

class InvalidAmountError(ValueError):
    """Operator input that should be a number is not one."""

    def __init__(self, field: str, value):
        self.field = field
        self.value = value
        super().__init__(f"{field} must be a number, got {value!r}")


class MissingCarrierError(ValueError):
    """Dispatch attempted without choosing a shipping company."""

    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(
            f"Order {order_id}: choose a shipping company (JT or POSTA) before dispatching"
        )


class AlreadyDispatchedError(ValueError):
    """The order already has a carrier; dispatch happens once per order."""

    def __init__(self, order_id: str, company):
        self.order_id = order_id
        self.company = company
        super().__init__(f"Order {order_id} is already dispatched with {getattr(company, 'value', company)}")


class OrderNotFoundError(KeyError):
    """No order with this id in the store."""

    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(order_id)

    def __str__(self) -> str:
        return f"Order {self.order_id} not found"


# =============================================================================
# ENUMS
# =============================================================================

class OrderStatus(str, Enum):
    PENDING = "pending"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class ShippingStatus(str, Enum):
    PENDING = "pending"              # Created, no carrier yet
    PROCESSING = "processing"        # Carrier assigned, being packed
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    RETURNED = "returned"


# =============================================================================
# HELPERS
# =============================================================================

def parse_amount(value, field: str = "amount") -> float:
    """
    Parse a number typed by an operator.

    Accepts ints, floats and numeric strings (surrounding whitespace
    ignored). Anything else raises InvalidAmountError.
    """
    if isinstance(value, bool):
        raise InvalidAmountError(field, value)
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            raise InvalidAmountError(field, value) from None
    raise InvalidAmountError(field, value)


# =============================================================================
# ORDER
# =============================================================================

class Order(BaseModel):
    """
    A customer order and its shipping assignment.

    Attributes:
        id (str): Opaque identifier, never changes after creation.
        city (str): Destination governorate; J&T zone lookup key.
        total_amount (float): Product price.
        paid (float): Collected so far; may be below or above total_amount.
        weight (float): Shipment weight in kg, at least 1.
        shipping_company (ShippingCompany): NONE until dispatched.
        shipping_fee (float): Net carrier cost, fixed on dispatch.
        shipping_profit (float): Margin on top of the carrier cost.
        shipping_status (ShippingStatus): Manual shipping progress.
        remaining (float): Derived on every read, see remaining().
    """

    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., min_length=1)
    customer_name: str = ""
    customer_phone: str = ""
    whatsapp_phone: str | None = None
    city: str = ""
    address: str = ""
    order_details: str = ""
    status: OrderStatus = OrderStatus.PENDING
    sales_username: str = ""
    created_at: datetime = Field(default_factory=datetime.now)

    total_amount: float = Field(0.0, ge=0)
    paid: float = Field(0.0, ge=0)
    payment_method: str = ""
    wallet_number: str | None = None

    weight: float = Field(1.0, ge=1)
    shipping_status: ShippingStatus = ShippingStatus.PENDING
    shipping_fee: float = Field(0.0, ge=0)
    shipping_profit: float = Field(20.0, ge=0)
    shipping_company: ShippingCompany = ShippingCompany.NONE
    shipping_notes: str | None = None

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data):
        """Null columns from the table fall back to field defaults."""
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data

    @field_validator("total_amount", "paid", "weight", "shipping_fee", "shipping_profit", mode="before")
    @classmethod
    def parse_numbers(cls, v, info):
        """Numbers may arrive as strings from forms and the table."""
        return parse_amount(v, info.field_name)

    @field_validator("shipping_company", mode="before")
    @classmethod
    def empty_company_to_none(cls, v):
        """Rows written before dispatch may carry an empty company."""
        if isinstance(v, str) and v.strip() == "":
            return ShippingCompany.NONE
        return v

    @property
    def is_dispatched(self) -> bool:
        return self.shipping_company != ShippingCompany.NONE

    @property
    def product_balance(self) -> float:
        """What the customer still owes for the products alone."""
        return self.total_amount - self.paid

    @property
    def shipping_charge(self) -> float:
        """Carrier fee plus margin, only once a carrier is assigned."""
        if not self.is_dispatched:
            return 0.0
        return self.shipping_fee + self.shipping_profit

    @computed_field
    @property
    def remaining(self) -> float:
        """
        Total still owed by the customer.

        Recomputed from the current fields on every read, so later edits to
        total_amount or paid are always reflected. A stored remaining
        value is ignored when a record is loaded.
        """
        return self.product_balance + self.shipping_charge

    def with_changes(self, **changes) -> "Order":
        """Validated copy of the order with some fields replaced."""
        return Order.model_validate({**self.model_dump(), **changes})

    def to_record(self) -> dict:
        """Flat, JSON-safe dict of every field including remaining."""
        return self.model_dump(mode="json")


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
]
