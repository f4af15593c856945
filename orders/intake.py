"""
Order Intake

Creates new orders the way the sales form pre-fills them: nothing paid,
1 kg, J&T margin pre-filled, no carrier, both statuses pending.
"""

from datetime import datetime

from carriers import ShippingCompany
from carriers.jt import DEFAULT_PROFIT

from .models import Order, OrderStatus, ShippingStatus


ID_PREFIX = "ORD-"
_DIGITS = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"


def _base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(_DIGITS[rem])
    return "".join(reversed(digits))


def generate_order_id(now: datetime | None = None) -> str:
    """ORD- followed by the creation time in milliseconds, base 36, upper case."""
    now = now or datetime.now()
    return ID_PREFIX + _base36(int(now.timestamp() * 1000))


def new_order(
    customer_name: str,
    customer_phone: str,
    city: str,
    address: str = "",
    order_details: str = "",
    total_amount=0,
    paid=0,
    sales_username: str = "",
    payment_method: str = "",
    wallet_number: str | None = None,
    whatsapp_phone: str | None = None,
    weight=1,
    now: datetime | None = None,
) -> Order:
    """
    Build a new, undispatched order.

    Amounts may be numbers or numeric strings; anything else raises a
    pydantic ValidationError.
    """
    now = now or datetime.now()
    return Order(
        id=generate_order_id(now),
        customer_name=customer_name,
        customer_phone=customer_phone,
        whatsapp_phone=whatsapp_phone,
        city=city,
        address=address,
        order_details=order_details,
        status=OrderStatus.PENDING,
        sales_username=sales_username,
        created_at=now,
        total_amount=total_amount,
        paid=paid,
        payment_method=payment_method,
        wallet_number=wallet_number,
        weight=weight,
        shipping_status=ShippingStatus.PENDING,
        shipping_fee=0,
        shipping_profit=DEFAULT_PROFIT,
        shipping_company=ShippingCompany.NONE,
    )


__all__ = ["new_order", "generate_order_id", "ID_PREFIX"]
