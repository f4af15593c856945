"""
Shipping Margin

Markup added on top of the J&T fee before it is billed to the customer.
Editable per order on the shipping desk; this is the pre-filled value.
"""

DEFAULT_PROFIT = 20
