"""
POSTA Carrier Module

Shipping cost handling for Egypt Post (POSTA), where the fee is entered
manually on dispatch.
"""

from .calculate_costs import calculate_costs
from .data import DEFAULT_PROFIT, DEFAULT_NET_FEE, FIXED_WEIGHT
from .version import VERSION

__all__ = ["calculate_costs", "DEFAULT_PROFIT", "DEFAULT_NET_FEE", "FIXED_WEIGHT", "VERSION"]
