"""
J&T Express Carrier Module

Expected shipping cost calculator for J&T Express (zone + weight tiered,
plus declared value surcharge).
"""

from .calculate_costs import calculate_costs, zone_for, Zone
from .data import DEFAULT_PROFIT
from .version import VERSION

__all__ = ["calculate_costs", "zone_for", "Zone", "DEFAULT_PROFIT", "VERSION"]
