"""
Shared Surcharges

Base class and utilities for carrier surcharges.
"""

from .base import Surcharge, at_least

__all__ = [
    "Surcharge",
    "at_least",
]
