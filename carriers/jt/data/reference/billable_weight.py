"""
Billable Weight Configuration

J&T Express domestic tariff.
Last updated: 2025-11-02

HOW WEIGHT IS BILLED
--------------------
The zone base price covers the first BASE_WEIGHT kilograms. Every kilogram
above it is billed at the zone's extra_per_kg rate:

    extra_weight_kg = max(0, weight_kg - BASE_WEIGHT)

Fractional kilograms are billed pro rata (no rounding up).
Orders without a weight are billed at DEFAULT_WEIGHT.
"""

BASE_WEIGHT = 1               # Kilograms included in the zone base price
DEFAULT_WEIGHT = 1            # Weight assumed when the order has none
