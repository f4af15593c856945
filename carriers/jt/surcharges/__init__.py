"""
Surcharges Package

Exports all surcharge classes and processing groups.

Within the "value" exclusivity group only the highest priority (lowest
number) surcharge that matches is charged.
"""

from shared.surcharges import Surcharge
from .value_percent import VAL_PCT
from .value_flat import VAL_FLAT


# All surcharges
ALL = [VAL_PCT, VAL_FLAT]


# =============================================================================
# HELPERS
# =============================================================================

def get_exclusivity_group(group: str) -> list[type[Surcharge]]:
    """Get surcharges in an exclusivity group, sorted by priority (lowest first)."""
    return sorted(
        [s for s in ALL if s.exclusivity_group == group],
        key=lambda s: s.priority
    )


def get_unique_exclusivity_groups(surcharges: list) -> set[str]:
    """Get unique exclusivity group names from a list of surcharges."""
    return {s.exclusivity_group for s in surcharges if s.exclusivity_group is not None}


# =============================================================================
# VALIDATION
# =============================================================================

def validate_surcharges() -> None:
    """
    Validate surcharge configuration integrity.

    Raises ValueError if any configuration issues are found.
    Called at import time to fail fast on configuration errors.
    """
    errors = []

    names = [s.name for s in ALL]
    duplicates = {n for n in names if names.count(n) > 1}
    if duplicates:
        errors.append(f"duplicate surcharge names: {sorted(duplicates)}")

    for s in ALL:
        # Check exclusivity_group surcharges have priority defined
        if s.exclusivity_group is not None and s.priority is None:
            errors.append(f"{s.name}: exclusivity_group '{s.exclusivity_group}' requires priority")

        # Check prices are not negative
        if s.list_price < 0:
            errors.append(f"{s.name}: list_price must not be negative")
        if s.rate is not None and s.rate < 0:
            errors.append(f"{s.name}: rate must not be negative")

        # Check a surcharge is either flat or value-based, not both
        if s.rate is not None and s.list_price:
            errors.append(f"{s.name}: set either list_price or rate, not both")

    # Check priorities are unique within each group
    for group in get_unique_exclusivity_groups(ALL):
        priorities = [s.priority for s in ALL if s.exclusivity_group == group]
        if len(priorities) != len(set(priorities)):
            errors.append(f"exclusivity_group '{group}': priorities must be unique")

    if errors:
        raise ValueError("Surcharge configuration errors:\n  " + "\n  ".join(errors))


# Run validation at import time
validate_surcharges()

__all__ = [
    # Base
    "Surcharge",
    # Surcharge classes
    "VAL_PCT",
    "VAL_FLAT",
    # Lists
    "ALL",
    # Helpers
    "get_exclusivity_group",
    "get_unique_exclusivity_groups",
    "validate_surcharges",
]
