"""Alert evaluation: classify an item's stock health against its minimum.

Pure and total: every (quantity, min_quantity) pair maps to exactly one
outcome. The critical boundary is inclusive (``quantity <= min_quantity / 2``)
and is computed in integer arithmetic so odd minimums never depend on float
rounding.
"""

from enum import Enum


class AlertLevel(Enum):
    LOW = "low"
    CRITICAL = "critical"
    OUT_OF_STOCK = "out_of_stock"


# Most severe first
_SEVERITY = [AlertLevel.OUT_OF_STOCK, AlertLevel.CRITICAL, AlertLevel.LOW]


def evaluate(quantity: int, min_quantity: int) -> AlertLevel | None:
    """Return the alert level for ``quantity`` given ``min_quantity``, or None."""
    if quantity <= 0:
        return AlertLevel.OUT_OF_STOCK
    if quantity > min_quantity:
        return None
    if 2 * quantity <= min_quantity:
        return AlertLevel.CRITICAL
    return AlertLevel.LOW


def is_escalation(previous: str, current: str) -> bool:
    """True when ``current`` is a more severe level than ``previous``."""
    return _SEVERITY.index(AlertLevel(current)) < _SEVERITY.index(AlertLevel(previous))
