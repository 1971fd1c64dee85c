"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance maintains its own state: no cross-user sharing.
"""

from dataclasses import dataclass, field


@dataclass
class SupplyState:
    """Tracks state for a single simulated ward's stock usage."""

    item_id: str | None = None
    user_id: str | None = None
    open_checkouts: list[str] = field(default_factory=list)
    alert_id: str | None = None
