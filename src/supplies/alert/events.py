"""Domain events for the LowStockAlert aggregate."""

from protean.fields import DateTime, Identifier, Integer, String

from supplies.domain import supplies


@supplies.event(part_of="LowStockAlert")
class LowStockAlertRaised:
    """An item dropped to or below its minimum with no open alert."""

    __version__ = 1

    alert_id = Identifier(required=True)
    item_id = Identifier(required=True)
    alert_level = String(required=True)
    current_quantity = Integer(required=True)
    min_quantity = Integer(required=True)
    raised_at = DateTime(required=True)


@supplies.event(part_of="LowStockAlert")
class AlertLevelChanged:
    """An open alert escalated or de-escalated between non-none levels."""

    __version__ = 1

    alert_id = Identifier(required=True)
    item_id = Identifier(required=True)
    previous_level = String(required=True)
    alert_level = String(required=True)
    status = String(required=True)
    current_quantity = Integer(required=True)
    min_quantity = Integer(required=True)
    changed_at = DateTime(required=True)


@supplies.event(part_of="LowStockAlert")
class AlertAcknowledged:
    """A staff member acknowledged an open alert."""

    __version__ = 1

    alert_id = Identifier(required=True)
    item_id = Identifier(required=True)
    acknowledged_by = Identifier(required=True)
    acknowledged_at = DateTime(required=True)


@supplies.event(part_of="LowStockAlert")
class AlertResolved:
    """An alert was closed, automatically on recovery or manually by staff."""

    __version__ = 1

    alert_id = Identifier(required=True)
    item_id = Identifier(required=True)
    resolution = String(required=True)  # automatic, manual
    resolved_by = Identifier()
    current_quantity = Integer(required=True)
    resolved_at = DateTime(required=True)
