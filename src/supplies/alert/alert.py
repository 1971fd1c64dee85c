"""LowStockAlert aggregate (CQRS): one alert instance per breach of an item's minimum.

An alert moves through ACTIVE → ACKNOWLEDGED → RESOLVED. Level changes while
open update the same record, so acknowledgement history survives escalation
and de-escalation. Resolved alerts are terminal; a fresh breach opens a new
alert instance.

OpenAlertIndex is the sparse ``item_id → alert_id`` map of the currently open
alert. Keying it by item id makes "at most one open alert per item" a
property of the store rather than of a scan.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, Integer, String

from supplies.alert.evaluation import AlertLevel
from supplies.alert.events import (
    AlertAcknowledged,
    AlertLevelChanged,
    AlertResolved,
    LowStockAlertRaised,
)
from supplies.domain import supplies


class AlertStatus(Enum):
    ACTIVE = "active"
    ACKNOWLEDGED = "acknowledged"
    RESOLVED = "resolved"


class Resolution(Enum):
    AUTOMATIC = "automatic"
    MANUAL = "manual"


OPEN_STATUSES = (AlertStatus.ACTIVE.value, AlertStatus.ACKNOWLEDGED.value)


@supplies.aggregate
class LowStockAlert:
    """A low-stock alert for one inventory item."""

    item_id = Identifier(required=True)
    current_quantity = Integer(required=True, min_value=0)
    min_quantity = Integer(required=True, min_value=0)
    alert_level = String(choices=AlertLevel, required=True)
    status = String(choices=AlertStatus, default=AlertStatus.ACTIVE.value)
    acknowledged_by = Identifier()
    acknowledged_at = DateTime()
    resolved_by = Identifier()
    resolution = String(choices=Resolution)
    resolved_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def acknowledgement_must_be_attributed(self):
        if self.status == AlertStatus.ACKNOWLEDGED.value and (not self.acknowledged_by or not self.acknowledged_at):
            raise ValidationError({"acknowledged_by": ["Acknowledged alerts must record who acknowledged them and when"]})

    @invariant.post
    def resolved_alerts_must_have_resolution_time(self):
        if self.status == AlertStatus.RESOLVED.value and not self.resolved_at:
            raise ValidationError({"resolved_at": ["Resolved alerts must record when they were resolved"]})

    @property
    def is_open(self):
        return self.status in OPEN_STATUSES

    @classmethod
    def raise_for(cls, item_id, alert_level, current_quantity, min_quantity):
        """Open a new alert for an item whose stock fell to or below its minimum."""
        now = datetime.now(UTC)
        alert = cls(
            item_id=str(item_id),
            alert_level=alert_level,
            current_quantity=current_quantity,
            min_quantity=min_quantity,
            status=AlertStatus.ACTIVE.value,
            created_at=now,
            updated_at=now,
        )
        alert.raise_(
            LowStockAlertRaised(
                alert_id=str(alert.id),
                item_id=str(item_id),
                alert_level=alert_level,
                current_quantity=current_quantity,
                min_quantity=min_quantity,
                raised_at=now,
            )
        )
        return alert

    def reassess(self, alert_level, current_quantity, min_quantity):
        """Refresh the snapshot of an open alert; returns True if the level changed.

        Status is left untouched so an acknowledged alert stays acknowledged.
        """
        if not self.is_open:
            raise ValidationError({"status": [f"Cannot reassess an alert in {self.status} state"]})

        previous_level = self.alert_level
        self.current_quantity = current_quantity
        self.min_quantity = min_quantity
        self.updated_at = datetime.now(UTC)

        if previous_level == alert_level:
            return False

        self.alert_level = alert_level
        self.raise_(
            AlertLevelChanged(
                alert_id=str(self.id),
                item_id=str(self.item_id),
                previous_level=previous_level,
                alert_level=alert_level,
                status=self.status,
                current_quantity=current_quantity,
                min_quantity=min_quantity,
                changed_at=self.updated_at,
            )
        )
        return True

    def acknowledge(self, user_id):
        """Record that a staff member has seen the alert."""
        if not user_id:
            raise ValidationError({"user_id": ["User is required to acknowledge an alert"]})
        if AlertStatus(self.status) != AlertStatus.ACTIVE:
            raise ValidationError({"status": [f"Cannot acknowledge an alert in {self.status} state"]})

        now = datetime.now(UTC)
        self.acknowledged_by = str(user_id)
        self.acknowledged_at = now
        self.status = AlertStatus.ACKNOWLEDGED.value
        self.updated_at = now

        self.raise_(
            AlertAcknowledged(
                alert_id=str(self.id),
                item_id=str(self.item_id),
                acknowledged_by=str(user_id),
                acknowledged_at=now,
            )
        )

    def resolve(self, current_quantity=None, resolved_by=None):
        """Close the alert. Automatic when ``resolved_by`` is None, manual otherwise."""
        if not self.is_open:
            raise ValidationError({"status": ["Alert is already resolved"]})

        now = datetime.now(UTC)
        resolution = Resolution.MANUAL if resolved_by else Resolution.AUTOMATIC
        if current_quantity is not None:
            self.current_quantity = current_quantity
        self.resolved_at = now
        self.resolved_by = str(resolved_by) if resolved_by else None
        self.resolution = resolution.value
        self.status = AlertStatus.RESOLVED.value
        self.updated_at = now

        self.raise_(
            AlertResolved(
                alert_id=str(self.id),
                item_id=str(self.item_id),
                resolution=resolution.value,
                resolved_by=self.resolved_by,
                current_quantity=self.current_quantity,
                resolved_at=now,
            )
        )


@supplies.projection
class OpenAlertIndex:
    """Pointer from an item to its single open alert."""

    item_id = Identifier(identifier=True, required=True)
    alert_id = Identifier(required=True)
    opened_at = DateTime()
