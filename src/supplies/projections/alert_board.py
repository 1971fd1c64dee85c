"""Alert board: open low-stock alerts for the purchasing dashboard."""

from protean.core.projector import on
from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, Identifier, Integer, String
from protean.utils.globals import current_domain

from supplies.alert.alert import LowStockAlert
from supplies.alert.events import AlertAcknowledged, AlertLevelChanged, AlertResolved, LowStockAlertRaised
from supplies.domain import supplies
from supplies.item.item import InventoryItem


@supplies.projection
class AlertBoard:
    alert_id = Identifier(identifier=True, required=True)
    item_id = Identifier(required=True)
    item_name = String(max_length=255)
    location = String(max_length=255)
    alert_level = String(required=True)
    status = String(required=True)
    current_quantity = Integer(default=0)
    min_quantity = Integer(default=0)
    acknowledged_by = Identifier()
    raised_at = DateTime()
    updated_at = DateTime()


@supplies.projector(projector_for=AlertBoard, aggregates=[LowStockAlert])
class AlertBoardProjector:
    @on(LowStockAlertRaised)
    def on_alert_raised(self, event):
        try:
            item = current_domain.repository_for(InventoryItem).get(event.item_id)
            item_name, location = item.name, item.location
        except ObjectNotFoundError:
            item_name, location = None, None

        current_domain.repository_for(AlertBoard).add(
            AlertBoard(
                alert_id=event.alert_id,
                item_id=event.item_id,
                item_name=item_name,
                location=location,
                alert_level=event.alert_level,
                status="active",
                current_quantity=event.current_quantity,
                min_quantity=event.min_quantity,
                raised_at=event.raised_at,
                updated_at=event.raised_at,
            )
        )

    @on(AlertLevelChanged)
    def on_alert_level_changed(self, event):
        repo = current_domain.repository_for(AlertBoard)
        try:
            row = repo.get(event.alert_id)
        except ObjectNotFoundError:
            return

        row.alert_level = event.alert_level
        row.status = event.status
        row.current_quantity = event.current_quantity
        row.min_quantity = event.min_quantity
        row.updated_at = event.changed_at
        repo.add(row)

    @on(AlertAcknowledged)
    def on_alert_acknowledged(self, event):
        repo = current_domain.repository_for(AlertBoard)
        try:
            row = repo.get(event.alert_id)
        except ObjectNotFoundError:
            return

        row.status = "acknowledged"
        row.acknowledged_by = event.acknowledged_by
        row.updated_at = event.acknowledged_at
        repo.add(row)

    @on(AlertResolved)
    def on_alert_resolved(self, event):
        """Resolved alerts leave the board."""
        repo = current_domain.repository_for(AlertBoard)
        try:
            row = repo.get(event.alert_id)
        except ObjectNotFoundError:
            return
        repo._dao.delete(row)
