"""Alert sweep: re-evaluate every item's alert against its current stock.

Designed to be triggered periodically by an external scheduler via the
maintenance API endpoint. Each item is reconciled through its own command so
one bad record cannot stop the rest of the sweep. Reconciliation is an
upsert by item, so a sweep racing an in-flight transaction converges on the
same single open alert.
"""

import structlog
from protean import handle
from protean.exceptions import InvalidOperationError, ObjectNotFoundError, ValidationError
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from supplies.alert.alert import LowStockAlert
from supplies.alert.lifecycle import AlertLifecycleManager
from supplies.domain import supplies
from supplies.item.item import InventoryItem
from supplies.utils.db import iterate_all

logger = structlog.get_logger(__name__)


@supplies.command(part_of="LowStockAlert")
class ReconcileStockAlert:
    item_id = Identifier(required=True)


@supplies.command(part_of="LowStockAlert")
class ReevaluateStockAlerts:
    """Reconcile the alert of every inventory item."""

    page_size = Integer(min_value=1)  # Optional: defaults to ALERT_SWEEP_PAGE_SIZE


@supplies.command_handler(part_of=LowStockAlert)
class StockAlertSweepHandler:
    @handle(ReconcileStockAlert)
    def reconcile_stock_alert(self, command):
        item = current_domain.repository_for(InventoryItem)._dao.get(str(command.item_id))
        return AlertLifecycleManager().reconcile(item)

    @handle(ReevaluateStockAlerts)
    def reevaluate_stock_alerts(self, command):
        config = current_domain.config.get("custom") or {}
        page_size = command.page_size or config.get("ALERT_SWEEP_PAGE_SIZE", 100)
        query = current_domain.repository_for(InventoryItem)._dao.query.order_by("created_at")

        item_ids = [str(item.id) for item in iterate_all(query, page_size)]
        logger.info("Starting stock alert sweep", items=len(item_ids), page_size=page_size)

        reconciled = 0
        for item_id in item_ids:
            try:
                current_domain.process(ReconcileStockAlert(item_id=item_id), asynchronous=False)
                reconciled += 1
            except (ValidationError, InvalidOperationError, ObjectNotFoundError) as exc:
                logger.warning("Failed to reconcile stock alert", item_id=item_id, error=str(exc))

        logger.info("Stock alert sweep complete", items=len(item_ids), reconciled=reconciled)
        return reconciled
