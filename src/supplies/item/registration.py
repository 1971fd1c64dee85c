"""Item registration and threshold changes: commands and handler."""

from datetime import UTC, datetime

import structlog
from protean import handle
from protean.fields import Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from supplies.alert.lifecycle import AlertLifecycleManager
from supplies.domain import supplies
from supplies.item.item import InventoryItem, ItemType
from supplies.utils.db import update_where

logger = structlog.get_logger(__name__)


@supplies.command(part_of="InventoryItem")
class RegisterItem:
    name = String(required=True, max_length=255)
    item_type = String(max_length=20, default=ItemType.SUPPLIES.value)
    location = String(max_length=255)
    initial_quantity = Integer(default=0)
    min_quantity = Integer(default=0)
    max_quantity = Integer()
    unit_price = Float()


@supplies.command(part_of="InventoryItem")
class UpdateStockThresholds:
    item_id = Identifier(required=True)
    min_quantity = Integer(required=True)
    max_quantity = Integer()


@supplies.command_handler(part_of=InventoryItem)
class ItemManagementHandler:
    @handle(RegisterItem)
    def register_item(self, command):
        item = InventoryItem.register(
            name=command.name,
            item_type=command.item_type,
            location=command.location,
            initial_quantity=command.initial_quantity,
            min_quantity=command.min_quantity,
            max_quantity=command.max_quantity,
            unit_price=command.unit_price,
        )
        current_domain.repository_for(InventoryItem).add(item)
        AlertLifecycleManager().reconcile(item)

        logger.info("Inventory item registered", item_id=str(item.id), name=item.name, quantity=item.quantity)
        return str(item.id)

    @handle(UpdateStockThresholds)
    def update_stock_thresholds(self, command):
        repo = current_domain.repository_for(InventoryItem)
        item = repo.get(command.item_id)
        item.update_thresholds(command.min_quantity, command.max_quantity)

        # Partial update: the ledger may be writing quantity concurrently
        update_where(
            repo._dao,
            {"id": str(item.id)},
            min_quantity=item.min_quantity,
            max_quantity=item.max_quantity,
            updated_at=datetime.now(UTC),
        )

        item = repo._dao.get(str(item.id))
        AlertLifecycleManager().reconcile(item)

        logger.info(
            "Stock thresholds updated",
            item_id=str(item.id),
            min_quantity=item.min_quantity,
            max_quantity=item.max_quantity,
        )
        return item
