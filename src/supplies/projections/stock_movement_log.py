"""Stock movement log: append-only audit trail of every applied delta."""

from protean.core.projector import on
from protean.fields import DateTime, Identifier, Integer, String
from protean.utils.globals import current_domain

from supplies.domain import supplies
from supplies.ledger.entry import LedgerEntry
from supplies.ledger.events import StockLevelChanged


@supplies.projection
class StockMovementLog:
    transaction_id = Identifier(identifier=True, required=True)
    item_id = Identifier(required=True)
    quantity_change = Integer(required=True)
    previous_level = Integer(default=0)
    new_level = Integer(default=0)
    path = String(required=True)
    occurred_at = DateTime(required=True)


@supplies.projector(projector_for=StockMovementLog, aggregates=[LedgerEntry])
class StockMovementLogProjector:
    @on(StockLevelChanged)
    def on_stock_level_changed(self, event):
        current_domain.repository_for(StockMovementLog).add(
            StockMovementLog(
                transaction_id=event.transaction_id,
                item_id=event.item_id,
                quantity_change=event.delta,
                previous_level=event.previous_quantity,
                new_level=event.new_quantity,
                path=event.path,
                occurred_at=event.applied_at,
            )
        )


def movements_for(item_id, limit=100):
    return (
        current_domain.repository_for(StockMovementLog)
        ._dao.query.filter(item_id=item_id)
        .order_by("-occurred_at")
        .limit(limit)
        .all()
        .items
    )
