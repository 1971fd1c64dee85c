"""LedgerEntry aggregate: the record of one applied quantity delta.

Each entry carries the id of the stock transaction that caused it, and at
most one entry exists per transaction id. The existence of an entry is what
makes ``apply_delta`` idempotent.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.fields import DateTime, Identifier, Integer, String

from supplies.domain import supplies
from supplies.ledger.events import StockLevelChanged


class LedgerPath(Enum):
    ATOMIC = "atomic"
    BEST_EFFORT = "best_effort"


@supplies.aggregate
class LedgerEntry:
    transaction_id = Identifier(required=True, unique=True)
    item_id = Identifier(required=True)
    delta = Integer(required=True)
    previous_quantity = Integer(required=True, min_value=0)
    new_quantity = Integer(required=True, min_value=0)
    path = String(choices=LedgerPath, required=True)
    applied_at = DateTime()

    @classmethod
    def record(cls, transaction_id, item_id, delta, previous_quantity, new_quantity, path):
        now = datetime.now(UTC)
        entry = cls(
            transaction_id=str(transaction_id),
            item_id=str(item_id),
            delta=delta,
            previous_quantity=previous_quantity,
            new_quantity=new_quantity,
            path=path,
            applied_at=now,
        )
        entry.raise_(
            StockLevelChanged(
                transaction_id=str(transaction_id),
                item_id=str(item_id),
                delta=delta,
                previous_quantity=previous_quantity,
                new_quantity=new_quantity,
                path=path,
                applied_at=now,
            )
        )
        return entry
