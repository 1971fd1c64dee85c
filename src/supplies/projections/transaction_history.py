"""Transaction history: flat, export-ready rows of every stock movement."""

import csv
import io

import structlog
from protean.core.projector import on
from protean.exceptions import ObjectNotFoundError
from protean.fields import Date, DateTime, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from supplies.domain import supplies
from supplies.item.item import InventoryItem
from supplies.transaction.events import CheckoutOverdue, CheckoutReturned, TransactionRecorded
from supplies.transaction.transaction import StockTransaction

logger = structlog.get_logger(__name__)

EXPORT_COLUMNS = ["date", "item", "user", "type", "quantity", "status", "due_date", "notes"]


@supplies.projection
class TransactionHistory:
    transaction_id = Identifier(identifier=True, required=True)
    item_id = Identifier(required=True)
    item_name = String(max_length=255)
    user_id = Identifier(required=True)
    transaction_type = String(required=True)
    quantity = Integer(required=True)
    status = String(required=True)
    due_date = Date()
    notes = Text()
    returned_at = DateTime()
    recorded_at = DateTime(required=True)


@supplies.projector(projector_for=TransactionHistory, aggregates=[StockTransaction])
class TransactionHistoryProjector:
    @on(TransactionRecorded)
    def on_transaction_recorded(self, event):
        try:
            item_name = current_domain.repository_for(InventoryItem).get(event.item_id).name
        except ObjectNotFoundError:
            item_name = None

        current_domain.repository_for(TransactionHistory).add(
            TransactionHistory(
                transaction_id=event.transaction_id,
                item_id=event.item_id,
                item_name=item_name,
                user_id=event.user_id,
                transaction_type=event.transaction_type,
                quantity=event.quantity,
                status=event.status,
                due_date=event.due_date,
                notes=event.notes,
                recorded_at=event.recorded_at,
            )
        )

    @on(CheckoutReturned)
    def on_checkout_returned(self, event):
        repo = current_domain.repository_for(TransactionHistory)
        row = _history_row(repo, event)
        if row is None:
            return
        row.status = "completed"
        row.returned_at = event.returned_at
        repo.add(row)

    @on(CheckoutOverdue)
    def on_checkout_overdue(self, event):
        repo = current_domain.repository_for(TransactionHistory)
        row = _history_row(repo, event)
        if row is None:
            return
        row.status = "overdue"
        repo.add(row)


def _history_row(repo, event):
    try:
        return repo.get(event.transaction_id)
    except ObjectNotFoundError:
        logger.warning(
            "History row missing for transaction", transaction_id=event.transaction_id, event_type=event.__class__.__name__
        )
        return None


def history_rows(item_id=None, limit=100, offset=0):
    """Most recent movements first, optionally for a single item."""
    query = current_domain.repository_for(TransactionHistory)._dao.query
    if item_id:
        query = query.filter(item_id=item_id)
    return query.order_by("-recorded_at").offset(offset).limit(limit).all().items


def export_csv(rows) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(EXPORT_COLUMNS)
    for row in rows:
        writer.writerow(
            [
                row.recorded_at.isoformat() if row.recorded_at else "",
                row.item_name or row.item_id,
                row.user_id,
                row.transaction_type,
                row.quantity,
                row.status,
                row.due_date.isoformat() if row.due_date else "",
                row.notes or "",
            ]
        )
    return buffer.getvalue()
