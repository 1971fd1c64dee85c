"""Overdue checkouts: command and handler for flagging late returns.

Designed to be triggered periodically by an external scheduler via the
maintenance API endpoint. Flips active checkouts whose due date is before
``as_of`` to overdue.
"""

from datetime import UTC, datetime

import structlog
from protean import handle
from protean.exceptions import InvalidOperationError, ValidationError
from protean.fields import DateTime
from protean.utils.globals import current_domain

from supplies.domain import supplies
from supplies.transaction.transaction import StockTransaction, TransactionStatus, TransactionType
from supplies.utils.db import iterate_all

logger = structlog.get_logger(__name__)


@supplies.command(part_of="StockTransaction")
class MarkOverdueCheckouts:
    as_of = DateTime()  # Optional: defaults to now


@supplies.command_handler(part_of=StockTransaction)
class MarkOverdueCheckoutsHandler:
    @handle(MarkOverdueCheckouts)
    def mark_overdue_checkouts(self, command):
        as_of = command.as_of or datetime.now(UTC)
        repo = current_domain.repository_for(StockTransaction)

        active_checkouts = repo._dao.query.filter(
            transaction_type=TransactionType.CHECKOUT.value,
            status=TransactionStatus.ACTIVE.value,
        ).order_by("created_at")

        late = [txn for txn in iterate_all(active_checkouts) if txn.due_date and txn.due_date < as_of.date()]
        if not late:
            logger.info("No overdue checkouts found", as_of=as_of.isoformat())
            return 0

        marked = 0
        for txn in late:
            try:
                txn.mark_overdue(as_of)
                repo.add(txn)
                marked += 1
                logger.info(
                    "Checkout marked overdue",
                    transaction_id=str(txn.id),
                    item_id=str(txn.item_id),
                    user_id=str(txn.user_id),
                    due_date=str(txn.due_date),
                )
            except (ValidationError, InvalidOperationError) as exc:
                logger.warning("Failed to mark checkout overdue", transaction_id=str(txn.id), error=str(exc))

        logger.info("Overdue checkout sweep complete", marked=marked)
        return marked
