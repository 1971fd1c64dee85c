"""Transaction processor: the boundary callers use to record stock movements.

Dispatches the recording commands and turns every failure of the error
taxonomy into a RecordOutcome, so callers branch on ``outcome.error``
instead of catching exceptions.
"""

from dataclasses import dataclass, field
from datetime import date

import structlog
from protean.exceptions import ObjectNotFoundError, TransactionError, ValidationError
from protean.utils.globals import current_domain
from sqlalchemy.exc import SQLAlchemyError

from supplies.alert.alert import LowStockAlert
from supplies.errors import InvalidTransaction, LedgerConflict, PersistenceFailure, UnknownTransaction
from supplies.item.item import InventoryItem
from supplies.transaction.recording import ReapplyTransaction, RecordTransaction
from supplies.transaction.transaction import StockTransaction, TransactionType

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class TransactionInput:
    item_id: str
    user_id: str
    transaction_type: str
    quantity: int
    due_date: date | None = None
    notes: str | None = None
    location_used: str | None = None
    condition_on_return: str | None = None
    returns_transaction_id: str | None = None


@dataclass(frozen=True)
class RecordOutcome:
    """Result of a recording attempt: the three results, or an error kind."""

    ok: bool
    transaction: StockTransaction | None = None
    item: InventoryItem | None = None
    alert: LowStockAlert | None = None
    path: str | None = None
    replayed: bool = False
    error: str | None = None
    messages: dict = field(default_factory=dict)

    @classmethod
    def success(cls, receipt):
        return cls(
            ok=True,
            transaction=receipt.transaction,
            item=receipt.item,
            alert=receipt.alert,
            path=receipt.path,
            replayed=receipt.replayed,
        )

    @classmethod
    def failure(cls, error, messages):
        return cls(ok=False, error=error, messages=messages)


class TransactionProcessor:
    def record(self, data: TransactionInput) -> RecordOutcome:
        return self._dispatch(
            RecordTransaction,
            item_id=data.item_id,
            user_id=data.user_id,
            transaction_type=data.transaction_type,
            quantity=data.quantity,
            due_date=data.due_date,
            notes=data.notes,
            location_used=data.location_used,
            condition_on_return=data.condition_on_return,
            returns_transaction_id=data.returns_transaction_id,
        )

    def return_checkout(self, transaction_id, user_id, condition_on_return=None, notes=None) -> RecordOutcome:
        """Check the full quantity of a checkout back in and close it."""
        try:
            checkout = current_domain.repository_for(StockTransaction).get(transaction_id)
        except ObjectNotFoundError:
            exc = UnknownTransaction(transaction_id)
            return RecordOutcome.failure(exc.kind, exc.messages)

        return self.record(
            TransactionInput(
                item_id=str(checkout.item_id),
                user_id=str(user_id),
                transaction_type=TransactionType.CHECKIN.value,
                quantity=checkout.quantity,
                notes=notes,
                condition_on_return=condition_on_return,
                returns_transaction_id=str(checkout.id),
            )
        )

    def retry_ledger(self, transaction_id) -> RecordOutcome:
        """Re-submit the ledger step of a recorded transaction. Safe to repeat."""
        return self._dispatch(ReapplyTransaction, transaction_id=transaction_id)

    def _dispatch(self, command_cls, **values):
        try:
            receipt = current_domain.process(command_cls(**values), asynchronous=False)
        except (InvalidTransaction, LedgerConflict, PersistenceFailure) as exc:
            return self._failed(exc.kind, exc, values)
        except ValidationError as exc:
            # InsufficientStock, plus field errors from the command or aggregate
            return self._failed(getattr(exc, "kind", InvalidTransaction.kind), exc, values)
        except (TransactionError, SQLAlchemyError) as exc:
            # Commit-time failures: nothing was stored
            return self._failed(PersistenceFailure.kind, exc, values)
        return RecordOutcome.success(receipt)

    def _failed(self, kind, exc, values):
        messages = getattr(exc, "messages", None) or {"error": [str(exc)]}
        log = logger.error if kind == PersistenceFailure.kind else logger.warning
        log("Stock transaction rejected", error=kind, messages=messages, **self._context(values))
        return RecordOutcome.failure(kind, messages)

    @staticmethod
    def _context(values):
        return {key: str(values[key]) for key in ("item_id", "transaction_id", "transaction_type") if values.get(key)}
