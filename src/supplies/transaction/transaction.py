"""StockTransaction aggregate (CQRS): one recorded stock movement.

Transactions are append-only. The only mutations after recording are the
status transitions of a checkout: returned (``completed``) and past due
(``overdue``).
"""

from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Date, DateTime, Identifier, Integer, String, Text

from supplies.domain import supplies
from supplies.transaction.events import CheckoutOverdue, CheckoutReturned, TransactionRecorded


class TransactionType(Enum):
    CHECKOUT = "checkout"
    CHECKIN = "checkin"
    LOST = "lost"
    DAMAGED = "damaged"
    MAINTENANCE = "maintenance"


class TransactionStatus(Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    OVERDUE = "overdue"
    LOST = "lost"
    DAMAGED = "damaged"


INITIAL_STATUS = {
    TransactionType.CHECKOUT: TransactionStatus.ACTIVE,
    TransactionType.CHECKIN: TransactionStatus.COMPLETED,
    TransactionType.LOST: TransactionStatus.LOST,
    TransactionType.DAMAGED: TransactionStatus.DAMAGED,
    TransactionType.MAINTENANCE: TransactionStatus.ACTIVE,
}

# Movements whose stock comes back through a checkin
RETURNABLE_TYPES = (TransactionType.CHECKOUT.value, TransactionType.MAINTENANCE.value)
AWAITING_RETURN_STATUSES = (TransactionStatus.ACTIVE.value, TransactionStatus.OVERDUE.value)


@supplies.aggregate
class StockTransaction:
    item_id = Identifier(required=True)
    user_id = Identifier(required=True)
    transaction_type = String(choices=TransactionType, required=True)
    quantity = Integer(required=True, min_value=1)
    status = String(choices=TransactionStatus, required=True)
    due_date = Date()
    notes = Text()
    location_used = String(max_length=255)
    condition_on_return = String(max_length=255)
    returns_transaction_id = Identifier()
    returned_at = DateTime()
    created_at = DateTime()

    @invariant.post
    def due_date_only_on_checkouts(self):
        if self.due_date and self.transaction_type != TransactionType.CHECKOUT.value:
            raise ValidationError({"due_date": ["Only checkouts can have a due date"]})

    @classmethod
    def record(
        cls,
        item_id,
        user_id,
        transaction_type,
        quantity,
        due_date=None,
        notes=None,
        location_used=None,
        condition_on_return=None,
        returns_transaction_id=None,
    ):
        now = datetime.now(UTC)
        status = INITIAL_STATUS[TransactionType(transaction_type)].value
        txn = cls(
            item_id=str(item_id),
            user_id=str(user_id),
            transaction_type=transaction_type,
            quantity=quantity,
            status=status,
            due_date=due_date,
            notes=notes,
            location_used=location_used,
            condition_on_return=condition_on_return,
            returns_transaction_id=returns_transaction_id,
            created_at=now,
        )
        txn.raise_(
            TransactionRecorded(
                transaction_id=str(txn.id),
                item_id=str(item_id),
                user_id=str(user_id),
                transaction_type=transaction_type,
                quantity=quantity,
                status=status,
                due_date=due_date,
                notes=notes,
                location_used=location_used,
                returns_transaction_id=returns_transaction_id,
                recorded_at=now,
            )
        )
        return txn

    @property
    def signed_delta(self) -> int:
        """Quantity change this movement applies to the item's on-hand count."""
        if self.transaction_type == TransactionType.CHECKIN.value:
            return self.quantity
        return -self.quantity

    @property
    def is_awaiting_return(self):
        return self.transaction_type in RETURNABLE_TYPES and self.status in AWAITING_RETURN_STATUSES

    def complete(self, returned_by_transaction_id, condition_on_return=None):
        """Close a checkout or maintenance send once its stock has been checked back in."""
        if not self.is_awaiting_return:
            raise ValidationError({"status": [f"Cannot return a {self.transaction_type} in {self.status} state"]})

        now = datetime.now(UTC)
        self.status = TransactionStatus.COMPLETED.value
        self.returned_at = now
        self.condition_on_return = condition_on_return

        self.raise_(
            CheckoutReturned(
                transaction_id=str(self.id),
                item_id=str(self.item_id),
                returned_by_transaction_id=str(returned_by_transaction_id),
                condition_on_return=condition_on_return,
                returned_at=now,
            )
        )

    def mark_overdue(self, as_of):
        if self.transaction_type != TransactionType.CHECKOUT.value or self.status != TransactionStatus.ACTIVE.value:
            raise ValidationError({"status": [f"Cannot mark a {self.transaction_type} in {self.status} state overdue"]})
        if not self.due_date or self.due_date >= as_of.date():
            raise ValidationError({"due_date": ["Checkout is not past its due date"]})

        self.status = TransactionStatus.OVERDUE.value
        self.raise_(
            CheckoutOverdue(
                transaction_id=str(self.id),
                item_id=str(self.item_id),
                user_id=str(self.user_id),
                due_date=self.due_date,
                marked_at=as_of,
            )
        )
