"""Transaction recording: commands and handler.

Recording runs as a single unit of work: the transaction is appended first,
then the ledger applies its delta, then the item's alert is reconciled. Any
failure raises out of the handler and the unit of work discards everything,
so a rejected movement never leaves a transaction without its delta.
"""

from dataclasses import dataclass

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Date, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from supplies.alert.alert import LowStockAlert
from supplies.alert.lifecycle import AlertLifecycleManager
from supplies.domain import supplies
from supplies.errors import InvalidTransaction, UnknownItem, UnknownTransaction
from supplies.item.item import InventoryItem
from supplies.ledger import get_ledger
from supplies.transaction.transaction import StockTransaction, TransactionType

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class TransactionReceipt:
    transaction: StockTransaction
    item: InventoryItem
    alert: LowStockAlert | None
    path: str
    replayed: bool = False


@supplies.command(part_of="StockTransaction")
class RecordTransaction:
    """Record a checkout, checkin, loss, damage or maintenance movement."""

    item_id = Identifier(required=True)
    user_id = Identifier(required=True)
    transaction_type = String(required=True, max_length=20)
    quantity = Integer(required=True)
    due_date = Date()
    notes = Text()
    location_used = String(max_length=255)
    condition_on_return = String(max_length=255)
    returns_transaction_id = Identifier()


@supplies.command(part_of="StockTransaction")
class ReapplyTransaction:
    """Re-run only the ledger step of an already recorded transaction."""

    transaction_id = Identifier(required=True)


def _validate(command):
    errors = {}
    if command.quantity is None or command.quantity <= 0:
        errors["quantity"] = ["Quantity must be a positive integer"]

    valid_types = [t.value for t in TransactionType]
    if command.transaction_type not in valid_types:
        errors["transaction_type"] = [f"Transaction type must be one of {', '.join(valid_types)}"]
    elif command.due_date and command.transaction_type != TransactionType.CHECKOUT.value:
        errors["due_date"] = ["Only checkouts can have a due date"]

    if command.returns_transaction_id and command.transaction_type != TransactionType.CHECKIN.value:
        errors["returns_transaction_id"] = ["Only checkins can return a checkout"]

    if errors:
        raise InvalidTransaction(errors)


def _returned_checkout(command):
    repo = current_domain.repository_for(StockTransaction)
    try:
        checkout = repo.get(command.returns_transaction_id)
    except ObjectNotFoundError as exc:
        raise UnknownTransaction(command.returns_transaction_id) from exc

    if not checkout.is_awaiting_return or str(checkout.item_id) != str(command.item_id):
        raise InvalidTransaction(
            {"returns_transaction_id": ["Referenced transaction is not an open checkout or maintenance send of this item"]}
        )
    if command.quantity > checkout.quantity:
        raise InvalidTransaction(
            {"quantity": [f"Cannot return {command.quantity}; checkout was for {checkout.quantity}"]}
        )
    return checkout


@supplies.command_handler(part_of=StockTransaction)
class TransactionRecordingHandler:
    @handle(RecordTransaction)
    def record_transaction(self, command):
        _validate(command)

        try:
            current_domain.repository_for(InventoryItem).get(command.item_id)
        except ObjectNotFoundError as exc:
            raise UnknownItem(command.item_id) from exc

        checkout = _returned_checkout(command) if command.returns_transaction_id else None

        repo = current_domain.repository_for(StockTransaction)
        txn = StockTransaction.record(
            item_id=command.item_id,
            user_id=command.user_id,
            transaction_type=command.transaction_type,
            quantity=command.quantity,
            due_date=command.due_date,
            notes=command.notes,
            location_used=command.location_used,
            condition_on_return=command.condition_on_return,
            returns_transaction_id=command.returns_transaction_id,
        )
        repo.add(txn)

        result = get_ledger().apply_delta(command.item_id, txn.signed_delta, txn.id)
        alert = AlertLifecycleManager().reconcile(result.item)

        if checkout is not None:
            checkout.complete(returned_by_transaction_id=txn.id, condition_on_return=command.condition_on_return)
            repo.add(checkout)

        logger.info(
            "Stock transaction recorded",
            transaction_id=str(txn.id),
            item_id=str(command.item_id),
            transaction_type=command.transaction_type,
            quantity=command.quantity,
            new_quantity=result.item.quantity,
        )
        return TransactionReceipt(transaction=txn, item=result.item, alert=alert, path=result.entry.path)

    @handle(ReapplyTransaction)
    def reapply_transaction(self, command):
        try:
            txn = current_domain.repository_for(StockTransaction).get(command.transaction_id)
        except ObjectNotFoundError as exc:
            raise UnknownTransaction(command.transaction_id) from exc

        result = get_ledger().apply_delta(txn.item_id, txn.signed_delta, txn.id)
        alert = AlertLifecycleManager().reconcile(result.item)
        return TransactionReceipt(
            transaction=txn,
            item=result.item,
            alert=alert,
            path=result.entry.path,
            replayed=result.replayed,
        )
