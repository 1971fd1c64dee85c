"""Error taxonomy of the stock ledger and transaction processor.

Validation-style failures derive from Protean's ValidationError so they carry
a ``messages`` dict and map to HTTP 400 through the FastAPI integration.
Infrastructure-style failures are plain exceptions.
"""

from protean.exceptions import ValidationError


class InvalidTransaction(ValidationError):
    """A stock movement was rejected before anything was written."""

    kind = "invalid_transaction"


class UnknownItem(InvalidTransaction):
    """The movement references an inventory item that does not exist."""

    kind = "unknown_item"

    def __init__(self, item_id):
        self.item_id = str(item_id)
        super().__init__({"item_id": [f"Inventory item {item_id} does not exist"]})


class InsufficientStock(ValidationError):
    """An outgoing delta would drive the on-hand quantity below zero."""

    kind = "insufficient_stock"

    def __init__(self, item_id, available, requested):
        self.item_id = str(item_id)
        self.available = available
        self.requested = requested
        super().__init__(
            {"quantity": [f"Insufficient stock: {available} available, {requested} requested"]}
        )


class LedgerConflict(Exception):
    """The atomic update path is unavailable or lost every compare-and-set race."""

    kind = "ledger_conflict"

    def __init__(self, item_id, reason):
        self.item_id = str(item_id)
        self.reason = reason
        super().__init__(f"Ledger conflict on item {item_id}: {reason}")


class PersistenceFailure(Exception):
    """The underlying store could not be reached."""

    kind = "persistence_failure"


class UnknownTransaction(InvalidTransaction):
    """A return or ledger retry references a stock transaction that does not exist."""

    kind = "unknown_transaction"

    def __init__(self, transaction_id):
        self.transaction_id = str(transaction_id)
        super().__init__({"transaction_id": [f"Stock transaction {transaction_id} does not exist"]})
