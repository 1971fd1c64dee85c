"""Domain events for the StockTransaction aggregate."""

from protean.fields import Date, DateTime, Identifier, Integer, String, Text

from supplies.domain import supplies


@supplies.event(part_of="StockTransaction")
class TransactionRecorded:
    """A stock movement was accepted and appended to the transaction log."""

    __version__ = 1

    transaction_id = Identifier(required=True)
    item_id = Identifier(required=True)
    user_id = Identifier(required=True)
    transaction_type = String(required=True)
    quantity = Integer(required=True)
    status = String(required=True)
    due_date = Date()
    notes = Text()
    location_used = String()
    returns_transaction_id = Identifier()
    recorded_at = DateTime(required=True)


@supplies.event(part_of="StockTransaction")
class CheckoutReturned:
    """A checkout was closed by the checkin that brought the stock back."""

    __version__ = 1

    transaction_id = Identifier(required=True)
    item_id = Identifier(required=True)
    returned_by_transaction_id = Identifier(required=True)
    condition_on_return = String()
    returned_at = DateTime(required=True)


@supplies.event(part_of="StockTransaction")
class CheckoutOverdue:
    """An active checkout passed its due date without being returned."""

    __version__ = 1

    transaction_id = Identifier(required=True)
    item_id = Identifier(required=True)
    user_id = Identifier(required=True)
    due_date = Date(required=True)
    marked_at = DateTime(required=True)
