"""Domain events for the quantity ledger."""

from protean.fields import DateTime, Identifier, Integer, String

from supplies.domain import supplies


@supplies.event(part_of="LedgerEntry")
class StockLevelChanged:
    """A quantity delta was applied to an inventory item."""

    __version__ = 1

    transaction_id = Identifier(required=True)
    item_id = Identifier(required=True)
    delta = Integer(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)
    path = String(required=True)
    applied_at = DateTime(required=True)
