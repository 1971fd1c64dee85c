"""Domain events for the InventoryItem aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from supplies.domain import supplies


@supplies.event(part_of="InventoryItem")
class ItemRegistered:
    """A new supply item was added to the inventory with its opening quantity."""

    __version__ = 1

    item_id = Identifier(required=True)
    name = String(required=True)
    item_type = String(required=True)
    location = String()
    initial_quantity = Integer(required=True)
    min_quantity = Integer(required=True)
    max_quantity = Integer()
    unit_price = Float()
    registered_at = DateTime(required=True)
