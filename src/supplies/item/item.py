"""InventoryItem aggregate (CQRS): a stocked medical supply or piece of equipment.

The on-hand ``quantity`` is owned by the Quantity Ledger. Outside of
registration the aggregate never assigns it directly: ledger strategies
either run a conditional update against the store or, on the best-effort
path, call ``restate_quantity``. Threshold edits are persisted as a partial
update so they can never overwrite a concurrent ledger write.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Integer, String

from supplies.domain import supplies
from supplies.item.events import ItemRegistered


class ItemType(Enum):
    EQUIPMENT = "equipment"
    SUPPLIES = "supplies"
    MEDICATIONS = "medications"
    CONSUMABLES = "consumables"


@supplies.aggregate
class InventoryItem:
    """A supply item with an on-hand count and a reorder threshold."""

    name = String(required=True, max_length=255)
    item_type = String(choices=ItemType, default=ItemType.SUPPLIES.value)
    location = String(max_length=255)
    quantity = Integer(default=0, min_value=0)
    min_quantity = Integer(default=0, min_value=0)
    max_quantity = Integer(min_value=0)
    unit_price = Float(min_value=0.0)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def quantity_cannot_be_negative(self):
        if self.quantity is not None and self.quantity < 0:
            raise ValidationError({"quantity": ["On-hand quantity cannot be negative"]})

    @invariant.post
    def max_quantity_cannot_be_below_minimum(self):
        if self.max_quantity is not None and self.max_quantity < (self.min_quantity or 0):
            raise ValidationError({"max_quantity": ["Maximum quantity cannot be below the minimum quantity"]})

    @classmethod
    def register(
        cls,
        name,
        item_type=ItemType.SUPPLIES.value,
        location=None,
        initial_quantity=0,
        min_quantity=0,
        max_quantity=None,
        unit_price=None,
    ):
        """Register a new item with its opening stock count."""
        now = datetime.now(UTC)
        item = cls(
            name=name,
            item_type=item_type,
            location=location,
            quantity=initial_quantity,
            min_quantity=min_quantity,
            max_quantity=max_quantity,
            unit_price=unit_price,
            created_at=now,
            updated_at=now,
        )
        item.raise_(
            ItemRegistered(
                item_id=str(item.id),
                name=name,
                item_type=item.item_type,
                location=location,
                initial_quantity=initial_quantity,
                min_quantity=min_quantity,
                max_quantity=max_quantity,
                unit_price=unit_price,
                registered_at=now,
            )
        )
        return item

    @property
    def stock_value(self):
        """Valuation of the on-hand stock; zero when the item has no price."""
        return (self.unit_price or 0.0) * (self.quantity or 0)

    def update_thresholds(self, min_quantity, max_quantity=None):
        """Change the reorder threshold and informational upper bound."""
        if min_quantity is None or min_quantity < 0:
            raise ValidationError({"min_quantity": ["Minimum quantity must be zero or more"]})

        with atomic_change(self):
            self.min_quantity = min_quantity
            self.max_quantity = max_quantity
            self.updated_at = datetime.now(UTC)

    def restate_quantity(self, new_quantity):
        """Overwrite the on-hand count. Reserved for the best-effort ledger path."""
        if new_quantity < 0:
            raise ValidationError({"quantity": ["On-hand quantity cannot be negative"]})
        self.quantity = new_quantity
        self.updated_at = datetime.now(UTC)
