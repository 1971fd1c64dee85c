"""Pydantic request/response schemas for the Supplies API.

These are external contracts (anti-corruption layer): separate from
internal Protean commands.
"""

from datetime import date, datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Item Schemas
# ---------------------------------------------------------------------------
class RegisterItemRequest(BaseModel):
    name: str
    item_type: str = "supplies"
    location: str | None = None
    initial_quantity: int = Field(ge=0, default=0)
    min_quantity: int = Field(ge=0, default=0)
    max_quantity: int | None = Field(default=None, ge=0)
    unit_price: float | None = Field(default=None, ge=0)


class UpdateThresholdsRequest(BaseModel):
    min_quantity: int = Field(ge=0)
    max_quantity: int | None = Field(default=None, ge=0)


class ItemIdResponse(BaseModel):
    item_id: str


class ItemResponse(BaseModel):
    item_id: str
    name: str
    item_type: str
    location: str | None = None
    quantity: int
    min_quantity: int
    max_quantity: int | None = None
    unit_price: float | None = None
    stock_value: float

    @classmethod
    def from_item(cls, item):
        return cls(
            item_id=str(item.id),
            name=item.name,
            item_type=item.item_type,
            location=item.location,
            quantity=item.quantity,
            min_quantity=item.min_quantity,
            max_quantity=item.max_quantity,
            unit_price=item.unit_price,
            stock_value=item.stock_value,
        )


class MovementResponse(BaseModel):
    transaction_id: str
    quantity_change: int
    previous_level: int
    new_level: int
    path: str
    occurred_at: datetime


# ---------------------------------------------------------------------------
# Alert Schemas
# ---------------------------------------------------------------------------
class AlertResponse(BaseModel):
    alert_id: str
    item_id: str
    alert_level: str
    status: str
    current_quantity: int
    min_quantity: int
    acknowledged_by: str | None = None
    acknowledged_at: datetime | None = None
    resolved_by: str | None = None
    resolution: str | None = None
    resolved_at: datetime | None = None

    @classmethod
    def from_alert(cls, alert):
        if alert is None:
            return None
        return cls(
            alert_id=str(alert.id),
            item_id=str(alert.item_id),
            alert_level=alert.alert_level,
            status=alert.status,
            current_quantity=alert.current_quantity,
            min_quantity=alert.min_quantity,
            acknowledged_by=alert.acknowledged_by,
            acknowledged_at=alert.acknowledged_at,
            resolved_by=alert.resolved_by,
            resolution=alert.resolution,
            resolved_at=alert.resolved_at,
        )


class AlertBoardEntry(BaseModel):
    alert_id: str
    item_id: str
    item_name: str | None = None
    location: str | None = None
    alert_level: str
    status: str
    current_quantity: int
    min_quantity: int
    acknowledged_by: str | None = None
    raised_at: datetime | None = None


class StaffActionRequest(BaseModel):
    user_id: str


# ---------------------------------------------------------------------------
# Transaction Schemas
# ---------------------------------------------------------------------------
class RecordTransactionRequest(BaseModel):
    item_id: str
    user_id: str
    transaction_type: str
    quantity: int
    due_date: date | None = None
    notes: str | None = None
    location_used: str | None = None
    condition_on_return: str | None = None
    returns_transaction_id: str | None = None


class ReturnCheckoutRequest(BaseModel):
    user_id: str
    condition_on_return: str | None = None
    notes: str | None = None


class TransactionSchema(BaseModel):
    transaction_id: str
    item_id: str
    user_id: str
    transaction_type: str
    quantity: int
    status: str
    due_date: date | None = None
    notes: str | None = None
    returns_transaction_id: str | None = None

    @classmethod
    def from_transaction(cls, txn):
        return cls(
            transaction_id=str(txn.id),
            item_id=str(txn.item_id),
            user_id=str(txn.user_id),
            transaction_type=txn.transaction_type,
            quantity=txn.quantity,
            status=txn.status,
            due_date=txn.due_date,
            notes=txn.notes,
            returns_transaction_id=txn.returns_transaction_id,
        )


class TransactionResponse(BaseModel):
    transaction: TransactionSchema
    item: ItemResponse
    alert: AlertResponse | None = None
    path: str
    replayed: bool = False

    @classmethod
    def from_outcome(cls, outcome):
        return cls(
            transaction=TransactionSchema.from_transaction(outcome.transaction),
            item=ItemResponse.from_item(outcome.item),
            alert=AlertResponse.from_alert(outcome.alert),
            path=outcome.path,
            replayed=outcome.replayed,
        )


class HistoryRow(BaseModel):
    transaction_id: str
    recorded_at: datetime
    item_id: str
    item: str | None = None
    user: str
    type: str
    quantity: int
    status: str
    due_date: date | None = None
    notes: str | None = None


# ---------------------------------------------------------------------------
# Dashboard / Maintenance Schemas
# ---------------------------------------------------------------------------
class DashboardStatsResponse(BaseModel):
    total_items: int
    open_alerts: int
    active_checkouts: int
    overdue_checkouts: int
    stock_value: float


class MarkOverdueRequest(BaseModel):
    as_of: datetime | None = None


class SweepRequest(BaseModel):
    page_size: int | None = Field(default=None, ge=1)


class CountResponse(BaseModel):
    count: int
