"""FastAPI routes for the Supplies domain: items, transactions, alerts."""

from fastapi import APIRouter, Response
from protean.utils.globals import current_domain

from supplies.alert.acknowledgement import AcknowledgeAlert, ResolveAlert
from supplies.alert.sweep import ReevaluateStockAlerts
from supplies.api.errors import error_response
from supplies.api.schemas import (
    AlertBoardEntry,
    AlertResponse,
    CountResponse,
    DashboardStatsResponse,
    HistoryRow,
    ItemIdResponse,
    ItemResponse,
    MarkOverdueRequest,
    MovementResponse,
    RecordTransactionRequest,
    RegisterItemRequest,
    ReturnCheckoutRequest,
    StaffActionRequest,
    SweepRequest,
    TransactionResponse,
    UpdateThresholdsRequest,
)
from supplies.item.item import InventoryItem
from supplies.item.registration import RegisterItem, UpdateStockThresholds
from supplies.projections.alert_board import AlertBoard
from supplies.projections.stock_movement_log import movements_for
from supplies.projections.transaction_history import export_csv, history_rows
from supplies.reporting import dashboard_stats
from supplies.transaction.overdue import MarkOverdueCheckouts
from supplies.transaction.processor import TransactionInput, TransactionProcessor


def _outcome_response(outcome, status_code=201):
    if not outcome.ok:
        return error_response(outcome.error, outcome.messages)
    body = TransactionResponse.from_outcome(outcome)
    return Response(content=body.model_dump_json(), status_code=status_code, media_type="application/json")


# ---------------------------------------------------------------------------
# Items Router
# ---------------------------------------------------------------------------
items_router = APIRouter(prefix="/items", tags=["items"])


@items_router.post("", status_code=201, response_model=ItemIdResponse)
async def register_item(body: RegisterItemRequest) -> ItemIdResponse:
    command = RegisterItem(
        name=body.name,
        item_type=body.item_type,
        location=body.location,
        initial_quantity=body.initial_quantity,
        min_quantity=body.min_quantity,
        max_quantity=body.max_quantity,
        unit_price=body.unit_price,
    )
    result = current_domain.process(command, asynchronous=False)
    return ItemIdResponse(item_id=result)


@items_router.get("/{item_id}", response_model=ItemResponse)
async def get_item(item_id: str) -> ItemResponse:
    item = current_domain.repository_for(InventoryItem).get(item_id)
    return ItemResponse.from_item(item)


@items_router.put("/{item_id}/thresholds", response_model=ItemResponse)
async def update_thresholds(item_id: str, body: UpdateThresholdsRequest) -> ItemResponse:
    command = UpdateStockThresholds(
        item_id=item_id,
        min_quantity=body.min_quantity,
        max_quantity=body.max_quantity,
    )
    item = current_domain.process(command, asynchronous=False)
    return ItemResponse.from_item(item)


@items_router.get("/{item_id}/movements", response_model=list[MovementResponse])
async def get_movements(item_id: str, limit: int = 100) -> list[MovementResponse]:
    return [
        MovementResponse(
            transaction_id=str(row.transaction_id),
            quantity_change=row.quantity_change,
            previous_level=row.previous_level,
            new_level=row.new_level,
            path=row.path,
            occurred_at=row.occurred_at,
        )
        for row in movements_for(item_id, limit=limit)
    ]


# ---------------------------------------------------------------------------
# Transactions Router
# ---------------------------------------------------------------------------
transactions_router = APIRouter(prefix="/transactions", tags=["transactions"])


@transactions_router.post("", status_code=201, response_model=TransactionResponse)
async def record_transaction(body: RecordTransactionRequest):
    outcome = TransactionProcessor().record(TransactionInput(**body.model_dump()))
    return _outcome_response(outcome)


@transactions_router.put("/{transaction_id}/return", response_model=TransactionResponse)
async def return_checkout(transaction_id: str, body: ReturnCheckoutRequest):
    outcome = TransactionProcessor().return_checkout(
        transaction_id,
        user_id=body.user_id,
        condition_on_return=body.condition_on_return,
        notes=body.notes,
    )
    return _outcome_response(outcome, status_code=200)


@transactions_router.post("/{transaction_id}/retry-ledger", response_model=TransactionResponse)
async def retry_ledger(transaction_id: str):
    outcome = TransactionProcessor().retry_ledger(transaction_id)
    return _outcome_response(outcome, status_code=200)


@transactions_router.get("/history", response_model=list[HistoryRow])
async def transaction_history(item_id: str | None = None, limit: int = 100, offset: int = 0) -> list[HistoryRow]:
    return [
        HistoryRow(
            transaction_id=str(row.transaction_id),
            recorded_at=row.recorded_at,
            item_id=str(row.item_id),
            item=row.item_name,
            user=str(row.user_id),
            type=row.transaction_type,
            quantity=row.quantity,
            status=row.status,
            due_date=row.due_date,
            notes=row.notes,
        )
        for row in history_rows(item_id=item_id, limit=limit, offset=offset)
    ]


@transactions_router.get("/export")
async def export_transactions(item_id: str | None = None, limit: int = 1000) -> Response:
    content = export_csv(history_rows(item_id=item_id, limit=limit))
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="transactions.csv"'},
    )


# ---------------------------------------------------------------------------
# Alerts Router
# ---------------------------------------------------------------------------
alerts_router = APIRouter(prefix="/alerts", tags=["alerts"])


@alerts_router.get("", response_model=list[AlertBoardEntry])
async def open_alerts(limit: int = 100) -> list[AlertBoardEntry]:
    rows = current_domain.repository_for(AlertBoard)._dao.query.order_by("-raised_at").limit(limit).all().items
    return [
        AlertBoardEntry(
            alert_id=str(row.alert_id),
            item_id=str(row.item_id),
            item_name=row.item_name,
            location=row.location,
            alert_level=row.alert_level,
            status=row.status,
            current_quantity=row.current_quantity,
            min_quantity=row.min_quantity,
            acknowledged_by=row.acknowledged_by,
            raised_at=row.raised_at,
        )
        for row in rows
    ]


@alerts_router.put("/{alert_id}/acknowledge", response_model=AlertResponse)
async def acknowledge_alert(alert_id: str, body: StaffActionRequest) -> AlertResponse:
    alert = current_domain.process(AcknowledgeAlert(alert_id=alert_id, user_id=body.user_id), asynchronous=False)
    return AlertResponse.from_alert(alert)


@alerts_router.put("/{alert_id}/resolve", response_model=AlertResponse)
async def resolve_alert(alert_id: str, body: StaffActionRequest) -> AlertResponse:
    alert = current_domain.process(ResolveAlert(alert_id=alert_id, user_id=body.user_id), asynchronous=False)
    return AlertResponse.from_alert(alert)


# ---------------------------------------------------------------------------
# Dashboard Router
# ---------------------------------------------------------------------------
dashboard_router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@dashboard_router.get("/stats", response_model=DashboardStatsResponse)
async def get_dashboard_stats() -> DashboardStatsResponse:
    stats = dashboard_stats()
    return DashboardStatsResponse(
        total_items=stats.total_items,
        open_alerts=stats.open_alerts,
        active_checkouts=stats.active_checkouts,
        overdue_checkouts=stats.overdue_checkouts,
        stock_value=stats.stock_value,
    )


# ---------------------------------------------------------------------------
# Maintenance Router: triggered by an external scheduler
# ---------------------------------------------------------------------------
maintenance_router = APIRouter(prefix="/maintenance", tags=["maintenance"])


@maintenance_router.post("/alerts/sweep", response_model=CountResponse)
async def sweep_alerts(body: SweepRequest | None = None) -> CountResponse:
    page_size = body.page_size if body else None
    count = current_domain.process(ReevaluateStockAlerts(page_size=page_size), asynchronous=False)
    return CountResponse(count=count)


@maintenance_router.post("/transactions/mark-overdue", response_model=CountResponse)
async def mark_overdue(body: MarkOverdueRequest | None = None) -> CountResponse:
    as_of = body.as_of if body else None
    count = current_domain.process(MarkOverdueCheckouts(as_of=as_of), asynchronous=False)
    return CountResponse(count=count)
