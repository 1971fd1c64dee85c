"""Dashboard figures computed from the write side."""

from dataclasses import dataclass

from protean.utils.globals import current_domain

from supplies.alert.alert import OpenAlertIndex
from supplies.item.item import InventoryItem
from supplies.transaction.transaction import StockTransaction, TransactionStatus, TransactionType
from supplies.utils.db import iterate_all


@dataclass(frozen=True)
class DashboardStats:
    total_items: int
    open_alerts: int
    active_checkouts: int
    overdue_checkouts: int
    stock_value: float


def _count(query):
    return sum(1 for _ in iterate_all(query))


def dashboard_stats() -> DashboardStats:
    items = list(iterate_all(current_domain.repository_for(InventoryItem)._dao.query.order_by("created_at")))
    checkouts = current_domain.repository_for(StockTransaction)._dao.query.filter(
        transaction_type=TransactionType.CHECKOUT.value
    )

    return DashboardStats(
        total_items=len(items),
        open_alerts=_count(current_domain.repository_for(OpenAlertIndex)._dao.query.order_by("item_id")),
        active_checkouts=_count(checkouts.filter(status=TransactionStatus.ACTIVE.value)),
        overdue_checkouts=_count(checkouts.filter(status=TransactionStatus.OVERDUE.value)),
        stock_value=round(sum(item.stock_value for item in items), 2),
    )
