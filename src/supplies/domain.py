"""Supplies bounded context: Stock Ledger and Low-Stock Alerts.

Tracks on-hand quantities of medical supplies and equipment as check-out,
check-in, loss, damage and maintenance movements are recorded, and manages
the lifecycle of the low-stock alerts derived from those quantities.
"""

import structlog
from protean.domain import Domain

supplies = Domain(name="supplies")

logger = structlog.get_logger(__name__)
