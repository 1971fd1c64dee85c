from supplies.api.errors import register_error_handlers
from supplies.api.routes import (
    alerts_router,
    dashboard_router,
    items_router,
    maintenance_router,
    transactions_router,
)

ALL_ROUTERS = [items_router, transactions_router, alerts_router, dashboard_router, maintenance_router]

__all__ = [
    "ALL_ROUTERS",
    "alerts_router",
    "dashboard_router",
    "items_router",
    "maintenance_router",
    "register_error_handlers",
    "transactions_router",
]
