"""MedStock FastAPI application.

Web server for the Supplies domain. Commands are processed synchronously
per request inside the domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from supplies.api import ALL_ROUTERS, register_error_handlers
from supplies.domain import supplies
from supplies.utils.logging import bind_request_context, clear_request_context, configure_logging

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# PROTEAN_ENV controls which config overlay is applied:
#   - "test"       → in-memory providers
#   - "production" → PostgreSQL, event_processing = "async"
configure_logging()
supplies.init()

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="MedStock API",
    description="Medical supply tracking: stock ledger and low-stock alerts",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the Supplies domain context and tag log lines with a request id."""
    bind_request_context(
        request_id=request.headers.get("X-Request-ID", str(uuid.uuid4())),
        method=request.method,
        path=request.url.path,
    )
    try:
        with supplies.domain_context():
            response = await call_next(request)
    finally:
        clear_request_context()
    return response


register_error_handlers(app)

for router in ALL_ROUTERS:
    app.include_router(router)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": supplies.name})
