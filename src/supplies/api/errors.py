"""HTTP mapping of domain errors.

Protean's standard handlers cover its own exceptions. Validation errors are
then re-mapped by their ``kind`` so stock and lookup failures get their own
status codes.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ValidationError
from protean.integrations.fastapi import register_exception_handlers

from supplies.errors import InvalidTransaction, PersistenceFailure

ERROR_STATUS = {
    "invalid_transaction": 400,
    "unknown_item": 404,
    "unknown_transaction": 404,
    "insufficient_stock": 409,
    "ledger_conflict": 409,
    "persistence_failure": 503,
}


def error_response(kind, messages) -> JSONResponse:
    return JSONResponse(status_code=ERROR_STATUS.get(kind, 400), content={"error": kind, "messages": messages})


def register_error_handlers(app: FastAPI) -> None:
    register_exception_handlers(app)

    @app.exception_handler(ValidationError)
    async def _validation_error(request: Request, exc: ValidationError):
        return error_response(getattr(exc, "kind", InvalidTransaction.kind), exc.messages)

    @app.exception_handler(PersistenceFailure)
    async def _persistence_failure(request: Request, exc: PersistenceFailure):
        return error_response(PersistenceFailure.kind, {"_store": [str(exc)]})
