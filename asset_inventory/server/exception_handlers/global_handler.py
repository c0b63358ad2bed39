"""
Fallback handler for exceptions no other handler claims.

Every unhandled exception gets a random error ID. The ID is logged with the
request context and returned to the client in the body and in the
``X-Error-Id`` header, so a report from a client can be matched to the log
line. The response never carries the exception message.
"""

from uuid import uuid4

from fastapi import Request
from fastapi.responses import JSONResponse

from asset_inventory.core.logging_config import get_logger
from asset_inventory.core.monitoring import log_error

logger = get_logger(__name__)

ERROR_ID_HEADER = "X-Error-Id"


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log ``exc`` under a fresh error ID and answer with a generic 500."""
    error_id = uuid4().hex
    error_type = type(exc).__name__
    client = request.client.host if request.client else "unknown"

    logger.error(
        f"Unhandled {error_type} [{error_id}] in {request.method} {request.url.path}: {exc}",
        exc_info=exc,
        extra={
            "error_id": error_id,
            "method": request.method,
            "path": request.url.path,
            "query_params": dict(request.query_params),
            "client": client,
            "error_type": error_type,
        },
    )
    log_error(
        error_type,
        str(exc),
        {"error_id": error_id, "method": request.method, "path": request.url.path},
    )

    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "error_id": error_id,
            "error_type": error_type,
        },
        headers={ERROR_ID_HEADER: error_id},
    )
