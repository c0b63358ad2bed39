"""
Exception handler for asset inventory domain errors.

Translates ``AssetInventoryError`` subclasses into JSON responses using the
status code each error declares.
"""

from fastapi import Request
from fastapi.responses import JSONResponse

from asset_inventory.core.errors import AssetInventoryError
from asset_inventory.core.logging_config import get_logger

logger = get_logger(__name__)


async def asset_inventory_exception_handler(request: Request, exc: AssetInventoryError) -> JSONResponse:
    """
    Render a domain error.

    Args:
        request: The HTTP request that caused the exception
        exc: The domain error that was raised

    Returns:
        JSONResponse with ``detail`` and the error's structured details
    """
    log = logger.warning if exc.status_code >= 500 else logger.info
    log(
        f"{type(exc).__name__} in {request.method} {request.url.path}: {exc.message}",
        extra={"error_type": type(exc).__name__, "path": request.url.path, "status_code": exc.status_code},
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "detail": exc.message,
            "error_type": type(exc).__name__,
            **({"details": exc.details} if exc.details else {}),
        },
    )
