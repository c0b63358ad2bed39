"""
Exception handlers for the asset inventory server.

This package contains custom exception handlers for different error types
and a setup function to register them with the FastAPI application.
"""

from fastapi import FastAPI

from asset_inventory.core.errors import AssetInventoryError
from asset_inventory.core.logging_config import get_logger

from .domain_handler import asset_inventory_exception_handler
from .global_handler import global_exception_handler

logger = get_logger(__name__)


def setup_exception_handlers(app: FastAPI) -> None:
    """
    Register exception handlers with the FastAPI application.

    This function should be called during application initialization to set up
    all custom exception handlers.

    Args:
        app: The FastAPI application instance
    """
    app.add_exception_handler(AssetInventoryError, asset_inventory_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)
    logger.debug("Exception handlers registered successfully")


__all__ = [
    "asset_inventory_exception_handler",
    "global_exception_handler",
    "setup_exception_handlers",
]
