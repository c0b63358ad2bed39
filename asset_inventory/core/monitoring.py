"""
Monitoring and Tracing Configuration Module.

This module provides integration with Pydantic Logfire for tracing of the
asset inventory server, including:
- API endpoint tracing
- Database statement tracing
- Request metrics and error reports

Logfire stays off unless it is enabled in the settings and a write token is
configured. While it is off every ``log_*`` helper is a no-op, so callers do
not need to check.
"""

from typing import Any, Dict, Optional

import logfire
from fastapi import FastAPI
from logfire import SamplingOptions
from sqlalchemy.ext.asyncio import AsyncEngine

from asset_inventory.core.logging_config import get_logger

logger = get_logger(__name__)

_logfire_enabled = False


def initialize_logfire(app: Optional[FastAPI] = None, engine: Optional[AsyncEngine] = None, config=None) -> bool:
    """
    Initialize Pydantic Logfire for monitoring and tracing.

    Sets up Logfire with automatic instrumentation for:
    - SQLAlchemy statements run on ``engine``
    - FastAPI endpoints of ``app``

    Instrumentation failures are logged and skipped; the server runs without
    that part of the tracing.

    Args:
        app: FastAPI application to instrument (optional)
        engine: Async engine to instrument (optional)
        config: ``MonitoringConfig`` to use instead of the process settings

    Returns:
        True when Logfire is configured and active
    """
    global _logfire_enabled

    if config is None:
        from asset_inventory.server.core.config import settings

        config = settings.monitoring

    if not config.enabled:
        logger.info("Logfire monitoring is disabled. Set ASSET_INVENTORY_LOGFIRE_ENABLED=true to enable.")
        return False

    if not config.token:
        logger.warning(
            "Logfire is enabled but ASSET_INVENTORY_LOGFIRE_TOKEN is not set. Monitoring stays disabled."
        )
        return False

    logfire.configure(
        token=config.token,
        service_name=config.service_name,
        environment=config.environment,
        sampling=SamplingOptions(head=config.sample_rate),
    )
    _logfire_enabled = True

    if config.trace_sqlalchemy and engine is not None:
        try:
            logfire.instrument_sqlalchemy(engine=engine.sync_engine)
            logger.info("Logfire: SQLAlchemy instrumentation enabled")
        except Exception as e:
            logger.warning(f"Failed to instrument SQLAlchemy: {e}")

    if config.trace_fastapi and app is not None:
        try:
            logfire.instrument_fastapi(app)
            logger.info("Logfire: FastAPI instrumentation enabled")
        except Exception as e:
            logger.warning(f"Failed to instrument FastAPI: {e}")

    logger.info(
        f"Logfire monitoring initialized: environment={config.environment}, service={config.service_name}"
    )
    return True


def log_api_request(method: str, path: str, status_code: int, duration_ms: float) -> None:
    """
    Report a finished API request with its duration.

    Args:
        method: HTTP method
        path: Request path
        status_code: HTTP status code
        duration_ms: Request duration in milliseconds
    """
    if not _logfire_enabled:
        return
    logfire.info(
        "API request completed",
        method=method,
        path=path,
        status_code=status_code,
        duration_ms=duration_ms,
    )


def log_error(error_type: str, error_message: str, context: Optional[Dict[str, Any]] = None) -> None:
    """
    Report an unhandled error with its request context.

    Args:
        error_type: Exception class name
        error_message: Exception message
        context: Additional attributes such as the error ID and request path
    """
    if not _logfire_enabled:
        return
    logfire.error(
        "Unhandled {error_type}: {error_message}",
        error_type=error_type,
        error_message=error_message,
        **(context or {}),
    )
