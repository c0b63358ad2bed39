"""
Main Application Entry Point.

This module initializes the FastAPI application, configures monitoring and middleware
(CORS, request logging), registers exception handlers and includes all API routers.
It serves as the root of the web server.
"""

from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from asset_inventory.core.database import engine, init_db
from asset_inventory.core.logging_config import get_logger, setup_logging
from asset_inventory.core.monitoring import initialize_logfire

from .api.v1 import health, storage_controllers
from .core import constant
from .core.config import settings
from .exception_handlers import setup_exception_handlers
from .middleware import RequestLoggingMiddleware

# Initialize logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events.

    Creates missing database tables on startup (when enabled) and logs shutdown.
    """
    logger.info(f"Starting up {constant.PROJECT_NAME} server...")
    await init_db()
    logger.info("Database initialized successfully")

    yield

    logger.info(f"Shutting down {constant.PROJECT_NAME} server...")


app = FastAPI(
    title=constant.PROJECT_NAME,
    description="""
    Asset Inventory API

    Keeps the inventory of storage controllers installed in inventoried nodes.
    Supports searching, creating, updating and deleting controllers and reading
    the change history of each controller.
    """,
    version=constant.API_VERSION,
    openapi_url=f"{constant.API_V1_STR}/openapi.json",
    docs_url=f"{constant.API_V1_STR}/docs",
    redoc_url=f"{constant.API_V1_STR}/redoc",
    lifespan=lifespan,
)

# Instrumentation wraps the app, so it runs before the middleware stack is built
initialize_logfire(app, engine)

cors = settings.cors
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors.origins,
    allow_credentials=cors.allow_credentials,
    allow_methods=cors.allow_methods,
    allow_headers=cors.allow_headers,
)
app.add_middleware(RequestLoggingMiddleware)

setup_exception_handlers(app)

app.include_router(health.router, tags=["health"])
app.include_router(
    storage_controllers.router,
    prefix=f"{constant.API_V1_STR}/storage-controllers",
)


def run() -> None:
    """Serve the application with uvicorn using the configured host and port."""
    uvicorn.run(
        "asset_inventory.server.main:app",
        host=settings.server_host,
        port=settings.server_port,
        log_level=settings.logging.level.lower(),
    )


if __name__ == "__main__":
    run()
