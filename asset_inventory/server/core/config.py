"""
Configuration Settings.

This module defines the application configuration using Pydantic's BaseSettings.
It automatically loads all configuration from environment variables and .env file
without explicit dotenv loading.
"""

from typing import Dict, List

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# =====================================================================
# Grouped Configuration Models
# =====================================================================


class CORSConfig(BaseModel):
    """CORS configuration."""

    origins: list[str] = Field(
        default=["*"], alias="ASSET_INVENTORY_CORS_ORIGINS", description="Allowed CORS origins (use * for all)"
    )
    allow_credentials: bool = Field(
        default=True, alias="ASSET_INVENTORY_CORS_ALLOW_CREDENTIALS", description="Allow credentials in CORS requests"
    )
    allow_methods: list[str] = Field(
        default=["*"], alias="ASSET_INVENTORY_CORS_ALLOW_METHODS", description="Allowed HTTP methods (use * for all)"
    )
    allow_headers: list[str] = Field(
        default=["*"], alias="ASSET_INVENTORY_CORS_ALLOW_HEADERS", description="Allowed HTTP headers (use * for all)"
    )

    model_config = {"populate_by_name": True}


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", alias="ASSET_INVENTORY_LOG_LEVEL", description="Root console log level")
    format: str = Field(
        default="detailed", alias="ASSET_INVENTORY_LOG_FORMAT", description="Log format (simple, detailed, json)"
    )
    file_dir: str = Field(default="logs", alias="ASSET_INVENTORY_LOG_FILE_DIR", description="Directory for log files")
    to_file: bool = Field(default=False, alias="ASSET_INVENTORY_LOG_TO_FILE", description="Also write logs to a file")

    model_config = {"populate_by_name": True}


class MonitoringConfig(BaseModel):
    """Logfire tracing configuration."""

    enabled: bool = Field(default=False, alias="ASSET_INVENTORY_LOGFIRE_ENABLED", description="Send traces to Logfire")
    token: str = Field(default="", alias="ASSET_INVENTORY_LOGFIRE_TOKEN", description="Logfire write token")
    environment: str = Field(
        default="development", alias="ASSET_INVENTORY_LOGFIRE_ENVIRONMENT", description="Deployment environment"
    )
    service_name: str = Field(
        default="asset-inventory", alias="ASSET_INVENTORY_LOGFIRE_SERVICE_NAME", description="Service name in traces"
    )
    sample_rate: float = Field(
        default=1.0, alias="ASSET_INVENTORY_LOGFIRE_SAMPLE_RATE", description="Share of traces kept (0.0 to 1.0)"
    )
    trace_sqlalchemy: bool = Field(
        default=True, alias="ASSET_INVENTORY_LOGFIRE_TRACE_SQLALCHEMY", description="Trace database statements"
    )
    trace_fastapi: bool = Field(
        default=True, alias="ASSET_INVENTORY_LOGFIRE_TRACE_FASTAPI", description="Trace API endpoints"
    )

    model_config = {"populate_by_name": True}


# =====================================================================
# Main Settings Class
# =====================================================================


class Settings(BaseSettings):
    """
    Application settings model.

    All properties are automatically bound from environment variables and .env file.
    Pydantic's BaseSettings handles dotenv loading automatically via model_config.
    """

    # =====================================================================
    # Pydantic Configuration
    # =====================================================================
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
        populate_by_name=True,
    )

    # =====================================================================
    # Server Configuration
    # =====================================================================
    server_host: str = Field(
        default="0.0.0.0",
        description="Server host address to bind to",
        alias="ASSET_INVENTORY_SERVER_HOST",
    )
    server_port: int = Field(
        default=8000,
        description="Server port number",
        alias="ASSET_INVENTORY_SERVER_PORT",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        alias="ASSET_INVENTORY_LOG_LEVEL",
    )
    log_format: str = Field(
        default="detailed",
        description="Logging format (simple, detailed, json)",
        alias="ASSET_INVENTORY_LOG_FORMAT",
    )
    log_file_dir: str = Field(
        default="logs",
        description="Directory that receives the log file when file logging is enabled",
        alias="ASSET_INVENTORY_LOG_FILE_DIR",
    )
    log_to_file: bool = Field(
        default=False,
        description="Write logs to <log_file_dir>/asset_inventory.log in addition to the console",
        alias="ASSET_INVENTORY_LOG_TO_FILE",
    )

    # =====================================================================
    # Database Configuration
    # =====================================================================
    database_url: str = Field(
        default="sqlite+aiosqlite:///./asset_inventory.db",
        description="Async database connection URL (postgresql+asyncpg or sqlite+aiosqlite)",
        alias="ASSET_INVENTORY_DATABASE_URL",
    )
    auto_create_tables: bool = Field(
        default=True,
        description="Create missing tables on startup; disable when Alembic manages the schema",
        alias="ASSET_INVENTORY_AUTO_CREATE_TABLES",
    )

    # =====================================================================
    # Access Control
    # =====================================================================
    api_keys: Dict[str, List[str]] = Field(
        default_factory=dict,
        description="JSON mapping of API key to granted scopes, e.g. {\"key\": [\"read\", \"write\"]}. "
        "Empty means access control is disabled.",
        alias="ASSET_INVENTORY_API_KEYS",
    )
    api_key_header: str = Field(
        default="X-API-Key",
        description="Header carrying the API key",
        alias="ASSET_INVENTORY_API_KEY_HEADER",
    )

    # =====================================================================
    # Search Configuration
    # =====================================================================
    default_page_size: int = Field(
        default=100,
        ge=1,
        description="Number of search results returned when no limit is given",
        alias="ASSET_INVENTORY_DEFAULT_PAGE_SIZE",
    )
    max_page_size: int = Field(
        default=1000,
        ge=1,
        description="Upper bound applied to the limit search parameter",
        alias="ASSET_INVENTORY_MAX_PAGE_SIZE",
    )

    # =====================================================================
    # Monitoring Configuration
    # =====================================================================
    logfire_enabled: bool = Field(
        default=False,
        description="Send request, error and database traces to Logfire",
        alias="ASSET_INVENTORY_LOGFIRE_ENABLED",
    )
    logfire_token: str = Field(
        default="",
        description="Logfire write token; tracing stays off without one",
        alias="ASSET_INVENTORY_LOGFIRE_TOKEN",
    )
    logfire_environment: str = Field(default="development", alias="ASSET_INVENTORY_LOGFIRE_ENVIRONMENT")
    logfire_service_name: str = Field(default="asset-inventory", alias="ASSET_INVENTORY_LOGFIRE_SERVICE_NAME")
    logfire_sample_rate: float = Field(default=1.0, ge=0.0, le=1.0, alias="ASSET_INVENTORY_LOGFIRE_SAMPLE_RATE")
    logfire_trace_sqlalchemy: bool = Field(default=True, alias="ASSET_INVENTORY_LOGFIRE_TRACE_SQLALCHEMY")
    logfire_trace_fastapi: bool = Field(default=True, alias="ASSET_INVENTORY_LOGFIRE_TRACE_FASTAPI")

    # =====================================================================
    # CORS Configuration
    # =====================================================================
    cors_origins: list[str] = Field(default=["*"], alias="ASSET_INVENTORY_CORS_ORIGINS")
    cors_allow_credentials: bool = Field(default=True, alias="ASSET_INVENTORY_CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(default=["*"], alias="ASSET_INVENTORY_CORS_ALLOW_METHODS")
    cors_allow_headers: list[str] = Field(default=["*"], alias="ASSET_INVENTORY_CORS_ALLOW_HEADERS")

    # =====================================================================
    # Computed Properties (Grouped Configurations)
    # =====================================================================

    @property
    def cors(self) -> CORSConfig:
        """Get CORS configuration from environment variables."""
        return CORSConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def logging(self) -> LoggingConfig:
        """Get logging configuration from environment variables."""
        return LoggingConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def monitoring(self) -> MonitoringConfig:
        """Get Logfire monitoring configuration from environment variables."""
        return MonitoringConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def auth_enabled(self) -> bool:
        """Whether API key access control is active."""
        return bool(self.api_keys)


settings = Settings()


def get_settings() -> Settings:
    """Dependency returning the process-wide settings instance."""
    return settings
