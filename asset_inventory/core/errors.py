"""
Domain errors raised by the asset inventory.

Every error carries the HTTP status code the server answers with, so the
exception handlers can translate them without knowing each subclass.
"""

from __future__ import annotations

from typing import Any, Optional


class AssetInventoryError(Exception):
    """Base class for asset inventory errors."""

    status_code: int = 500

    def __init__(self, message: str, *, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class RecordNotFoundError(AssetInventoryError):
    """Raised when a requested record does not exist."""

    status_code = 404

    def __init__(self, entity: str, record_id: Any) -> None:
        super().__init__(f"{entity} {record_id} not found", details={"entity": entity, "id": record_id})
        self.entity = entity
        self.record_id = record_id


class SearchParameterError(AssetInventoryError):
    """Raised when a single search criterion cannot be applied."""

    status_code = 400

    def __init__(self, parameter: str, message: str) -> None:
        super().__init__(message, details={"parameter": parameter})
        self.parameter = parameter
