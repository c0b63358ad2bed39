"""
I/O models for API requests and responses.

This package contains Pydantic-based I/O schemas that define the contract
between API endpoints and clients. These models are separate from database
entities to allow independent evolution of API contracts.
"""

from .storage_controllers import (
    FieldNamesRead,
    SearchFormRead,
    StorageControllerCreate,
    StorageControllerRead,
    StorageControllerSearchItem,
    StorageControllerSearchResponse,
    StorageControllerTemplate,
    StorageControllerUpdate,
    StorageControllerVersionRead,
)

__all__ = [
    "FieldNamesRead",
    "SearchFormRead",
    "StorageControllerCreate",
    "StorageControllerRead",
    "StorageControllerSearchItem",
    "StorageControllerSearchResponse",
    "StorageControllerTemplate",
    "StorageControllerUpdate",
    "StorageControllerVersionRead",
]
