"""
Repository layer.

Each module provides async data access for one table.
"""

from .base import AsyncBaseRepository
from .storage_controller_versions import StorageControllerVersionRepository
from .storage_controllers import StorageControllerRepository

__all__ = [
    "AsyncBaseRepository",
    "StorageControllerRepository",
    "StorageControllerVersionRepository",
]
