"""
Database entity models.

Modules:
- storage_controllers: Storage controller inventory records
- storage_controller_versions: Change history of storage controllers
"""

from . import storage_controller_versions, storage_controllers
from .storage_controller_versions import StorageControllerVersion, VersionAction
from .storage_controllers import StorageController, StorageControllerBase

__all__ = [
    "StorageController",
    "StorageControllerBase",
    "StorageControllerVersion",
    "VersionAction",
    "storage_controller_versions",
    "storage_controllers",
]
