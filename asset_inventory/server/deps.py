"""
Request-scoped dependencies for the API routers.

Provides repositories bound to the request's database session and loads the
storage controller addressed by the path before the endpoint runs.
"""

from typing import Annotated

from fastapi import Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from asset_inventory.core.database import get_session
from asset_inventory.core.database.base import MAX_INTEGER
from asset_inventory.core.database.entities.storage_controllers import StorageController
from asset_inventory.core.database.repositories import (
    StorageControllerRepository,
    StorageControllerVersionRepository,
)
from asset_inventory.core.errors import RecordNotFoundError

ControllerId = Annotated[int, Path(ge=1, le=MAX_INTEGER, description="Storage controller ID")]


def get_storage_controller_repository(
    session: AsyncSession = Depends(get_session),
) -> StorageControllerRepository:
    """Storage controller repository for the current request."""
    return StorageControllerRepository(session)


def get_version_repository(
    session: AsyncSession = Depends(get_session),
) -> StorageControllerVersionRepository:
    """Storage controller version repository for the current request."""
    return StorageControllerVersionRepository(session)


async def get_storage_controller(
    controller_id: ControllerId,
    repository: StorageControllerRepository = Depends(get_storage_controller_repository),
) -> StorageController:
    """Load the storage controller named in the path.

    Raises:
        RecordNotFoundError: When no controller has the given ID
    """
    controller = await repository.get_by_id(controller_id)
    if controller is None:
        raise RecordNotFoundError("StorageController", controller_id)
    return controller


async def get_storage_controller_for_update(
    controller_id: ControllerId,
    repository: StorageControllerRepository = Depends(get_storage_controller_repository),
) -> StorageController:
    """Load and lock the storage controller named in the path for a write.

    The row lock is held until the write commits, so two writers of one
    controller record their versions one after the other.

    Raises:
        RecordNotFoundError: When no controller has the given ID
    """
    controller = await repository.get_by_id(controller_id, for_update=True)
    if controller is None:
        raise RecordNotFoundError("StorageController", controller_id)
    return controller


SessionDep = Annotated[AsyncSession, Depends(get_session)]
StorageControllerRepositoryDep = Annotated[StorageControllerRepository, Depends(get_storage_controller_repository)]
VersionRepositoryDep = Annotated[StorageControllerVersionRepository, Depends(get_version_repository)]
StorageControllerDep = Annotated[StorageController, Depends(get_storage_controller)]
LockedStorageControllerDep = Annotated[StorageController, Depends(get_storage_controller_for_update)]
