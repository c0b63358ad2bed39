"""
Storage controller repository interface and implementation.

This module provides data access operations for storage controllers.
Every write also stages a version row so the controller's history is
committed atomically with the change.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from asset_inventory.core.logging_config import get_logger
from asset_inventory.server.core.constant import ANONYMOUS_ACTOR

from ..base import utc_now
from ..entities.storage_controller_versions import VersionAction
from ..entities.storage_controllers import SYSTEM_FIELDS, StorageController
from .base import AsyncBaseRepository
from .storage_controller_versions import StorageControllerVersionRepository

logger = get_logger(__name__)


def _json_value(entity: StorageController, field: str) -> Any:
    return entity.model_dump(mode="json", include={field}).get(field)


class StorageControllerRepository(AsyncBaseRepository[StorageController]):
    """Repository for storage controller data access operations using SQLModel."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async session for database operations
        """
        super().__init__(session, StorageController)
        self.versions = StorageControllerVersionRepository(session)

    async def create(self, controller: StorageController, actor: str = ANONYMOUS_ACTOR) -> StorageController:
        """Create a new storage controller and its first version.

        Args:
            controller: StorageController SQLModel instance
            actor: Who performed the change

        Returns:
            Persisted StorageController with generated fields
        """
        self.session.add(controller)
        # Flush to obtain the primary key for the version row
        await self.session.flush()
        snapshot = controller.snapshot()
        changes = {
            field: [None, value]
            for field, value in snapshot.items()
            if field not in SYSTEM_FIELDS and value is not None
        }
        await self.versions.record(controller.id, VersionAction.CREATE, changes, snapshot, actor)
        await self.session.commit()
        await self.session.refresh(controller)
        logger.info(f"Created storage controller {controller.id} ({controller.name}) by {actor}")
        return controller

    async def get_by_id(self, controller_id: int, for_update: bool = False) -> Optional[StorageController]:
        """Get storage controller by its ID.

        Args:
            controller_id: Controller ID
            for_update: Lock the row until the transaction ends, so concurrent
                writers of one controller are serialized and never race for
                the same version number

        Returns:
            StorageController instance or None
        """
        stmt = select(StorageController).where(StorageController.id == controller_id)
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def first(self) -> Optional[StorageController]:
        """Return the stored controller with the lowest ID, if any."""
        stmt = select(StorageController).order_by(StorageController.id).limit(1)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def update(
        self,
        controller: StorageController,
        changes: Dict[str, Any],
        actor: str = ANONYMOUS_ACTOR,
    ) -> StorageController:
        """Apply field changes to a storage controller.

        Only fields whose value actually changes are written and recorded.
        System fields are ignored. An update that changes nothing leaves the
        record and its history untouched.

        Args:
            controller: Persisted StorageController instance
            changes: Field values to assign
            actor: Who performed the change

        Returns:
            Updated StorageController instance
        """
        diff: Dict[str, List[Any]] = {}
        for field, value in changes.items():
            if field in SYSTEM_FIELDS:
                continue
            old_value = _json_value(controller, field)
            setattr(controller, field, value)
            new_value = _json_value(controller, field)
            if old_value != new_value:
                diff[field] = [old_value, new_value]

        if not diff:
            logger.debug(f"Update of storage controller {controller.id} changed nothing")
            return controller

        controller.updated_at = utc_now()
        self.session.add(controller)
        await self.versions.record(controller.id, VersionAction.UPDATE, diff, controller.snapshot(), actor)
        await self.session.commit()
        await self.session.refresh(controller)
        logger.info(f"Updated storage controller {controller.id} fields {sorted(diff)} by {actor}")
        return controller

    async def delete(self, controller_id: int, actor: str = ANONYMOUS_ACTOR) -> bool:
        """Delete storage controller by its ID, recording the final state.

        Args:
            controller_id: Controller ID to delete
            actor: Who performed the change

        Returns:
            True if deleted, False if not found
        """
        controller = await self.get_by_id(controller_id, for_update=True)
        if controller is None:
            return False
        await self.versions.record(controller_id, VersionAction.DESTROY, {}, controller.snapshot(), actor)
        await self.session.delete(controller)
        await self.session.commit()
        logger.info(f"Deleted storage controller {controller_id} by {actor}")
        return True
