"""
Storage controller version repository.

Appends change records for storage controllers and reads them back in
version order. Recording only stages the row on the session; the caller
commits it together with the change it describes.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.storage_controller_versions import StorageControllerVersion, VersionAction


class StorageControllerVersionRepository:
    """Data access for storage controller history."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def next_version(self, storage_controller_id: int) -> int:
        """Return the version number the next change of a controller receives."""
        stmt = select(func.max(StorageControllerVersion.version)).where(
            StorageControllerVersion.storage_controller_id == storage_controller_id
        )
        result = await self.session.execute(stmt)
        current = result.scalar_one_or_none()
        return (current or 0) + 1

    async def record(
        self,
        storage_controller_id: int,
        action: VersionAction,
        changes: Dict[str, Any],
        snapshot: Dict[str, Any],
        changed_by: str,
    ) -> StorageControllerVersion:
        """Stage a version row for a controller change.

        Args:
            storage_controller_id: ID of the changed controller
            action: Kind of change
            changes: Mapping of field name to ``[old, new]``
            snapshot: Full record state the version describes
            changed_by: Actor responsible for the change

        Returns:
            The staged (uncommitted) version row
        """
        version = StorageControllerVersion(
            storage_controller_id=storage_controller_id,
            version=await self.next_version(storage_controller_id),
            action=action.value,
            changes=changes,
            snapshot=snapshot,
            changed_by=changed_by,
        )
        self.session.add(version)
        return version

    async def list_for_controller(self, storage_controller_id: int) -> List[StorageControllerVersion]:
        """History of one controller, oldest first."""
        stmt = (
            select(StorageControllerVersion)
            .where(StorageControllerVersion.storage_controller_id == storage_controller_id)
            .order_by(StorageControllerVersion.version)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_for_controllers(self, storage_controller_ids: Iterable[int]) -> Dict[int, List[StorageControllerVersion]]:
        """History of several controllers grouped by controller ID, each oldest first."""
        ids = list(storage_controller_ids)
        grouped: Dict[int, List[StorageControllerVersion]] = {controller_id: [] for controller_id in ids}
        if not ids:
            return grouped
        stmt = (
            select(StorageControllerVersion)
            .where(StorageControllerVersion.storage_controller_id.in_(ids))
            .order_by(StorageControllerVersion.storage_controller_id, StorageControllerVersion.version)
        )
        result = await self.session.execute(stmt)
        for version in result.scalars().all():
            grouped[version.storage_controller_id].append(version)
        return grouped
