"""Repository tests against an in-memory SQLite database.

Verifies that writes and their version rows land together and that history
outlives the controller it describes.
"""

from __future__ import annotations

from asset_inventory.core.database.entities import StorageController
from asset_inventory.core.database.repositories import (
    StorageControllerRepository,
    StorageControllerVersionRepository,
)


class TestStorageControllerRepositorySQLite:
    """End-to-end repository behaviour on SQLite."""

    async def test_create_assigns_id_and_first_version(self, in_memory_session, sample_storage_controller_data):
        repository = StorageControllerRepository(in_memory_session)

        controller = await repository.create(StorageController(**sample_storage_controller_data), actor="tester")

        assert controller.id is not None
        history = await repository.versions.list_for_controller(controller.id)
        assert [(v.version, v.action, v.changed_by) for v in history] == [(1, "create", "tester")]
        assert history[0].snapshot["name"] == "PERC H730P"

    async def test_update_then_delete_keeps_full_history(self, in_memory_session, sample_storage_controller_data):
        repository = StorageControllerRepository(in_memory_session)
        controller = await repository.create(StorageController(**sample_storage_controller_data))
        controller_id = controller.id

        await repository.update(controller, {"physical_drive_count": 10, "node_name": "db02.example.com"})
        deleted = await repository.delete(controller_id)

        assert deleted is True
        assert await repository.get_by_id(controller_id) is None
        history = await StorageControllerVersionRepository(in_memory_session).list_for_controller(controller_id)
        assert [v.action for v in history] == ["create", "update", "destroy"]
        assert [v.version for v in history] == [1, 2, 3]
        assert history[1].changes == {
            "physical_drive_count": [8, 10],
            "node_name": ["db01.example.com", "db02.example.com"],
        }
        assert history[2].snapshot["physical_drive_count"] == 10

    async def test_versions_are_numbered_per_controller(self, in_memory_session):
        repository = StorageControllerRepository(in_memory_session)
        first = await repository.create(StorageController(name="first"))
        second = await repository.create(StorageController(name="second"))

        await repository.update(first, {"vendor": "Dell"})

        versions = await repository.versions.list_for_controllers([first.id, second.id])
        assert [v.version for v in versions[first.id]] == [1, 2]
        assert [v.version for v in versions[second.id]] == [1]

    async def test_list_for_controllers_without_ids(self, in_memory_session):
        versions = await StorageControllerVersionRepository(in_memory_session).list_for_controllers([])

        assert versions == {}

    async def test_first_returns_lowest_id(self, in_memory_session, sample_storage_controllers):
        repository = StorageControllerRepository(in_memory_session)
        assert await repository.first() is None

        for data in sample_storage_controllers:
            await repository.create(StorageController(**data))

        first = await repository.first()
        assert first.name == "PERC H730P"
