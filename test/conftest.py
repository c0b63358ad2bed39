from __future__ import annotations

import os

import pytest

# Point the application at an in-memory database and disable access control
# before any application module builds its settings or engine.
os.environ["ASSET_INVENTORY_DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ASSET_INVENTORY_API_KEYS"] = "{}"
os.environ["ASSET_INVENTORY_LOG_TO_FILE"] = "false"
os.environ["ASSET_INVENTORY_LOGFIRE_ENABLED"] = "false"


@pytest.fixture(scope="function")
def sample_storage_controller_data() -> dict:
    """Sample storage controller data for testing."""
    return {
        "name": "PERC H730P",
        "controller_type": "raid",
        "vendor": "Dell",
        "model": "H730P Mini",
        "firmware_version": "25.5.9.0001",
        "driver": "megaraid_sas",
        "slot": "Embedded",
        "cache_size_mb": 2048,
        "battery_backed": True,
        "physical_drive_count": 8,
        "node_name": "db01.example.com",
        "description": "Primary database array",
    }


@pytest.fixture(scope="function")
def sample_storage_controllers() -> list[dict]:
    """A small, varied inventory used by search tests."""
    return [
        {
            "name": "PERC H730P",
            "controller_type": "raid",
            "vendor": "Dell",
            "physical_drive_count": 8,
            "battery_backed": True,
            "cache_size_mb": 2048,
            "node_name": "db01.example.com",
        },
        {
            "name": "Smart Array P440ar",
            "controller_type": "raid",
            "vendor": "HP",
            "physical_drive_count": 4,
            "battery_backed": True,
            "cache_size_mb": 2048,
            "node_name": "web01.example.com",
        },
        {
            "name": "LSI SAS 9207-8i",
            "controller_type": "hba",
            "vendor": "Broadcom",
            "physical_drive_count": 12,
            "battery_backed": False,
            "node_name": "backup01.example.com",
        },
        {
            "name": "Intel C620 SATA",
            "controller_type": "sata",
            "vendor": "Intel",
            "physical_drive_count": 2,
            "battery_backed": False,
            "node_name": None,
        },
    ]
