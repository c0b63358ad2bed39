"""
Storage controller entity models.

This module contains the database entity for storage controllers: RAID cards,
HBAs and on-board disk controllers installed in inventoried nodes.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import DateTime
from sqlmodel import Field

from ..base import MAX_INTEGER, Base, utc_now

# Columns that are maintained by the database layer rather than by clients
SYSTEM_FIELDS = frozenset({"id", "created_at", "updated_at"})


class StorageControllerBase(Base):
    """Base fields for a storage controller."""

    name: str = Field(min_length=1, max_length=255, index=True, description="Controller name (e.g. 'PERC H730P')")
    controller_type: Optional[str] = Field(
        default=None, max_length=64, description="Controller kind (e.g. 'raid', 'hba', 'sata')"
    )
    vendor: Optional[str] = Field(default=None, max_length=255, description="Manufacturer")
    model: Optional[str] = Field(default=None, max_length=255, description="Model identifier")
    firmware_version: Optional[str] = Field(default=None, max_length=128, description="Firmware revision")
    driver: Optional[str] = Field(default=None, max_length=128, description="Operating system driver in use")
    slot: Optional[str] = Field(default=None, max_length=64, description="Bus or slot location")
    cache_size_mb: Optional[int] = Field(default=None, ge=0, le=MAX_INTEGER, description="On-board cache size in MiB")
    battery_backed: bool = Field(default=False, description="Whether the cache is battery or flash backed")
    physical_drive_count: int = Field(
        default=0, ge=0, le=MAX_INTEGER, description="Number of attached physical drives"
    )
    node_name: Optional[str] = Field(
        default=None, max_length=255, index=True, description="Inventoried node the controller is installed in"
    )
    description: Optional[str] = Field(default=None, description="Free-form notes")


class StorageController(StorageControllerBase, table=True):
    """Persistent storage controller record.

    Table: storage_controllers
    """

    __tablename__ = "storage_controllers"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)

    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))

    @classmethod
    def field_names(cls) -> List[str]:
        """Column names of the table in declaration order."""
        return [column.name for column in cls.__table__.columns]

    def snapshot(self) -> Dict[str, Any]:
        """JSON-compatible copy of every column value."""
        return self.model_dump(mode="json")

    def __repr__(self) -> str:
        return f"StorageController(id={self.id}, name={self.name}, node={self.node_name})"
