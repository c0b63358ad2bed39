"""
Storage controller version entity models.

Every create, update and destroy of a storage controller appends one row
here. Rows are kept after the controller is destroyed so its history stays
readable.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from sqlalchemy import JSON, Column, DateTime, UniqueConstraint
from sqlmodel import Field

from ..base import Base, utc_now


class VersionAction(str, Enum):
    """Change that produced a version row."""

    CREATE = "create"
    UPDATE = "update"
    DESTROY = "destroy"


class StorageControllerVersion(Base, table=True):
    """Audit row describing one change to a storage controller.

    Table: storage_controller_versions
    """

    __tablename__ = "storage_controller_versions"
    __table_args__ = (
        UniqueConstraint("storage_controller_id", "version", name="uq_storage_controller_versions_version"),
        {"extend_existing": True},
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    # No foreign key: history must outlive the controller row
    storage_controller_id: int = Field(index=True)
    version: int = Field(ge=1)
    action: str = Field(max_length=16)
    changes: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    snapshot: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    changed_by: str = Field(default="anonymous", max_length=255)
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))

    def __repr__(self) -> str:
        return (
            f"StorageControllerVersion(controller={self.storage_controller_id}, "
            f"version={self.version}, action={self.action})"
        )
