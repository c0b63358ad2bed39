"""
Storage controller I/O models for API requests and responses.

This module contains Pydantic-based I/O schemas for the storage controller
endpoints. These models define the contract between the API and clients
and are kept separate from the database entities.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from asset_inventory.core.database.base import MAX_INTEGER


class StorageControllerFields(BaseModel):
    """Client-editable storage controller fields with their defaults."""

    name: str = Field(min_length=1, max_length=255, description="Controller name (e.g. 'PERC H730P')")
    controller_type: Optional[str] = Field(default=None, max_length=64, description="Controller kind")
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
    node_name: Optional[str] = Field(default=None, max_length=255, description="Node the controller is installed in")
    description: Optional[str] = Field(default=None, description="Free-form notes")


class StorageControllerCreate(StorageControllerFields):
    """Schema for creating a storage controller via API."""

    model_config = ConfigDict(extra="forbid")


class StorageControllerUpdate(BaseModel):
    """Schema for updating a storage controller via API.

    Every field is optional; only fields present in the request are applied.
    """

    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    controller_type: Optional[str] = Field(default=None, max_length=64)
    vendor: Optional[str] = Field(default=None, max_length=255)
    model: Optional[str] = Field(default=None, max_length=255)
    firmware_version: Optional[str] = Field(default=None, max_length=128)
    driver: Optional[str] = Field(default=None, max_length=128)
    slot: Optional[str] = Field(default=None, max_length=64)
    cache_size_mb: Optional[int] = Field(default=None, ge=0, le=MAX_INTEGER)
    battery_backed: Optional[bool] = None
    physical_drive_count: Optional[int] = Field(default=None, ge=0, le=MAX_INTEGER)
    node_name: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def reject_null_required_fields(cls, data: Any) -> Any:
        """Non-nullable columns may be omitted but not cleared."""
        if isinstance(data, dict):
            for field in ("name", "battery_backed", "physical_drive_count"):
                if field in data and data[field] is None:
                    raise ValueError(f"'{field}' cannot be null")
        return data


class StorageControllerRead(StorageControllerFields):
    """Schema for reading a storage controller from API."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: datetime
    updated_at: datetime


class StorageControllerTemplate(StorageControllerFields):
    """Blank storage controller carrying the default value of every field."""

    name: Optional[str] = None


class StorageControllerVersionRead(BaseModel):
    """Schema for one entry of a storage controller's history."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    storage_controller_id: int
    version: int
    action: str
    changes: Dict[str, Any]
    snapshot: Dict[str, Any]
    changed_by: str
    created_at: datetime


class StorageControllerSearchItem(StorageControllerRead):
    """Search result row; ``versions`` is only filled when requested with ``include=versions``."""

    versions: Optional[List[StorageControllerVersionRead]] = None


class StorageControllerSearchResponse(BaseModel):
    """Result of a storage controller search."""

    results: List[StorageControllerSearchItem]
    total: int = Field(description="Number of matches before pagination")
    limit: int
    offset: int
    errors: List[str] = Field(default_factory=list, description="Search parameters that could not be applied")
    includes: List[str] = Field(default_factory=list, description="Associations embedded in each result")


class FieldNamesRead(BaseModel):
    """Column names of the storage controller table."""

    field_names: List[str]


class SearchFormRead(BaseModel):
    """Everything a client needs to build a storage controller search form."""

    fields: List[str]
    operators: List[str]
    includes: List[str]
    example: Optional[StorageControllerRead] = None
