"""Initial schema for the asset inventory

Revision ID: 20261019_000000
Revises: None
Create Date: 2026-10-19 00:00:00.000000

Creates the storage controller inventory table and its version history table.

Revision format: YYYYMMDD_HHMMSS_description

"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "20261019_000000"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create storage controller tables."""

    op.create_table(
        "storage_controllers",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("controller_type", sa.String(64), nullable=True),
        sa.Column("vendor", sa.String(255), nullable=True),
        sa.Column("model", sa.String(255), nullable=True),
        sa.Column("firmware_version", sa.String(128), nullable=True),
        sa.Column("driver", sa.String(128), nullable=True),
        sa.Column("slot", sa.String(64), nullable=True),
        sa.Column("cache_size_mb", sa.Integer(), nullable=True),
        sa.Column("battery_backed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("physical_drive_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("node_name", sa.String(255), nullable=True),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_storage_controllers_name", "storage_controllers", ["name"])
    op.create_index("ix_storage_controllers_node_name", "storage_controllers", ["node_name"])

    op.create_table(
        "storage_controller_versions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("storage_controller_id", sa.Integer(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("action", sa.String(16), nullable=False),
        sa.Column("changes", sa.JSON(), nullable=False),
        sa.Column("snapshot", sa.JSON(), nullable=False),
        sa.Column("changed_by", sa.String(255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("storage_controller_id", "version", name="uq_storage_controller_versions_version"),
    )
    op.create_index(
        "ix_storage_controller_versions_storage_controller_id",
        "storage_controller_versions",
        ["storage_controller_id"],
    )


def downgrade() -> None:
    """Drop storage controller tables."""
    op.drop_index("ix_storage_controller_versions_storage_controller_id", table_name="storage_controller_versions")
    op.drop_table("storage_controller_versions")
    op.drop_index("ix_storage_controllers_node_name", table_name="storage_controllers")
    op.drop_index("ix_storage_controllers_name", table_name="storage_controllers")
    op.drop_table("storage_controllers")
