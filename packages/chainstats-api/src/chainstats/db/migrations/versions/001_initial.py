"""Initial schema - ledger snapshot tables.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _counter(name: str) -> sa.Column:
    return sa.Column(name, sa.BigInteger(), nullable=False, server_default="0")


def upgrade() -> None:
    # Days table
    op.create_table(
        "days",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("date", sa.Date(), nullable=False, unique=True),
        sa.Column("first_block_height", sa.BigInteger(), nullable=False),
        sa.Column("last_block_height", sa.BigInteger(), nullable=True),
        sa.Column("last_block_height_yet", sa.BigInteger(), nullable=False),
    )

    # Blocks table: cumulative and instantaneous counters per height
    op.create_table(
        "blocks",
        sa.Column("height", sa.BigInteger(), primary_key=True, autoincrement=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("day_id", sa.String(36), sa.ForeignKey("days.id"), nullable=True),
        sa.Column("is_processed", sa.Boolean(), nullable=False, server_default="0"),
        _counter("total_lease_count"),
        _counter("total_uakt_spent"),
        sa.Column("active_lease_count", sa.Integer(), nullable=False, server_default="0"),
        _counter("active_cpu"),
        _counter("active_gpu"),
        _counter("active_memory"),
        _counter("active_ephemeral_storage"),
        _counter("active_persistent_storage"),
    )
    op.create_index("ix_blocks_timestamp", "blocks", ["timestamp"])
    op.create_index("ix_blocks_processed_height", "blocks", ["is_processed", "height"])

    # Provider snapshots table: one row per capacity probe
    op.create_table(
        "provider_snapshots",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("owner", sa.String(64), nullable=False),
        sa.Column("check_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("is_online", sa.Boolean(), nullable=False, server_default="0"),
        *[
            _counter(f"{state}_{resource}")
            for resource in ("cpu", "gpu", "memory", "storage")
            for state in ("active", "pending", "available")
        ],
    )
    op.create_index(
        "ix_provider_snapshots_owner_check_date",
        "provider_snapshots",
        ["owner", "check_date"],
    )

    # Leases table
    op.create_table(
        "leases",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("provider_address", sa.String(64), nullable=False),
        sa.Column("created_height", sa.BigInteger(), nullable=False),
        sa.Column("closed_height", sa.BigInteger(), nullable=True),
        sa.Column("predicted_closed_height", sa.BigInteger(), nullable=True),
    )
    op.create_index(
        "ix_leases_provider_created",
        "leases",
        ["provider_address", "created_height"],
    )


def downgrade() -> None:
    op.drop_table("leases")
    op.drop_table("provider_snapshots")
    op.drop_table("blocks")
    op.drop_table("days")
