"""initial roster schema

Revision ID: 0001
Revises:
Create Date: 2026-10-18 09:00:00

"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

from rostersync.adapters.sqlalchemy.mappings import UTCDateTime
from rostersync.domain.model import AccessRole, PendingDeltaStatus, PendingDeltaType, RemovalReason

revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "region",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("ascii_name", sa.String(), nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_region")),
        sa.UniqueConstraint("name", name=op.f("uq_region_name")),
    )
    op.create_table(
        "rank",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("grade", sa.String(length=8), nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_rank")),
        sa.UniqueConstraint("name", name=op.f("uq_rank_name")),
    )
    op.create_table(
        "division",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("ascii_name", sa.String(), nullable=True),
        sa.Column("region_id", sa.Uuid(), nullable=False),
        sa.ForeignKeyConstraint(
            ["region_id"], ["region.id"], name=op.f("fk_division_region_id_region")
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_division")),
        sa.UniqueConstraint("region_id", "name", name=op.f("uq_division_region_id")),
    )
    op.create_table(
        "linked_account",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("display_name", sa.String(), nullable=False),
        sa.Column("region_id", sa.Uuid(), nullable=True),
        sa.Column("division_id", sa.Uuid(), nullable=True),
        sa.ForeignKeyConstraint(
            ["division_id"], ["division.id"], name=op.f("fk_linked_account_division_id_division")
        ),
        sa.ForeignKeyConstraint(
            ["region_id"], ["region.id"], name=op.f("fk_linked_account_region_id_region")
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_linked_account")),
    )
    op.create_table(
        "role_assignment",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("account_id", sa.Uuid(), nullable=False),
        sa.Column("role", sa.Enum(AccessRole, native_enum=False, length=32), nullable=False),
        sa.ForeignKeyConstraint(
            ["account_id"],
            ["linked_account.id"],
            name=op.f("fk_role_assignment_account_id_linked_account"),
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_role_assignment")),
        sa.UniqueConstraint("account_id", "role", name=op.f("uq_role_assignment_account_id")),
    )
    op.create_table(
        "active_member",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("external_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("command_label", sa.String(), nullable=False),
        sa.Column("region_label", sa.String(), nullable=False),
        sa.Column("division_label", sa.String(), nullable=False),
        sa.Column("rank_label", sa.String(), nullable=False),
        sa.Column("training_label", sa.String(), nullable=True),
        sa.Column("sergeant_at_arms", sa.Boolean(), nullable=False),
        sa.Column("skull", sa.Boolean(), nullable=False),
        sa.Column("skull_alternate", sa.Boolean(), nullable=False),
        sa.Column("outrider", sa.Boolean(), nullable=False),
        sa.Column("cub", sa.Boolean(), nullable=False),
        sa.Column("wolf", sa.Boolean(), nullable=False),
        sa.Column("has_motorcycle", sa.Boolean(), nullable=False),
        sa.Column("has_car", sa.Boolean(), nullable=False),
        sa.Column("entry_date", sa.Date(), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False),
        sa.Column("linked_account_id", sa.Uuid(), nullable=True),
        sa.Column("region_id", sa.Uuid(), nullable=True),
        sa.Column("division_id", sa.Uuid(), nullable=True),
        sa.Column("rank_id", sa.Uuid(), nullable=True),
        sa.Column(
            "inactivation_reason",
            sa.Enum(RemovalReason, native_enum=False, length=32),
            nullable=True,
        ),
        sa.Column("inactivation_date", sa.Date(), nullable=True),
        sa.Column("inactivation_notes", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", UTCDateTime(), nullable=False),
        sa.Column("updated_at", UTCDateTime(), nullable=False),
        sa.ForeignKeyConstraint(
            ["linked_account_id"],
            ["linked_account.id"],
            name=op.f("fk_active_member_linked_account_id_linked_account"),
        ),
        sa.ForeignKeyConstraint(
            ["region_id"], ["region.id"], name=op.f("fk_active_member_region_id_region")
        ),
        sa.ForeignKeyConstraint(
            ["division_id"], ["division.id"], name=op.f("fk_active_member_division_id_division")
        ),
        sa.ForeignKeyConstraint(
            ["rank_id"], ["rank.id"], name=op.f("fk_active_member_rank_id_rank")
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_active_member")),
        sa.UniqueConstraint("external_id", name=op.f("uq_active_member_external_id")),
        sa.UniqueConstraint(
            "linked_account_id", name=op.f("uq_active_member_linked_account_id")
        ),
    )
    op.create_index(
        "ix_active_member_active_region",
        "active_member",
        ["active", "region_label"],
    )
    op.create_table(
        "history_snapshot",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("created_at", UTCDateTime(), nullable=False),
        sa.Column("batch_type", sa.String(length=32), nullable=False),
        sa.Column("total_active", sa.Integer(), nullable=False),
        sa.Column("divisions", sa.JSON(), nullable=False),
        sa.Column("operator", sa.String(), nullable=True),
        sa.Column("note", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_history_snapshot")),
    )
    op.create_index(
        op.f("ix_history_snapshot_created_at"),
        "history_snapshot",
        ["created_at"],
    )
    op.create_table(
        "field_change_log",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("snapshot_id", sa.Uuid(), nullable=False),
        sa.Column("member_id", sa.Uuid(), nullable=False),
        sa.Column("external_id", sa.Integer(), nullable=False),
        sa.Column("member_name", sa.String(), nullable=False),
        sa.Column("field_name", sa.String(length=64), nullable=False),
        sa.Column("previous_value", sa.Text(), nullable=True),
        sa.Column("new_value", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(
            ["snapshot_id"],
            ["history_snapshot.id"],
            name=op.f("fk_field_change_log_snapshot_id_history_snapshot"),
        ),
        sa.ForeignKeyConstraint(
            ["member_id"],
            ["active_member.id"],
            name=op.f("fk_field_change_log_member_id_active_member"),
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_field_change_log")),
    )
    op.create_index(
        op.f("ix_field_change_log_snapshot_id"),
        "field_change_log",
        ["snapshot_id"],
    )
    op.create_table(
        "pending_delta",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("external_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("division_label", sa.String(), nullable=False),
        sa.Column(
            "delta_type",
            sa.Enum(PendingDeltaType, native_enum=False, length=32),
            nullable=False,
        ),
        sa.Column("priority", sa.Integer(), nullable=False),
        sa.Column("extra", sa.JSON(), nullable=False),
        sa.Column(
            "status",
            sa.Enum(PendingDeltaStatus, native_enum=False, length=16),
            nullable=False,
        ),
        sa.Column("created_at", UTCDateTime(), nullable=False),
        sa.Column("resolved_by", sa.String(), nullable=True),
        sa.Column("resolved_at", UTCDateTime(), nullable=True),
        sa.Column("resolution_note", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_pending_delta")),
    )
    op.create_index(
        "ix_pending_delta_lookup",
        "pending_delta",
        ["external_id", "delta_type", "status"],
    )


def downgrade() -> None:
    op.drop_index("ix_pending_delta_lookup", table_name="pending_delta")
    op.drop_table("pending_delta")
    op.drop_index(op.f("ix_field_change_log_snapshot_id"), table_name="field_change_log")
    op.drop_table("field_change_log")
    op.drop_index(op.f("ix_history_snapshot_created_at"), table_name="history_snapshot")
    op.drop_table("history_snapshot")
    op.drop_index("ix_active_member_active_region", table_name="active_member")
    op.drop_table("active_member")
    op.drop_table("role_assignment")
    op.drop_table("linked_account")
    op.drop_table("division")
    op.drop_table("rank")
    op.drop_table("region")
