"""SQLAlchemy mapping metadata for the roster domain model."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from functools import cache
from typing import TYPE_CHECKING

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Dialect,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    orm,
)

from rostersync.domain.model import (
    AccessRole,
    ActiveMember,
    Division,
    FieldChangeLogEntry,
    HistorySnapshot,
    LinkedAccount,
    PendingDeltaEntry,
    PendingDeltaStatus,
    PendingDeltaType,
    Rank,
    Region,
    RemovalReason,
    RoleAssignment,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Catalog ---------------------------------------------------------------------

region_table = Table(
    "region",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("name", String, nullable=False, unique=True),
    Column("ascii_name", String, nullable=True),
)

division_table = Table(
    "division",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("name", String, nullable=False),
    Column("ascii_name", String, nullable=True),
    Column("region_id", UUIDColumnType, ForeignKey("region.id"), nullable=False),
    UniqueConstraint("region_id", "name"),
)

rank_table = Table(
    "rank",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("name", String, nullable=False, unique=True),
    Column("grade", String(8), nullable=True),
)

# Accounts --------------------------------------------------------------------

linked_account_table = Table(
    "linked_account",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("display_name", String, nullable=False),
    Column("region_id", UUIDColumnType, ForeignKey("region.id"), nullable=True),
    Column("division_id", UUIDColumnType, ForeignKey("division.id"), nullable=True),
)

role_assignment_table = Table(
    "role_assignment",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("account_id", UUIDColumnType, ForeignKey("linked_account.id"), nullable=False),
    Column("role", Enum(AccessRole, native_enum=False, length=32), nullable=False),
    UniqueConstraint("account_id", "role"),
)

# Members ---------------------------------------------------------------------

active_member_table = Table(
    "active_member",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("external_id", Integer, nullable=False, unique=True),
    Column("name", String, nullable=False),
    Column("command_label", String, nullable=False, default=""),
    Column("region_label", String, nullable=False, default=""),
    Column("division_label", String, nullable=False, default=""),
    Column("rank_label", String, nullable=False, default=""),
    Column("training_label", String, nullable=True),
    Column("sergeant_at_arms", Boolean, nullable=False, default=False),
    Column("skull", Boolean, nullable=False, default=False),
    Column("skull_alternate", Boolean, nullable=False, default=False),
    Column("outrider", Boolean, nullable=False, default=False),
    Column("cub", Boolean, nullable=False, default=False),
    Column("wolf", Boolean, nullable=False, default=False),
    Column("has_motorcycle", Boolean, nullable=False, default=False),
    Column("has_car", Boolean, nullable=False, default=False),
    Column("entry_date", Date, nullable=True),
    Column("active", Boolean, nullable=False, default=True),
    Column(
        "linked_account_id",
        UUIDColumnType,
        ForeignKey("linked_account.id"),
        nullable=True,
        unique=True,
    ),
    Column("region_id", UUIDColumnType, ForeignKey("region.id"), nullable=True),
    Column("division_id", UUIDColumnType, ForeignKey("division.id"), nullable=True),
    Column("rank_id", UUIDColumnType, ForeignKey("rank.id"), nullable=True),
    Column(
        "inactivation_reason",
        Enum(RemovalReason, native_enum=False, length=32),
        nullable=True,
    ),
    Column("inactivation_date", Date, nullable=True),
    Column("inactivation_notes", Text, nullable=True),
    Column("notes", Text, nullable=True),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("updated_at", UTCDateTime(), nullable=False),
    Index("ix_active_member_active_region", "active", "region_label"),
)

# Audit -----------------------------------------------------------------------

history_snapshot_table = Table(
    "history_snapshot",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("created_at", UTCDateTime(), nullable=False, index=True),
    Column("batch_type", String(32), nullable=False),
    Column("total_active", Integer, nullable=False),
    Column("divisions", JSON, nullable=False),
    Column("operator", String, nullable=True),
    Column("note", Text, nullable=True),
)

field_change_log_table = Table(
    "field_change_log",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column(
        "snapshot_id",
        UUIDColumnType,
        ForeignKey("history_snapshot.id"),
        nullable=False,
        index=True,
    ),
    Column("member_id", UUIDColumnType, ForeignKey("active_member.id"), nullable=False),
    Column("external_id", Integer, nullable=False),
    Column("member_name", String, nullable=False),
    Column("field_name", String(64), nullable=False),
    Column("previous_value", Text, nullable=True),
    Column("new_value", Text, nullable=True),
)

pending_delta_table = Table(
    "pending_delta",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("external_id", Integer, nullable=False),
    Column("name", String, nullable=False),
    Column("division_label", String, nullable=False, default=""),
    Column("delta_type", Enum(PendingDeltaType, native_enum=False, length=32), nullable=False),
    Column("priority", Integer, nullable=False, default=0),
    Column("extra", JSON, nullable=False),
    Column(
        "status",
        Enum(PendingDeltaStatus, native_enum=False, length=16),
        nullable=False,
    ),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("resolved_by", String, nullable=True),
    Column("resolved_at", UTCDateTime(), nullable=True),
    Column("resolution_note", Text, nullable=True),
    Index("ix_pending_delta_lookup", "external_id", "delta_type", "status"),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(Region, region_table)
    mapper_registry.map_imperatively(Division, division_table)
    mapper_registry.map_imperatively(Rank, rank_table)
    mapper_registry.map_imperatively(LinkedAccount, linked_account_table)
    mapper_registry.map_imperatively(RoleAssignment, role_assignment_table)
    mapper_registry.map_imperatively(ActiveMember, active_member_table)
    mapper_registry.map_imperatively(HistorySnapshot, history_snapshot_table)
    mapper_registry.map_imperatively(FieldChangeLogEntry, field_change_log_table)
    mapper_registry.map_imperatively(PendingDeltaEntry, pending_delta_table)

    orm.configure_mappers()
    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    mapper_registry.metadata.create_all(engine)
