"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select

from rostersync.adapters.sqlalchemy.mappings import (
    active_member_table,
    division_table,
    field_change_log_table,
    pending_delta_table,
    region_table,
    role_assignment_table,
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
    Rank,
    Region,
    RoleAssignment,
)

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from sqlalchemy.orm import Session

    from rostersync.domain.model import PendingDeltaType


class SqlAlchemyMemberRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: ActiveMember) -> None:
        self.session.add(entity)

    def get_by_external_id(self, external_id: int) -> ActiveMember | None:
        stmt = select(ActiveMember).where(active_member_table.c.external_id == external_id)
        return self.session.execute(stmt).scalar_one_or_none()

    def list_active(self) -> list[ActiveMember]:
        stmt = (
            select(ActiveMember)
            .where(active_member_table.c.active.is_(True))
            .order_by(active_member_table.c.external_id)
        )
        return list(self.session.execute(stmt).scalars())


class SqlAlchemyHierarchyCatalog:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: Region | Division | Rank) -> None:
        self.session.add(entity)

    def list_regions(self) -> list[Region]:
        stmt = select(Region).order_by(region_table.c.name)
        return list(self.session.execute(stmt).scalars())

    def list_divisions(self) -> list[Division]:
        stmt = select(Division).order_by(division_table.c.name)
        return list(self.session.execute(stmt).scalars())

    def get_region(self, region_id: UUID) -> Region | None:
        return self.session.get(Region, region_id)

    def get_division(self, division_id: UUID) -> Division | None:
        return self.session.get(Division, division_id)

    def get_rank(self, rank_id: UUID) -> Rank | None:
        return self.session.get(Rank, rank_id)


class SqlAlchemyLinkedAccountRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: LinkedAccount) -> None:
        self.session.add(entity)

    def get(self, account_id: UUID) -> LinkedAccount | None:
        return self.session.get(LinkedAccount, account_id)


class SqlAlchemyRoleRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def _assignments(self, account_id: UUID) -> list[RoleAssignment]:
        stmt = select(RoleAssignment).where(role_assignment_table.c.account_id == account_id)
        return list(self.session.execute(stmt).scalars())

    def roles_for(self, account_id: UUID) -> set[AccessRole]:
        return {assignment.role for assignment in self._assignments(account_id)}

    def has_role(self, account_id: UUID, role: AccessRole) -> bool:
        return role in self.roles_for(account_id)

    def replace(self, account_id: UUID, roles: set[AccessRole]) -> None:
        existing = self._assignments(account_id)
        kept: set[AccessRole] = set()
        for assignment in existing:
            if assignment.role in roles:
                kept.add(assignment.role)
            else:
                self.session.delete(assignment)
        for role in sorted(roles - kept):
            self.session.add(RoleAssignment(account_id=account_id, role=role))


class SqlAlchemySnapshotRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: HistorySnapshot) -> None:
        self.session.add(entity)

    def get(self, snapshot_id: UUID) -> HistorySnapshot | None:
        return self.session.get(HistorySnapshot, snapshot_id)


class SqlAlchemyFieldChangeRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: FieldChangeLogEntry) -> None:
        self.session.add(entity)

    def for_snapshot(self, snapshot_id: UUID) -> list[FieldChangeLogEntry]:
        stmt = (
            select(FieldChangeLogEntry)
            .where(field_change_log_table.c.snapshot_id == snapshot_id)
            .order_by(field_change_log_table.c.external_id, field_change_log_table.c.field_name)
        )
        return list(self.session.execute(stmt).scalars())


class SqlAlchemyPendingDeltaRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: PendingDeltaEntry) -> None:
        self.session.add(entity)

    def get(self, entry_id: UUID) -> PendingDeltaEntry | None:
        return self.session.get(PendingDeltaEntry, entry_id)

    def find_pending(
        self,
        external_id: int,
        delta_type: PendingDeltaType,
        *,
        since: datetime,
    ) -> list[PendingDeltaEntry]:
        stmt = (
            select(PendingDeltaEntry)
            .where(pending_delta_table.c.external_id == external_id)
            .where(pending_delta_table.c.delta_type == delta_type)
            .where(pending_delta_table.c.status == PendingDeltaStatus.PENDING)
            .where(pending_delta_table.c.created_at >= since)
        )
        return list(self.session.execute(stmt).scalars())

    def list_pending(self) -> list[PendingDeltaEntry]:
        stmt = (
            select(PendingDeltaEntry)
            .where(pending_delta_table.c.status == PendingDeltaStatus.PENDING)
            .order_by(pending_delta_table.c.priority.desc(), pending_delta_table.c.created_at)
        )
        return list(self.session.execute(stmt).scalars())
