"""Ports for persisting domain aggregates."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from rostersync.domain.model import (
        AccessRole,
        ActiveMember,
        Division,
        FieldChangeLogEntry,
        HistorySnapshot,
        LinkedAccount,
        PendingDeltaEntry,
        PendingDeltaType,
        Rank,
        Region,
    )


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class MemberRepository(Repository["ActiveMember"], Protocol):
    def get_by_external_id(self, external_id: int) -> ActiveMember | None: ...

    def list_active(self) -> list[ActiveMember]: ...


@runtime_checkable
class HierarchyCatalog(Protocol):
    """Read access to the region/division/rank catalog."""

    def list_regions(self) -> list[Region]: ...

    def list_divisions(self) -> list[Division]: ...

    def get_region(self, region_id: UUID) -> Region | None: ...

    def get_division(self, division_id: UUID) -> Division | None: ...

    def get_rank(self, rank_id: UUID) -> Rank | None: ...


@runtime_checkable
class LinkedAccountRepository(Repository["LinkedAccount"], Protocol):
    def get(self, account_id: UUID) -> LinkedAccount | None: ...


@runtime_checkable
class RoleRepository(Protocol):
    def roles_for(self, account_id: UUID) -> set[AccessRole]: ...

    def replace(self, account_id: UUID, roles: set[AccessRole]) -> None: ...


@runtime_checkable
class SnapshotRepository(Repository["HistorySnapshot"], Protocol):
    def get(self, snapshot_id: UUID) -> HistorySnapshot | None: ...


@runtime_checkable
class FieldChangeRepository(Repository["FieldChangeLogEntry"], Protocol):
    def for_snapshot(self, snapshot_id: UUID) -> list[FieldChangeLogEntry]: ...


@runtime_checkable
class PendingDeltaRepository(Repository["PendingDeltaEntry"], Protocol):
    def get(self, entry_id: UUID) -> PendingDeltaEntry | None: ...

    def find_pending(
        self,
        external_id: int,
        delta_type: PendingDeltaType,
        *,
        since: datetime,
    ) -> list[PendingDeltaEntry]: ...

    def list_pending(self) -> list[PendingDeltaEntry]: ...
