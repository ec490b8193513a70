"""Value objects exchanged between classification, the batch and the commit engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from rostersync.domain.model import DeltaCategory

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from rostersync.domain.errors import ValidationError
    from rostersync.domain.model import ActiveMember, PendingDeltaEntry, RosterRecord


@dataclass(frozen=True, slots=True)
class SourceFileInfo:
    """Name and row count of one uploaded roster file."""

    name: str
    row_count: int


@dataclass(frozen=True, slots=True, kw_only=True)
class RosterImport:
    """Merged rows of both roster files plus the files' metadata."""

    records: tuple[RosterRecord, ...]
    source_a: SourceFileInfo
    source_b: SourceFileInfo


@dataclass(frozen=True, slots=True, kw_only=True)
class UpdatedMember:
    before: ActiveMember
    after: RosterRecord
    changed_fields: tuple[str, ...]

    @property
    def external_id(self) -> int:
        return self.before.external_id


@dataclass(frozen=True, slots=True, kw_only=True)
class TransferredMember:
    """Member who left the detected region but is still active elsewhere."""

    member: ActiveMember
    destination_region: str
    destination_division: str

    @property
    def external_id(self) -> int:
        return self.member.external_id


@dataclass(slots=True, kw_only=True)
class ClassificationStats:
    total_rows: int = 0
    valid_rows: int = 0
    invalid_rows: int = 0
    duplicate_rows: int = 0
    active_in_region: int = 0
    source_a_rows: int = 0
    source_b_rows: int = 0
    rejected: list[ValidationError] = field(default_factory=list)


@dataclass(slots=True, kw_only=True)
class DeltaResult:
    new: list[RosterRecord] = field(default_factory=list)
    updated: list[UpdatedMember] = field(default_factory=list)
    removed: list[ActiveMember] = field(default_factory=list)
    transferred: list[TransferredMember] = field(default_factory=list)
    no_change_count: int = 0
    detected_region: str = ""
    stats: ClassificationStats = field(default_factory=ClassificationStats)

    def ids_for(self, category: DeltaCategory) -> tuple[int, ...]:
        if category is DeltaCategory.NEW:
            return tuple(record.external_id for record in self.new if record.external_id)
        if category is DeltaCategory.UPDATED:
            return tuple(item.external_id for item in self.updated)
        return tuple(member.external_id for member in self.removed)

    @property
    def transferred_ids(self) -> frozenset[int]:
        return frozenset(item.external_id for item in self.transferred)


@dataclass(frozen=True, slots=True, kw_only=True)
class CommitResult:
    """Outcome of a commit, identical for simulated and real runs."""

    success: bool = True
    inserted_count: int = 0
    updated_count: int = 0
    inactivated_count: int = 0
    promoted_count: int = 0
    leave_count: int = 0
    transferred_count: int = 0
    skipped_count: int = 0
    auto_resolved_count: int = 0
    roles_changed_count: int = 0
    snapshot_id: UUID | None = None
    snapshot_at: datetime | None = None
    anomaly_count: int = 0
    anomalies: tuple[PendingDeltaEntry, ...] = ()

    @property
    def summary(self) -> str:
        parts = [
            f"{self.inserted_count} new",
            f"{self.updated_count} updated",
            f"{self.inactivated_count} inactivated",
        ]
        if self.promoted_count:
            parts.append(f"{self.promoted_count} promoted")
        if self.leave_count:
            parts.append(f"{self.leave_count} on leave")
        if self.transferred_count:
            parts.append(f"{self.transferred_count} transferred")
        if self.skipped_count:
            parts.append(f"{self.skipped_count} skipped")
        if self.anomaly_count:
            parts.append(f"{self.anomaly_count} anomalies queued")
        return ", ".join(parts)
