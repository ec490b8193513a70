"""Audit records written by each committed import."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .base import new_id, utcnow
from .enums import PendingDeltaStatus

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from .enums import PendingDeltaType


@dataclass(eq=False, kw_only=True)
class HistorySnapshot:
    """Per-division aggregate of the active membership after an import."""

    id: UUID = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utcnow)
    batch_type: str = "roster"
    total_active: int = 0
    divisions: list[dict[str, Any]] = field(default_factory=list)
    operator: str | None = None
    note: str | None = None


@dataclass(eq=False, kw_only=True)
class FieldChangeLogEntry:
    id: UUID = field(default_factory=new_id)
    snapshot_id: UUID
    member_id: UUID
    external_id: int
    member_name: str
    field_name: str
    previous_value: str | None = None
    new_value: str | None = None


@dataclass(eq=False, kw_only=True)
class PendingDeltaEntry:
    """Anomaly queued for human follow-up."""

    id: UUID = field(default_factory=new_id)
    external_id: int
    name: str
    division_label: str = ""
    delta_type: PendingDeltaType
    priority: int = 0
    extra: dict[str, Any] = field(default_factory=dict)
    status: PendingDeltaStatus = PendingDeltaStatus.PENDING
    created_at: datetime = field(default_factory=utcnow)
    resolved_by: str | None = None
    resolved_at: datetime | None = None
    resolution_note: str | None = None

    @property
    def is_pending(self) -> bool:
        return self.status is PendingDeltaStatus.PENDING

    def resolve(self, *, by: str, at: datetime, note: str | None = None) -> None:
        self.status = PendingDeltaStatus.RESOLVED
        self.resolved_by = by
        self.resolved_at = at
        self.resolution_note = note
