"""Stored member state and the accounts linked to it."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .base import new_id, utcnow
from .enums import AccessRole, RemovalReason
from .roster import COMPARABLE_FIELDS

if TYPE_CHECKING:
    from datetime import date, datetime
    from uuid import UUID

    from .roster import RosterRecord


@dataclass(eq=False, kw_only=True)
class ActiveMember:
    """Canonical stored record of a member, keyed by the upstream ``external_id``."""

    id: UUID = field(default_factory=new_id)
    external_id: int
    name: str
    command_label: str = ""
    region_label: str = ""
    division_label: str = ""
    rank_label: str = ""
    training_label: str | None = None
    sergeant_at_arms: bool = False
    skull: bool = False
    skull_alternate: bool = False
    outrider: bool = False
    cub: bool = False
    wolf: bool = False
    has_motorcycle: bool = False
    has_car: bool = False
    entry_date: date | None = None

    active: bool = True
    linked_account_id: UUID | None = None
    region_id: UUID | None = None
    division_id: UUID | None = None
    rank_id: UUID | None = None
    inactivation_reason: RemovalReason | None = None
    inactivation_date: date | None = None
    inactivation_notes: str | None = None
    notes: str | None = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @classmethod
    def from_record(cls, record: RosterRecord, *, now: datetime | None = None) -> ActiveMember:
        if record.external_id is None:
            raise ValueError("Cannot create a member without an external id")
        timestamp = now or utcnow()
        member = cls(
            external_id=record.external_id,
            name=record.name,
            created_at=timestamp,
            updated_at=timestamp,
        )
        member.apply_record(record)
        return member

    @property
    def linked(self) -> bool:
        return self.linked_account_id is not None

    def comparable_values(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in COMPARABLE_FIELDS}

    def apply_record(self, record: RosterRecord) -> None:
        """Overwrite roster-owned attributes with the values of ``record``."""

        for name in COMPARABLE_FIELDS:
            setattr(self, name, getattr(record, name))

    def inactivate(self, reason: RemovalReason, *, on: date, notes: str | None = None) -> None:
        self.active = False
        self.inactivation_reason = reason
        self.inactivation_date = on
        self.inactivation_notes = notes

    def reactivate(self) -> None:
        self.active = True
        self.inactivation_reason = None
        self.inactivation_date = None
        self.inactivation_notes = None

    def append_note(self, text: str) -> None:
        self.notes = f"{self.notes}\n{text}" if self.notes else text


@dataclass(eq=False, kw_only=True)
class LinkedAccount:
    """Portal account weakly linked to at most one member."""

    id: UUID = field(default_factory=new_id)
    display_name: str
    region_id: UUID | None = None
    division_id: UUID | None = None


@dataclass(eq=False, kw_only=True)
class RoleAssignment:
    id: UUID = field(default_factory=new_id)
    account_id: UUID
    role: AccessRole
