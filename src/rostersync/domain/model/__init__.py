"""Domain model for roster reconciliation."""

from __future__ import annotations

from .audit import FieldChangeLogEntry, HistorySnapshot, PendingDeltaEntry
from .base import new_id, utcnow
from .enums import (
    AccessRole,
    DeltaCategory,
    LoteStage,
    PendingDeltaStatus,
    PendingDeltaType,
    RemovalReason,
    TransferLookup,
)
from .hierarchy import Division, Rank, Region
from .member import ActiveMember, LinkedAccount, RoleAssignment
from .roster import COMPARABLE_FIELDS, DATE_FIELDS, FLAG_FIELDS, TEXT_FIELDS, RosterRecord

__all__ = [
    "COMPARABLE_FIELDS",
    "DATE_FIELDS",
    "FLAG_FIELDS",
    "TEXT_FIELDS",
    "AccessRole",
    "ActiveMember",
    "DeltaCategory",
    "Division",
    "FieldChangeLogEntry",
    "HistorySnapshot",
    "LinkedAccount",
    "LoteStage",
    "PendingDeltaEntry",
    "PendingDeltaStatus",
    "PendingDeltaType",
    "Rank",
    "Region",
    "RemovalReason",
    "RoleAssignment",
    "RosterRecord",
    "TransferLookup",
    "new_id",
    "utcnow",
]
