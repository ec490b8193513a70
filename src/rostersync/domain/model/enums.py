"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class RemovalReason(StrEnum):
    TRANSFERRED = "transferred"
    DECEASED = "deceased"
    RESIGNED = "resigned"
    EXPELLED = "expelled"
    LEAVE_OF_ABSENCE = "leave-of-absence"
    PROMOTED = "promoted"
    OTHER = "other"


class LoteStage(StrEnum):
    UPLOAD = "upload"
    REVIEW = "review"
    DONE = "done"


class DeltaCategory(StrEnum):
    """Selectable delta buckets of a batch."""

    NEW = "new"
    UPDATED = "updated"
    REMOVED = "removed"


class TransferLookup(StrEnum):
    NOT_STARTED = "not-started"
    IN_PROGRESS = "in-progress"
    FOUND = "found"
    NOT_FOUND = "not-found"


class PendingDeltaType(StrEnum):
    NEW_ACTIVE = "new-active"
    DISAPPEARED_FROM_LEAVE_LIST = "disappeared-from-leave-list"
    UNRESOLVED_HIERARCHY = "unresolved-hierarchy"


class PendingDeltaStatus(StrEnum):
    PENDING = "pending"
    RESOLVED = "resolved"


class AccessRole(StrEnum):
    ADMIN = "admin"
    MODERATOR = "moderator"
    REGIONAL = "regional"
    REGIONAL_DIRECTOR = "regional-director"
    DIVISION_DIRECTOR = "division-director"
    DIVISION_SOCIAL = "division-social"
    DIVISION_ADMINISTRATION = "division-administration"
