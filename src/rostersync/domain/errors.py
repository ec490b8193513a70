"""Domain error hierarchy for roster reconciliation."""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence


class RosterSyncError(RuntimeError):
    """Base class for all reconciliation failures."""


class ValidationError(RosterSyncError):
    """Raised when imported rows or operator input cannot be accepted."""


class SanityGuardError(ValidationError):
    """Raised when an import would remove an implausibly large share of active members."""

    def __init__(self, *, removed: int, active: int, imported: int, ratio: float) -> None:
        self.removed = removed
        self.active = active
        self.imported = imported
        self.ratio = ratio
        super().__init__(
            f"Import would remove {removed} of {active} active members "
            f"({ratio:.0%}) while only {imported} rows were supplied. "
            "Check that the correct files were uploaded."
        )


class AuthorizationError(RosterSyncError):
    """Raised when the operator is not allowed to commit changes."""


class PersistenceErrorCategory(StrEnum):
    DUPLICATE = "duplicate"
    INVALID_REFERENCE = "invalid-reference"
    MISSING_REQUIRED_FIELD = "missing-required-field"
    PERMISSION_DENIED = "permission-denied"
    NOT_FOUND = "not-found"
    GENERIC = "generic"


_CATEGORY_MESSAGES: dict[PersistenceErrorCategory, str] = {
    PersistenceErrorCategory.DUPLICATE: "A record with these values already exists",
    PersistenceErrorCategory.INVALID_REFERENCE: "A referenced record does not exist",
    PersistenceErrorCategory.MISSING_REQUIRED_FIELD: "A required field was left empty",
    PersistenceErrorCategory.PERMISSION_DENIED: "The store refused the operation",
    PersistenceErrorCategory.NOT_FOUND: "The requested record was not found",
    PersistenceErrorCategory.GENERIC: "The store reported an unexpected error",
}


class PersistenceError(RosterSyncError):
    """Store failure mapped onto a small set of user-facing categories."""

    def __init__(
        self,
        category: PersistenceErrorCategory,
        detail: str | None = None,
        *,
        step: str | None = None,
    ) -> None:
        self.category = category
        self.detail = detail
        self.step = step
        super().__init__(self.message)

    @property
    def message(self) -> str:
        text = _CATEGORY_MESSAGES[self.category]
        if self.step:
            text = f"{text} (step: {self.step})"
        if self.detail:
            text = f"{text}: {self.detail}"
        return text

    def __str__(self) -> str:
        return self.message


class LoteStateError(RosterSyncError):
    """Raised when a batch operation is not allowed in the current stage."""


class PendingDecisionError(LoteStateError):
    """Raised when removal decisions still block the import."""

    def __init__(self, issues: Mapping[str, Sequence[int]]) -> None:
        self.issues = {key: tuple(value) for key, value in issues.items() if value}
        described = "; ".join(
            f"{key}: {', '.join(str(item) for item in ids)}" for key, ids in self.issues.items()
        )
        super().__init__(f"Removal decisions incomplete ({described})")
