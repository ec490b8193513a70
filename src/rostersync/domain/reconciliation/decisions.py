"""Operator removal decisions and their routing into commit groups."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

from rostersync.domain.errors import ValidationError
from rostersync.domain.model import RemovalReason, TransferLookup

if TYPE_CHECKING:
    from collections.abc import Iterable
    from uuid import UUID

MISSING_DECISION: Final[str] = "missing-decision"
LOOKUP_IN_PROGRESS: Final[str] = "transfer-lookup-in-progress"
PROMOTION_INCOMPLETE: Final[str] = "promotion-destination-missing"


@dataclass(frozen=True, slots=True, kw_only=True)
class RemovalDecision:
    """Disposition chosen by the operator for one removed member."""

    external_id: int
    reason: RemovalReason
    note: str | None = None
    destination_rank_id: UUID | None = None
    destination_region_id: UUID | None = None
    destination_division_id: UUID | None = None
    transfer_lookup: TransferLookup = TransferLookup.NOT_STARTED

    @property
    def has_resolved_destination(self) -> bool:
        return (
            self.reason is RemovalReason.TRANSFERRED
            and self.transfer_lookup is TransferLookup.FOUND
            and self.destination_region_id is not None
        )

    def blocking_issue(self) -> str | None:
        """Return why this decision cannot be committed yet, if it cannot."""

        if self.reason is RemovalReason.TRANSFERRED:
            if self.transfer_lookup is TransferLookup.IN_PROGRESS:
                return LOOKUP_IN_PROGRESS
        elif self.reason is RemovalReason.PROMOTED and (
            self.destination_rank_id is None or self.destination_region_id is None
        ):
            return PROMOTION_INCOMPLETE
        return None


@dataclass(slots=True)
class RemovalPartitions:
    """Four disjoint removal groups consumed by the commit engine."""

    inactivate: list[RemovalDecision] = field(default_factory=list)
    promote: list[RemovalDecision] = field(default_factory=list)
    leave: list[RemovalDecision] = field(default_factory=list)
    transfer: list[RemovalDecision] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.inactivate) + len(self.promote) + len(self.leave) + len(self.transfer)


def partition_removals(decisions: Iterable[RemovalDecision]) -> RemovalPartitions:
    partitions = RemovalPartitions()
    for decision in decisions:
        issue = decision.blocking_issue()
        if issue is not None:
            raise ValidationError(f"Decision for member {decision.external_id} is blocked: {issue}")
        if decision.reason is RemovalReason.PROMOTED:
            partitions.promote.append(decision)
        elif decision.reason is RemovalReason.LEAVE_OF_ABSENCE:
            partitions.leave.append(decision)
        elif decision.has_resolved_destination:
            partitions.transfer.append(decision)
        else:
            # Inactivating reasons plus transfers without a confirmed destination.
            partitions.inactivate.append(decision)
    return partitions
