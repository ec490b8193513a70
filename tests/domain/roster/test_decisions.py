from __future__ import annotations

from uuid import uuid4

import pytest

from rostersync.domain.errors import ValidationError
from rostersync.domain.model import RemovalReason, TransferLookup
from rostersync.domain.reconciliation import RemovalDecision, partition_removals


def test_partition_routes_each_reason() -> None:
    region_id = uuid4()
    decisions = [
        RemovalDecision(external_id=1, reason=RemovalReason.DECEASED),
        RemovalDecision(external_id=2, reason=RemovalReason.RESIGNED),
        RemovalDecision(external_id=3, reason=RemovalReason.EXPELLED),
        RemovalDecision(external_id=4, reason=RemovalReason.OTHER),
        RemovalDecision(
            external_id=5,
            reason=RemovalReason.PROMOTED,
            destination_rank_id=uuid4(),
            destination_region_id=region_id,
        ),
        RemovalDecision(external_id=6, reason=RemovalReason.LEAVE_OF_ABSENCE),
        RemovalDecision(
            external_id=7,
            reason=RemovalReason.TRANSFERRED,
            destination_region_id=region_id,
            transfer_lookup=TransferLookup.FOUND,
        ),
        RemovalDecision(
            external_id=8,
            reason=RemovalReason.TRANSFERRED,
            transfer_lookup=TransferLookup.NOT_FOUND,
        ),
    ]

    partitions = partition_removals(decisions)

    assert [d.external_id for d in partitions.inactivate] == [1, 2, 3, 4, 8]
    assert [d.external_id for d in partitions.promote] == [5]
    assert [d.external_id for d in partitions.leave] == [6]
    assert [d.external_id for d in partitions.transfer] == [7]
    assert len(partitions) == len(decisions)


def test_blocked_decisions_cannot_be_partitioned() -> None:
    decision = RemovalDecision(external_id=1, reason=RemovalReason.PROMOTED)

    with pytest.raises(ValidationError):
        partition_removals([decision])


def test_blocking_issues() -> None:
    lookup = RemovalDecision(
        external_id=1,
        reason=RemovalReason.TRANSFERRED,
        transfer_lookup=TransferLookup.IN_PROGRESS,
    )
    promotion = RemovalDecision(
        external_id=2,
        reason=RemovalReason.PROMOTED,
        destination_rank_id=uuid4(),
    )

    assert lookup.blocking_issue() == "transfer-lookup-in-progress"
    assert promotion.blocking_issue() == "promotion-destination-missing"
    assert RemovalDecision(external_id=3, reason=RemovalReason.OTHER).blocking_issue() is None
