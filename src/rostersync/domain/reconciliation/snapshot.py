"""Point-in-time aggregates of the active roster."""

from __future__ import annotations

from collections import defaultdict
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterable

    from rostersync.domain.model import ActiveMember

UNASSIGNED_DIVISION = "(no division)"


def division_breakdown(members: Iterable[ActiveMember]) -> list[dict[str, Any]]:
    """Count active members per division, split by account linkage.

    Rows are sorted by region and division label so that two snapshots of the same
    roster serialize identically.
    """

    buckets: dict[tuple[str, str], dict[str, int]] = defaultdict(
        lambda: {"total": 0, "linked": 0, "unlinked": 0}
    )
    for member in members:
        if not member.active:
            continue
        division = member.division_label.strip() or UNASSIGNED_DIVISION
        region = member.region_label.strip()
        bucket = buckets[(region, division)]
        bucket["total"] += 1
        bucket["linked" if member.linked else "unlinked"] += 1

    return [
        {"division": division, "region": region, **counts}
        for (region, division), counts in sorted(buckets.items())
    ]
