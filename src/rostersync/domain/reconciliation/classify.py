"""Diff an imported roster against the stored active members.

The classifier is side-effect free: it only reads its inputs and returns a
:class:`DeltaResult` or raises. It may therefore run for previews and simulations
as often as needed.
"""

from __future__ import annotations

import logging
from collections import Counter, defaultdict
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from rostersync.domain.errors import SanityGuardError, ValidationError
from rostersync.domain.model import COMPARABLE_FIELDS

from .contracts import (
    ClassificationStats,
    DeltaResult,
    TransferredMember,
    UpdatedMember,
)
from .normalize import normalize_hierarchy_label, values_differ
from .policy import ReconciliationPolicy

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from rostersync.domain.model import ActiveMember, RosterRecord

    from .contracts import SourceFileInfo

log = logging.getLogger(__name__)


def detect_region(records: Iterable[RosterRecord]) -> str:
    """Return the region label carried by most rows (first seen wins ties)."""

    votes: Counter[str] = Counter()
    labels: dict[str, str] = {}
    for record in records:
        key = normalize_hierarchy_label(record.region_label)
        if not key:
            continue
        votes[key] += 1
        labels.setdefault(key, record.region_label.strip())
    if not votes:
        return ""
    winner, _ = votes.most_common(1)[0]
    return labels[winner]


def changed_fields(member: ActiveMember, record: RosterRecord) -> tuple[str, ...]:
    return tuple(
        name
        for name in COMPARABLE_FIELDS
        if values_differ(getattr(member, name), getattr(record, name))
    )


def _same_placement(left: ActiveMember, right: ActiveMember) -> bool:
    return normalize_hierarchy_label(left.region_label) == normalize_hierarchy_label(
        right.region_label
    ) and normalize_hierarchy_label(left.division_label) == normalize_hierarchy_label(
        right.division_label
    )


@dataclass(slots=True, kw_only=True)
class DeltaClassifier:
    """Split an imported roster into new, updated, unchanged and removed members.

    Removed members found elsewhere in the active set are reported as transfers, and
    the mass-removal guard in ``policy`` rejects imports that would remove most of the roster.
    """

    policy: ReconciliationPolicy = field(default_factory=ReconciliationPolicy)

    def classify(
        self,
        records: Sequence[RosterRecord],
        active_members: Iterable[ActiveMember],
        *,
        sources: tuple[SourceFileInfo, SourceFileInfo] | None = None,
    ) -> DeltaResult:
        if not records:
            raise ValidationError("The import contains no rows")

        stats = ClassificationStats(total_rows=len(records))
        if sources is not None:
            stats.source_a_rows = sources[0].row_count
            stats.source_b_rows = sources[1].row_count

        imported = self._validated(records, stats)
        if not imported:
            raise ValidationError(
                f"None of the {len(records)} imported rows carries a valid member id"
            )

        detected_label = detect_region(imported.values())
        detected_key = normalize_hierarchy_label(detected_label)

        by_id: dict[int, list[ActiveMember]] = defaultdict(list)
        for member in active_members:
            if member.active:
                by_id[member.external_id].append(member)

        def in_region(member: ActiveMember) -> bool:
            return normalize_hierarchy_label(member.region_label) == detected_key

        result = DeltaResult(detected_region=detected_label, stats=stats)
        for external_id, record in imported.items():
            candidates = by_id.get(external_id)
            if not candidates:
                result.new.append(record)
                continue
            current = next((m for m in candidates if in_region(m)), candidates[0])
            diff = changed_fields(current, record)
            if diff:
                result.updated.append(
                    UpdatedMember(before=current, after=record, changed_fields=diff)
                )
            else:
                result.no_change_count += 1

        regional = [
            member for members in by_id.values() for member in members if in_region(member)
        ]
        stats.active_in_region = len({member.external_id for member in regional})

        seen_missing: set[int] = set()
        for member in regional:
            if member.external_id in imported or member.external_id in seen_missing:
                continue
            seen_missing.add(member.external_id)
            destination = next(
                (
                    other
                    for other in by_id[member.external_id]
                    if other is not member and not _same_placement(other, member)
                ),
                None,
            )
            if destination is None:
                result.removed.append(member)
            else:
                result.transferred.append(
                    TransferredMember(
                        member=member,
                        destination_region=destination.region_label,
                        destination_division=destination.division_label,
                    )
                )

        self._guard(result, imported_count=len(imported))
        log.info(
            "Classified %d rows for region %r: %d new, %d updated, %d unchanged, "
            "%d removed, %d transferred",
            stats.total_rows,
            result.detected_region,
            len(result.new),
            len(result.updated),
            result.no_change_count,
            len(result.removed),
            len(result.transferred),
        )
        return result

    def _validated(
        self,
        records: Sequence[RosterRecord],
        stats: ClassificationStats,
    ) -> dict[int, RosterRecord]:
        imported: dict[int, RosterRecord] = {}
        for position, record in enumerate(records, start=1):
            if not record.has_valid_id or record.external_id is None:
                stats.invalid_rows += 1
                stats.rejected.append(
                    ValidationError(
                        f"Row {position} ({record.name!r}) has no valid member id: "
                        f"{record.external_id!r}"
                    )
                )
                continue
            if record.external_id in imported:
                stats.duplicate_rows += 1
                log.debug("Duplicate row for member %s, keeping the last", record.external_id)
            imported[record.external_id] = record
        stats.valid_rows = len(imported)
        if stats.invalid_rows:
            log.warning("Rejected %d rows without a valid member id", stats.invalid_rows)
        return imported

    def _guard(self, result: DeltaResult, *, imported_count: int) -> None:
        active = result.stats.active_in_region
        removed = len(result.removed)
        if self.policy.removal_is_implausible(removed=removed, active=active):
            ratio = removed / active
            log.error(
                "Aborting classification: %d of %d active members would be removed",
                removed,
                active,
            )
            raise SanityGuardError(
                removed=removed,
                active=active,
                imported=imported_count,
                ratio=ratio,
            )


def classify_roster(
    records: Sequence[RosterRecord],
    active_members: Iterable[ActiveMember],
    *,
    policy: ReconciliationPolicy | None = None,
    sources: tuple[SourceFileInfo, SourceFileInfo] | None = None,
) -> DeltaResult:
    classifier = DeltaClassifier(policy=policy or ReconciliationPolicy())
    return classifier.classify(records, active_members, sources=sources)
