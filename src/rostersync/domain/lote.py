"""Review workflow for one import batch ("lote").

Stages move ``upload -> review -> done``; :meth:`Lote.reset` starts over from any
stage. The batch lives with a single operator and is never persisted itself; only
the confirmed change set reaches the commit engine.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol

from rostersync.domain.errors import LoteStateError, PendingDecisionError, ValidationError
from rostersync.domain.model import (
    DeltaCategory,
    LoteStage,
    RemovalReason,
    TransferLookup,
    utcnow,
)
from rostersync.domain.reconciliation.commit import CommitRequest
from rostersync.domain.reconciliation.decisions import (
    MISSING_DECISION,
    RemovalDecision,
    partition_removals,
)

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime
    from uuid import UUID

    from rostersync.domain.model import ActiveMember, RosterRecord
    from rostersync.domain.reconciliation import (
        CommitResult,
        DeltaClassifier,
        DeltaResult,
        HierarchyResolution,
        SourceFileInfo,
    )

log = logging.getLogger(__name__)

LOTE_ID_FORMAT = "LOTE-%Y-%m-%d-%H%M%S"


class LoteCommitter(Protocol):
    """Run a commit request, persisting its effects unless ``dry_run`` is set."""

    def __call__(self, request: CommitRequest, *, dry_run: bool) -> CommitResult: ...


def _empty_selections() -> dict[DeltaCategory, set[int]]:
    return {category: set() for category in DeltaCategory}


@dataclass(slots=True, kw_only=True)
class Lote:
    id: str
    created_at: datetime
    stage: LoteStage = LoteStage.UPLOAD
    simulation_mode: bool = True
    source_a: SourceFileInfo | None = None
    source_b: SourceFileInfo | None = None
    delta: DeltaResult | None = None
    selections: dict[DeltaCategory, set[int]] = field(default_factory=_empty_selections)
    removal_decisions: dict[int, RemovalDecision] = field(default_factory=dict)
    result: CommitResult | None = None
    simulated: bool | None = None

    @classmethod
    def start(cls, *, now: datetime | None = None) -> Lote:
        created_at = now or utcnow()
        return cls(id=created_at.strftime(LOTE_ID_FORMAT), created_at=created_at)

    # Transitions --------------------------------------------------------------

    def process_files(
        self,
        source_a: SourceFileInfo,
        source_b: SourceFileInfo,
        records: list[RosterRecord],
        active_members: Iterable[ActiveMember],
        *,
        classifier: DeltaClassifier,
    ) -> DeltaResult:
        """Classify the merged rows and enter review with empty selections."""

        self._require(LoteStage.UPLOAD)
        delta = classifier.classify(records, active_members, sources=(source_a, source_b))
        self.source_a = source_a
        self.source_b = source_b
        self.delta = delta
        self.selections = _empty_selections()
        self.removal_decisions = {}
        self.stage = LoteStage.REVIEW
        log.info("Batch %s entered review", self.id)
        return delta

    def toggle_selection(self, category: DeltaCategory, external_id: int) -> bool:
        """Flip one id in ``category`` and return whether it is now selected."""

        self._require(LoteStage.REVIEW)
        if external_id not in self._available(category):
            raise ValidationError(f"Member {external_id} is not part of the {category} delta")
        selected = self.selections[category]
        if external_id in selected:
            selected.remove(external_id)
            return False
        selected.add(external_id)
        return True

    def toggle_all(self, category: DeltaCategory, select: bool) -> None:
        """Select every id in ``category``, or clear the category."""

        self._require(LoteStage.REVIEW)
        self.selections[category] = set(self._available(category)) if select else set()

    def toggle_simulation_mode(self) -> bool:
        if self.stage is LoteStage.DONE:
            raise LoteStateError("Simulation mode cannot change after the import ran")
        self.simulation_mode = not self.simulation_mode
        return self.simulation_mode

    def define_removal_reason(self, decision: RemovalDecision) -> None:
        self._require(LoteStage.REVIEW)
        if decision.external_id not in self._available(DeltaCategory.REMOVED):
            raise ValidationError(f"Member {decision.external_id} is not a removal candidate")
        self.removal_decisions[decision.external_id] = decision

    def begin_transfer_lookup(self, external_id: int) -> RemovalDecision:
        """Mark a transfer decision as waiting for a destination lookup."""

        decision = self._transfer_decision(external_id)
        updated = dataclasses.replace(decision, transfer_lookup=TransferLookup.IN_PROGRESS)
        self.removal_decisions[external_id] = updated
        return updated

    def complete_transfer_lookup(
        self,
        external_id: int,
        destination: HierarchyResolution | None,
    ) -> RemovalDecision:
        decision = self._transfer_decision(external_id)
        if destination is not None and destination.region_id is not None:
            updated = dataclasses.replace(
                decision,
                transfer_lookup=TransferLookup.FOUND,
                destination_region_id=destination.region_id,
                destination_division_id=destination.division_id,
            )
        else:
            updated = dataclasses.replace(
                decision,
                transfer_lookup=TransferLookup.NOT_FOUND,
                destination_region_id=None,
                destination_division_id=None,
            )
        self.removal_decisions[external_id] = updated
        return updated

    def pending_issues(self) -> dict[str, list[int]]:
        """Selected removals that still block :meth:`execute_import`, by issue."""

        issues: dict[str, list[int]] = {}
        for external_id in sorted(self.selections[DeltaCategory.REMOVED]):
            decision = self.removal_decisions.get(external_id)
            issue = MISSING_DECISION if decision is None else decision.blocking_issue()
            if issue is not None:
                issues.setdefault(issue, []).append(external_id)
        return issues

    def build_commit_request(self, operator_id: UUID) -> CommitRequest:
        delta = self._delta()
        new_ids = self.selections[DeltaCategory.NEW]
        updated_ids = self.selections[DeltaCategory.UPDATED]
        removed_ids = sorted(self.selections[DeltaCategory.REMOVED])
        return CommitRequest(
            operator_id=operator_id,
            new_records=[r for r in delta.new if r.external_id in new_ids],
            updates=[item.after for item in delta.updated if item.external_id in updated_ids],
            removals=partition_removals(self.removal_decisions[i] for i in removed_ids),
            batch_id=self.id,
        )

    def execute_import(self, operator_id: UUID, committer: LoteCommitter) -> CommitResult:
        """Commit the selected changes; a simulation runs the same path without storing."""

        self._require(LoteStage.REVIEW)
        issues = self.pending_issues()
        if issues:
            raise PendingDecisionError(issues)
        request = self.build_commit_request(operator_id)
        result = committer(request, dry_run=self.simulation_mode)
        self.result = result
        self.simulated = self.simulation_mode
        self.stage = LoteStage.DONE
        log.info(
            "Batch %s %s: %s",
            self.id,
            "simulated" if self.simulation_mode else "imported",
            result.summary,
        )
        return result

    def reset(self, *, now: datetime | None = None) -> None:
        """Discard the batch, its selections and decisions and return to upload."""

        fresh = Lote.start(now=now)
        for item in dataclasses.fields(self):
            setattr(self, item.name, getattr(fresh, item.name))

    # Views --------------------------------------------------------------------

    def export_rows(self) -> list[dict[str, Any]]:
        """Flatten the selected changes for download, one row per member."""

        delta = self._delta()
        rows: list[dict[str, Any]] = []
        new_ids = self.selections[DeltaCategory.NEW]
        for record in delta.new:
            if record.external_id in new_ids:
                rows.append(
                    _export_row("new", record.external_id, record.name, record.division_label)
                )
        updated_ids = self.selections[DeltaCategory.UPDATED]
        for item in delta.updated:
            if item.external_id in updated_ids:
                after = item.after
                row = _export_row("updated", item.external_id, after.name, after.division_label)
                row["changes"] = ", ".join(item.changed_fields)
                rows.append(row)
        removed_ids = self.selections[DeltaCategory.REMOVED]
        for member in delta.removed:
            if member.external_id in removed_ids:
                row = _export_row(
                    "removed", member.external_id, member.name, member.division_label
                )
                decision = self.removal_decisions.get(member.external_id)
                row["reason"] = str(decision.reason) if decision else ""
                row["note"] = (decision.note or "") if decision else ""
                rows.append(row)
        for item in delta.transferred:
            moved = item.member
            row = _export_row("transferred", item.external_id, moved.name, moved.division_label)
            row["destination"] = f"{item.destination_region} / {item.destination_division}"
            rows.append(row)
        return rows

    # Internals ----------------------------------------------------------------

    def _require(self, stage: LoteStage) -> None:
        if self.stage is not stage:
            raise LoteStateError(f"Batch {self.id} is in stage {self.stage}, expected {stage}")

    def _delta(self) -> DeltaResult:
        if self.delta is None:
            raise LoteStateError(f"Batch {self.id} has no processed files")
        return self.delta

    def _available(self, category: DeltaCategory) -> tuple[int, ...]:
        return self._delta().ids_for(category)

    def _transfer_decision(self, external_id: int) -> RemovalDecision:
        self._require(LoteStage.REVIEW)
        decision = self.removal_decisions.get(external_id)
        if decision is None or decision.reason is not RemovalReason.TRANSFERRED:
            raise ValidationError(f"Member {external_id} has no transfer decision")
        return decision


def _export_row(
    category: str,
    external_id: int | None,
    name: str,
    division: str,
) -> dict[str, Any]:
    return {"category": category, "external_id": external_id, "name": name, "division": division}
