"""Apply an operator-confirmed change set to the stored roster.

Steps run in order inside the caller's unit of work:

1. authorize the operator (fail closed)
2. auto-resolve "disappeared from leave list" anomalies for returning members
3. upsert new members
4. apply updates
5. apply the four removal groups
6. derive access roles for linked members
7. write the division snapshot
8. write one field-change entry per changed field
9. queue the anomalies raised by this run

The engine never commits; the caller decides whether the unit of work is committed
or rolled back, which is how simulated runs leave no stored effects.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from rostersync.domain.errors import (
    AuthorizationError,
    PersistenceError,
    PersistenceErrorCategory,
)
from rostersync.domain.model import (
    ActiveMember,
    FieldChangeLogEntry,
    HistorySnapshot,
    PendingDeltaEntry,
    PendingDeltaType,
    RemovalReason,
    utcnow,
)

from .contracts import CommitResult
from .decisions import RemovalPartitions
from .hierarchy import HierarchyCache, HierarchyResolution, HierarchyResolver
from .normalize import normalize_for_comparison, stringify_value, values_differ
from .policy import ReconciliationPolicy
from .roles import derive_role
from .snapshot import division_breakdown

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime
    from uuid import UUID

    from rostersync.domain.model import RosterRecord
    from rostersync.domain.ports import AdminAuthorizer, ReconciliationUnitOfWork

    from .decisions import RemovalDecision

log = logging.getLogger(__name__)

type Clock = Callable[[], datetime]


@dataclass(frozen=True, slots=True, kw_only=True)
class CommitRequest:
    operator_id: UUID
    new_records: Sequence[RosterRecord] = ()
    updates: Sequence[RosterRecord] = ()
    removals: RemovalPartitions = field(default_factory=RemovalPartitions)
    batch_id: str | None = None
    note: str | None = None


@dataclass(slots=True)
class _RunState:
    now: datetime
    cache: HierarchyCache = field(default_factory=HierarchyCache)
    new_records: dict[int, RosterRecord] = field(default_factory=dict)
    returned_ids: set[int] = field(default_factory=set)
    role_candidates: list[ActiveMember] = field(default_factory=list)
    changes: list[tuple[ActiveMember, list[tuple[str, Any, Any]]]] = field(default_factory=list)
    anomalies: list[PendingDeltaEntry] = field(default_factory=list)
    counts: dict[str, int] = field(
        default_factory=lambda: dict.fromkeys(
            (
                "inserted",
                "updated",
                "inactivated",
                "promoted",
                "leave",
                "transferred",
                "skipped",
                "auto_resolved",
                "roles_changed",
            ),
            0,
        )
    )


class CommitEngine:
    """Run one reconciliation commit against ``unit_of_work``.

    Each step is flushed on its own so a store failure is reported with the name of
    the step that raised it. Nothing is committed here.
    """

    def __init__(
        self,
        unit_of_work: ReconciliationUnitOfWork,
        authorizer: AdminAuthorizer,
        *,
        policy: ReconciliationPolicy | None = None,
        clock: Clock = utcnow,
    ) -> None:
        self.unit_of_work = unit_of_work
        self.authorizer = authorizer
        self.policy = policy or ReconciliationPolicy()
        self.clock = clock
        self.repositories = unit_of_work.repositories
        self.resolver = HierarchyResolver(self.repositories.hierarchy)

    def run(self, request: CommitRequest) -> CommitResult:
        self._authorize(request.operator_id)
        state = _RunState(now=self.clock())

        self._select_new_records(request, state)
        with self._step("auto-return"):
            self._reconcile_returns(state)
        with self._step("insert-new"):
            self._upsert_new(request, state)
        with self._step("apply-updates"):
            self._apply_updates(request, state)
        with self._step("apply-removals"):
            self._apply_removals(request, state)
        with self._step("derive-roles"):
            self._derive_roles(state)
        with self._step("snapshot"):
            snapshot = self._write_snapshot(request, state)
        with self._step("field-changes"):
            self._write_field_changes(snapshot, state)
        with self._step("anomalies"):
            self._queue_anomalies(request, state)

        counts = state.counts
        result = CommitResult(
            inserted_count=counts["inserted"],
            updated_count=counts["updated"],
            inactivated_count=counts["inactivated"],
            promoted_count=counts["promoted"],
            leave_count=counts["leave"],
            transferred_count=counts["transferred"],
            skipped_count=counts["skipped"],
            auto_resolved_count=counts["auto_resolved"],
            roles_changed_count=counts["roles_changed"],
            snapshot_id=snapshot.id,
            snapshot_at=snapshot.created_at,
            anomaly_count=len(state.anomalies),
            anomalies=tuple(state.anomalies[: self.policy.anomaly_preview_limit]),
        )
        log.info("Commit finished: %s", result.summary)
        return result

    # Step helpers -------------------------------------------------------------

    @contextmanager
    def _step(self, name: str) -> Iterator[None]:
        log.info("Commit step %s", name)
        try:
            with self.unit_of_work.translating():
                yield
            self.unit_of_work.flush()
        except PersistenceError as exc:
            if exc.step is None:
                exc.step = name
            log.exception("Commit step %s failed (%s)", name, exc.category)
            raise

    def _authorize(self, operator_id: UUID) -> None:
        try:
            allowed = self.authorizer.is_admin(operator_id)
        except Exception as exc:
            log.exception("Role lookup failed for operator %s", operator_id)
            raise AuthorizationError("Unable to verify operator permissions") from exc
        if not allowed:
            log.warning("Operator %s attempted a commit without admin rights", operator_id)
            raise AuthorizationError(f"Operator {operator_id} is not an administrator")

    def _resolve(self, record: RosterRecord, state: _RunState) -> HierarchyResolution:
        resolution = self.resolver.resolve(
            record.division_label,
            record.region_label,
            cache=state.cache,
        )
        if not resolution.resolved and record.external_id is not None:
            state.anomalies.append(
                PendingDeltaEntry(
                    external_id=record.external_id,
                    name=record.name,
                    division_label=record.division_label,
                    delta_type=PendingDeltaType.UNRESOLVED_HIERARCHY,
                    priority=2,
                    extra={"region_label": record.region_label},
                    created_at=state.now,
                )
            )
        return resolution

    # Steps --------------------------------------------------------------------

    def _select_new_records(self, request: CommitRequest, state: _RunState) -> None:
        for record in request.new_records:
            if not record.has_valid_id or record.external_id is None:
                log.warning("Skipping new row %r without a valid member id", record.name)
                state.counts["skipped"] += 1
                continue
            if not record.rank_label.strip():
                log.warning("Skipping new member %s without a rank label", record.external_id)
                state.counts["skipped"] += 1
                continue
            state.new_records[record.external_id] = record

    def _reconcile_returns(self, state: _RunState) -> None:
        since = state.now - self.policy.auto_return_window
        pending = self.repositories.pending_deltas
        for external_id in state.new_records:
            entries = pending.find_pending(
                external_id,
                PendingDeltaType.DISAPPEARED_FROM_LEAVE_LIST,
                since=since,
            )
            for entry in entries:
                entry.resolve(
                    by=self.policy.auto_resolver,
                    at=state.now,
                    note="Member reappeared in the roster import",
                )
                state.counts["auto_resolved"] += 1
            if entries:
                state.returned_ids.add(external_id)
                log.info("Member %s returned; resolved %d entries", external_id, len(entries))

    def _upsert_new(self, request: CommitRequest, state: _RunState) -> None:
        members = self.repositories.members
        for external_id, record in state.new_records.items():
            resolution = self._resolve(record, state)
            member = members.get_by_external_id(external_id)
            if member is None:
                member = ActiveMember.from_record(record, now=state.now)
                members.add(member)
            else:
                member.apply_record(record)
                member.reactivate()
                member.updated_at = state.now
            member.division_id = resolution.division_id
            member.region_id = resolution.region_id
            state.role_candidates.append(member)
            state.counts["inserted"] += 1
            if external_id not in state.returned_ids:
                state.anomalies.append(
                    PendingDeltaEntry(
                        external_id=external_id,
                        name=record.name,
                        division_label=record.division_label,
                        delta_type=PendingDeltaType.NEW_ACTIVE,
                        priority=1,
                        extra={"batch_id": request.batch_id},
                        created_at=state.now,
                    )
                )

    def _apply_updates(self, request: CommitRequest, state: _RunState) -> None:
        members = self.repositories.members
        for record in request.updates:
            if record.external_id is None:
                state.counts["skipped"] += 1
                continue
            member = members.get_by_external_id(record.external_id)
            if member is None:
                log.warning("Update for unknown member %s skipped", record.external_id)
                state.counts["skipped"] += 1
                continue

            before = member.comparable_values()
            previous_region = member.region_id
            division_changed = normalize_for_comparison(
                member.division_label
            ) != normalize_for_comparison(record.division_label)

            member.apply_record(record)
            member.updated_at = state.now
            if division_changed:
                resolution = self._resolve(record, state)
                member.division_id = resolution.division_id
                member.region_id = resolution.region_id

            after = member.comparable_values()
            diff = [
                (name, before[name], after[name])
                for name in before
                if values_differ(before[name], after[name])
            ]
            state.changes.append((member, diff))
            state.role_candidates.append(member)
            state.counts["updated"] += 1

            if member.region_id != previous_region:
                self._propagate_placement(member)

    def _apply_removals(self, request: CommitRequest, state: _RunState) -> None:
        groups = request.removals
        today = state.now.date()
        for decision in groups.inactivate:
            member = self._removed_member(decision, state)
            if member is None:
                continue
            note = decision.note
            if decision.reason is RemovalReason.TRANSFERRED:
                note = _join_note("Transfer destination not confirmed", note)
            member.inactivate(decision.reason, on=today, notes=note)
            member.updated_at = state.now
            state.counts["inactivated"] += 1

        for decision in groups.promote:
            member = self._removed_member(decision, state)
            if member is None:
                continue
            self._promote(member, decision, state)
            state.counts["promoted"] += 1

        for decision in groups.leave:
            member = self._removed_member(decision, state)
            if member is None:
                continue
            member.append_note(_join_note(f"{today.isoformat()}: leave of absence", decision.note))
            member.updated_at = state.now
            state.counts["leave"] += 1

        for decision in groups.transfer:
            member = self._removed_member(decision, state)
            if member is None:
                continue
            self._transfer(member, decision, state)
            state.counts["transferred"] += 1

    def _removed_member(self, decision: RemovalDecision, state: _RunState) -> ActiveMember | None:
        member = self.repositories.members.get_by_external_id(decision.external_id)
        if member is None:
            log.warning("Removal for unknown member %s skipped", decision.external_id)
            state.counts["skipped"] += 1
        return member

    def _promote(self, member: ActiveMember, decision: RemovalDecision, state: _RunState) -> None:
        hierarchy = self.repositories.hierarchy
        rank = (
            hierarchy.get_rank(decision.destination_rank_id)
            if decision.destination_rank_id
            else None
        )
        region = (
            hierarchy.get_region(decision.destination_region_id)
            if decision.destination_region_id
            else None
        )
        if rank is None or region is None:
            raise PersistenceError(
                PersistenceErrorCategory.INVALID_REFERENCE,
                f"promotion of member {member.external_id} points at an unknown rank or region",
            )
        member.active = True
        member.rank_id = rank.id
        member.rank_label = rank.name
        member.region_id = region.id
        member.region_label = region.name
        member.division_id = None
        member.division_label = region.name
        member.append_note(
            _join_note(f"{state.now.date().isoformat()}: promoted to {rank.name}", decision.note)
        )
        member.updated_at = state.now
        state.role_candidates.append(member)
        self._propagate_placement(member)

    def _transfer(self, member: ActiveMember, decision: RemovalDecision, state: _RunState) -> None:
        hierarchy = self.repositories.hierarchy
        region = (
            hierarchy.get_region(decision.destination_region_id)
            if decision.destination_region_id
            else None
        )
        if region is None:
            raise PersistenceError(
                PersistenceErrorCategory.INVALID_REFERENCE,
                f"transfer of member {member.external_id} points at an unknown region",
            )
        division = (
            hierarchy.get_division(decision.destination_division_id)
            if decision.destination_division_id
            else None
        )
        member.region_id = region.id
        member.region_label = region.name
        member.division_id = division.id if division else None
        member.division_label = division.name if division else region.name
        member.append_note(
            _join_note(
                f"{state.now.date().isoformat()}: transferred to {member.division_label}",
                decision.note,
            )
        )
        member.updated_at = state.now
        self._propagate_placement(member)

    def _propagate_placement(self, member: ActiveMember) -> None:
        if member.linked_account_id is None:
            return
        account = self.repositories.accounts.get(member.linked_account_id)
        if account is None:
            return
        account.region_id = member.region_id
        account.division_id = member.division_id

    def _derive_roles(self, state: _RunState) -> None:
        roles = self.repositories.roles
        seen: set[int] = set()
        for member in state.role_candidates:
            if member.external_id in seen or member.linked_account_id is None:
                continue
            seen.add(member.external_id)
            decision = derive_role(member.rank_label)
            if not decision.matched:
                log.debug("No role rule for rank %r; roles left unchanged", member.rank_label)
                continue
            current = roles.roles_for(member.linked_account_id)
            derived = decision.apply(current)
            if derived != current:
                roles.replace(member.linked_account_id, derived)
                state.counts["roles_changed"] += 1

    def _write_snapshot(self, request: CommitRequest, state: _RunState) -> HistorySnapshot:
        active = self.repositories.members.list_active()
        snapshot = HistorySnapshot(
            created_at=state.now,
            total_active=len(active),
            divisions=division_breakdown(active),
            operator=str(request.operator_id),
            note=request.note or request.batch_id,
        )
        self.repositories.snapshots.add(snapshot)
        return snapshot

    def _write_field_changes(self, snapshot: HistorySnapshot, state: _RunState) -> None:
        field_changes = self.repositories.field_changes
        for member, diff in state.changes:
            for name, previous, new in diff:
                field_changes.add(
                    FieldChangeLogEntry(
                        snapshot_id=snapshot.id,
                        member_id=member.id,
                        external_id=member.external_id,
                        member_name=member.name,
                        field_name=name,
                        previous_value=stringify_value(previous),
                        new_value=stringify_value(new),
                    )
                )

    def _queue_anomalies(self, request: CommitRequest, state: _RunState) -> None:
        pending = self.repositories.pending_deltas
        for entry in state.anomalies:
            if request.batch_id and "batch_id" not in entry.extra:
                entry.extra = {**entry.extra, "batch_id": request.batch_id}
            pending.add(entry)


def _join_note(prefix: str, note: str | None) -> str:
    return f"{prefix} - {note}" if note else prefix
