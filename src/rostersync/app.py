"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING, cast

from rostersync.adapters.sqlalchemy.authorization import SqlAlchemyAdminAuthorizer
from rostersync.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyReconciliationUnitOfWork,
    is_started,
    startup,
)
from rostersync.config import get_reconciliation_policy
from rostersync.domain.errors import (
    PersistenceError,
    PersistenceErrorCategory,
    ValidationError,
)
from rostersync.domain.lote import Lote
from rostersync.domain.model import utcnow
from rostersync.domain.ports.unit_of_work import ReconciliationUnitOfWork
from rostersync.domain.reconciliation import (
    CommitEngine,
    DeltaClassifier,
    HierarchyCache,
    HierarchyResolver,
)

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from rostersync.domain.lote import LoteCommitter
    from rostersync.domain.model import PendingDeltaEntry
    from rostersync.domain.ports import AdminAuthorizer
    from rostersync.domain.reconciliation import (
        CommitRequest,
        CommitResult,
        DeltaResult,
        HierarchyResolution,
        ReconciliationPolicy,
        RosterImport,
    )

UnitOfWorkFactory = Callable[[], ReconciliationUnitOfWork]
AuthorizerFactory = Callable[[ReconciliationUnitOfWork], "AdminAuthorizer"]


log = getLogger(__name__)


def _default_authorizer(unit_of_work: ReconciliationUnitOfWork) -> AdminAuthorizer:
    session = cast("SqlAlchemyReconciliationUnitOfWork", unit_of_work).session
    return SqlAlchemyAdminAuthorizer(session)


def _unit_of_work_factory(factory: UnitOfWorkFactory | None) -> UnitOfWorkFactory:
    if factory is not None:
        return factory
    if not is_started():
        startup()
    return SqlAlchemyReconciliationUnitOfWork


def preview_roster(
    roster: RosterImport,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    policy: ReconciliationPolicy | None = None,
) -> DeltaResult:
    """Classify ``roster`` against the stored members without writing anything."""

    effective_uow = _unit_of_work_factory(unit_of_work_factory)
    classifier = DeltaClassifier(policy=policy or get_reconciliation_policy())
    with effective_uow() as uow:
        active = uow.repositories.members.list_active()
        return classifier.classify(
            roster.records,
            active,
            sources=(roster.source_a, roster.source_b),
        )


def start_lote(
    roster: RosterImport,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    policy: ReconciliationPolicy | None = None,
    now: datetime | None = None,
) -> Lote:
    """Open a batch for ``roster`` and move it into review."""

    effective_uow = _unit_of_work_factory(unit_of_work_factory)
    classifier = DeltaClassifier(policy=policy or get_reconciliation_policy())
    lote = Lote.start(now=now)
    with effective_uow() as uow:
        active = uow.repositories.members.list_active()
        lote.process_files(
            roster.source_a,
            roster.source_b,
            list(roster.records),
            active,
            classifier=classifier,
        )
    return lote


def commit_changes(
    request: CommitRequest,
    *,
    dry_run: bool,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    authorizer_factory: AuthorizerFactory | None = None,
    policy: ReconciliationPolicy | None = None,
) -> CommitResult:
    """Run the commit engine in one transaction, rolling back when ``dry_run`` is set."""

    effective_uow = _unit_of_work_factory(unit_of_work_factory)
    effective_authorizer = authorizer_factory or _default_authorizer
    log.info(
        "Starting %s commit for batch %s by operator %s",
        "simulated" if dry_run else "real",
        request.batch_id,
        request.operator_id,
    )
    with effective_uow() as uow:
        engine = CommitEngine(
            uow,
            effective_authorizer(uow),
            policy=policy or get_reconciliation_policy(),
        )
        result = engine.run(request)
        if dry_run:
            uow.rollback()
        else:
            uow.commit()
    log.info("Finished %s commit: %s", "simulated" if dry_run else "real", result.summary)
    return result


def build_committer(
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    authorizer_factory: AuthorizerFactory | None = None,
    policy: ReconciliationPolicy | None = None,
) -> LoteCommitter:
    """Bind :func:`commit_changes` to the given collaborators for :meth:`Lote.execute_import`."""

    def committer(request: CommitRequest, *, dry_run: bool) -> CommitResult:
        return commit_changes(
            request,
            dry_run=dry_run,
            unit_of_work_factory=unit_of_work_factory,
            authorizer_factory=authorizer_factory,
            policy=policy,
        )

    return committer


def lookup_transfer_destination(
    division_label: str,
    region_label: str | None = None,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> HierarchyResolution:
    """Resolve a destination typed by the operator for a transfer decision."""

    effective_uow = _unit_of_work_factory(unit_of_work_factory)
    with effective_uow() as uow:
        resolver = HierarchyResolver(uow.repositories.hierarchy)
        return resolver.resolve(division_label, region_label, cache=HierarchyCache())


def list_pending_deltas(
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[PendingDeltaEntry]:
    effective_uow = _unit_of_work_factory(unit_of_work_factory)
    with effective_uow() as uow:
        return uow.repositories.pending_deltas.list_pending()


def resolve_pending_delta(
    entry_id: UUID,
    *,
    operator: str,
    note: str | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> PendingDeltaEntry:
    """Mark a queued anomaly as handled by ``operator``."""

    effective_uow = _unit_of_work_factory(unit_of_work_factory)
    with effective_uow() as uow:
        entry = uow.repositories.pending_deltas.get(entry_id)
        if entry is None:
            raise PersistenceError(
                PersistenceErrorCategory.NOT_FOUND,
                f"pending delta {entry_id}",
            )
        if not entry.is_pending:
            raise ValidationError(f"Pending delta {entry_id} is already resolved")
        entry.resolve(by=operator, at=utcnow(), note=note)
        uow.commit()
    log.info("Pending delta %s resolved by %s", entry_id, operator)
    return entry
