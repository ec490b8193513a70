"""Ports the reconciliation domain depends on."""

from __future__ import annotations

from .authorization import AdminAuthorizer
from .persistence import (
    FieldChangeRepository,
    HierarchyCatalog,
    LinkedAccountRepository,
    MemberRepository,
    PendingDeltaRepository,
    RoleRepository,
    SnapshotRepository,
)
from .unit_of_work import (
    ReconciliationRepositories,
    ReconciliationUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "AdminAuthorizer",
    "FieldChangeRepository",
    "HierarchyCatalog",
    "LinkedAccountRepository",
    "MemberRepository",
    "PendingDeltaRepository",
    "ReconciliationRepositories",
    "ReconciliationUnitOfWork",
    "RepositoryCollection",
    "RoleRepository",
    "SnapshotRepository",
    "UnitOfWork",
]
