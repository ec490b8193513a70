"""SQLAlchemy adapter package for rostersync."""

from __future__ import annotations

from .authorization import SqlAlchemyAdminAuthorizer
from .errors import translate_errors
from .mappings import create_all_tables, mapper_registry, start_mappers
from .repositories import (
    SqlAlchemyFieldChangeRepository,
    SqlAlchemyHierarchyCatalog,
    SqlAlchemyLinkedAccountRepository,
    SqlAlchemyMemberRepository,
    SqlAlchemyPendingDeltaRepository,
    SqlAlchemyRoleRepository,
    SqlAlchemySnapshotRepository,
)
from .unit_of_work import SqlAlchemyReconciliationUnitOfWork, StartupError, startup

__all__ = [
    "SqlAlchemyAdminAuthorizer",
    "SqlAlchemyFieldChangeRepository",
    "SqlAlchemyHierarchyCatalog",
    "SqlAlchemyLinkedAccountRepository",
    "SqlAlchemyMemberRepository",
    "SqlAlchemyPendingDeltaRepository",
    "SqlAlchemyReconciliationUnitOfWork",
    "SqlAlchemyRoleRepository",
    "SqlAlchemySnapshotRepository",
    "StartupError",
    "create_all_tables",
    "mapper_registry",
    "start_mappers",
    "startup",
    "translate_errors",
]
