"""Roster reconciliation core.

Flow of one import:
1) classify the imported rows against the stored active members
2) let the operator review the delta and decide each removal
3) partition the removal decisions by reason
4) commit the confirmed change set with audit records
"""

from __future__ import annotations

from .classify import DeltaClassifier, classify_roster, detect_region
from .commit import CommitEngine, CommitRequest
from .contracts import (
    ClassificationStats,
    CommitResult,
    DeltaResult,
    RosterImport,
    SourceFileInfo,
    TransferredMember,
    UpdatedMember,
)
from .decisions import RemovalDecision, RemovalPartitions, partition_removals
from .hierarchy import HierarchyCache, HierarchyResolution, HierarchyResolver
from .policy import ReconciliationPolicy
from .ranks import RankLabel, grade_number, parse_rank_label
from .roles import DEFAULT_ROLE_RULES, RoleDecision, RoleRule, derive_role

__all__ = [
    "DEFAULT_ROLE_RULES",
    "ClassificationStats",
    "CommitEngine",
    "CommitRequest",
    "CommitResult",
    "DeltaClassifier",
    "DeltaResult",
    "HierarchyCache",
    "HierarchyResolution",
    "HierarchyResolver",
    "RankLabel",
    "ReconciliationPolicy",
    "RemovalDecision",
    "RemovalPartitions",
    "RoleDecision",
    "RoleRule",
    "RosterImport",
    "SourceFileInfo",
    "TransferredMember",
    "UpdatedMember",
    "classify_roster",
    "derive_role",
    "detect_region",
    "grade_number",
    "parse_rank_label",
    "partition_removals",
]
