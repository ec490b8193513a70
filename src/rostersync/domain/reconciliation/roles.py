"""Role derivation for members linked to portal accounts.

Rules are evaluated in order; the first rule whose grade range contains the member's
grade and whose keywords (if any) appear in the rank title wins. A rule with
``role=None`` revokes the managed roles without granting a new one. When no rule
matches, the account's roles are left as they are.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from rostersync.domain.model import AccessRole

from .normalize import normalize_for_comparison
from .ranks import parse_rank_label

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from .ranks import RankLabel

MANAGED_ROLES: Final[frozenset[AccessRole]] = frozenset(
    {
        AccessRole.MODERATOR,
        AccessRole.REGIONAL,
        AccessRole.REGIONAL_DIRECTOR,
        AccessRole.DIVISION_DIRECTOR,
        AccessRole.DIVISION_SOCIAL,
        AccessRole.DIVISION_ADMINISTRATION,
    }
)


@dataclass(frozen=True, slots=True, kw_only=True)
class RoleRule:
    name: str
    grades: range
    role: AccessRole | None
    keywords: tuple[str, ...] = ()

    def matches(self, rank: RankLabel) -> bool:
        if rank.grade_number not in self.grades:
            return False
        if not self.keywords:
            return True
        title = normalize_for_comparison(rank.title)
        return any(keyword in title for keyword in self.keywords)


@dataclass(frozen=True, slots=True)
class RoleDecision:
    rule: RoleRule | None

    @property
    def matched(self) -> bool:
        return self.rule is not None

    def apply(self, current: Iterable[AccessRole]) -> set[AccessRole]:
        """Return the role set after applying this decision to ``current``."""

        roles = set(current)
        if self.rule is None:
            return roles
        roles -= MANAGED_ROLES
        if self.rule.role is not None:
            roles.add(self.rule.role)
        return roles


_REGION_GRADE = range(5, 6)
_DIVISION_GRADE = range(6, 7)

DEFAULT_ROLE_RULES: Final[tuple[RoleRule, ...]] = (
    RoleRule(
        name="regional-director",
        grades=_REGION_GRADE,
        keywords=("DIRETOR", "DIRECTOR"),
        role=AccessRole.REGIONAL_DIRECTOR,
    ),
    RoleRule(name="regional-staff", grades=_REGION_GRADE, role=AccessRole.REGIONAL),
    RoleRule(
        name="division-director",
        grades=_DIVISION_GRADE,
        keywords=("DIRETOR", "DIRECTOR"),
        role=AccessRole.DIVISION_DIRECTOR,
    ),
    RoleRule(
        name="division-social",
        grades=_DIVISION_GRADE,
        keywords=("SOCIAL",),
        role=AccessRole.DIVISION_SOCIAL,
    ),
    RoleRule(
        name="division-administration",
        grades=_DIVISION_GRADE,
        keywords=("ADM",),
        role=AccessRole.DIVISION_ADMINISTRATION,
    ),
    RoleRule(name="division-staff", grades=_DIVISION_GRADE, role=AccessRole.MODERATOR),
    RoleRule(
        name="rank-and-file",
        grades=range(7, 11),
        role=None,
    ),
)


def derive_role(
    rank_label: str | None,
    rules: Sequence[RoleRule] = DEFAULT_ROLE_RULES,
) -> RoleDecision:
    rank = parse_rank_label(rank_label)
    for rule in rules:
        if rule.matches(rank):
            return RoleDecision(rule)
    return RoleDecision(None)
