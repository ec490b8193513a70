from __future__ import annotations

import pytest

from rostersync.domain.model import AccessRole
from rostersync.domain.reconciliation import (
    RoleRule,
    derive_role,
    grade_number,
    parse_rank_label,
)


@pytest.mark.parametrize(
    ("label", "title", "grade"),
    [
        ("Diretor Regional (Grau V)", "Diretor Regional", "V"),
        ("Social Divisão Grau VI", "Social Divisão", "VI"),
        ("Soldado (grau x)", "Soldado", "X"),
        ("Prospect", "Prospect", None),
        ("", "", None),
    ],
)
def test_parse_rank_label(label: str, title: str, grade: str | None) -> None:
    parsed = parse_rank_label(label)

    assert parsed.title == title
    assert parsed.grade == grade


def test_grade_numbers() -> None:
    assert grade_number("IV") == 4
    assert grade_number("vii") == 7
    assert grade_number(None) == 999
    assert parse_rank_label("Soldado (Grau X)").grade_number == 10


@pytest.mark.parametrize(
    ("label", "role"),
    [
        ("Diretor Regional (Grau V)", AccessRole.REGIONAL_DIRECTOR),
        ("Secretário Regional (Grau V)", AccessRole.REGIONAL),
        ("Diretor de Divisão (Grau VI)", AccessRole.DIVISION_DIRECTOR),
        ("Sub Diretor (Grau VI)", AccessRole.DIVISION_DIRECTOR),
        ("Social Divisão (Grau VI)", AccessRole.DIVISION_SOCIAL),
        ("ADM Divisão (Grau VI)", AccessRole.DIVISION_ADMINISTRATION),
        ("Sargento (Grau VI)", AccessRole.MODERATOR),
    ],
)
def test_derive_role_grants_expected_role(label: str, role: AccessRole) -> None:
    decision = derive_role(label)

    assert decision.matched
    assert decision.apply({AccessRole.MODERATOR}) == {role}


def test_rank_and_file_grades_revoke_managed_roles() -> None:
    decision = derive_role("Soldado (Grau X)")

    assert decision.apply({AccessRole.REGIONAL, AccessRole.ADMIN}) == {AccessRole.ADMIN}


def test_admin_role_is_never_touched() -> None:
    decision = derive_role("Diretor de Divisão (Grau VI)")

    assert decision.apply({AccessRole.ADMIN, AccessRole.REGIONAL}) == {
        AccessRole.ADMIN,
        AccessRole.DIVISION_DIRECTOR,
    }


@pytest.mark.parametrize("label", ["Presidente (Grau I)", "Prospect", ""])
def test_unmatched_labels_leave_roles_untouched(label: str) -> None:
    decision = derive_role(label)
    current = {AccessRole.REGIONAL_DIRECTOR, AccessRole.ADMIN}

    assert not decision.matched
    assert decision.apply(current) == current


def test_custom_rule_table() -> None:
    rules = (RoleRule(name="all-fives", grades=range(5, 6), role=AccessRole.MODERATOR),)

    assert derive_role("Diretor Regional (Grau V)", rules).apply(set()) == {AccessRole.MODERATOR}
    assert not derive_role("Diretor de Divisão (Grau VI)", rules).matched
