"""Rank label parsing and grade arithmetic."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Final

UNKNOWN_GRADE: Final[int] = 999

_ROMAN_GRADES: Final[dict[str, int]] = {
    "I": 1,
    "II": 2,
    "III": 3,
    "IV": 4,
    "V": 5,
    "VI": 6,
    "VII": 7,
    "VIII": 8,
    "IX": 9,
    "X": 10,
    "XI": 11,
    "XII": 12,
}

_PARENTHESISED: Final = re.compile(r"^(.+?)\s*\(\s*grau\s+([ivxlc]+)\s*\)\s*$", re.IGNORECASE)
_TRAILING: Final = re.compile(r"^(.+?)\s+grau\s+([ivxlc]+)\s*$", re.IGNORECASE)


@dataclass(frozen=True, slots=True)
class RankLabel:
    """A rank label split into its title and roman grade."""

    title: str
    grade: str | None = None

    @property
    def grade_number(self) -> int:
        return grade_number(self.grade)


def parse_rank_label(text: str | None) -> RankLabel:
    """Split ``"Director (Grau V)"`` or ``"Director Grau V"`` into title and grade."""

    if not text or not text.strip():
        return RankLabel(title="")
    cleaned = text.strip()
    for pattern in (_PARENTHESISED, _TRAILING):
        match = pattern.match(cleaned)
        if match:
            return RankLabel(title=match.group(1).strip(), grade=match.group(2).upper())
    return RankLabel(title=cleaned)


def grade_number(grade: str | None) -> int:
    if not grade:
        return UNKNOWN_GRADE
    return _ROMAN_GRADES.get(grade.strip().upper(), UNKNOWN_GRADE)
