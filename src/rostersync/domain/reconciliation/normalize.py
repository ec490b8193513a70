"""Text normalization used for comparisons and hierarchy matching.

Two flavours exist:
- ``normalize_for_comparison`` folds a roster value for change detection
- ``normalize_hierarchy_label`` additionally strips organizational prefixes and
  decorations so that labels from different exports collapse onto one key
"""

from __future__ import annotations

import re
import unicodedata
from datetime import date
from typing import Any, Final

_WHITESPACE: Final = re.compile(r"\s+")
_HIERARCHY_PREFIX: Final = re.compile(r"^(?:comando\s+regional|regional|divisao)\s+")
_STATE_SUFFIX: Final = re.compile(r"\s+-\s+[a-z]{2}$")
_TRAILING_DASH: Final = re.compile(r"\s*-\s*$")
_PARENTHETICAL_SUFFIX: Final = re.compile(r"\s*\([^)]*\)\s*$")
_REGION_LEVEL: Final = re.compile(r"^(?:divisao\s+)?regional\b")


def strip_diacritics(text: str) -> str:
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(char for char in decomposed if not unicodedata.combining(char))


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def normalize_for_comparison(value: str | None) -> str:
    """Uppercase, accent-free, whitespace-collapsed form of ``value``."""

    if not value:
        return ""
    return collapse_whitespace(strip_diacritics(value).upper())


def _fold(value: str | None) -> str:
    if not value:
        return ""
    return collapse_whitespace(strip_diacritics(value).lower())


def normalize_hierarchy_label(value: str | None) -> str:
    """Return the matching key for a region or division label.

    >>> normalize_hierarchy_label("Divisão Vale do Sol - SP")
    'vale do sol'
    >>> normalize_hierarchy_label("COMANDO REGIONAL Norte (antiga)")
    'norte'
    """

    text = _fold(value)
    text = _HIERARCHY_PREFIX.sub("", text)
    text = _PARENTHETICAL_SUFFIX.sub("", text)
    text = _STATE_SUFFIX.sub("", text)
    text = _TRAILING_DASH.sub("", text)
    return collapse_whitespace(text)


def is_region_level_label(value: str | None) -> bool:
    """Whether a division label actually names a region (regional staff)."""

    return _REGION_LEVEL.match(_fold(value)) is not None


def comparable_value(value: Any) -> Any:
    """Fold ``value`` so that semantically equal roster values compare equal."""

    if value is None or isinstance(value, str):
        return normalize_for_comparison(value)
    if isinstance(value, bool):
        return value
    if isinstance(value, date):
        return value.isoformat()
    return value


def values_differ(left: Any, right: Any) -> bool:
    return comparable_value(left) != comparable_value(right)


def stringify_value(value: Any) -> str | None:
    """Render a field value for the change log."""

    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, date):
        return value.isoformat()
    return str(value)
