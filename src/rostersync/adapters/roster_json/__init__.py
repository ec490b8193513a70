"""JSON adapter for merged roster exports and removal decisions."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import ValidationError as PydanticValidationError

from rostersync.domain.errors import ValidationError

from .schema import RemovalDecisionDocumentPayload, RosterDocumentPayload
from .translator import translate_decisions, translate_roster

if TYPE_CHECKING:
    from rostersync.domain.reconciliation import RemovalDecision, RosterImport


def _read(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ValidationError(f"Unable to read {path}: {exc}") from exc


def parse_roster_document(text: str) -> RosterImport:
    try:
        payload = RosterDocumentPayload.model_validate_json(text)
    except PydanticValidationError as exc:
        raise ValidationError(f"Invalid roster document: {exc}") from exc
    return translate_roster(payload)


def parse_removal_decisions(text: str) -> list[RemovalDecision]:
    try:
        payload = RemovalDecisionDocumentPayload.model_validate_json(text)
    except PydanticValidationError as exc:
        raise ValidationError(f"Invalid decision document: {exc}") from exc
    return translate_decisions(payload)


def load_roster_document(path: str | Path) -> RosterImport:
    return parse_roster_document(_read(Path(path)))


def load_removal_decisions(path: str | Path) -> list[RemovalDecision]:
    return parse_removal_decisions(_read(Path(path)))


__all__ = [
    "load_removal_decisions",
    "load_roster_document",
    "parse_removal_decisions",
    "parse_roster_document",
]
