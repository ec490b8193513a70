"""Pydantic models describing the JSON roster and decision documents.

Rows accept both the English field names and the column names used by the upstream
spreadsheet export (``id_integrante``, ``divisao_texto`` and friends).
"""

from __future__ import annotations

import re
from datetime import date, datetime
from logging import getLogger
from typing import Final
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

log = getLogger(__name__)

_TRUE_VALUES: Final = frozenset({"S", "SIM", "Y", "YES", "X", "1", "TRUE", "V"})
_FALSE_VALUES: Final = frozenset({"", "N", "NAO", "NÃO", "NO", "0", "FALSE", "F", "-"})
_BR_DATE: Final = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")

_REASON_ALIASES: Final[dict[str, str]] = {
    "transferido": "transferred",
    "falecido": "deceased",
    "desligado": "resigned",
    "expulso": "expelled",
    "afastado": "leave-of-absence",
    "promovido": "promoted",
    "outro": "other",
}


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


def _aliases(*names: str) -> AliasChoices:
    return AliasChoices(*names)


class RosterBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class RosterRowPayload(RosterBaseModel):
    external_id: int | None = Field(
        default=None,
        validation_alias=_aliases("external_id", "id_integrante", "id"),
    )
    name: str = Field(validation_alias=_aliases("name", "nome_colete", "nome"))
    command_label: str = Field(
        default="", validation_alias=_aliases("command_label", "comando_texto", "comando")
    )
    region_label: str = Field(
        default="", validation_alias=_aliases("region_label", "regional_texto", "regional")
    )
    division_label: str = Field(
        default="", validation_alias=_aliases("division_label", "divisao_texto", "divisao")
    )
    rank_label: str = Field(
        default="", validation_alias=_aliases("rank_label", "cargo_grau_texto", "cargo")
    )
    training_label: str | None = Field(
        default=None, validation_alias=_aliases("training_label", "cargo_estagio", "estagio")
    )
    sergeant_at_arms: bool = Field(
        default=False, validation_alias=_aliases("sergeant_at_arms", "sgt_armas")
    )
    skull: bool = Field(default=False, validation_alias=_aliases("skull", "caveira"))
    skull_alternate: bool = Field(
        default=False, validation_alias=_aliases("skull_alternate", "caveira_suplente")
    )
    outrider: bool = Field(default=False, validation_alias=_aliases("outrider", "batedor"))
    cub: bool = Field(default=False, validation_alias=_aliases("cub", "ursinho"))
    wolf: bool = Field(default=False, validation_alias=_aliases("wolf", "lobo"))
    has_motorcycle: bool = Field(
        default=False, validation_alias=_aliases("has_motorcycle", "tem_moto")
    )
    has_car: bool = Field(default=False, validation_alias=_aliases("has_car", "tem_carro"))
    entry_date: date | None = Field(
        default=None, validation_alias=_aliases("entry_date", "data_entrada")
    )

    @field_validator("external_id", mode="before")
    @classmethod
    def _parse_external_id(cls, value: object) -> int | None:
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, int):
            return value
        if isinstance(value, float):
            return int(value) if value.is_integer() else None
        if isinstance(value, str):
            stripped = value.strip()
            try:
                return int(stripped)
            except ValueError:
                return None
        return None

    @field_validator(
        "sergeant_at_arms",
        "skull",
        "skull_alternate",
        "outrider",
        "cub",
        "wolf",
        "has_motorcycle",
        "has_car",
        mode="before",
    )
    @classmethod
    def _parse_flag(cls, value: object) -> bool:
        if value is None:
            return False
        if isinstance(value, bool):
            return value
        if isinstance(value, int | float):
            return value != 0
        text = str(value).strip().upper()
        if text in _TRUE_VALUES:
            return True
        if text not in _FALSE_VALUES:
            log.debug("Treating unrecognised flag value %r as false", value)
        return False

    @field_validator("entry_date", mode="before")
    @classmethod
    def _parse_entry_date(cls, value: object) -> date | None:
        if value is None or isinstance(value, date):
            return value
        text = str(value).strip()
        if not text:
            return None
        match = _BR_DATE.match(text)
        try:
            if match:
                day, month, year = (int(part) for part in match.groups())
                return date(year, month, day)
            return datetime.fromisoformat(text).date()
        except ValueError:
            log.warning("Ignoring unparseable entry date %r", value)
            return None

    @field_validator("command_label", "region_label", "division_label", "rank_label", mode="before")
    @classmethod
    def _none_to_empty(cls, value: object) -> object:
        return "" if value is None else value

    _normalize_training = field_validator("training_label", mode="before")(_blank_to_none)


class RosterSourcePayload(RosterBaseModel):
    name: str
    rows: int = Field(ge=0)


class RosterDocumentPayload(RosterBaseModel):
    source_a: RosterSourcePayload
    source_b: RosterSourcePayload
    records: list[RosterRowPayload]


class RemovalDecisionPayload(RosterBaseModel):
    external_id: int = Field(validation_alias=_aliases("external_id", "id_integrante"))
    reason: str = Field(validation_alias=_aliases("reason", "motivo"))
    note: str | None = Field(default=None, validation_alias=_aliases("note", "observacao"))
    destination_rank_id: UUID | None = None
    destination_region_id: UUID | None = None
    destination_division_id: UUID | None = None

    @field_validator("reason", mode="before")
    @classmethod
    def _translate_reason(cls, value: object) -> object:
        if isinstance(value, str):
            text = value.strip().lower()
            return _REASON_ALIASES.get(text, text)
        return value

    _normalize_note = field_validator("note", mode="before")(_blank_to_none)


class RemovalDecisionDocumentPayload(RosterBaseModel):
    decisions: list[RemovalDecisionPayload]
