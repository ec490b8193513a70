"""Normalized rows of an uploaded roster."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from datetime import date

TEXT_FIELDS: Final[tuple[str, ...]] = (
    "name",
    "command_label",
    "region_label",
    "division_label",
    "rank_label",
    "training_label",
)
FLAG_FIELDS: Final[tuple[str, ...]] = (
    "sergeant_at_arms",
    "skull",
    "skull_alternate",
    "outrider",
    "cub",
    "wolf",
    "has_motorcycle",
    "has_car",
)
DATE_FIELDS: Final[tuple[str, ...]] = ("entry_date",)

# Attributes shared by roster rows and stored members, in change-log order.
COMPARABLE_FIELDS: Final[tuple[str, ...]] = TEXT_FIELDS + FLAG_FIELDS + DATE_FIELDS


@dataclass(frozen=True, slots=True, kw_only=True)
class RosterRecord:
    """One member row as delivered by the upstream roster export."""

    external_id: int | None
    name: str
    command_label: str = ""
    region_label: str = ""
    division_label: str = ""
    rank_label: str = ""
    training_label: str | None = None
    sergeant_at_arms: bool = False
    skull: bool = False
    skull_alternate: bool = False
    outrider: bool = False
    cub: bool = False
    wolf: bool = False
    has_motorcycle: bool = False
    has_car: bool = False
    entry_date: date | None = None

    @property
    def has_valid_id(self) -> bool:
        return self.external_id is not None and self.external_id > 0
