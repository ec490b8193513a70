"""Organizational catalog entries: regions, divisions and ranks."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .base import new_id

if TYPE_CHECKING:
    from uuid import UUID


@dataclass(eq=False, kw_only=True)
class Region:
    id: UUID = field(default_factory=new_id)
    name: str
    ascii_name: str | None = None


@dataclass(eq=False, kw_only=True)
class Division:
    id: UUID = field(default_factory=new_id)
    name: str
    region_id: UUID
    ascii_name: str | None = None


@dataclass(eq=False, kw_only=True)
class Rank:
    id: UUID = field(default_factory=new_id)
    name: str
    grade: str | None = None
