"""Resolve free-text region/division labels to catalog identifiers."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .normalize import is_region_level_label, normalize_hierarchy_label

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from uuid import UUID

    from rostersync.domain.model import Division, Region
    from rostersync.domain.ports import HierarchyCatalog

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class HierarchyResolution:
    division_id: UUID | None = None
    region_id: UUID | None = None

    @property
    def resolved(self) -> bool:
        return self.division_id is not None or self.region_id is not None


UNRESOLVED = HierarchyResolution()


@dataclass(slots=True)
class HierarchyCache:
    """Per-run memo of resolutions and the catalog snapshot they were computed from."""

    resolutions: dict[tuple[str, str], HierarchyResolution] = field(default_factory=dict)
    unresolved: list[str] = field(default_factory=list)
    regions: tuple[Region, ...] | None = None
    divisions: tuple[Division, ...] | None = None

    def note_unresolved(self, label: str) -> None:
        if label not in self.unresolved:
            self.unresolved.append(label)


def _keys(name: str, ascii_name: str | None) -> set[str]:
    keys = {normalize_hierarchy_label(name), normalize_hierarchy_label(ascii_name)}
    keys.discard("")
    return keys


def _overlaps(key: str, candidates: Iterable[str]) -> bool:
    return any(key in candidate or candidate in key for candidate in candidates)


def match_region(key: str, regions: Sequence[Region]) -> Region | None:
    """Exact key match first, then substring containment in either direction."""

    if not key:
        return None
    for region in regions:
        if key in _keys(region.name, region.ascii_name):
            return region
    for region in regions:
        if _overlaps(key, _keys(region.name, region.ascii_name)):
            return region
    return None


def match_division(
    key: str,
    divisions: Sequence[Division],
    *,
    region_id: UUID | None = None,
) -> Division | None:
    """Match ``key`` against division names; ties prefer ``region_id``."""

    if not key:
        return None
    exact = [d for d in divisions if key in _keys(d.name, d.ascii_name)]
    candidates = exact or [d for d in divisions if _overlaps(key, _keys(d.name, d.ascii_name))]
    if not candidates:
        return None
    if region_id is not None:
        for division in candidates:
            if division.region_id == region_id:
                return division
    return candidates[0]


class HierarchyResolver:
    """Map division/region labels to catalog ids, caching per :class:`HierarchyCache`."""

    def __init__(self, catalog: HierarchyCatalog) -> None:
        self.catalog = catalog

    def resolve(
        self,
        division_label: str | None,
        region_label: str | None = None,
        *,
        cache: HierarchyCache,
    ) -> HierarchyResolution:
        division_key = normalize_hierarchy_label(division_label)
        region_key = normalize_hierarchy_label(region_label)
        cache_key = (division_key, region_key)
        if cache_key in cache.resolutions:
            return cache.resolutions[cache_key]

        resolution = self._resolve_uncached(division_label, division_key, region_key, cache)
        cache.resolutions[cache_key] = resolution
        if not resolution.resolved:
            label = (division_label or "").strip() or "<empty>"
            log.warning(
                "Unresolved hierarchy for division %r (region %r)",
                label,
                region_label,
            )
            cache.note_unresolved(label)
        return resolution

    def _resolve_uncached(
        self,
        division_label: str | None,
        division_key: str,
        region_key: str,
        cache: HierarchyCache,
    ) -> HierarchyResolution:
        if not division_key:
            return UNRESOLVED
        regions = self._regions(cache)

        if is_region_level_label(division_label):
            region = match_region(division_key, regions)
            return HierarchyResolution(region_id=region.id) if region else UNRESOLVED

        hint = match_region(region_key, regions)
        division = match_division(
            division_key,
            self._divisions(cache),
            region_id=hint.id if hint else None,
        )
        if division is None:
            return UNRESOLVED
        return HierarchyResolution(division_id=division.id, region_id=division.region_id)

    def _regions(self, cache: HierarchyCache) -> tuple[Region, ...]:
        if cache.regions is None:
            cache.regions = tuple(self.catalog.list_regions())
        return cache.regions

    def _divisions(self, cache: HierarchyCache) -> tuple[Division, ...]:
        if cache.divisions is None:
            cache.divisions = tuple(self.catalog.list_divisions())
        return cache.divisions
