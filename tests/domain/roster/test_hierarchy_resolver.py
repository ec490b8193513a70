from __future__ import annotations

from rostersync.domain.model import Division
from rostersync.domain.reconciliation import HierarchyCache, HierarchyResolver
from tests.helpers.roster import FakeCatalog, build_catalog


def test_exact_division_match_returns_division_and_region() -> None:
    catalog = build_catalog()
    resolver = HierarchyResolver(FakeCatalog.from_catalog(catalog))

    resolution = resolver.resolve("DIVISAO VALE DO SOL - SP", cache=HierarchyCache())

    assert resolution.division_id == catalog.sun_valley.id
    assert resolution.region_id == catalog.north.id


def test_exact_match_on_ascii_alias() -> None:
    catalog = build_catalog()
    catalog.highlands.name = "Div. Serra"
    resolver = HierarchyResolver(FakeCatalog.from_catalog(catalog))

    resolution = resolver.resolve("Divisão Serra", cache=HierarchyCache())

    assert resolution.division_id == catalog.highlands.id


def test_substring_match_in_either_direction() -> None:
    catalog = build_catalog()
    catalog.highlands.name = "Divisão Serra Alta"
    catalog.highlands.ascii_name = None
    resolver = HierarchyResolver(FakeCatalog.from_catalog(catalog))

    resolution = resolver.resolve("Serra", cache=HierarchyCache())

    assert resolution.division_id == catalog.highlands.id


def test_region_level_label_resolves_only_region() -> None:
    catalog = build_catalog()
    resolver = HierarchyResolver(FakeCatalog.from_catalog(catalog))

    resolution = resolver.resolve("Regional Sul", cache=HierarchyCache())

    assert resolution.division_id is None
    assert resolution.region_id == catalog.south.id


def test_ambiguous_division_prefers_region_hint() -> None:
    catalog = build_catalog()
    twin = Division(name="Divisão Vale do Sol", region_id=catalog.south.id)
    fake = FakeCatalog.from_catalog(catalog)
    fake.divisions.append(twin)
    resolver = HierarchyResolver(fake)

    resolution = resolver.resolve("Vale do Sol", "Regional Sul", cache=HierarchyCache())

    assert resolution.division_id == twin.id
    assert resolution.region_id == catalog.south.id


def test_unresolved_label_is_recorded_not_raised() -> None:
    resolver = HierarchyResolver(FakeCatalog.from_catalog(build_catalog()))
    cache = HierarchyCache()

    resolution = resolver.resolve("Divisão Inexistente", cache=cache)

    assert not resolution.resolved
    assert cache.unresolved == ["Divisão Inexistente"]


def test_cache_avoids_repeated_catalog_reads() -> None:
    fake = FakeCatalog.from_catalog(build_catalog())
    resolver = HierarchyResolver(fake)
    cache = HierarchyCache()

    first = resolver.resolve("Divisão Serra", cache=cache)
    calls_after_first = fake.list_calls
    second = resolver.resolve("DIVISAO SERRA", cache=cache)
    resolver.resolve("Divisão Litoral", cache=cache)

    assert first == second
    assert fake.list_calls == calls_after_first


def test_fresh_cache_reads_catalog_again() -> None:
    fake = FakeCatalog.from_catalog(build_catalog())
    resolver = HierarchyResolver(fake)

    resolver.resolve("Divisão Serra", cache=HierarchyCache())
    calls = fake.list_calls
    resolver.resolve("Divisão Serra", cache=HierarchyCache())

    assert fake.list_calls == calls * 2
