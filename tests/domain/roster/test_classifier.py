from __future__ import annotations

import pytest

from rostersync.domain.errors import SanityGuardError, ValidationError
from rostersync.domain.model import ActiveMember
from rostersync.domain.reconciliation import (
    DeltaClassifier,
    ReconciliationPolicy,
    SourceFileInfo,
    classify_roster,
    detect_region,
)
from tests.helpers.roster import (
    COAST,
    HIGHLANDS,
    NORTH,
    SOUTH,
    make_member,
    make_record,
    region_members,
)


def test_example_scenario_new_unchanged_and_transferred() -> None:
    active = [
        make_member(502),
        make_member(503, division_label=HIGHLANDS),
        make_member(503, region_label=SOUTH, division_label=COAST),
    ]
    records = [make_record(501), make_record(502)]

    delta = classify_roster(records, active)

    assert delta.detected_region == NORTH
    assert [record.external_id for record in delta.new] == [501]
    assert delta.updated == []
    assert delta.no_change_count == 1
    assert delta.removed == []
    assert len(delta.transferred) == 1
    transfer = delta.transferred[0]
    assert transfer.external_id == 503
    assert transfer.destination_region == SOUTH
    assert transfer.destination_division == COAST


def test_changed_fields_are_listed_in_order() -> None:
    active = [make_member(10)]
    records = [make_record(10, rank_label="Diretor de Divisão (Grau VI)", has_car=True)]

    delta = classify_roster(records, active)

    assert len(delta.updated) == 1
    assert delta.updated[0].changed_fields == ("rank_label", "has_car")
    assert delta.updated[0].before is active[0]


def test_accent_and_case_changes_do_not_count_as_updates() -> None:
    active = [make_member(10, name="João da Silva")]
    records = [make_record(10, name="JOAO DA SILVA")]

    delta = classify_roster(records, active)

    assert delta.updated == []
    assert delta.no_change_count == 1


def test_partition_completeness() -> None:
    active = region_members(5, start=1)
    records = [
        make_record(1),
        make_record(2, name="Renamed"),
        make_record(3),
        make_record(40),
        make_record(41),
    ]

    delta = classify_roster(records, active)

    new_ids = {record.external_id for record in delta.new}
    updated_ids = {item.external_id for item in delta.updated}
    assert new_ids == {40, 41}
    assert updated_ids == {2}
    assert not new_ids & updated_ids
    assert len(new_ids) + len(updated_ids) + delta.no_change_count == len(records)
    assert {member.external_id for member in delta.removed} == {4, 5}


def test_removed_and_transferred_are_disjoint() -> None:
    active = [
        *region_members(3, start=1),
        make_member(2, region_label=SOUTH, division_label=COAST),
    ]
    records = [make_record(1)]

    delta = classify_roster(records, active)

    removed = {member.external_id for member in delta.removed}
    assert removed == {3}
    assert delta.transferred_ids == frozenset({2})
    assert not removed & delta.transferred_ids


def test_inactive_members_are_ignored() -> None:
    active = [make_member(7, active=False)]

    delta = classify_roster([make_record(7)], active)

    assert [record.external_id for record in delta.new] == [7]


def test_guard_trips_when_almost_everyone_disappears() -> None:
    active = region_members(20, start=1)

    with pytest.raises(SanityGuardError) as excinfo:
        classify_roster([make_record(1)], active)

    assert excinfo.value.removed == 19
    assert excinfo.value.active == 20
    assert all(member.active for member in active)


def test_guard_ignores_small_regions() -> None:
    active = region_members(10, start=1)

    delta = classify_roster([make_record(500)], active)

    assert len(delta.removed) == 10


def test_guard_threshold_is_configurable() -> None:
    active = region_members(20, start=1)
    classifier = DeltaClassifier(policy=ReconciliationPolicy(mass_removal_ratio=0.5))

    with pytest.raises(SanityGuardError):
        classifier.classify([make_record(i) for i in range(1, 11)], active)


def test_invalid_ids_are_rejected_and_counted() -> None:
    records = [make_record(None), make_record(0), make_record(-3), make_record(9)]

    delta = classify_roster(records, [])

    assert delta.stats.total_rows == 4
    assert delta.stats.invalid_rows == 3
    assert delta.stats.valid_rows == 1
    assert len(delta.stats.rejected) == 3
    assert [record.external_id for record in delta.new] == [9]


def test_import_without_valid_ids_is_rejected() -> None:
    with pytest.raises(ValidationError):
        classify_roster([make_record(None), make_record(0)], [])


def test_empty_import_is_rejected() -> None:
    with pytest.raises(ValidationError):
        classify_roster([], [])


def test_duplicate_rows_keep_last_occurrence() -> None:
    records = [make_record(5, name="First"), make_record(5, name="Second")]

    delta = classify_roster(records, [])

    assert delta.stats.duplicate_rows == 1
    assert [record.name for record in delta.new] == ["Second"]


def test_detected_region_uses_majority() -> None:
    records = [
        make_record(1, region_label=SOUTH),
        make_record(2, region_label="REGIONAL NORTE"),
        make_record(3),
    ]

    assert detect_region(records) == "REGIONAL NORTE"


def test_source_counts_are_reported() -> None:
    delta = classify_roster(
        [make_record(1)],
        [],
        sources=(SourceFileInfo("hierarchy.xlsx", 12), SourceFileInfo("attributes.xlsx", 11)),
    )

    assert delta.stats.source_a_rows == 12
    assert delta.stats.source_b_rows == 11


def test_reimport_after_applying_is_idempotent() -> None:
    active = region_members(4, start=1)
    records = [
        make_record(1),
        make_record(2, rank_label="Diretor de Divisão (Grau VI)"),
        make_record(3, has_car=True),
        make_record(4),
        make_record(60),
    ]
    delta = classify_roster(records, active)
    assert delta.new and delta.updated

    by_id = {member.external_id: member for member in active}
    for item in delta.updated:
        by_id[item.external_id].apply_record(item.after)
    stored: list[ActiveMember] = [
        *by_id.values(),
        *(ActiveMember.from_record(record) for record in delta.new),
    ]

    second = classify_roster(records, stored)

    assert second.new == []
    assert second.updated == []
    assert second.no_change_count == len(records)
