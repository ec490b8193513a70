"""Translate JSON roster payloads into domain objects."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from rostersync.domain.errors import ValidationError
from rostersync.domain.model import RemovalReason, RosterRecord, TransferLookup
from rostersync.domain.reconciliation import RemovalDecision, RosterImport, SourceFileInfo

if TYPE_CHECKING:
    from .schema import (
        RemovalDecisionDocumentPayload,
        RemovalDecisionPayload,
        RosterDocumentPayload,
        RosterRowPayload,
    )

log = getLogger(__name__)


def translate_row(payload: RosterRowPayload) -> RosterRecord:
    return RosterRecord(
        external_id=payload.external_id,
        name=payload.name.strip(),
        command_label=payload.command_label.strip(),
        region_label=payload.region_label.strip(),
        division_label=payload.division_label.strip(),
        rank_label=payload.rank_label.strip(),
        training_label=payload.training_label,
        sergeant_at_arms=payload.sergeant_at_arms,
        skull=payload.skull,
        skull_alternate=payload.skull_alternate,
        outrider=payload.outrider,
        cub=payload.cub,
        wolf=payload.wolf,
        has_motorcycle=payload.has_motorcycle,
        has_car=payload.has_car,
        entry_date=payload.entry_date,
    )


def translate_roster(payload: RosterDocumentPayload) -> RosterImport:
    records = tuple(translate_row(row) for row in payload.records)
    log.info(
        "Loaded %d merged rows from %s (%d rows) and %s (%d rows)",
        len(records),
        payload.source_a.name,
        payload.source_a.rows,
        payload.source_b.name,
        payload.source_b.rows,
    )
    return RosterImport(
        records=records,
        source_a=SourceFileInfo(payload.source_a.name, payload.source_a.rows),
        source_b=SourceFileInfo(payload.source_b.name, payload.source_b.rows),
    )


def translate_decision(payload: RemovalDecisionPayload) -> RemovalDecision:
    try:
        reason = RemovalReason(payload.reason)
    except ValueError as exc:
        raise ValidationError(
            f"Unknown removal reason {payload.reason!r} for member {payload.external_id}"
        ) from exc

    lookup = TransferLookup.NOT_STARTED
    if reason is RemovalReason.TRANSFERRED and payload.destination_region_id is not None:
        lookup = TransferLookup.FOUND
    return RemovalDecision(
        external_id=payload.external_id,
        reason=reason,
        note=payload.note,
        destination_rank_id=payload.destination_rank_id,
        destination_region_id=payload.destination_region_id,
        destination_division_id=payload.destination_division_id,
        transfer_lookup=lookup,
    )


def translate_decisions(payload: RemovalDecisionDocumentPayload) -> list[RemovalDecision]:
    return [translate_decision(item) for item in payload.decisions]
