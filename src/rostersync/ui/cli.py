from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING, Any
from uuid import UUID

from dotenv import load_dotenv

from rostersync.adapters.roster_json import load_removal_decisions, load_roster_document
from rostersync.adapters.sqlalchemy.unit_of_work import startup
from rostersync.app import (
    build_committer,
    list_pending_deltas,
    preview_roster,
    resolve_pending_delta,
    start_lote,
)
from rostersync.config import configure_logging
from rostersync.domain.errors import LoteStateError, ValidationError
from rostersync.domain.model import DeltaCategory

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from rostersync.domain.lote import Lote
    from rostersync.domain.reconciliation import DeltaResult, RemovalDecision, RosterImport

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile roster exports with stored members")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("init-db", help="Create or upgrade the database schema")

    preview = subparsers.add_parser("preview", help="Classify a roster without writing")
    preview.add_argument("roster", type=Path, help="Merged roster JSON document")
    preview.add_argument(
        "--export",
        type=Path,
        help="Write the classified rows as JSON to this path",
    )

    run_import = subparsers.add_parser("import", help="Review and commit a roster import")
    run_import.add_argument("roster", type=Path, help="Merged roster JSON document")
    run_import.add_argument(
        "--operator",
        type=str,
        required=True,
        help="Account id of the administrator running the import",
    )
    run_import.add_argument(
        "--decisions",
        type=Path,
        help="JSON document with one removal decision per removed member",
    )
    run_import.add_argument(
        "--apply",
        action="store_true",
        help="Persist the changes (default is a simulation)",
    )
    run_import.add_argument(
        "--deselect-removed",
        action="store_true",
        help="Leave removed members out of this import",
    )

    pending = subparsers.add_parser("pending", help="Anomaly queue commands")
    pending_sub = pending.add_subparsers(dest="pending_command", required=True)
    pending_sub.add_parser("list", help="List pending anomalies")
    pending_resolve = pending_sub.add_parser("resolve", help="Resolve one anomaly")
    pending_resolve.add_argument("entry_id", type=str, help="Id of the pending entry")
    pending_resolve.add_argument(
        "--operator",
        type=str,
        required=True,
        help="Name recorded as the resolver",
    )
    pending_resolve.add_argument("--note", type=str, help="Optional resolution note")

    return parser.parse_args(list(argv))


def _parse_uuid(value: str) -> UUID:
    try:
        return UUID(value)
    except ValueError as exc:
        raise ValueError(f"Invalid UUID: {value}") from exc


def _log_delta(delta: DeltaResult) -> None:
    stats = delta.stats
    log.info(
        "Region %r: %d rows (%d valid, %d invalid, %d duplicates), %d active in region",
        delta.detected_region,
        stats.total_rows,
        stats.valid_rows,
        stats.invalid_rows,
        stats.duplicate_rows,
        stats.active_in_region,
    )
    log.info(
        "new=%d updated=%d unchanged=%d removed=%d transferred=%d",
        len(delta.new),
        len(delta.updated),
        delta.no_change_count,
        len(delta.removed),
        len(delta.transferred),
    )
    for item in delta.transferred:
        log.info(
            "Member %s moved to %s / %s",
            item.external_id,
            item.destination_region,
            item.destination_division,
        )


def _write_export(path: Path, rows: list[dict[str, Any]]) -> None:
    path.write_text(json.dumps(rows, indent=2, ensure_ascii=False), encoding="utf-8")
    log.info("Wrote %d rows to %s", len(rows), path)


def _run_import(
    roster: RosterImport,
    *,
    operator_id: UUID,
    decisions: list[RemovalDecision],
    apply: bool,
    include_removed: bool,
) -> Lote:
    lote = start_lote(roster)
    if lote.delta is not None:
        _log_delta(lote.delta)
    lote.toggle_all(DeltaCategory.NEW, select=True)
    lote.toggle_all(DeltaCategory.UPDATED, select=True)
    lote.toggle_all(DeltaCategory.REMOVED, select=include_removed)
    for decision in decisions:
        lote.define_removal_reason(decision)
    if apply:
        lote.toggle_simulation_mode()
    result = lote.execute_import(operator_id, build_committer())
    log.info(
        "%s %s: %s (snapshot %s)",
        "Simulated" if lote.simulated else "Imported",
        lote.id,
        result.summary,
        result.snapshot_id,
    )
    for entry in result.anomalies:
        log.info("Anomaly %s for member %s (%s)", entry.delta_type, entry.external_id, entry.name)
    return lote


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    parsed_args: argparse.Namespace
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    roster: RosterImport | None = None
    decisions: list[RemovalDecision] = []
    try:
        parsed_args = _parse_args(args_list)
        if parsed_args.verbose:
            configure_logging(level=logging.DEBUG, force=True)
        if parsed_args.command in {"preview", "import"}:
            roster = load_roster_document(parsed_args.roster)
        if parsed_args.command == "import" and parsed_args.decisions is not None:
            decisions = load_removal_decisions(parsed_args.decisions)
    except (ValueError, ValidationError):
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "init-db":
            startup()
            log.info("Database schema is up to date")
        elif parsed_args.command == "preview" and roster is not None:
            if parsed_args.export is not None:
                lote = start_lote(roster)
                for category in DeltaCategory:
                    lote.toggle_all(category, select=True)
                if lote.delta is not None:
                    _log_delta(lote.delta)
                _write_export(parsed_args.export, lote.export_rows())
            else:
                _log_delta(preview_roster(roster))
        elif parsed_args.command == "import" and roster is not None:
            _run_import(
                roster,
                operator_id=_parse_uuid(parsed_args.operator),
                decisions=decisions,
                apply=parsed_args.apply,
                include_removed=not parsed_args.deselect_removed,
            )
        elif parsed_args.command == "pending" and parsed_args.pending_command == "list":
            entries = list_pending_deltas()
            for entry in entries:
                log.info(
                    "%s %s member=%s name=%r division=%r priority=%d",
                    entry.id,
                    entry.delta_type,
                    entry.external_id,
                    entry.name,
                    entry.division_label,
                    entry.priority,
                )
            log.info("%d pending entries", len(entries))
        elif parsed_args.command == "pending" and parsed_args.pending_command == "resolve":
            entry = resolve_pending_delta(
                _parse_uuid(parsed_args.entry_id),
                operator=parsed_args.operator,
                note=parsed_args.note,
            )
            log.info("Resolved %s", entry.id)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
    except (ValueError, ValidationError, LoteStateError):
        log.exception("Import rejected")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error during reconciliation")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
