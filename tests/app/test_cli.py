from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any
from uuid import UUID, uuid4

import pytest

from rostersync.domain.lote import Lote
from rostersync.domain.model import PendingDeltaEntry, PendingDeltaType
from rostersync.domain.reconciliation import (
    CommitRequest,
    CommitResult,
    DeltaClassifier,
    DeltaResult,
    RosterImport,
)
from rostersync.ui import cli
from tests.helpers.roster import make_member

if TYPE_CHECKING:
    from pathlib import Path

OPERATOR = "6f1c2a8e-1d0b-4a55-9a43-3c1f0f7f2b11"


def _write_roster(path: Path) -> Path:
    rows = [
        {
            "id_integrante": external_id,
            "nome_colete": f"Member {external_id}",
            "comando_texto": "Comando Central",
            "regional_texto": "Regional Norte",
            "divisao_texto": "Divisão Vale do Sol",
            "cargo_grau_texto": "Soldado (Grau X)",
            "tem_moto": "S",
            "data_entrada": "17/05/2020",
        }
        for external_id in (1, 2, 50)
    ]
    document = {
        "source_a": {"name": "a.xlsx", "rows": 2},
        "source_b": {"name": "b.xlsx", "rows": 1},
        "records": rows,
    }
    path.write_text(json.dumps(document), encoding="utf-8")
    return path


def _fake_start_lote(roster: RosterImport) -> Lote:
    active = [make_member(1), make_member(2), make_member(3)]
    lote = Lote.start()
    lote.process_files(
        roster.source_a,
        roster.source_b,
        list(roster.records),
        active,
        classifier=DeltaClassifier(),
    )
    return lote


class RecordingCommitter:
    def __init__(self) -> None:
        self.calls: list[tuple[CommitRequest, bool]] = []

    def __call__(self, request: CommitRequest, *, dry_run: bool) -> CommitResult:
        self.calls.append((request, dry_run))
        return CommitResult(inserted_count=len(request.new_records))


@pytest.fixture
def committer(monkeypatch: pytest.MonkeyPatch) -> RecordingCommitter:
    recording = RecordingCommitter()
    monkeypatch.setattr(cli, "start_lote", _fake_start_lote)
    monkeypatch.setattr(cli, "build_committer", lambda: recording)
    return recording


def test_import_simulates_by_default(tmp_path: Path, committer: RecordingCommitter) -> None:
    roster = _write_roster(tmp_path / "roster.json")
    decisions = tmp_path / "decisions.json"
    decisions.write_text(
        json.dumps({"decisions": [{"external_id": 3, "motivo": "desligado"}]}),
        encoding="utf-8",
    )

    cli.main(["import", str(roster), "--operator", OPERATOR, "--decisions", str(decisions)])

    request, dry_run = committer.calls[0]
    assert dry_run is True
    assert request.operator_id == UUID(OPERATOR)
    assert [record.external_id for record in request.new_records] == [50]
    assert [d.external_id for d in request.removals.inactivate] == [3]


def test_import_apply_runs_for_real(tmp_path: Path, committer: RecordingCommitter) -> None:
    roster = _write_roster(tmp_path / "roster.json")

    cli.main(
        ["import", str(roster), "--operator", OPERATOR, "--apply", "--deselect-removed"]
    )

    request, dry_run = committer.calls[0]
    assert dry_run is False
    assert len(request.removals) == 0


def test_import_without_removal_decision_is_rejected(
    tmp_path: Path,
    committer: RecordingCommitter,
) -> None:
    roster = _write_roster(tmp_path / "roster.json")

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["import", str(roster), "--operator", OPERATOR])

    assert excinfo.value.code == 2
    assert committer.calls == []


def test_invalid_operator_id_exits_with_validation_code(
    tmp_path: Path,
    committer: RecordingCommitter,
) -> None:
    roster = _write_roster(tmp_path / "roster.json")

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["import", str(roster), "--operator", "not-a-uuid"])

    assert excinfo.value.code == 2
    assert committer.calls == []


def test_unreadable_roster_exits_with_validation_code(tmp_path: Path) -> None:
    broken = tmp_path / "broken.json"
    broken.write_text("{", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["preview", str(broken)])

    assert excinfo.value.code == 2


def test_preview_classifies_loaded_roster(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    captured: dict[str, Any] = {}

    def fake_preview(roster: RosterImport) -> DeltaResult:
        captured["roster"] = roster
        return DeltaResult(detected_region="Regional Norte")

    monkeypatch.setattr(cli, "preview_roster", fake_preview)

    cli.main(["preview", str(_write_roster(tmp_path / "roster.json"))])

    assert [record.external_id for record in captured["roster"].records] == [1, 2, 50]


def test_preview_export_writes_rows(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli, "start_lote", _fake_start_lote)
    export = tmp_path / "export.json"

    cli.main(["preview", str(_write_roster(tmp_path / "roster.json")), "--export", str(export)])

    rows = json.loads(export.read_text(encoding="utf-8"))
    assert [(row["category"], row["external_id"]) for row in rows] == [
        ("new", 50),
        ("removed", 3),
    ]


def test_unexpected_failure_exits_with_fatal_code(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    def failing_preview(roster: RosterImport) -> DeltaResult:
        raise RuntimeError(f"database unavailable for {len(roster.records)} rows")

    monkeypatch.setattr(cli, "preview_roster", failing_preview)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["preview", str(_write_roster(tmp_path / "roster.json"))])

    assert excinfo.value.code == 1


def test_pending_commands(monkeypatch: pytest.MonkeyPatch) -> None:
    entry = PendingDeltaEntry(
        external_id=50,
        name="Member 50",
        delta_type=PendingDeltaType.NEW_ACTIVE,
    )
    resolved: dict[str, Any] = {}

    def fake_resolve(entry_id: UUID, *, operator: str, note: str | None) -> PendingDeltaEntry:
        resolved.update(entry_id=entry_id, operator=operator, note=note)
        return entry

    monkeypatch.setattr(cli, "list_pending_deltas", lambda: [entry])
    monkeypatch.setattr(cli, "resolve_pending_delta", fake_resolve)

    cli.main(["pending", "list"])
    entry_id = uuid4()
    cli.main(["pending", "resolve", str(entry_id), "--operator", "reviewer", "--note", "ok"])

    assert resolved == {"entry_id": entry_id, "operator": "reviewer", "note": "ok"}


def test_init_db_starts_adapter(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[bool] = []
    monkeypatch.setattr(cli, "startup", lambda: calls.append(True))

    cli.main(["init-db"])

    assert calls == [True]
