from pathlib import Path
import json

import pytest

from conftest import make_report
from fund_tracker.cli import main


@pytest.fixture
def state_path(tmp_path: Path) -> Path:
    return tmp_path / "state.json"


def write_report(tmp_path: Path, name: str, **kwargs) -> str:
    path = tmp_path / name
    path.write_text(make_report(**kwargs), encoding="utf-8")
    return str(path)


def test_parse_dry_run(tmp_path: Path, state_path: Path, capsys):
    report = write_report(tmp_path, "report.txt")

    assert main(["--state", str(state_path), "parse", report]) == 0

    out = capsys.readouterr().out
    assert "As of: 2026-01-27" in out
    assert "NAVPU: ₱ 5.13" in out
    assert not state_path.exists()


def test_parse_failure_exits_nonzero(tmp_path: Path, state_path: Path, capsys):
    source = tmp_path / "bad.txt"
    source.write_text("Total Units 12", encoding="utf-8")

    assert main(["--state", str(state_path), "add-snapshot", str(source)]) == 1

    err = capsys.readouterr().err
    assert "Missing “as of” date" in err
    assert "Missing NAVPU" in err


def test_snapshot_event_and_breakdown_flow(tmp_path: Path, state_path: Path, capsys):
    first = write_report(tmp_path, "jan.txt", day="Jan 1, 2026", units="100", value="510.00", nav="5.10")
    second = write_report(tmp_path, "feb.txt", day="Feb 1, 2026", units="300", value="1530.00", nav="5.10")
    base = ["--state", str(state_path)]

    assert main(base + ["add-snapshot", first]) == 0
    assert main(base + ["add-snapshot", second]) == 0
    assert main(base + ["deposit", "2026-01-15", "1,020.00", "--note", "top-up"]) == 0
    assert main(base + ["dividend", "2026-01-20", "5", "--mode", "cash"]) == 0
    capsys.readouterr()

    assert main(base + ["breakdown"]) == 0
    out = capsys.readouterr().out
    assert "2026-01-01 → 2026-02-01: Deposit executed" in out

    saved = json.loads(state_path.read_text())
    assert len(saved["snapshots"]) == 2
    assert [event["type"] for event in saved["events"]] == ["deposit", "dividend"]


def test_rejected_deposit_exits_nonzero(state_path: Path, capsys):
    assert main(["--state", str(state_path), "deposit", "2026-01-15", "0"]) == 1
    assert "Enter a valid deposit amount" in capsys.readouterr().err


def test_export_import_round_trip(tmp_path: Path, state_path: Path):
    report = write_report(tmp_path, "report.txt")
    base = ["--state", str(state_path)]
    assert main(base + ["add-snapshot", report]) == 0

    exported = tmp_path / "export.json"
    csv_path = tmp_path / "export.csv"
    assert main(base + ["export-json", str(exported)]) == 0
    assert main(base + ["export-csv", str(csv_path)]) == 0
    assert csv_path.read_text().startswith("asOf,totalValue")

    other_state = tmp_path / "other.json"
    assert main(["--state", str(other_state), "import-json", str(exported)]) == 0
    assert len(json.loads(other_state.read_text())["snapshots"]) == 1

    assert main(base + ["delete-last"]) == 0
    assert json.loads(state_path.read_text())["snapshots"] == []


def test_unreadable_inputs_exit_nonzero(tmp_path: Path, state_path: Path, capsys):
    base = ["--state", str(state_path)]
    binary = tmp_path / "binary.txt"
    binary.write_bytes(b"\xff\xfe\x00as of")

    assert main(base + ["add-snapshot", str(tmp_path / "absent.txt")]) == 1
    assert main(base + ["import-json", str(tmp_path / "absent.json")]) == 1
    assert main(base + ["parse", str(binary)]) == 1

    err = capsys.readouterr().err
    assert err.count("Error:") == 3
    assert not state_path.exists()
