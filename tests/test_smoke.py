"""Smoke tests for the command-line flow."""

import json
import logging
from datetime import date

import pytest

from rotaengine.cli import create_sample_snapshot, load_snapshot, main
from rotaengine.config import RotaSettings
from rotaengine.domain import encode_snapshot

MONDAY = date(2024, 1, 15)


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo the handler and propagation changes made by setup_logging."""
    yield
    logger = logging.getLogger("rotaengine")
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def snapshot_file(tmp_path):
    """Sample rota for the week of 2024-01-15, written as JSON."""
    doc = encode_snapshot(create_sample_snapshot(MONDAY))
    doc["settings"] = RotaSettings().to_dict()
    path = tmp_path / "rota.json"
    path.write_text(json.dumps(doc))
    return str(path)


class TestSmoke:
    """End-to-end smoke tests for the CLI."""

    def test_load_snapshot(self, snapshot_file):
        snapshot, result, settings = load_snapshot(snapshot_file)
        assert result.is_valid
        assert len(snapshot.employees) == 3
        assert len(snapshot.shifts) == 3
        assert settings == RotaSettings()

    def test_validate_reports_double_booking(self, snapshot_file, capsys):
        assert main(["validate", snapshot_file]) == 1
        out = capsys.readouterr().out
        assert "Validation: FAILED (1 errors)" in out
        assert "overlapping_assignments" in out

    def test_check_ok(self, snapshot_file, capsys):
        code = main(["check", snapshot_file, "-e", "E002", "-s", "S-NIGHT", "-d", "2024-01-20"])
        assert code == 0
        assert "OK" in capsys.readouterr().out

    def test_check_conflict(self, snapshot_file, capsys):
        code = main(["check", snapshot_file, "-e", "E002", "-s", "S-DAY", "-d", "2024-01-17"])
        assert code == 1
        assert '"field": "conflict"' in capsys.readouterr().out

    def test_check_unavailable(self, snapshot_file, capsys):
        code = main(["check", snapshot_file, "-e", "E001", "-s", "S-DAY", "-d", "2024-01-20"])
        assert code == 1
        assert '"field": "availability"' in capsys.readouterr().out

    def test_stats_json(self, snapshot_file, capsys):
        assert main(["stats", snapshot_file, "--week-start", "2024-01-15", "--json"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["weekly"]["weekStart"] == "2024-01-15"
        assert data["weekly"]["totalAssignments"] == 13
        assert data["weekly"]["totalHours"] == 104.0
        assert len(data["employees"]) == 3
        assert data["overall"]["totalEmployees"] == 3

    def test_stats_text(self, snapshot_file, capsys):
        assert main(["stats", snapshot_file, "-w", "2024-01-15"]) == 0
        out = capsys.readouterr().out
        assert "Statistics for 2024-01-15 - 2024-01-21" in out
        assert "(legacy)" in out

    def test_report_to_stdout(self, snapshot_file, capsys):
        assert main(["report", snapshot_file, "-w", "2024-01-15"]) == 0
        out = capsys.readouterr().out
        assert "ROTA REPORT" in out
        assert "VALIDATION" in out

    def test_report_to_files(self, snapshot_file, tmp_path):
        text_path = tmp_path / "report.txt"
        pdf_path = tmp_path / "roster.pdf"
        assert main(["report", snapshot_file, "-w", "2024-01-15", "-o", str(text_path)]) == 0
        assert main(["report", snapshot_file, "-w", "2024-01-15", "-o", str(pdf_path)]) == 0
        assert "END OF REPORT" in text_path.read_text()
        assert pdf_path.read_bytes()[:4] == b"%PDF"

    def test_demo(self, capsys):
        assert main(["demo"]) == 0
        out = capsys.readouterr().out
        assert "Design grid:" in out
        assert "0 placement(s) on Tuesday" in out
        assert "Candidate checks:" in out

    def test_demo_snapshot_round_trip(self, tmp_path, capsys):
        path = tmp_path / "sample.json"
        assert main(["demo", "--save-snapshot", str(path)]) == 0
        assert main(["validate", str(path)]) == 1

    def test_missing_file(self, tmp_path, capsys):
        assert main(["validate", str(tmp_path / "missing.json")]) == 2
        assert "Error:" in capsys.readouterr().err

    def test_not_an_object(self, tmp_path, capsys):
        path = tmp_path / "list.json"
        path.write_text("[]")
        assert main(["validate", str(path)]) == 2

    def test_non_record_entries_are_reported(self, tmp_path, capsys):
        schedule = {"id": "W1", "weekStart": "2024-01-15", "weekEnd": "2024-01-21",
                    "shifts": ["2024-01-16"]}
        path = tmp_path / "rota.json"
        path.write_text(json.dumps({"employees": ["E001"], "schedules": [schedule]}))
        assert main(["validate", str(path)]) == 1
        out = capsys.readouterr().out
        assert "[invalid_value] employees.0:" in out
        assert "[invalid_value] W1: shifts:" in out

    def test_bad_date(self, snapshot_file, capsys):
        code = main(["check", snapshot_file, "-e", "E001", "-s", "S-DAY", "-d", "someday"])
        assert code == 2

    def test_no_command(self, capsys):
        assert main([]) == 1
