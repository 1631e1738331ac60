"""Tests for the text and PDF roster reports."""

from datetime import date, datetime

import pytest

from rotaengine.cli import create_sample_snapshot
from rotaengine.domain.models import ScheduleSnapshot
from rotaengine.domain.policies import DailyCoveragePolicy
from rotaengine.output.pdf_generator import PDFGenerator, hex_to_rgb
from rotaengine.output.report_generator import ReportGenerator
from rotaengine.validation.errors import ValidationResult
from rotaengine.validation.validator import RotaValidator

MONDAY = date(2024, 1, 15)
NOW = datetime(2024, 1, 17, 12, 0)


@pytest.fixture
def snapshot():
    return create_sample_snapshot(MONDAY)


class TestReportGenerator:
    """Tests for the text report."""

    @pytest.fixture
    def report(self, snapshot):
        return ReportGenerator().generate_to_string(snapshot, MONDAY, NOW)

    def test_sections(self, report):
        assert report.startswith("=" * 80)
        assert "ROTA REPORT - Jan 15 - Jan 21, 2024" in report
        for section in ("ROSTER", "SCHEDULED HOURS PER DATE", "SHIFT FILL RATES",
                        "EMPLOYEE STATISTICS", "WEEKLY COVERAGE"):
            assert section in report
        assert report.rstrip().endswith("=" * 80)
        assert "VALIDATION" not in report

    def test_overnight_halves_are_marked(self, report):
        assert ">> continues next day" in report
        assert "<< from previous day" in report

    def test_empty_days(self, report):
        assert "Sunday 2024-01-21 (0 assignments)" in report
        assert "(none)" in report

    def test_hours_per_date_count_each_shift_once(self, report):
        assert "2024-01-15: " + "#" * 24 + " (24.0h)" in report
        assert "2024-01-17: " + "#" * 16 + " (16.0h)" in report
        assert "2024-01-21: . (0.0h)" in report

    def test_overbooked_shift_is_flagged(self, report):
        assert "! overbooked on at least one day" in report

    def test_legacy_coverage(self, report):
        assert "Coverage: 22.5%" in report

    def test_daily_coverage(self, snapshot):
        report = ReportGenerator(DailyCoveragePolicy()).generate_to_string(snapshot, MONDAY, NOW)
        assert "Coverage: 157.6%" in report

    def test_validation_section(self, snapshot):
        validation = RotaValidator().validate_snapshot(snapshot)
        report = ReportGenerator().generate_to_string(snapshot, MONDAY, NOW, validation)
        assert "VALIDATION" in report
        assert "ERROR   [overlapping_assignments]" in report

    def test_clean_validation_section(self, snapshot):
        report = ReportGenerator().generate_to_string(
            snapshot, MONDAY, NOW, ValidationResult()
        )
        assert "No problems found" in report

    def test_generate_writes_file(self, snapshot, tmp_path):
        path = tmp_path / "report.txt"
        content = ReportGenerator().generate(snapshot, MONDAY, NOW, path)
        assert path.read_text() == content


class TestPDFGenerator:
    """Tests for the PDF roster."""

    def test_generate_to_buffer(self, snapshot):
        buffer = PDFGenerator().generate_to_buffer(snapshot, MONDAY)
        assert buffer.getvalue()[:4] == b"%PDF"

    def test_without_summary_is_smaller(self, snapshot):
        generator = PDFGenerator()
        full = generator.generate_to_buffer(snapshot, MONDAY).getvalue()
        roster_only = generator.generate_to_buffer(
            snapshot, MONDAY, include_summary=False
        ).getvalue()
        assert len(roster_only) < len(full)

    def test_generate_file(self, snapshot, tmp_path):
        path = tmp_path / "roster.pdf"
        PDFGenerator().generate(snapshot, MONDAY, path)
        assert path.read_bytes()[:4] == b"%PDF"

    def test_empty_snapshot(self):
        buffer = PDFGenerator().generate_to_buffer(ScheduleSnapshot(), MONDAY)
        assert buffer.getvalue()[:4] == b"%PDF"

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("#ff0000", (1.0, 0.0, 0.0)),
            ("00ff00", (0.0, 1.0, 0.0)),
            ("red", None),
            (None, None),
        ],
    )
    def test_hex_to_rgb(self, value, expected):
        assert hex_to_rgb(value) == expected
