"""Command-line interface for the rota validation engine."""

import argparse
import json
import logging
import sys
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Optional

from rotaengine.config import RotaSettings
from rotaengine.domain import (
    BusinessHours,
    DayAvailability,
    Employee,
    ScheduleSnapshot,
    Shift,
    Weekday,
    decode_snapshot,
    encode_snapshot,
    parse_iso_date,
    week_bounds,
)
from rotaengine.logging_config import setup_logging
from rotaengine.output.pdf_generator import PDFGenerator
from rotaengine.output.report_generator import ReportGenerator
from rotaengine.reporting.statistics import StatisticsAggregator
from rotaengine.scheduling.overnight import ShiftDesignGrid, make_assignment
from rotaengine.validation.errors import ValidationResult
from rotaengine.validation.validator import RotaValidator

logger = logging.getLogger(__name__)


def load_snapshot(path: str) -> tuple[ScheduleSnapshot, ValidationResult, RotaSettings]:
    """Read a snapshot JSON file.

    Raises:
        OSError: If the file cannot be read.
        ValueError: If the file is not JSON or the settings are invalid.
    """
    doc = json.loads(Path(path).read_text())
    if not isinstance(doc, dict):
        raise ValueError(f"{path}: expected a JSON object at the top level")
    settings = RotaSettings.from_dict(doc.get("settings"))
    snapshot, result = decode_snapshot(doc, settings.default_shift_duration)
    return snapshot, result, settings


def print_result(result: ValidationResult, limit: Optional[int] = None) -> None:
    if result.is_valid:
        print("  Validation: PASSED")
    else:
        print(f"  Validation: FAILED ({len(result.errors)} errors)")
    errors = result.errors if limit is None else result.errors[:limit]
    for error in errors:
        print(f"    - {error}")
    if limit is not None and len(result.errors) > limit:
        print(f"    ... and {len(result.errors) - limit} more errors")
    for warning in result.warnings:
        print(f"    ! {warning}")


def create_sample_snapshot(week_start: date) -> ScheduleSnapshot:
    """Create a small sample rota for the week starting at ``week_start``.

    The sample includes an overnight shift, an employee without declared
    availability, a double-booking and an overbooked shift.
    """
    weekdays = {
        day: DayAvailability(start="09:00", end="17:00")
        for day in (Weekday.MONDAY, Weekday.TUESDAY, Weekday.WEDNESDAY,
                    Weekday.THURSDAY, Weekday.FRIDAY)
    }
    weekdays[Weekday.SATURDAY] = DayAvailability.closed()
    weekdays[Weekday.SUNDAY] = DayAvailability.closed()

    nights = {day: DayAvailability(start="20:00", end="23:59") for day in Weekday}
    nights[Weekday.MONDAY] = DayAvailability.closed()

    employees = [
        Employee(id="E001", name="Alice", role="cashier", availability=weekdays,
                 email="alice@example.com", phone="555-0101"),
        Employee(id="E002", name="Bob", role=["cashier", "stock"],
                 email="bob@example.com", phone="555-0102"),
        Employee(id="E003", name="Carol", role="security", availability=nights,
                 email="carol@example.com", phone="555-0103"),
    ]
    shifts = [
        Shift(id="S-MORNING", name="Morning", start_time="06:00", end_time="14:00",
              duration=8, required_employees=1, color="#66b366"),
        Shift(id="S-DAY", name="Day", start_time="09:00", end_time="17:00",
              duration=8, required_employees=1, color="#6666cc"),
        Shift(id="S-NIGHT", name="Night", start_time="22:00", end_time="06:00",
              duration=8, required_employees=1, is_overnight=True, color="#b366b3"),
    ]
    by_id = {s.id: s for s in shifts}

    business_hours = [
        BusinessHours(day_of_week=day, open_time="08:00", close_time="20:00",
                      id=f"bh-{int(day)}")
        for day in (Weekday.MONDAY, Weekday.TUESDAY, Weekday.WEDNESDAY,
                    Weekday.THURSDAY, Weekday.FRIDAY)
    ]
    business_hours.append(
        BusinessHours(day_of_week=Weekday.SATURDAY, open_time="10:00", close_time="16:00",
                      id="bh-6")
    )
    business_hours.append(BusinessHours(day_of_week=Weekday.SUNDAY, is_open=False, id="bh-0"))

    assignments = []
    for offset in range(5):
        d = week_start + timedelta(days=offset)
        assignments += make_assignment(f"A-day-{offset}", "E001", by_id["S-DAY"], d)
        assignments += make_assignment(f"A-morning-{offset}", "E002", by_id["S-MORNING"], d)

    # Bob also takes Monday's Day shift: overbooks it and overlaps his Morning
    assignments += make_assignment("A-day-extra", "E002", by_id["S-DAY"], week_start)
    # Carol covers two nights
    assignments += make_assignment(
        "A-night-0", "E003", by_id["S-NIGHT"], week_start + timedelta(days=1)
    )
    assignments += make_assignment(
        "A-night-1", "E003", by_id["S-NIGHT"], week_start + timedelta(days=3)
    )

    return ScheduleSnapshot(
        employees=employees,
        shifts=shifts,
        assignments=assignments,
        business_hours=business_hours,
    )


def run_validate(path: str) -> int:
    snapshot, decode_result, settings = load_snapshot(path)
    validator = RotaValidator(settings.build_availability_policy())

    result = ValidationResult()
    result.extend(decode_result)
    result.extend(validator.validate_snapshot(snapshot))

    print(f"Validating {path}")
    print(f"  Employees: {len(snapshot.employees)}, shifts: {len(snapshot.shifts)}, "
          f"assignments: {len(snapshot.assignments)}")
    print_result(result)
    return 0 if result.is_valid else 1


def run_check(path: str, employee_id: str, shift_id: str, on_date: str) -> int:
    snapshot, _, settings = load_snapshot(path)
    validator = RotaValidator(settings.build_availability_policy())
    result = validator.check_candidate(employee_id, shift_id, parse_iso_date(on_date), snapshot)

    print(f"Checking {employee_id} on {shift_id} for {on_date}")
    if result.is_valid:
        print("  OK: assignment can be made")
    else:
        print(json.dumps(result.to_list(), indent=2))
    return 0 if result.is_valid else 1


def run_stats(path: str, week_start: Optional[str], as_json: bool) -> int:
    snapshot, _, settings = load_snapshot(path)
    aggregator = StatisticsAggregator(snapshot, settings.build_coverage_policy())

    if week_start:
        start = parse_iso_date(week_start)
    else:
        start, _ = week_bounds(date.today(), settings.scheduling_week_starts_on)
    end = start + timedelta(days=6)
    now = datetime.now()

    weekly = aggregator.weekly_stats(start)
    overall = aggregator.overall_stats()
    employees = [
        aggregator.employee_stats_detailed(e.id, start, end, now) for e in snapshot.employees
    ]
    shifts = [aggregator.shift_stats_detailed(s.id, start, end) for s in snapshot.shifts]

    if as_json:
        print(json.dumps({
            "weekly": weekly.to_dict(),
            "overall": overall.to_dict(),
            "employees": [s.to_dict() for s in employees],
            "shifts": [s.to_dict() for s in shifts],
        }, indent=2))
        return 0

    print(f"Statistics for {start} - {end}")
    print(f"  Assignments: {weekly.total_assignments}")
    print(f"  Scheduled hours: {weekly.total_hours:.1f}")
    print(f"  Coverage: {weekly.coverage_percentage:.1f}% ({settings.coverage_policy})")
    print(f"  Average shifts per employee: {overall.avg_shifts_per_employee:.1f}")

    names = {e.id: e.name for e in snapshot.employees}
    print("\n  Employees:")
    for stats in employees:
        print(f"    {names[stats.employee_id]:<20} shifts={stats.total_shifts} "
              f"hours={stats.total_hours:.1f} "
              f"availability={stats.availability_percentage:.0f}%")

    print("\n  Shifts:")
    for shift, stats in zip(snapshot.shifts, shifts):
        print(f"    {shift.name:<20} assignments={stats.total_assignments} "
              f"fill rate={stats.fill_rate:.0f}%")
    return 0


def run_report(path: str, week_start: Optional[str], output_path: Optional[str]) -> int:
    snapshot, decode_result, settings = load_snapshot(path)
    validator = RotaValidator(settings.build_availability_policy())
    validation = ValidationResult()
    validation.extend(decode_result)
    validation.extend(validator.validate_snapshot(snapshot))

    if week_start:
        start = parse_iso_date(week_start)
    else:
        start, _ = week_bounds(date.today(), settings.scheduling_week_starts_on)

    coverage_policy = settings.build_coverage_policy()
    if output_path and output_path.lower().endswith(".pdf"):
        PDFGenerator(coverage_policy=coverage_policy).generate(snapshot, start, output_path)
        print(f"PDF created: {output_path}")
        return 0

    generator = ReportGenerator(coverage_policy)
    if output_path:
        generator.generate(snapshot, start, datetime.now(), output_path, validation)
        print(f"Report written: {output_path}")
    else:
        print(generator.generate_to_string(snapshot, start, datetime.now(), validation))
    return 0


def run_demo(output_path: Optional[str] = None, snapshot_path: Optional[str] = None) -> int:
    """Run the checks on a sample rota."""
    settings = RotaSettings()
    week_start, _ = week_bounds(date.today(), settings.scheduling_week_starts_on)
    snapshot = create_sample_snapshot(week_start)
    shifts = snapshot.shifts_by_id()

    print(f"Sample rota for the week of {week_start}")

    # Weekly design grid
    grid = ShiftDesignGrid()
    grid = grid.assign(shifts["S-DAY"], Weekday.MONDAY)
    grid = grid.assign(shifts["S-NIGHT"], Weekday.MONDAY)
    grid = grid.assign(shifts["S-NIGHT"], Weekday.SUNDAY)
    print("\nDesign grid:")
    for day in Weekday.ordered_from(settings.scheduling_week_starts_on):
        placements = grid.placements(day)
        if not placements:
            continue
        cells = ", ".join(f"{p.shift_id} {p.start_time}-{p.end_time}" for p in placements)
        print(f"  {day.label:<10} {grid.total_hours(day, shifts):>5.1f}h  {cells}")

    grid = grid.remove(Weekday.MONDAY, 1)
    print(f"  After removing Monday's night head: "
          f"{len(grid.placements(Weekday.TUESDAY))} placement(s) on Tuesday")

    # Pre-commit checks
    validator = RotaValidator()
    print("\nCandidate checks:")
    for employee_id, shift_id, offset in (
        ("E001", "S-DAY", 5),
        ("E001", "S-MORNING", 0),
        ("E003", "S-NIGHT", 0),
        ("E002", "S-DAY", 2),
    ):
        on_date = week_start + timedelta(days=offset)
        result = validator.check_candidate(employee_id, shift_id, on_date, snapshot)
        verdict = "ok" if result.is_valid else ", ".join(e.message for e in result.errors)
        print(f"  {employee_id} {shift_id:<10} {on_date}: {verdict}")

    print("\nSnapshot:")
    print_result(validator.validate_snapshot(snapshot), limit=5)

    aggregator = StatisticsAggregator(snapshot)
    weekly = aggregator.weekly_stats(week_start)
    print(f"\n  Scheduled hours: {weekly.total_hours:.1f}")
    print(f"  Coverage: {weekly.coverage_percentage:.1f}%")
    for shift in snapshot.shifts:
        stats = aggregator.shift_stats_for_day(shift.id, week_start)
        print(f"  {shift.name} fill rate on {week_start}: {stats.fill_rate:.0f}%")

    if snapshot_path:
        doc = encode_snapshot(snapshot)
        doc["settings"] = settings.to_dict()
        Path(snapshot_path).write_text(json.dumps(doc, indent=2))
        print(f"\nSnapshot written: {snapshot_path}")

    if output_path:
        print(f"\nGenerating PDF: {output_path}")
        PDFGenerator().generate(snapshot, week_start, output_path)
        print("  PDF created successfully!")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for CLI."""
    parser = argparse.ArgumentParser(
        description="Rota Engine - Scheduling validation and conflict checks",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s validate rota.json                 Validate every record
  %(prog)s check rota.json --employee E001 --shift S-DAY --date 2024-01-15
  %(prog)s stats rota.json --week-start 2024-01-15
  %(prog)s report rota.json --output roster.pdf
  %(prog)s demo --save-snapshot rota.json     Write the sample rota
        """,
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: $ROTAENGINE_LOG_LEVEL or WARNING)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    validate_parser = subparsers.add_parser("validate", help="Validate a snapshot")
    validate_parser.add_argument("snapshot", help="Snapshot JSON file")

    check_parser = subparsers.add_parser(
        "check",
        help="Check whether an employee can be placed on a shift",
    )
    check_parser.add_argument("snapshot", help="Snapshot JSON file")
    check_parser.add_argument("--employee", "-e", required=True, help="Employee id")
    check_parser.add_argument("--shift", "-s", required=True, help="Shift id")
    check_parser.add_argument("--date", "-d", required=True, help="Date (YYYY-MM-DD)")

    stats_parser = subparsers.add_parser("stats", help="Print weekly statistics")
    stats_parser.add_argument("snapshot", help="Snapshot JSON file")
    stats_parser.add_argument(
        "--week-start", "-w",
        type=str,
        help="First date of the week (default: current week)",
    )
    stats_parser.add_argument(
        "--json",
        action="store_true",
        help="Print statistics as JSON",
    )

    report_parser = subparsers.add_parser("report", help="Write a roster report")
    report_parser.add_argument("snapshot", help="Snapshot JSON file")
    report_parser.add_argument(
        "--week-start", "-w",
        type=str,
        help="First date of the week (default: current week)",
    )
    report_parser.add_argument(
        "--output", "-o",
        type=str,
        help="Output file; .pdf writes a PDF, anything else text (default: stdout)",
    )

    demo_parser = subparsers.add_parser("demo", help="Run the checks on a sample rota")
    demo_parser.add_argument(
        "--output", "-o",
        type=str,
        help="Output PDF file path",
    )
    demo_parser.add_argument(
        "--save-snapshot",
        type=str,
        help="Write the sample snapshot as JSON",
    )

    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    try:
        if args.command == "validate":
            return run_validate(args.snapshot)
        elif args.command == "check":
            return run_check(args.snapshot, args.employee, args.shift, args.date)
        elif args.command == "stats":
            return run_stats(args.snapshot, args.week_start, args.json)
        elif args.command == "report":
            return run_report(args.snapshot, args.week_start, args.output)
        elif args.command == "demo":
            return run_demo(args.output, args.save_snapshot)
        else:
            parser.print_help()
            return 1
    except (OSError, ValueError) as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
