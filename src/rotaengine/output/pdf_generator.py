"""PDF generation for weekly rosters.

This module creates printable PDF rosters showing:
- A weekly grid with one row per employee and one column per date
- Overnight shifts drawn as their head and tail halves
- A summary page with scheduled hours per date and shift fill rates
"""

import re
from datetime import date, datetime, timedelta
from io import BytesIO
from pathlib import Path
from typing import Optional, Union

from rotaengine.constants import DAYS_PER_WEEK
from rotaengine.domain.models import ScheduleSnapshot, Shift, ShiftAssignment
from rotaengine.domain.policies import CoveragePolicy
from rotaengine.domain.time_utils import Weekday, format_week_range
from rotaengine.reporting.statistics import StatisticsAggregator

# Fallback shift colors (RGB tuples, 0-1 scale), cycled by shift order
PALETTE = [
    (0.4, 0.7, 0.4),  # Green
    (0.4, 0.4, 0.8),  # Blue
    (0.8, 0.6, 0.2),  # Orange
    (0.7, 0.4, 0.7),  # Purple
    (0.3, 0.7, 0.7),  # Teal
]

COLORS = {
    "cancelled": (0.85, 0.85, 0.85),
    "grid": (0.7, 0.7, 0.7),
    "header": (0.9, 0.92, 0.96),
    "bar": (0.4, 0.6, 0.8),
}

HEX_COLOR = re.compile(r"^#?([0-9a-fA-F]{6})$")


def hex_to_rgb(value: Optional[str]) -> Optional[tuple[float, float, float]]:
    """Convert ``"#RRGGBB"`` to an RGB tuple on the 0-1 scale."""
    if not value:
        return None
    match = HEX_COLOR.match(value.strip())
    if not match:
        return None
    digits = match.group(1)
    return tuple(int(digits[i:i + 2], 16) / 255 for i in (0, 2, 4))


class PDFGenerator:
    """Generates printable weekly roster PDFs.

    Example:
        >>> generator = PDFGenerator()
        >>> generator.generate(snapshot, date(2024, 1, 15), "roster.pdf")
    """

    def __init__(
        self,
        page_width: float = 792,  # Letter landscape width (11")
        page_height: float = 612,  # Letter landscape height (8.5")
        margin: float = 36,  # 0.5 inch margins
        coverage_policy: Optional[CoveragePolicy] = None,
    ):
        self.page_width = page_width
        self.page_height = page_height
        self.margin = margin
        self.coverage_policy = coverage_policy

    def generate(
        self,
        snapshot: ScheduleSnapshot,
        week_start: date,
        output_path: Union[str, Path],
        include_summary: bool = True,
    ) -> None:
        """Generate the roster PDF and save it to a file.

        Args:
            snapshot: Records to render.
            week_start: First date of the week.
            output_path: Path to save the PDF.
            include_summary: Whether to include the summary page.
        """
        try:
            from reportlab.lib.pagesizes import landscape, letter
            from reportlab.pdfgen import canvas
        except ImportError as e:
            raise ImportError(
                "reportlab is required for PDF generation. "
                "Install with: pip install reportlab"
            ) from e

        c = canvas.Canvas(str(output_path), pagesize=landscape(letter))
        self._draw(c, snapshot, week_start, include_summary)
        c.save()

    def generate_to_buffer(
        self,
        snapshot: ScheduleSnapshot,
        week_start: date,
        include_summary: bool = True,
    ) -> BytesIO:
        """Generate the roster PDF and return it as a bytes buffer."""
        try:
            from reportlab.lib.pagesizes import landscape, letter
            from reportlab.pdfgen import canvas
        except ImportError as e:
            raise ImportError(
                "reportlab is required for PDF generation. "
                "Install with: pip install reportlab"
            ) from e

        buffer = BytesIO()
        c = canvas.Canvas(buffer, pagesize=landscape(letter))
        self._draw(c, snapshot, week_start, include_summary)
        c.save()
        buffer.seek(0)
        return buffer

    def _draw(self, c, snapshot: ScheduleSnapshot, week_start: date, include_summary: bool) -> None:
        dates = [week_start + timedelta(days=i) for i in range(DAYS_PER_WEEK)]
        self._draw_roster_pages(c, snapshot, dates)
        if include_summary:
            self._draw_summary_page(c, snapshot, dates)

    def _shift_color(self, snapshot: ScheduleSnapshot, shift: Optional[Shift]) -> tuple:
        if shift is None:
            return (0.5, 0.5, 0.5)
        rgb = hex_to_rgb(shift.color)
        if rgb is not None:
            return rgb
        index = next((i for i, s in enumerate(snapshot.shifts) if s.id == shift.id), 0)
        return PALETTE[index % len(PALETTE)]

    def _draw_roster_pages(self, c, snapshot: ScheduleSnapshot, dates: list[date]) -> None:
        """Draw the weekly grid, paging over employees."""
        employees = sorted(snapshot.employees, key=lambda e: e.name)
        shifts = snapshot.shifts_by_id()

        by_cell: dict[tuple[str, date], list[ShiftAssignment]] = {}
        for assignment in snapshot.assignments:
            if dates[0] <= assignment.date <= dates[-1]:
                by_cell.setdefault((assignment.employee_id, assignment.date), []).append(assignment)

        row_height = 40
        header_height = 60
        footer_height = 40
        usable_height = self.page_height - 2 * self.margin - header_height - footer_height
        rows_per_page = max(1, int(usable_height / row_height) - 1)

        name_width = 120
        column_width = (self.page_width - 2 * self.margin - name_width) / len(dates)
        grid_left = self.margin + name_width

        total_pages = max(1, (len(employees) + rows_per_page - 1) // rows_per_page)
        for page in range(total_pages):
            page_employees = employees[page * rows_per_page:(page + 1) * rows_per_page]

            self._draw_header(c, snapshot, dates)

            # Column headers
            y = self.page_height - self.margin - header_height
            c.setFillColorRGB(*COLORS["header"])
            c.rect(grid_left, y - row_height / 2, column_width * len(dates), row_height / 2,
                   fill=1, stroke=0)
            c.setFillColorRGB(0, 0, 0)
            c.setFont("Helvetica-Bold", 9)
            for i, d in enumerate(dates):
                c.drawCentredString(
                    grid_left + (i + 0.5) * column_width,
                    y - row_height / 2 + 6,
                    f"{Weekday.from_date(d).label[:3]} {d.day}",
                )
            y -= row_height / 2

            for employee in page_employees:
                y -= row_height
                c.setFillColorRGB(0, 0, 0)
                c.setFont("Helvetica", 9)
                c.drawString(self.margin, y + row_height / 2 - 3, employee.name[:20])

                c.setStrokeColorRGB(*COLORS["grid"])
                c.setLineWidth(0.5)
                for i, d in enumerate(dates):
                    cell_x = grid_left + i * column_width
                    c.rect(cell_x, y, column_width, row_height, fill=0, stroke=1)
                    cell = sorted(by_cell.get((employee.id, d), []), key=lambda a: a.start_time)
                    self._draw_cell(c, snapshot, cell, shifts, cell_x, y, column_width, row_height)

            c.setFillColorRGB(0, 0, 0)
            c.setFont("Helvetica", 9)
            c.drawCentredString(
                self.page_width / 2,
                self.margin - 10,
                f"Page {page + 1} of {total_pages}",
            )
            c.showPage()

    def _draw_cell(
        self,
        c,
        snapshot: ScheduleSnapshot,
        cell: list[ShiftAssignment],
        shifts: dict[str, Shift],
        x: float,
        y: float,
        width: float,
        height: float,
    ) -> None:
        """Draw the assignments of one employee on one date, stacked."""
        if not cell:
            return
        block_height = (height - 4) / len(cell)
        for i, assignment in enumerate(cell):
            shift = shifts.get(assignment.shift_id)
            by = y + height - 2 - (i + 1) * block_height
            if assignment.is_cancelled:
                c.setFillColorRGB(*COLORS["cancelled"])
            else:
                c.setFillColorRGB(*self._shift_color(snapshot, shift))
            c.rect(x + 2, by, width - 4, block_height - 1, fill=1, stroke=0)

            label = shift.name if shift else assignment.shift_id
            if assignment.is_overnight_head:
                label += " >"
            elif assignment.is_overnight_tail:
                label = "< " + label
            c.setFillColorRGB(0, 0, 0)
            c.setFont("Helvetica-Bold", 7)
            c.drawString(x + 4, by + block_height - 9, label[:16])
            if block_height >= 18:
                c.setFont("Helvetica", 6)
                c.drawString(x + 4, by + 3, f"{assignment.start_time}-{assignment.end_time}")

    def _draw_header(self, c, snapshot: ScheduleSnapshot, dates: list[date]) -> None:
        """Draw page header with the week and title."""
        c.setFillColorRGB(0, 0, 0)
        c.setFont("Helvetica-Bold", 16)
        c.drawString(
            self.margin,
            self.page_height - self.margin - 20,
            f"Weekly Roster - {format_week_range(dates[0], dates[-1])}",
        )

        c.setFont("Helvetica", 10)
        c.drawString(
            self.margin,
            self.page_height - self.margin - 35,
            f"Employees: {len(snapshot.employees)}    Shifts: {len(snapshot.shifts)}",
        )

    def _draw_summary_page(self, c, snapshot: ScheduleSnapshot, dates: list[date]) -> None:
        """Draw summary page with hours, coverage and fill rates."""
        aggregator = StatisticsAggregator(snapshot, self.coverage_policy)
        weekly = aggregator.weekly_stats(dates[0])

        c.setFillColorRGB(0, 0, 0)
        c.setFont("Helvetica-Bold", 16)
        c.drawString(
            self.margin,
            self.page_height - self.margin - 20,
            f"Roster Summary - {format_week_range(dates[0], dates[-1])}",
        )

        y = self.page_height - self.margin - 60
        c.setFont("Helvetica-Bold", 12)
        c.drawString(self.margin, y, "Overview")
        y -= 20

        c.setFont("Helvetica", 10)
        stats = [
            f"Assignments: {weekly.total_assignments}",
            f"Scheduled Hours: {weekly.total_hours:.1f}",
            f"Business Hours: {weekly.total_possible_hours:.1f}",
            f"Coverage: {weekly.coverage_percentage:.1f}%",
            f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M')}",
        ]
        for stat in stats:
            c.drawString(self.margin + 20, y, stat)
            y -= 15

        # Hours chart
        y -= 20
        c.setFont("Helvetica-Bold", 12)
        c.drawString(self.margin, y, "Scheduled Hours per Date")
        hours = [
            aggregator.total_hours([a for a in snapshot.assignments if a.date == d])
            for d in dates
        ]
        self._draw_hours_chart(c, hours, dates, self.margin + 20, y - 150, 400, 130)

        # Fill rates
        y -= 190
        c.setFont("Helvetica-Bold", 12)
        c.drawString(self.margin, y, "Shift Fill Rates")
        y -= 15

        c.setFont("Helvetica", 9)
        for shift in snapshot.shifts:
            rates = [aggregator.shift_stats_for_day(shift.id, d).fill_rate for d in dates]
            c.setFillColorRGB(*self._shift_color(snapshot, shift))
            c.rect(self.margin + 20, y - 2, 10, 10, fill=1, stroke=1)
            c.setFillColorRGB(0, 0, 0)
            c.drawString(
                self.margin + 35, y,
                f"{shift.name} ({shift.start_time}-{shift.end_time}, "
                f"needs {shift.required_employees}): "
                + "  ".join(f"{rate:.0f}%" for rate in rates),
            )
            y -= 15
            if y < self.margin:
                break

        c.showPage()

    def _draw_hours_chart(
        self,
        c,
        hours: list[float],
        dates: list[date],
        x: float,
        y: float,
        width: float,
        height: float,
    ) -> None:
        """Draw a simple bar chart of hours per date."""
        max_hours = max(hours) or 1
        bar_width = width / len(hours)

        # Draw axes
        c.setStrokeColorRGB(0, 0, 0)
        c.setLineWidth(1)
        c.line(x, y, x, y + height)  # Y axis
        c.line(x, y, x + width, y)  # X axis

        c.setFillColorRGB(*COLORS["bar"])
        for i, value in enumerate(hours):
            bar_height = (value / max_hours) * height
            c.rect(x + i * bar_width + 2, y, bar_width - 4, bar_height, fill=1, stroke=0)

        c.setFillColorRGB(0, 0, 0)
        c.setFont("Helvetica", 7)
        c.drawRightString(x - 5, y, "0")
        c.drawRightString(x - 5, y + height - 5, f"{max_hours:.0f}")
        for i, d in enumerate(dates):
            c.drawCentredString(x + (i + 0.5) * bar_width, y - 12, Weekday.from_date(d).label[:3])
