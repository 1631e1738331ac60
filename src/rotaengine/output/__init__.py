"""Output generation for rosters (text report, PDF)."""

from rotaengine.output.pdf_generator import PDFGenerator
from rotaengine.output.report_generator import ReportGenerator

__all__ = [
    "PDFGenerator",
    "ReportGenerator",
]
