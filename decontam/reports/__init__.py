"""Report generation for decontam."""

from .core import create_report_directory, generate_reports
from .data import ReportData

__all__ = [
    "ReportData",
    "create_report_directory",
    "generate_reports",
]
