"""Helper functions for report generation."""

from datetime import datetime
from typing import TextIO


def write_report_header(f: TextIO, title: str) -> None:
    """Write a standard report header.

    Args:
        f: File object to write to
        title: Report title
    """
    f.write("=" * 80 + "\n")
    f.write(f"{title}\n")
    f.write("=" * 80 + "\n")
    f.write(f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}\n")
    f.write("\n")


def write_subsection_header(f: TextIO, title: str, width: int = 80) -> None:
    """Write a subsection header.

    Args:
        f: File object to write to
        title: Subsection title
        width: Width of separator line (default: 80)
    """
    f.write(f"{title}\n")
    f.write("-" * width + "\n")
