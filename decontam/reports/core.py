"""Report directory handling for decontam runs."""

from datetime import datetime
from pathlib import Path

from loguru import logger

from decontam.reports.data import ReportData
from decontam.reports.summary import generate_summary_report


def create_report_directory(reports_path: str, command: str) -> Path:
    """Create a timestamped report directory.

    Args:
        reports_path: Base path for reports directory
        command: Subcommand name to include in folder name

    Returns:
        Path to the created report directory
    """
    timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
    report_dir = Path(reports_path) / f"{timestamp}_{command}"
    report_dir.mkdir(parents=True, exist_ok=True)
    return report_dir


def generate_reports(data: ReportData, report_dir: Path, verbose: bool = False) -> Path:
    """Write all report files into ``report_dir``."""
    if verbose:
        logger.info(f"  Generating reports in: {report_dir}/")
    return generate_summary_report(data, report_dir)
