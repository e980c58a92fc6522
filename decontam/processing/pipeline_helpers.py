"""Helper functions for pipeline initialization and setup."""

from pathlib import Path

from loguru import logger

from decontam.core import RunConfig
from decontam.reports import ReportData, create_report_directory
from decontam.utils.logging import add_log_file_handler


def setup_reporting(
    config: RunConfig, command: str, start_time: float
) -> tuple[ReportData | None, Path | None]:
    """Set up reporting infrastructure if enabled.

    Args:
        config: Configuration object
        command: Subcommand being run
        start_time: Run start time

    Returns:
        Tuple of (report_data, report_dir) or (None, None) if reports disabled
    """
    if not config.reports:
        return None, None

    report_data = ReportData(command=command, start_time=start_time)
    report_data.settings = {
        key: str(value)
        for key, value in config.model_dump(exclude={"verbose", "debug", "reports"}).items()
    }
    report_dir = create_report_directory(config.reports, command)

    # Directory name starts with the timestamp: YYYY-MM-DD_HH-MM-SS
    timestamp = report_dir.name[:19]
    log_file = report_dir / f"decontam-{timestamp}.log"
    add_log_file_handler(log_file, verbose=config.verbose, debug=config.debug)

    if config.verbose:
        logger.info(f"Logs will be saved to: {log_file}")
        logger.info("")

    return report_data, report_dir
