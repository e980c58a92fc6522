"""Utility functions for decontam."""

from decontam.utils.helpers import (
    ensure_directory_exists,
    expand_file_path,
    format_time,
    write_file_safely,
)
from decontam.utils.logging import add_log_file_handler, setup_logger

__all__ = [
    "add_log_file_handler",
    "ensure_directory_exists",
    "expand_file_path",
    "format_time",
    "setup_logger",
    "write_file_safely",
]
