"""decontam - train/validation contamination detection.

Find byte substrings shared between a training corpus and a suffix-array
indexed validation corpus, and mark validation documents that a single
training line covers beyond a threshold.
"""

from decontam.core import (
    BuildMatchesConfig,
    ContaminationRecord,
    MarkContaminatesConfig,
    RawMatch,
    load_config,
)
from decontam.processing import run_build_matches, run_mark_contaminates
from decontam.utils.logging import setup_logger

__version__ = "0.1.0"
__all__ = [
    "BuildMatchesConfig",
    "ContaminationRecord",
    "MarkContaminatesConfig",
    "RawMatch",
    "load_config",
    "run_build_matches",
    "run_mark_contaminates",
    "setup_logger",
]
