"""Corpus discovery and persisted artifacts."""

from .artifacts import (
    CONTAMINATES_FILENAME,
    MATCHES_FILENAME,
    PATHS_FILENAME,
    read_contaminates,
    read_matches,
    read_path_index,
    write_contaminates,
    write_matches,
    write_path_index,
)
from .corpus import assign_document_ids, expand_dirs, read_training_lines

__all__ = [
    "CONTAMINATES_FILENAME",
    "MATCHES_FILENAME",
    "PATHS_FILENAME",
    "assign_document_ids",
    "expand_dirs",
    "read_contaminates",
    "read_matches",
    "read_path_index",
    "read_training_lines",
    "write_contaminates",
    "write_matches",
    "write_path_index",
]
