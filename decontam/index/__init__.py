"""Suffix-array index and validation document boundaries."""

from .boundaries import (
    decode_boundaries,
    document_span,
    load_boundaries,
    locate_document,
    size_path_for,
)
from .suffix_array import SuffixArrayIndex, load_index, table_path_for

__all__ = [
    "SuffixArrayIndex",
    "decode_boundaries",
    "document_span",
    "load_boundaries",
    "load_index",
    "locate_document",
    "size_path_for",
    "table_path_for",
]
