"""Validation document boundaries (the ``.size`` object).

The boundary object is a flat sequence of little-endian u64 cumulative
offsets; document ``i`` occupies ``[boundaries[i], boundaries[i + 1])`` of
the concatenated validation corpus.
"""

from bisect import bisect_right
from pathlib import Path
import struct

from loguru import logger

from decontam.core.errors import SuffixIndexError

SIZE_SUFFIX = ".size"
_U64 = 8


def size_path_for(descriptor: str | Path) -> Path:
    """Return the boundary object path belonging to an index descriptor."""
    return Path(f"{descriptor}{SIZE_SUFFIX}")


def validate_boundaries(boundaries: list[int]) -> None:
    """Check that boundaries start at 0 and never decrease.

    Raises:
        SuffixIndexError: If the sequence is empty or malformed
    """
    if not boundaries:
        raise SuffixIndexError("Boundary object is empty")
    if boundaries[0] != 0:
        raise SuffixIndexError(f"Boundary object must start at 0, got {boundaries[0]}")
    for i in range(1, len(boundaries)):
        if boundaries[i] < boundaries[i - 1]:
            raise SuffixIndexError(
                f"Boundary object decreases at entry {i}: "
                f"{boundaries[i - 1]} > {boundaries[i]}"
            )


def decode_boundaries(data: bytes) -> list[int]:
    """Decode and validate a raw boundary object."""
    if len(data) % _U64 != 0:
        raise SuffixIndexError(f"Boundary object size {len(data)} is not a multiple of 8")
    boundaries = [value for (value,) in struct.iter_unpack("<Q", data)]
    validate_boundaries(boundaries)
    return boundaries


def load_boundaries(descriptor: str | Path) -> list[int]:
    """Load the validation document boundaries for an index descriptor.

    Raises:
        SuffixIndexError: If the boundary object is missing or malformed
    """
    path = size_path_for(descriptor)
    try:
        data = path.read_bytes()
    except OSError as e:
        logger.error(f"✗ Could not read boundary object {path}: {e}")
        raise SuffixIndexError(f"Could not read boundary object {path}: {e}") from e
    boundaries = decode_boundaries(data)
    logger.debug(f"Loaded {len(boundaries) - 1} validation document boundaries from {path}")
    return boundaries


def locate_document(position: int, boundaries: list[int]) -> int:
    """Return the validation document containing a corpus position.

    Finds the unique ``i`` with ``boundaries[i] <= position < boundaries[i + 1]``.

    Raises:
        SuffixIndexError: If ``position`` is negative or at/after the corpus end
    """
    if position < 0 or position >= boundaries[-1]:
        raise SuffixIndexError(
            f"Corpus position {position} is outside the validation corpus [0, {boundaries[-1]})"
        )
    # Rightmost boundary <= position; skips over empty documents
    return bisect_right(boundaries, position) - 1


def document_span(doc_id: int, boundaries: list[int]) -> tuple[int, int]:
    """Return ``(start, size)`` of a validation document."""
    start = boundaries[doc_id]
    return start, boundaries[doc_id + 1] - start
