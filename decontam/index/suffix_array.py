"""In-memory suffix-array index over the validation corpus.

The index is two files: the raw corpus text at the descriptor path and the
suffix table at ``<descriptor>.table.bin``. The table holds one little-endian
offset per suffix of the text, in lexicographic suffix order; every entry is
``offset_width`` bytes wide, where ``offset_width = table_size // text_len``.
"""

from dataclasses import dataclass
from pathlib import Path

from loguru import logger

from decontam.core.errors import SuffixIndexError

TABLE_SUFFIX = ".table.bin"
MAX_OFFSET_WIDTH = 8


def table_path_for(descriptor: str | Path) -> Path:
    """Return the suffix table path belonging to an index descriptor."""
    return Path(f"{descriptor}{TABLE_SUFFIX}")


@dataclass(frozen=True)
class SuffixArrayIndex:
    """Read-only suffix-array view shared by every collection worker.

    Attributes:
        text: Full validation corpus text
        table: Encoded suffix table
        offset_width: Bytes per encoded table entry
    """

    text: bytes
    table: bytes
    offset_width: int

    @property
    def text_len(self) -> int:
        return len(self.text)

    @property
    def table_len(self) -> int:
        """Number of entries in the suffix table."""
        return len(self.table) // self.offset_width

    def entry(self, i: int) -> int:
        """Decode table entry ``i`` into an absolute text position."""
        width = self.offset_width
        start = i * width
        return int.from_bytes(self.table[start : start + width], "little")

    def _prefix_at(self, i: int, length: int) -> bytes:
        pos = self.entry(i)
        return self.text[pos : pos + length]

    def _lower_bound(self, query: bytes) -> int:
        """First table index whose suffix is >= query on the query's length."""
        lo, hi = 0, self.table_len
        size = len(query)
        while lo < hi:
            mid = (lo + hi) // 2
            if self._prefix_at(mid, size) < query:
                lo = mid + 1
            else:
                hi = mid
        return lo

    def _upper_bound(self, query: bytes, lo: int) -> int:
        """First table index at or after ``lo`` whose suffix prefix is > query."""
        hi = self.table_len
        size = len(query)
        while lo < hi:
            mid = (lo + hi) // 2
            if self._prefix_at(mid, size) <= query:
                lo = mid + 1
            else:
                hi = mid
        return lo

    def occurrences(self, query: bytes) -> list[int]:
        """Return every position in the text where ``query`` occurs.

        The result is the occurrence band of the table, one position per
        table entry and in table order. An absent query yields an empty list.

        Raises:
            SuffixIndexError: If the query is empty
        """
        if not query:
            raise SuffixIndexError("Cannot query the suffix array with an empty string")
        start = self._lower_bound(query)
        end = self._upper_bound(query, start)
        return [self.entry(i) for i in range(start, end)]


def _read_bytes(path: Path, what: str) -> bytes:
    try:
        return path.read_bytes()
    except FileNotFoundError as e:
        logger.error(f"✗ {what} not found: {path}")
        raise SuffixIndexError(f"{what} not found: {path}") from e
    except OSError as e:
        logger.error(f"✗ Could not read {what.lower()} {path}: {e}")
        raise SuffixIndexError(f"Could not read {what.lower()} {path}: {e}") from e


def load_index(descriptor: str | Path) -> SuffixArrayIndex:
    """Load the corpus text and suffix table fully into memory.

    Args:
        descriptor: Path of the corpus text; the table sits beside it

    Returns:
        SuffixArrayIndex over the loaded buffers

    Raises:
        SuffixIndexError: If either file is missing or the table size does not
            correspond to a whole number of fixed-width entries per text byte
    """
    text = _read_bytes(Path(descriptor), "Index text")
    table = _read_bytes(table_path_for(descriptor), "Suffix table")

    if not text:
        raise SuffixIndexError(f"Index text is empty: {descriptor}")
    if len(table) % len(text) != 0:
        raise SuffixIndexError(
            f"Suffix table size ({len(table)}) is not a multiple of text size ({len(text)})"
        )
    offset_width = len(table) // len(text)
    if not 1 <= offset_width <= MAX_OFFSET_WIDTH:
        raise SuffixIndexError(f"Unsupported suffix table entry width: {offset_width}")

    logger.debug(
        f"Loaded index {descriptor}: {len(text)} bytes of text, "
        f"{len(table) // offset_width} table entries of width {offset_width}"
    )
    return SuffixArrayIndex(text=text, table=table, offset_width=offset_width)
