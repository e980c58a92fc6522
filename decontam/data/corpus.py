"""Training corpus discovery and JSON Lines parsing."""

import json
from pathlib import Path
from typing import Iterable, Iterator

from loguru import logger

from decontam.core.errors import InputOutputError, ParseError
from decontam.core.types import TrainingDocument, TrainingLine
from decontam.data.artifacts import read_compressed
from decontam.utils import expand_file_path

DEFAULT_EXTENSIONS = (
    ".jsonl",
    ".jsonl.gz",
    ".jsonl.zst",
    ".jsonl.zstd",
    ".json",
    ".json.gz",
    ".json.zst",
    ".json.zstd",
)


def _has_extension(path: Path, extensions: tuple[str, ...]) -> bool:
    name = path.name.lower()
    return any(name.endswith(ext) for ext in extensions)


def expand_dirs(
    roots: Iterable[str | Path], extensions: tuple[str, ...] | None = None
) -> list[str]:
    """Expand files and directories into the list of training files.

    Directories are walked recursively and filtered by extension. A root that
    names a file is always kept, whatever its extension.

    Raises:
        InputOutputError: If a root does not exist
    """
    extensions = extensions or DEFAULT_EXTENSIONS
    files: list[str] = []
    for root in roots:
        root_path = Path(expand_file_path(str(root)) or root)
        if root_path.is_file():
            files.append(str(root_path))
        elif root_path.is_dir():
            files.extend(
                str(p)
                for p in root_path.rglob("*")
                if p.is_file() and _has_extension(p, extensions)
            )
        else:
            logger.error(f"✗ Training corpus path not found: {root_path}")
            raise InputOutputError(f"Training corpus path not found: {root_path}")
    return files


def assign_document_ids(paths: Iterable[str]) -> list[TrainingDocument]:
    """Give every path a stable ID by lexicographic order.

    Duplicate paths collapse to a single document.
    """
    return [TrainingDocument(path, doc_id) for doc_id, path in enumerate(sorted(set(paths)))]


def parse_training_line(raw: bytes, path: str, line_num: int) -> TrainingLine:
    """Extract the ``text`` field of one JSON Lines record as UTF-8 bytes.

    Raises:
        ParseError: If the record is not a JSON object with a string ``text``
    """
    try:
        record = json.loads(raw)
    except ValueError as e:
        raise ParseError(path, line_num, f"invalid JSON: {e}") from e
    if not isinstance(record, dict):
        raise ParseError(path, line_num, "record is not a JSON object")
    text = record.get("text")
    if not isinstance(text, str):
        raise ParseError(path, line_num, 'missing or non-string "text" field')
    try:
        return TrainingLine(line_num, text.encode("utf-8"))
    except UnicodeEncodeError as e:
        raise ParseError(path, line_num, f'"text" is not valid unicode: {e}') from e


def read_training_lines(path: str) -> Iterator[TrainingLine]:
    """Yield the parsed lines of a training document.

    Line numbers are physical 0-based positions; blank lines are skipped but
    still consume a number.
    """
    data = read_compressed(path)
    lines = data.split(b"\n")
    if lines and lines[-1] == b"":
        lines.pop()
    for line_num, raw in enumerate(lines):
        if not raw.strip():
            continue
        yield parse_training_line(raw.rstrip(b"\r"), path, line_num)
