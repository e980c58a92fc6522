"""Persisted artifacts: compressed whole-file I/O and record codecs.

Record files use a bincode-compatible layout: a little-endian u64 record
count followed by three little-endian u64 fields per record, in the field
order of the record type.
"""

import gzip
import io
import json
from pathlib import Path
import struct
from typing import Iterable, TypeVar
import zlib

from loguru import logger
import zstandard

from decontam.core.errors import InputOutputError, SerializationError
from decontam.core.types import ContaminationRecord, RawMatch, TrainingDocument

PATHS_FILENAME = "paths.json.gz"
MATCHES_FILENAME = "matches.bin.gz"
CONTAMINATES_FILENAME = "contaminates.bin.gz"

_COUNT = struct.Struct("<Q")
_TRIPLE = struct.Struct("<QQQ")

GZIP_SUFFIXES = (".gz",)
ZSTD_SUFFIXES = (".zst", ".zstd")

RecordT = TypeVar("RecordT", bound=tuple)


def _compression_for(path: Path) -> str | None:
    suffix = path.suffix.lower()
    if suffix in GZIP_SUFFIXES:
        return "gzip"
    if suffix in ZSTD_SUFFIXES:
        return "zstd"
    return None


def decompress_bytes(raw: bytes, path: str | Path) -> bytes:
    """Decompress a buffer according to the compression implied by ``path``.

    Raises:
        SerializationError: If the payload is not valid for its compression
    """
    kind = _compression_for(Path(path))
    try:
        if kind == "gzip":
            return gzip.decompress(raw)
        if kind == "zstd":
            with zstandard.ZstdDecompressor().stream_reader(io.BytesIO(raw)) as reader:
                return reader.read()
    except (OSError, EOFError, zlib.error, zstandard.ZstdError) as e:
        logger.error(f"✗ Could not decompress {path}: {e}")
        raise SerializationError(f"Could not decompress {path}: {e}") from e
    return raw


def compress_bytes(data: bytes, path: str | Path) -> bytes:
    """Compress a buffer according to the compression implied by ``path``."""
    kind = _compression_for(Path(path))
    if kind == "gzip":
        return gzip.compress(data)
    if kind == "zstd":
        return zstandard.ZstdCompressor().compress(data)
    return data


def read_compressed(path: str | Path) -> bytes:
    """Read a whole file into memory, decompressing by suffix.

    Raises:
        InputOutputError: If the file cannot be read
        SerializationError: If the file cannot be decompressed
    """
    try:
        raw = Path(path).read_bytes()
    except FileNotFoundError as e:
        logger.error(f"✗ File not found: {path}")
        raise InputOutputError(f"File not found: {path}") from e
    except OSError as e:
        logger.error(f"✗ Could not read {path}: {e}")
        raise InputOutputError(f"Could not read {path}: {e}") from e
    return decompress_bytes(raw, path)


def write_compressed(data: bytes, path: str | Path) -> None:
    """Write a whole buffer to ``path``, compressing by suffix.

    Parent directories are created. Any existing file is replaced.

    Raises:
        InputOutputError: If the file cannot be written
    """
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(compress_bytes(data, path))
    except OSError as e:
        logger.error(f"✗ Could not write {path}: {e}")
        raise InputOutputError(f"Could not write {path}: {e}") from e


def encode_records(records: Iterable[tuple[int, int, int]]) -> bytes:
    """Encode three-field integer records into the binary tuple layout.

    Raises:
        SerializationError: If a field is negative or wider than 64 bits
    """
    try:
        body = b"".join(_TRIPLE.pack(*record) for record in records)
    except struct.error as e:
        raise SerializationError(f"Record cannot be encoded as (u64, u64, u64): {e}") from e
    return _COUNT.pack(len(body) // _TRIPLE.size) + body


def decode_records(data: bytes, record_type: type[RecordT]) -> list[RecordT]:
    """Decode the binary tuple layout into records of ``record_type``.

    Raises:
        SerializationError: If the length prefix disagrees with the payload
    """
    if len(data) < _COUNT.size:
        raise SerializationError(f"Record buffer too short for a length prefix ({len(data)} bytes)")
    (count,) = _COUNT.unpack_from(data, 0)
    expected = _COUNT.size + count * _TRIPLE.size
    if len(data) != expected:
        raise SerializationError(
            f"Record buffer holds {len(data)} bytes but its header announces "
            f"{count} records ({expected} bytes)"
        )
    body = memoryview(data)[_COUNT.size :]
    return [record_type(*fields) for fields in _TRIPLE.iter_unpack(body)]


def write_matches(matches: list[RawMatch], path: str | Path) -> None:
    """Persist the raw match list."""
    write_compressed(encode_records(matches), path)


def read_matches(path: str | Path) -> list[RawMatch]:
    """Load a raw match list written by ``write_matches``."""
    return decode_records(read_compressed(path), RawMatch)


def write_contaminates(records: list[ContaminationRecord], path: str | Path) -> None:
    """Persist the contamination records."""
    write_compressed(encode_records(records), path)


def read_contaminates(path: str | Path) -> list[ContaminationRecord]:
    """Load contamination records written by ``write_contaminates``."""
    return decode_records(read_compressed(path), ContaminationRecord)


def write_path_index(documents: list[TrainingDocument], path: str | Path) -> None:
    """Persist the training path -> document ID mapping as JSON."""
    mapping = {doc.path: doc.doc_id for doc in documents}
    write_compressed(json.dumps(mapping).encode("utf-8"), path)


def read_path_index(path: str | Path) -> dict[str, int]:
    """Load the training path -> document ID mapping.

    Raises:
        SerializationError: If the payload is not a JSON object of integer IDs
    """
    data = read_compressed(path)
    try:
        mapping = json.loads(data)
    except ValueError as e:
        raise SerializationError(f"Path index {path} is not valid JSON: {e}") from e
    if not isinstance(mapping, dict) or not all(isinstance(v, int) for v in mapping.values()):
        raise SerializationError(f"Path index {path} must map paths to integer IDs")
    return mapping
