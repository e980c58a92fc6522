"""Shared fixtures: tiny suffix-array indexes and JSON Lines training files."""

import json
from pathlib import Path
import struct

import pytest


def build_suffix_table(text: bytes, width: int | None = None) -> bytes:
    """Encode a naive suffix array of ``text`` with fixed-width entries."""
    if width is None:
        width = max(1, (len(text).bit_length() + 7) // 8)
    order = sorted(range(len(text)), key=lambda i: text[i:])
    return b"".join(i.to_bytes(width, "little") for i in order)


def write_index(base: Path, documents: list[bytes], width: int | None = None) -> Path:
    """Write corpus text, suffix table and boundary object for ``documents``."""
    text = b"".join(documents)
    base.parent.mkdir(parents=True, exist_ok=True)
    base.write_bytes(text)
    Path(f"{base}.table.bin").write_bytes(build_suffix_table(text, width))
    boundaries = [0]
    for doc in documents:
        boundaries.append(boundaries[-1] + len(doc))
    Path(f"{base}.size").write_bytes(struct.pack(f"<{len(boundaries)}Q", *boundaries))
    return base


def write_jsonl(path: Path, texts: list[str]) -> Path:
    """Write one ``{"text": ...}`` record per line."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("".join(json.dumps({"text": t}) + "\n" for t in texts), encoding="utf-8")
    return path


@pytest.fixture
def make_index(tmp_path):
    """Factory building a validation index from a list of documents."""

    def _make(documents: list[bytes], name: str = "val/corpus", width: int | None = None) -> Path:
        return write_index(tmp_path / name, documents, width)

    return _make


@pytest.fixture
def make_jsonl(tmp_path):
    """Factory writing a JSON Lines training file."""

    def _make(name: str, texts: list[str]) -> Path:
        return write_jsonl(tmp_path / name, texts)

    return _make
