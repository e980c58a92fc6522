"""Type definitions for decontam.

Field order of the record types is the on-disk field order.
"""

from typing import NamedTuple


class TrainingDocument(NamedTuple):
    """A training corpus file and its stable integer ID."""

    path: str
    doc_id: int


class TrainingLine(NamedTuple):
    """One JSON Lines record of a training document."""

    line_num: int
    text: bytes


class RawMatch(NamedTuple):
    """One occurrence of one training-line window inside the validation corpus."""

    training_doc_id: int
    line_num: int
    corpus_position: int


class ContaminationRecord(NamedTuple):
    """A validation document judged contaminated by a training line."""

    validation_doc_id: int
    training_doc_id: int
    line_num: int


# Outer grouping key: (validation_doc_id, validation_doc_size)
GroupKey = tuple[int, int]

# Inner grouping key: (training_doc_id, line_num)
SourceKey = tuple[int, int]
