"""Stage 1: Match collection with multiprocessing support.

Every training line is cut into overlapping byte windows of ``match_size``
and each window is looked up in the validation corpus suffix array. Every
(window, occurrence) pair becomes one RawMatch.
"""

from multiprocessing import Pool
from typing import Any, Iterator

from loguru import logger
from tqdm import tqdm

from decontam.core.errors import ConfigError
from decontam.core.types import RawMatch, TrainingDocument
from decontam.data.corpus import read_training_lines
from decontam.index import SuffixArrayIndex
from decontam.processing.stages.worker_context import (
    WorkerContext,
    get_worker_context,
    init_worker,
)


def iter_windows(text: bytes, match_size: int) -> Iterator[bytes]:
    """Yield every ``match_size`` window of ``text`` with stride 1.

    A text shorter than ``match_size`` yields nothing.
    """
    if match_size < 1:
        raise ConfigError(f"match_size must be >= 1, got {match_size}")
    for start in range(len(text) - match_size + 1):
        yield text[start : start + match_size]


def collect_document_matches(
    document: TrainingDocument, index: SuffixArrayIndex, match_size: int
) -> list[RawMatch]:
    """Collect the raw matches of a single training document."""
    matches: list[RawMatch] = []
    for line in read_training_lines(document.path):
        for window in iter_windows(line.text, match_size):
            for position in index.occurrences(window):
                matches.append(RawMatch(document.doc_id, line.line_num, position))
    return matches


def collect_document_worker(document: TrainingDocument) -> list[RawMatch]:
    """Worker function for multiprocessing."""
    context = get_worker_context()
    if context.index is None:
        raise RuntimeError("Worker context has no suffix-array index")
    return collect_document_matches(document, context.index, context.match_size)


def _process_multiprocessing(
    documents: list[TrainingDocument],
    index: SuffixArrayIndex,
    match_size: int,
    jobs: int,
    verbose: bool,
) -> list[RawMatch]:
    """Fan documents out to a worker pool, one task per document."""
    if verbose:
        logger.info(f"  Using {jobs} parallel workers")

    context = WorkerContext(match_size=match_size, index=index)
    matches: list[RawMatch] = []

    with Pool(processes=jobs, initializer=init_worker, initargs=(context,)) as pool:
        results = pool.imap_unordered(collect_document_worker, documents)

        if verbose:
            results_wrapped_iter: Any = tqdm(
                results, total=len(documents), desc="Paths", unit="path"
            )
        else:
            results_wrapped_iter = results

        for document_matches in results_wrapped_iter:
            matches.extend(document_matches)

    return matches


def _process_single_threaded(
    documents: list[TrainingDocument],
    index: SuffixArrayIndex,
    match_size: int,
    verbose: bool,
) -> list[RawMatch]:
    matches: list[RawMatch] = []
    docs_iter = tqdm(documents, desc="Paths", unit="path") if verbose else documents
    for document in docs_iter:
        matches.extend(collect_document_matches(document, index, match_size))
    return matches


def collect_matches(
    documents: list[TrainingDocument],
    index: SuffixArrayIndex,
    match_size: int,
    jobs: int = 1,
    verbose: bool = False,
) -> list[RawMatch]:
    """Collect raw matches for all training documents.

    The result is a multiset: its order depends on scheduling, its content
    does not. Any failure in any document aborts the whole collection.

    Args:
        documents: Training documents with their stable IDs
        index: Validation corpus suffix-array index
        match_size: Window size in bytes
        jobs: Number of worker processes (1 runs in-process)
        verbose: Whether to show progress

    Returns:
        All raw matches across all documents
    """
    if match_size < 1:
        raise ConfigError(f"match_size must be >= 1, got {match_size}")

    if jobs > 1 and len(documents) > 1:
        return _process_multiprocessing(documents, index, match_size, jobs, verbose)
    return _process_single_threaded(documents, index, match_size, verbose)
