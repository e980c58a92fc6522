"""Stage 2: Group raw matches by validation document and training line.

Groups are keyed ``(validation_doc_id, validation_doc_size)`` on the outside
and ``(training_doc_id, line_num)`` on the inside; each inner list holds the
in-document start offsets of the matches, one entry per raw match.
"""

from collections import defaultdict
from multiprocessing import Pool
import threading
from typing import Any, Iterator, Sequence

from loguru import logger
from tqdm import tqdm

from decontam.core.types import GroupKey, RawMatch, SourceKey
from decontam.index import document_span, locate_document
from decontam.processing.stages.worker_context import (
    WorkerContext,
    get_worker_context,
    init_worker,
)

DEFAULT_NUM_SHARDS = 64
DEFAULT_CHUNK_SIZE = 100_000

PartialGroups = dict[GroupKey, dict[SourceKey, list[int]]]


class MatchGroups:
    """Concurrent map of maps of lists, sharded by outer key.

    ``add`` and ``merge`` may be called from any number of threads; each
    shard has its own lock, so callers never lock.
    """

    def __init__(self, num_shards: int = DEFAULT_NUM_SHARDS):
        if num_shards < 1:
            raise ValueError(f"num_shards must be >= 1, got {num_shards}")
        self._shards: list[PartialGroups] = [{} for _ in range(num_shards)]
        self._locks = [threading.Lock() for _ in range(num_shards)]

    def _shard_for(self, group_key: GroupKey) -> int:
        return hash(group_key) % len(self._shards)

    def add(self, group_key: GroupKey, source_key: SourceKey, position: int) -> None:
        """Append one in-document offset, creating both levels on demand."""
        shard = self._shard_for(group_key)
        with self._locks[shard]:
            inner = self._shards[shard].setdefault(group_key, {})
            inner.setdefault(source_key, []).append(position)

    def merge(self, partial: PartialGroups) -> None:
        """Fold a locally built grouping into this one."""
        by_shard: dict[int, list[GroupKey]] = defaultdict(list)
        for group_key in partial:
            by_shard[self._shard_for(group_key)].append(group_key)

        for shard, group_keys in by_shard.items():
            with self._locks[shard]:
                target = self._shards[shard]
                for group_key in group_keys:
                    inner = target.setdefault(group_key, {})
                    for source_key, positions in partial[group_key].items():
                        inner.setdefault(source_key, []).extend(positions)

    def items(self) -> list[tuple[GroupKey, dict[SourceKey, list[int]]]]:
        """Snapshot of all outer groups."""
        snapshot = []
        for shard, lock in zip(self._shards, self._locks):
            with lock:
                snapshot.extend(shard.items())
        return snapshot

    def get(self, group_key: GroupKey) -> dict[SourceKey, list[int]] | None:
        shard = self._shard_for(group_key)
        with self._locks[shard]:
            return self._shards[shard].get(group_key)

    def total_entries(self) -> int:
        """Number of offsets stored across every group."""
        return sum(
            len(positions) for _, inner in self.items() for positions in inner.values()
        )

    def to_dict(self) -> PartialGroups:
        return dict(self.items())

    def __len__(self) -> int:
        return sum(len(shard) for shard in self._shards)

    def __iter__(self) -> Iterator[GroupKey]:
        return iter([group_key for group_key, _ in self.items()])


def resolve_match(match: RawMatch, boundaries: Sequence[int]) -> tuple[GroupKey, SourceKey, int]:
    """Resolve a raw match to its group key, source key and in-document offset.

    Raises:
        SuffixIndexError: If the corpus position lies outside the validation corpus
    """
    doc_id = locate_document(match.corpus_position, boundaries)
    start, size = document_span(doc_id, boundaries)
    return (
        (doc_id, size),
        (match.training_doc_id, match.line_num),
        match.corpus_position - start,
    )


def group_chunk(matches: Sequence[RawMatch], boundaries: Sequence[int]) -> PartialGroups:
    """Group a chunk of raw matches into a plain local mapping."""
    groups: PartialGroups = {}
    for match in matches:
        group_key, source_key, position = resolve_match(match, boundaries)
        groups.setdefault(group_key, {}).setdefault(source_key, []).append(position)
    return groups


def group_chunk_worker(matches: list[RawMatch]) -> PartialGroups:
    """Worker function for multiprocessing."""
    context = get_worker_context()
    return group_chunk(matches, context.boundaries)


def _chunked(matches: list[RawMatch], chunk_size: int) -> list[list[RawMatch]]:
    return [matches[i : i + chunk_size] for i in range(0, len(matches), chunk_size)]


def group_matches(
    matches: list[RawMatch],
    boundaries: Sequence[int],
    jobs: int = 1,
    verbose: bool = False,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> MatchGroups:
    """Group raw matches by validation document and training line.

    In parallel mode each worker groups a chunk of matches locally and the
    partial groupings are merged once they come back.

    Args:
        matches: Raw matches from match collection
        boundaries: Validation document boundaries
        jobs: Number of worker processes (1 runs in-process)
        verbose: Whether to show progress
        chunk_size: Raw matches per worker task

    Returns:
        MatchGroups holding exactly one offset per input raw match
    """
    groups = MatchGroups()
    chunks = _chunked(matches, chunk_size)

    if jobs > 1 and len(chunks) > 1:
        if verbose:
            logger.info(f"  Using {jobs} parallel workers")
        context = WorkerContext(boundaries=tuple(boundaries))
        with Pool(processes=jobs, initializer=init_worker, initargs=(context,)) as pool:
            results = pool.imap_unordered(group_chunk_worker, chunks)
            if verbose:
                results_wrapped_iter: Any = tqdm(
                    results, total=len(chunks), desc="Matches", unit="chunk"
                )
            else:
                results_wrapped_iter = results
            for partial in results_wrapped_iter:
                groups.merge(partial)
        return groups

    matches_iter = tqdm(matches, desc="Matches", unit="match") if verbose else matches
    for match in matches_iter:
        groups.add(*resolve_match(match, boundaries))
    return groups
