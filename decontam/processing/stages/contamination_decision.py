"""Stage 3: Interval merging and the coverage threshold decision."""

import math
from multiprocessing import Pool
from typing import Any, Iterable

from loguru import logger
from tqdm import tqdm

from decontam.core.types import ContaminationRecord, GroupKey, SourceKey
from decontam.processing.stages.data_models import ContaminationSummary
from decontam.processing.stages.match_grouping import MatchGroups
from decontam.processing.stages.worker_context import (
    WorkerContext,
    get_worker_context,
    init_worker,
)

DEFAULT_GROUPS_PER_TASK = 1_000

GroupItem = tuple[GroupKey, dict[SourceKey, list[int]]]


def merge_intervals(intervals: Iterable[tuple[int, int]]) -> list[tuple[int, int]]:
    """Merge half-open intervals into a minimal disjoint sorted list.

    Touching intervals (next start == current end) coalesce; a strict gap
    starts a new run.
    """
    merged: list[tuple[int, int]] = []
    for start, end in sorted(intervals, key=lambda interval: interval[0]):
        if merged and merged[-1][1] >= start:
            last_start, last_end = merged[-1]
            merged[-1] = (last_start, max(last_end, end))
        else:
            merged.append((start, end))
    return merged


def covered_bytes(starts: Iterable[int], match_size: int) -> int:
    """Total length of the union of ``[s, s + match_size)`` over all starts."""
    merged = merge_intervals((start, start + match_size) for start in starts)
    return sum(end - start for start, end in merged)


def required_coverage(doc_size: int, threshold: float) -> int:
    """Bytes that must be covered: ``ceil(doc_size * threshold)``."""
    return math.ceil(doc_size * threshold)


def meets_threshold(
    starts: Iterable[int], match_size: int, doc_size: int, threshold: float
) -> bool:
    """Check whether matches starting at ``starts`` cover enough of a document."""
    return covered_bytes(starts, match_size) >= required_coverage(doc_size, threshold)


def decide_group(
    group_key: GroupKey,
    sources: dict[SourceKey, list[int]],
    match_size: int,
    threshold: float,
) -> list[ContaminationRecord]:
    """Emit one record per training line whose coverage clears the threshold."""
    validation_doc_id, validation_doc_size = group_key
    return [
        ContaminationRecord(validation_doc_id, training_doc_id, line_num)
        for (training_doc_id, line_num), starts in sources.items()
        if meets_threshold(starts, match_size, validation_doc_size, threshold)
    ]


def decide_chunk_worker(items: list[GroupItem]) -> list[ContaminationRecord]:
    """Worker function for multiprocessing."""
    context = get_worker_context()
    records: list[ContaminationRecord] = []
    for group_key, sources in items:
        records.extend(decide_group(group_key, sources, context.match_size, context.threshold))
    return records


def decide_contamination(
    groups: MatchGroups | dict[GroupKey, dict[SourceKey, list[int]]],
    match_size: int,
    threshold: float,
    jobs: int = 1,
    verbose: bool = False,
    groups_per_task: int = DEFAULT_GROUPS_PER_TASK,
) -> list[ContaminationRecord]:
    """Decide contamination for every group.

    Args:
        groups: Output of match grouping
        match_size: Window size used when the matches were collected
        threshold: Required coverage fraction of each validation document
        jobs: Number of worker processes (1 runs in-process)
        verbose: Whether to show progress
        groups_per_task: Outer groups per worker task

    Returns:
        Contamination records, sorted
    """
    items: list[GroupItem] = list(groups.items())
    records: list[ContaminationRecord] = []

    if jobs > 1 and len(items) > groups_per_task:
        if verbose:
            logger.info(f"  Using {jobs} parallel workers")
        chunks = [items[i : i + groups_per_task] for i in range(0, len(items), groups_per_task)]
        context = WorkerContext(match_size=match_size, threshold=threshold)
        with Pool(processes=jobs, initializer=init_worker, initargs=(context,)) as pool:
            results = pool.imap_unordered(decide_chunk_worker, chunks)
            if verbose:
                results_wrapped_iter: Any = tqdm(
                    results, total=len(chunks), desc="Groups", unit="chunk"
                )
            else:
                results_wrapped_iter = results
            for chunk_records in results_wrapped_iter:
                records.extend(chunk_records)
    else:
        items_iter = tqdm(items, desc="Groups", unit="group") if verbose else items
        for group_key, sources in items_iter:
            records.extend(decide_group(group_key, sources, match_size, threshold))

    records.sort()
    return records


def summarize_contamination(records: Iterable[ContaminationRecord]) -> ContaminationSummary:
    """Count contaminated validation documents and total records."""
    records = list(records)
    return ContaminationSummary(
        contaminated_documents=len({record.validation_doc_id for record in records}),
        total_records=len(records),
    )
