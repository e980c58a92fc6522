"""Worker context for multiprocessing without global state."""

import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from decontam.index import SuffixArrayIndex


@dataclass(frozen=True)
class WorkerContext:
    """Immutable context for multiprocessing workers.

    Each stage fills in the fields its workers read; the rest keep their
    defaults.

    Attributes:
        match_size: Match window size in bytes
        index: Suffix-array index (match collection)
        boundaries: Validation document boundaries (match grouping)
        threshold: Required coverage fraction (contamination decision)
    """

    match_size: int = 0
    index: "SuffixArrayIndex | None" = None
    boundaries: tuple[int, ...] = ()
    threshold: float = 0.0


# Thread-local storage for worker context
_worker_context = threading.local()


def init_worker(context: WorkerContext) -> None:
    """Initialize worker process with context in thread-local storage.

    Args:
        context: WorkerContext to store in thread-local storage
    """
    _worker_context.value = context


def get_worker_context() -> WorkerContext:
    """Get the current worker's context from thread-local storage.

    Raises:
        RuntimeError: If called before init_worker
    """
    try:
        return _worker_context.value
    except AttributeError as e:
        raise RuntimeError("Worker context not initialized. Call init_worker first.") from e
