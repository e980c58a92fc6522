"""Tests for worker context without global state."""

import threading
from dataclasses import FrozenInstanceError
from multiprocessing import Pool

import pytest

from decontam.processing.stages.worker_context import (
    WorkerContext,
    get_worker_context,
    init_worker,
)


# Module-level worker functions (needed for multiprocessing)
def _scale_by_match_size(x):
    """Worker that uses context to compute result."""
    context = get_worker_context()
    return context.match_size * x


def _get_threshold(_):
    """Worker that returns threshold from its context."""
    context = get_worker_context()
    return context.threshold


class TestWorkerContextBehavior:
    """Tests for WorkerContext behavior."""

    def test_unused_fields_keep_defaults(self):
        """A stage only sets the fields its workers read."""
        context = WorkerContext(boundaries=(0, 6))
        assert (context.match_size, context.index, context.threshold) == (0, None, 0.0)

    def test_context_is_immutable(self):
        """Workers cannot change shared settings."""
        context = WorkerContext(match_size=3)
        with pytest.raises(FrozenInstanceError):
            context.match_size = 4

    def test_init_worker_sets_current_context(self):
        """The in-process path reads the same context workers would."""
        context = WorkerContext(match_size=7)
        init_worker(context)
        assert get_worker_context() is context


class TestMultiprocessingBehavior:
    """Tests for multiprocessing behavior without globals."""

    @pytest.mark.slow
    def test_workers_can_process_using_context(self):
        """Workers must be able to access and use context data."""
        context = WorkerContext(match_size=2)

        with Pool(processes=2, initializer=init_worker, initargs=(context,)) as pool:
            result = pool.map(_scale_by_match_size, [3])[0]

        assert result == 6

    @pytest.mark.slow
    def test_sequential_pools_use_their_own_context(self):
        """Different pool instances must not interfere with each other."""
        first, second = WorkerContext(threshold=0.1), WorkerContext(threshold=0.9)
        with Pool(processes=2, initializer=init_worker, initargs=(first,)) as pool:
            _ = pool.map(_get_threshold, [1])[0]

        with Pool(processes=2, initializer=init_worker, initargs=(second,)) as pool:
            result2 = pool.map(_get_threshold, [1])[0]

        assert result2 == 0.9

    def test_accessing_context_before_init_fails_safely(self):
        """Accessing context before initialization should provide clear error."""
        # A fresh thread has its own empty thread-local storage
        errors = []

        def probe():
            try:
                get_worker_context()
            except RuntimeError as e:
                errors.append(str(e))

        thread = threading.Thread(target=probe)
        thread.start()
        thread.join()
        assert errors and "Worker context not initialized" in errors[0]
