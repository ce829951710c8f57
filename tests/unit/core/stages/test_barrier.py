from __future__ import annotations

"""
Unit tests for the Completion Barrier.

Verifies single-shot firing, over-decrement detection and behavior under
concurrent decrements.
"""

import threading
from unittest.mock import MagicMock

import pytest

from compile_modules.core.pipeline.stages.barrier import CompletionBarrier


def test_fires_once_at_zero() -> None:
    on_zero = MagicMock()
    barrier = CompletionBarrier(3, on_zero)

    assert barrier.decrement() == 2
    assert barrier.decrement() == 1
    on_zero.assert_not_called()

    assert barrier.decrement() == 0
    on_zero.assert_called_once_with()
    assert barrier.fired
    assert barrier.remaining == 0


def test_decrement_past_zero_raises() -> None:
    on_zero = MagicMock()
    barrier = CompletionBarrier(1, on_zero)
    barrier.decrement()

    with pytest.raises(RuntimeError):
        barrier.decrement()
    on_zero.assert_called_once()


def test_zero_seed_never_fires_on_its_own() -> None:
    on_zero = MagicMock()
    barrier = CompletionBarrier(0, on_zero)

    assert not barrier.fired
    with pytest.raises(RuntimeError):
        barrier.decrement()
    on_zero.assert_not_called()


def test_negative_seed_rejected() -> None:
    with pytest.raises(ValueError):
        CompletionBarrier(-1, lambda: None)


def test_concurrent_decrements_fire_exactly_once() -> None:
    calls = []
    barrier = CompletionBarrier(200, lambda: calls.append(threading.current_thread().name))

    threads = [threading.Thread(target=barrier.decrement) for _ in range(200)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(calls) == 1
    assert barrier.remaining == 0
