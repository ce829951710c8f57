from __future__ import annotations

"""
Completion Barrier.

A single-shot countdown shared by the compile run: seeded with the number
of enqueued tasks, decremented once per completed task, and firing its
callback exactly once when the count reaches zero.
"""

import logging
import threading
from typing import Callable

logger = logging.getLogger(__name__)


class CompletionBarrier:
    """Thread-safe countdown that fires on_zero exactly once."""

    def __init__(self, count: int, on_zero: Callable[[], None]) -> None:
        if count < 0:
            raise ValueError(f"Barrier count must be >= 0, got {count}")
        self._remaining = count
        self._on_zero = on_zero
        self._fired = False
        self._lock = threading.Lock()

    @property
    def remaining(self) -> int:
        return self._remaining

    @property
    def fired(self) -> bool:
        return self._fired

    def decrement(self) -> int:
        """
        Signal one completion.

        The fetch-and-check is atomic; only the call that brings the count
        to zero runs the callback, outside of the lock.

        Returns:
            int: The remaining count after this decrement.

        Raises:
            RuntimeError: More completions than the seeded count.
        """
        with self._lock:
            if self._remaining <= 0:
                raise RuntimeError("CompletionBarrier decremented past zero.")
            self._remaining -= 1
            remaining = self._remaining
            fire = remaining == 0
            if fire:
                self._fired = True

        if fire:
            logger.debug("All tasks completed; releasing barrier.")
            self._on_zero()
        return remaining
