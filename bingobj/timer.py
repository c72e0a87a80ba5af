"""A simple stopwatch that accumulates time over several sessions."""

from __future__ import annotations

import time


class StopWatch:
    """Measures elapsed wall-clock time in milliseconds.

    Each ``start``/``stop`` pair is one session; the total time of all
    finished sessions is kept until ``reset``.
    """

    def __init__(self) -> None:
        self._start_time = 0.0
        self._diff_ms = 0.0
        self._total_ms = 0.0
        self._running = False
        self._sessions = 0

    @property
    def running(self) -> bool:
        """Whether a session is in progress."""
        return self._running

    @property
    def sessions(self) -> int:
        """Number of finished sessions since the last reset."""
        return self._sessions

    @property
    def last_ms(self) -> float:
        """Length of the most recently finished session."""
        return self._diff_ms

    def _since_start_ms(self) -> float:
        return (time.perf_counter() - self._start_time) * 1000.0

    def start(self) -> None:
        """Begin a session."""
        self._start_time = time.perf_counter()
        self._running = True

    def stop(self) -> None:
        """End the current session and add its length to the total."""
        self._diff_ms = self._since_start_ms()
        self._total_ms += self._diff_ms
        self._running = False
        self._sessions += 1

    def reset(self) -> None:
        """Zero all counters; a running session restarts from now."""
        self._diff_ms = 0.0
        self._total_ms = 0.0
        self._sessions = 0
        if self._running:
            self._start_time = time.perf_counter()

    def elapsed_ms(self) -> float:
        """Total time so far, including a session still in progress."""
        total = self._total_ms
        if self._running:
            total += self._since_start_ms()
        return total

    def average_ms(self) -> float:
        """Mean length of the finished sessions, or 0 if there are none."""
        if self._sessions > 0:
            return self._total_ms / self._sessions
        return 0.0

    def __enter__(self) -> "StopWatch":
        self.start()
        return self

    def __exit__(self, *args) -> None:
        self.stop()