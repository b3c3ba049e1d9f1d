"""Deadline timer used by every polling wait."""

import time


class Timer:
    """Restartable deadline.

    A timer that has never been started counts as expired.
    """

    def __init__(self, timeout_s: float) -> None:
        self.timeout_s = timeout_s
        self._deadline: float | None = None

    def start(self) -> "Timer":
        """(Re)arm the deadline. Returns self so it can be chained."""
        self._deadline = time.monotonic() + self.timeout_s
        return self

    def is_expired(self) -> bool:
        return self._deadline is None or time.monotonic() >= self._deadline
