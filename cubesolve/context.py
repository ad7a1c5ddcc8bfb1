from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

ProgressCallback = Callable[[str, float], None]


class SolveStatus(str, Enum):
    ALREADY_SOLVED = "already_solved"
    SOLVED = "solved"
    INCOMPLETE = "incomplete"
    TIMED_OUT = "timed_out"
    CANCELLED = "cancelled"


@dataclass
class SolveContext:
    """Deadline, cancellation token and progress hook shared by every strategy of one solve."""

    deadline: float | None = None
    cancel_event: threading.Event = field(default_factory=threading.Event)
    progress: ProgressCallback | None = None
    yield_every: int = 2048
    _ticks: int = field(default=0, init=False, repr=False)

    @classmethod
    def with_timeout(cls, timeout: float | None, **kwargs: object) -> "SolveContext":
        deadline = None if timeout is None else time.monotonic() + timeout
        return cls(deadline=deadline, **kwargs)

    def cancel(self) -> None:
        self.cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()

    @property
    def expired(self) -> bool:
        return self.deadline is not None and time.monotonic() >= self.deadline

    def remaining(self) -> float | None:
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def should_stop(self) -> bool:
        return self.cancelled or self.expired

    def stop_status(self) -> SolveStatus | None:
        if self.cancelled:
            return SolveStatus.CANCELLED
        if self.expired:
            return SolveStatus.TIMED_OUT
        return None

    def checkpoint(self) -> bool:
        """Yields to other threads and reports whether the solve must stop."""
        time.sleep(0)
        return self.should_stop()

    def tick(self) -> bool:
        # Polling the clock on every search node is too slow, so only every yield_every calls.
        self._ticks += 1
        if self._ticks % self.yield_every:
            return False
        return self.checkpoint()

    def report(self, stage: str, fraction: float) -> None:
        if self.progress is not None:
            self.progress(stage, max(0.0, min(1.0, fraction)))
