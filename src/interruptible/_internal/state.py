"""Lifecycle state machine for interruptible tasks."""

from __future__ import annotations

import time
from enum import StrEnum

from interruptible.types import TaskStateError


class TaskStatus(StrEnum):
    """Status of a task instance."""

    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    INTERRUPTED = "interrupted"
    FAILED = "failed"


_TERMINAL = frozenset({TaskStatus.COMPLETED, TaskStatus.INTERRUPTED, TaskStatus.FAILED})

_TRANSITIONS: dict[TaskStatus, frozenset[TaskStatus]] = {
    TaskStatus.IDLE: frozenset({TaskStatus.RUNNING}),
    TaskStatus.RUNNING: _TERMINAL,
    TaskStatus.COMPLETED: frozenset({TaskStatus.IDLE}),
    TaskStatus.INTERRUPTED: frozenset({TaskStatus.IDLE}),
    TaskStatus.FAILED: frozenset({TaskStatus.IDLE}),
}


class TaskLifecycle:
    """Guarded ``IDLE -> RUNNING -> {COMPLETED, INTERRUPTED, FAILED} -> IDLE``.

    The terminal status of the most recent run is kept as ``last_outcome``
    after the lifecycle returns to ``IDLE``.
    """

    def __init__(self) -> None:
        self.status: TaskStatus = TaskStatus.IDLE
        self.last_outcome: TaskStatus | None = None
        self.started_at: float | None = None
        self.ended_at: float | None = None

    def _transition(self, target: TaskStatus) -> None:
        if target not in _TRANSITIONS[self.status]:
            raise TaskStateError(f"Cannot move task from '{self.status}' to '{target}'")
        self.status = target

    def start(self) -> None:
        """Transition to RUNNING."""
        self._transition(TaskStatus.RUNNING)
        self.started_at = time.time()
        self.ended_at = None

    def finish(self, outcome: TaskStatus) -> None:
        """Record the terminal *outcome* of the run."""
        if outcome not in _TERMINAL:
            raise TaskStateError(f"'{outcome}' is not a terminal status")
        self._transition(outcome)
        self.last_outcome = outcome
        self.ended_at = time.time()

    def reset(self) -> None:
        """Return to IDLE after a terminal status."""
        self._transition(TaskStatus.IDLE)

    @property
    def is_running(self) -> bool:
        """Whether a run is in progress."""
        return self.status == TaskStatus.RUNNING

    @property
    def duration(self) -> float | None:
        """Elapsed seconds of the last finished run, or None."""
        if self.started_at is not None and self.ended_at is not None:
            return self.ended_at - self.started_at
        return None
