"""Async lifecycle hooks for interruptible tasks."""

from __future__ import annotations

import enum
from collections.abc import Callable, Coroutine
from typing import Any

Hook = Callable[..., Coroutine[Any, Any, None]]


class HookPoint(enum.Enum):
    """Lifecycle points of a run and the keyword arguments their hooks get.

    - ``START``: ``task``, before the task function is called
    - ``FINISHED``: ``task``, ``result``
    - ``INTERRUPTED``: ``task``, ``error``
    - ``ERROR``: ``task``, ``error``
    """

    START = "start"
    FINISHED = "finished"
    INTERRUPTED = "interrupted"
    ERROR = "error"


class TaskHooks:
    """Per-task hook registry.

    Hooks for a point run one after another in registration order; the
    first one that raises fails the run.
    """

    def __init__(self) -> None:
        self._hooks: dict[HookPoint, list[Hook]] = {point: [] for point in HookPoint}

    def add(self, point: HookPoint, hook: Hook) -> Hook:
        """Register *hook* at *point* and return it."""
        self._hooks[point].append(hook)
        return hook

    async def fire(self, point: HookPoint, **data: Any) -> None:
        for hook in self._hooks[point]:
            await hook(**data)
