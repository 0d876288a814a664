"""Logging helpers for interruptible tasks (stdlib only).

Task loggers live under the ``interruptible.`` namespace.  The driver binds
the task name, nesting depth and interrupt reason with ``LogContext``;
``TaskFormatter`` renders those bindings after the logger name::

    configure_logging(level="DEBUG")
    # 12:00:01 D task [task=sync depth=2] driving nested computation
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from typing import Any

_PREFIX = "interruptible"

_bindings: ContextVar[dict[str, Any] | None] = ContextVar("_bindings", default=None)


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the ``interruptible.`` namespace."""
    if name != _PREFIX and not name.startswith(f"{_PREFIX}."):
        name = f"{_PREFIX}.{name}"
    return logging.getLogger(name)


class LogContext:
    """Bind key-value pairs to every record logged inside the block.

    Bindings nest and are kept per asyncio task, since they live in a
    ``ContextVar``.
    """

    def __init__(self, **bindings: Any) -> None:
        self._bindings = bindings
        self._token: Any = None

    def __enter__(self) -> LogContext:
        self._token = _bindings.set({**(_bindings.get() or {}), **self._bindings})
        return self

    def __exit__(self, *_: object) -> None:
        _bindings.reset(self._token)


class TaskFormatter(logging.Formatter):
    """One line per record: time, level letter, short logger name, bindings."""

    def format(self, record: logging.LogRecord) -> str:
        name = record.name.removeprefix(f"{_PREFIX}.")
        bound = _bindings.get()
        context = f" [{' '.join(f'{k}={v}' for k, v in bound.items())}]" if bound else ""
        line = (
            f"{self.formatTime(record, '%H:%M:%S')} {record.levelname[0]} "
            f"{name}{context} {record.getMessage()}"
        )
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def configure_logging(level: str | int = "WARNING", *, force: bool = False) -> None:
    """Attach a stderr handler with ``TaskFormatter`` to the package logger.

    Does nothing if a handler is already attached, unless *force* is set.
    """
    root = logging.getLogger(_PREFIX)
    if root.handlers and not force:
        return
    root.handlers.clear()
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(TaskFormatter())
    root.addHandler(handler)
    root.setLevel(level.upper() if isinstance(level, str) else level)
