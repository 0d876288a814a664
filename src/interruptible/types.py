"""Core types for the interruptible package: errors, steps and produced values."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel

DEFAULT_INTERRUPT_PREFIX = "InterruptibleTask interrupted"


class InterruptibleError(Exception):
    """Base exception for all interruptible errors."""


class InterruptError(InterruptibleError):
    """Raised when a run stops because an interruption was requested.

    Args:
        reason: Human-readable reason given to ``interrupt()``.
        prefix: Leading part of the message.
    """

    kind = "InterruptError"

    def __init__(self, reason: str = "", *, prefix: str = DEFAULT_INTERRUPT_PREFIX) -> None:
        self.reason = reason
        super().__init__(f"{prefix}: {reason}")


class InvocationError(InterruptibleError):
    """Raised when the task function does not produce a computation."""

    kind = "InvocationError"


class TaskStateError(InterruptibleError):
    """Raised for illegal task lifecycle transitions."""

    kind = "TaskStateError"


# ---------------------------------------------------------------------------
# Step results and produced values
# ---------------------------------------------------------------------------


class Step(BaseModel):
    """Result of a single resumption of a computation.

    Args:
        done: Whether the computation has finished.
        value: The produced value, or the terminal value when ``done``.
    """

    model_config = {"frozen": True}

    done: bool = False
    value: Any = None


class ProducedKind(StrEnum):
    """How the driver resolves a produced value."""

    NOTHING = "nothing"
    NESTED = "nested"
    PENDING = "pending"
    PLAIN = "plain"


class Produced(BaseModel):
    """A produced value tagged with its kind.

    For ``NESTED`` the value is a ``Computation``, for ``PENDING`` an
    awaitable, for ``PLAIN`` the value itself and for ``NOTHING`` ``None``.
    """

    model_config = {"frozen": True}

    kind: ProducedKind
    value: Any = None
