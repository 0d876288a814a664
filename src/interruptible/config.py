"""Configuration types for interruptible tasks."""

from __future__ import annotations

from pydantic import BaseModel, Field

from interruptible.types import DEFAULT_INTERRUPT_PREFIX


class TaskConfig(BaseModel):
    """Configuration for an ``InterruptibleTask``.

    Args:
        name: Task name, bound to every log record the task emits.
        interrupt_prefix: Leading part of ``InterruptError`` messages.
        keep_pending_interrupt: Keep an interruption requested while the
            task was idle, so the next run stops at its first boundary.
            By default such a request is discarded when the run starts.
    """

    model_config = {"frozen": True}

    name: str = Field(default="task", min_length=1)
    interrupt_prefix: str = DEFAULT_INTERRUPT_PREFIX
    keep_pending_interrupt: bool = False
