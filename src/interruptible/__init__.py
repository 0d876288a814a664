"""Interruptible: cooperative, interruptible drivers for generator-based tasks."""

__version__ = "0.1.0"

from interruptible.computation import (
    AsyncGeneratorComputation,
    Computation,
    GeneratorComputation,
)
from interruptible.config import TaskConfig
from interruptible.hooks import HookPoint, TaskHooks
from interruptible.logging import configure_logging as configure
from interruptible.logging import get_logger
from interruptible.task import InterruptibleTask, as_interruptible, make_interruptible
from interruptible.types import (
    InterruptError,
    InterruptibleError,
    InvocationError,
    Step,
    TaskStateError,
)

__all__ = [
    "AsyncGeneratorComputation",
    "Computation",
    "GeneratorComputation",
    "HookPoint",
    "InterruptError",
    "InterruptibleError",
    "InterruptibleTask",
    "InvocationError",
    "Step",
    "TaskConfig",
    "TaskHooks",
    "TaskStateError",
    "as_interruptible",
    "configure",
    "get_logger",
    "make_interruptible",
]
