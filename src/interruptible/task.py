"""The task driver: runs a computation step by step, honouring interruptions.

Usage::

    @make_interruptible
    def sync_users(client):
        try:
            users = yield client.fetch_users()   # awaited by the driver
            for user in users:
                yield store(user)                # nested generator, driven first
            return len(users)
        finally:
            client.release()

    pending = sync_users.run(client)
    sync_users.interrupt("shutdown")             # observed at the next boundary
    await pending                                # raises InterruptError
"""

from __future__ import annotations

import asyncio
import functools
import inspect
from collections.abc import Callable
from typing import Any

from interruptible._internal.state import TaskLifecycle, TaskStatus
from interruptible.computation import Computation, classify, to_computation
from interruptible.config import TaskConfig
from interruptible.hooks import HookPoint, TaskHooks
from interruptible.logging import LogContext, get_logger
from interruptible.types import InterruptError, InvocationError, ProducedKind, Step

_log = get_logger(__name__)


def _bind(fn: Callable[..., Any], context: Any) -> Callable[..., Any]:
    """Bind *fn* to *context* the way attribute access binds a method."""
    getter = getattr(fn, "__get__", None)
    if getter is None:
        return functools.partial(fn, context)
    return getter(context, type(context))


async def _resolve_step(step: Any) -> Step:
    if inspect.isawaitable(step):
        step = await step
    return step


async def _close(computation: Computation) -> None:
    closing = computation.close()
    if inspect.isawaitable(closing):
        await closing


class InterruptibleTask:
    """Drives computations produced by one function, one run at a time.

    Calling ``run()`` while a run is in flight raises
    ``TaskStateError``.  Interruption is cooperative and is only observed
    right before the driver resumes a computation.

    Args:
        fn: Callable returning a generator, an async generator or a
            ``Computation``.
        config: Task configuration; defaults to ``TaskConfig()``.
    """

    def __init__(self, fn: Callable[..., Any], *, config: TaskConfig | None = None) -> None:
        self._fn = fn
        self.config = config or TaskConfig()
        self.hooks = TaskHooks()
        self._lifecycle = TaskLifecycle()
        self._interrupted = False
        self._interrupt_reason = ""
        self._result: asyncio.Task[Any] | None = None
        self._stack: list[Computation] = []

    # -- status ------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        """Whether a run is in flight."""
        return self._lifecycle.is_running

    @property
    def is_interrupted(self) -> bool:
        """Whether an interruption has been requested and not yet consumed."""
        return self._interrupted

    @property
    def interrupt_reason(self) -> str:
        """Reason given to the most recent ``interrupt()`` call."""
        return self._interrupt_reason

    @property
    def status(self) -> TaskStatus:
        return self._lifecycle.status

    @property
    def last_outcome(self) -> TaskStatus | None:
        """Terminal status of the most recent run, or None if never run."""
        return self._lifecycle.last_outcome

    @property
    def depth(self) -> int:
        """Number of computations currently being driven (1 = no nesting)."""
        return len(self._stack)

    @property
    def result_handle(self) -> asyncio.Task[Any] | None:
        """The completion handle of the most recent run."""
        return self._result

    # -- control -----------------------------------------------------------

    def run(self, *args: Any, context: Any = None, **kwargs: Any) -> asyncio.Task[Any]:
        """Start the computation and return its completion handle.

        The task function is called with ``*args``/``**kwargs``, bound to
        *context* like a method when one is given.  Awaiting the returned
        handle yields the terminal value or raises ``InterruptError``,
        ``InvocationError`` or whatever fault escaped the computation.

        Must be called with a running event loop.

        Raises:
            TaskStateError: If a run is already in flight.
        """
        loop = asyncio.get_running_loop()
        self._lifecycle.start()
        if not self.config.keep_pending_interrupt:
            self._interrupted = False
        self._result = loop.create_task(
            self._execute(args, kwargs, context), name=f"interruptible:{self.config.name}"
        )
        self._result.add_done_callback(self._on_done)
        return self._result

    def interrupt(self, reason: str = "") -> None:
        """Request that the running computation stop at its next boundary."""
        self._interrupted = True
        self._interrupt_reason = reason
        _log.info("interrupt requested task='%s' reason='%s'", self.config.name, reason)

    async def await_execution(self) -> Any:
        """Wait for the most recent run without starting a new one.

        Returns ``None`` immediately if ``run()`` was never called.
        Cancelling the caller does not cancel the run.
        """
        if self._result is None:
            return None
        return await asyncio.shield(self._result)

    # -- execution ---------------------------------------------------------

    def _start(self, args: tuple[Any, ...], kwargs: dict[str, Any], context: Any) -> Computation:
        fn = self._fn if context is None else _bind(self._fn, context)
        produced = fn(*args, **kwargs)
        computation = to_computation(produced)
        if computation is None:
            raise InvocationError(
                "InterruptibleTask: the task function must return a generator, "
                f"an async generator or a Computation, got {type(produced).__name__}"
            )
        return computation

    async def _execute(
        self, args: tuple[Any, ...], kwargs: dict[str, Any], context: Any
    ) -> Any:
        outcome = TaskStatus.FAILED
        with LogContext(task=self.config.name):
            _log.debug("run starting")
            try:
                await self.hooks.fire(HookPoint.START, task=self)
                result = await self._drive(self._start(args, kwargs, context))
                outcome = TaskStatus.COMPLETED
                await self.hooks.fire(HookPoint.FINISHED, task=self, result=result)
                _log.debug("run finished")
                return result
            except InterruptError as exc:
                outcome = TaskStatus.INTERRUPTED
                _log.info("run interrupted: %s", exc.reason)
                await self.hooks.fire(HookPoint.INTERRUPTED, task=self, error=exc)
                raise
            except Exception as exc:
                outcome = TaskStatus.FAILED
                _log.debug("run failed: %s: %s", type(exc).__name__, exc)
                await self.hooks.fire(HookPoint.ERROR, task=self, error=exc)
                raise
            finally:
                self._finish(outcome)

    def _finish(self, outcome: TaskStatus) -> None:
        self._interrupted = False
        self._lifecycle.finish(outcome)
        self._lifecycle.reset()

    def _on_done(self, handle: asyncio.Task[Any]) -> None:
        # A handle cancelled before its first step never enters _execute.
        if handle is self._result and self._lifecycle.is_running:
            _log.debug("run cancelled before start task='%s'", self.config.name)
            self._finish(TaskStatus.FAILED)

    async def _drive(self, computation: Computation) -> Any:
        """Resume *computation* until it completes and return its terminal value.

        An interruption observed at a boundary is consumed and thrown into
        the computation.  Whatever it yields while unwinding (cleanup
        awaitables, nested computations) is still resolved; once it
        finishes, the ``InterruptError`` is raised even if it was swallowed.
        """
        self._stack.append(computation)
        try:
            with LogContext(depth=self.depth):
                value: Any = None
                fault: BaseException | None = None
                interruption: InterruptError | None = None
                while True:
                    if self._interrupted:
                        self._interrupted = False
                        interruption = InterruptError(
                            self._interrupt_reason, prefix=self.config.interrupt_prefix
                        )
                        fault = interruption
                        _log.debug("throwing interruption reason='%s'", self._interrupt_reason)

                    if fault is not None:
                        step = await _resolve_step(computation.throw_into(fault))
                        fault = None
                    else:
                        step = await _resolve_step(computation.resume(value))

                    produced = classify(step.value)
                    if produced.kind == ProducedKind.NESTED:
                        _log.debug("driving nested computation")
                        value = await self._drive(produced.value)
                    elif produced.kind == ProducedKind.PENDING:
                        try:
                            value = await produced.value
                        except Exception as exc:
                            # Nothing left to inject into once the computation is done.
                            if step.done:
                                raise
                            value, fault = None, exc
                    else:
                        value = produced.value

                    if step.done:
                        if interruption is not None:
                            raise interruption
                        return value
        except BaseException:
            try:
                await _close(computation)
            except Exception:
                _log.warning("closing %r failed", computation, exc_info=True)
            raise
        finally:
            self._stack.pop()

    def __repr__(self) -> str:
        return f"InterruptibleTask(name={self.config.name!r}, status={self.status.value!r})"


def make_interruptible(
    fn: Callable[..., Any] | None = None, *, config: TaskConfig | None = None
) -> Any:
    """Wrap a computation-producing function in an ``InterruptibleTask``.

    Works as a plain call or as a decorator, with or without arguments::

        task = make_interruptible(worker)

        @make_interruptible(config=TaskConfig(name="sync"))
        def sync(): ...
    """
    if fn is None:
        return functools.partial(make_interruptible, config=config)
    return InterruptibleTask(fn, config=config)


as_interruptible = make_interruptible
