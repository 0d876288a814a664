"""Computations: the suspendable units of work driven by ``InterruptibleTask``.

A computation is resumed step by step.  Each resumption returns a
:class:`~interruptible.types.Step` (or an awaitable of one) that either
carries an intermediate produced value or, once ``done``, the terminal
value.

Generators and async generators are adapted automatically::

    def fetch_all(client):
        users = yield client.get("/users")      # awaited by the driver
        total = yield count_rows(users)         # nested generator, driven first
        return total

Custom computations subclass :class:`Computation` directly.
"""

from __future__ import annotations

import inspect
from abc import ABC, abstractmethod
from collections.abc import AsyncGenerator, Awaitable, Generator
from typing import Any

from interruptible.types import Produced, ProducedKind, Step


class Computation(ABC):
    """A resumable computation.

    ``resume`` and ``throw_into`` may return a ``Step`` directly or an
    awaitable resolving to one.
    """

    @abstractmethod
    def resume(self, value: Any) -> Step | Awaitable[Step]:
        """Continue the computation, sending *value* to its suspension point."""

    @abstractmethod
    def throw_into(self, error: BaseException) -> Step | Awaitable[Step]:
        """Continue the computation by raising *error* at its suspension point."""

    def close(self) -> Awaitable[None] | None:
        """Release an unfinished computation.  No-op by default."""
        return None


class GeneratorComputation(Computation):
    """Adapts a generator; its ``return`` value is the terminal value."""

    def __init__(self, gen: Generator[Any, Any, Any]) -> None:
        self._gen = gen

    def resume(self, value: Any) -> Step:
        try:
            return Step(value=self._gen.send(value))
        except StopIteration as exc:
            return Step(done=True, value=exc.value)

    def throw_into(self, error: BaseException) -> Step:
        try:
            return Step(value=self._gen.throw(error))
        except StopIteration as exc:
            return Step(done=True, value=exc.value)

    def close(self) -> None:
        self._gen.close()

    def __repr__(self) -> str:
        return f"GeneratorComputation({self._gen!r})"


class AsyncGeneratorComputation(Computation):
    """Adapts an async generator.

    Async generators cannot return a value, so the terminal value is
    always ``None``.
    """

    def __init__(self, agen: AsyncGenerator[Any, Any]) -> None:
        self._agen = agen

    async def resume(self, value: Any) -> Step:
        try:
            return Step(value=await self._agen.asend(value))
        except StopAsyncIteration:
            return Step(done=True)

    async def throw_into(self, error: BaseException) -> Step:
        try:
            return Step(value=await self._agen.athrow(error))
        except StopAsyncIteration:
            return Step(done=True)

    async def close(self) -> None:
        await self._agen.aclose()

    def __repr__(self) -> str:
        return f"AsyncGeneratorComputation({self._agen!r})"


def to_computation(obj: Any) -> Computation | None:
    """Return *obj* as a ``Computation``, or ``None`` if it is not one."""
    if isinstance(obj, Computation):
        return obj
    if inspect.isgenerator(obj):
        return GeneratorComputation(obj)
    if inspect.isasyncgen(obj):
        return AsyncGeneratorComputation(obj)
    return None


def classify(value: Any) -> Produced:
    """Tag a produced value with the way the driver must resolve it.

    Only ``None`` counts as "no value"; ``0``, ``False`` and ``""`` are
    plain values.
    """
    if value is None:
        return Produced(kind=ProducedKind.NOTHING)
    computation = to_computation(value)
    if computation is not None:
        return Produced(kind=ProducedKind.NESTED, value=computation)
    if inspect.isawaitable(value):
        return Produced(kind=ProducedKind.PENDING, value=value)
    return Produced(kind=ProducedKind.PLAIN, value=value)
