# SPDX-License-Identifier: MIT
# Copyright (c) 2026 LlamaIndex Inc.
"""
Composition of interceptor handlers into a call chain.

A chain is built once per operation and owning context, and is immutable.
Each invocation folds fresh single-use ``next`` continuations from the
terminal outward, then calls the outermost handler:

    I1.method(input, next -> I2.method(input, next -> ... -> terminal(input)))

Code before ``next`` runs in registration order, code after ``next`` runs in
reverse order as the nested calls return.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable, Union

from workflow_interceptors.errors import (
    InterceptorConfigurationError,
    InterceptorMisuseError,
    NextAlreadyCalledError,
)
from workflow_interceptors.interceptor import interceptor_name, is_passthrough
from workflow_interceptors.operations import OPERATIONS, OperationKind, OperationSpec

Terminal = Callable[[Any], Any]
Handler = Callable[[Any, Callable[[Any], Any]], Any]
_Downstream = Callable[[Any], Any]


@dataclass(frozen=True)
class ChainFrame:
    """One interceptor's handler for a single operation."""

    name: str
    handler: Handler


class Next:
    """
    Continuation bound to the remainder of the chain.

    May be called at most once. A second call raises
    :class:`NextAlreadyCalledError` before anything downstream runs.
    """

    __slots__ = ("_downstream", "_caller", "_operation", "_called")

    def __init__(self, downstream: _Downstream, caller: str, operation: str) -> None:
        self._downstream = downstream
        self._caller = caller
        self._operation = operation
        self._called = False

    @property
    def called(self) -> bool:
        return self._called

    def __call__(self, input: Any) -> Any:
        if self._called:
            raise NextAlreadyCalledError(self._caller, self._operation)
        self._called = True
        return self._downstream(input)


def _callable_name(fn: Any) -> str:
    name = getattr(fn, "__qualname__", None) or getattr(fn, "__name__", None)
    return name or repr(fn)


def _check_terminal(terminal: Terminal | None, operation: str) -> Terminal:
    if terminal is None:
        raise InterceptorConfigurationError(
            f"Chain for '{operation}' has no terminal handler"
        )
    if not callable(terminal):
        raise InterceptorConfigurationError(
            f"Terminal handler for '{operation}' is not callable: {terminal!r}"
        )
    return terminal


def resolve_handlers(
    interceptors: Iterable[Any], method_name: str
) -> tuple[ChainFrame, ...]:
    """
    Collect the handlers for `method_name`, in registration order.

    Interceptors without the method, or that only inherit a pass-through
    default, contribute no frame.
    """
    frames = []
    for interceptor in interceptors:
        handler = getattr(interceptor, method_name, None)
        if handler is None or not callable(handler):
            continue
        if is_passthrough(handler):
            continue
        frames.append(ChainFrame(name=interceptor_name(interceptor), handler=handler))
    return tuple(frames)


@dataclass(frozen=True)
class Chain:
    operation: OperationSpec
    frames: tuple[ChainFrame, ...]
    terminal: Terminal

    @property
    def synchronous(self) -> bool:
        return self.operation.synchronous

    def with_terminal(self, terminal: Terminal) -> Chain:
        """A chain with the same handlers ending in a different terminal."""
        return bind_chain(self.operation, self.frames, terminal)

    def describe(self) -> list[str]:
        return [frame.name for frame in self.frames] + [_callable_name(self.terminal)]

    async def invoke(self, input: Any) -> Any:
        if self.synchronous:
            raise InterceptorMisuseError(
                f"'{self.operation.name}' is synchronous; use invoke_sync()"
            )
        terminal = self.terminal

        async def call_terminal(value: Any) -> Any:
            result = terminal(value)
            if inspect.isawaitable(result):
                result = await result
            return result

        downstream: Callable[[Any], Awaitable[Any]] = call_terminal
        for frame in reversed(self.frames):
            downstream = _bind_async(
                frame, Next(downstream, frame.name, self.operation.name)
            )
        return await downstream(input)

    def invoke_sync(self, input: Any) -> Any:
        if not self.synchronous:
            raise InterceptorMisuseError(
                f"'{self.operation.name}' is asynchronous; use invoke()"
            )
        downstream: _Downstream = _bind_sync_terminal(
            self.terminal, self.operation.name
        )
        for frame in reversed(self.frames):
            downstream = _bind_sync(
                frame,
                Next(downstream, frame.name, self.operation.name),
                self.operation.name,
            )
        return downstream(input)


def _bind_async(frame: ChainFrame, next: Next) -> Callable[[Any], Awaitable[Any]]:
    async def call(value: Any) -> Any:
        result = frame.handler(value, next)
        if inspect.isawaitable(result):
            result = await result
        return result

    return call


def _reject_awaitable(result: Any, who: str, operation: str) -> Any:
    if inspect.isawaitable(result):
        if inspect.iscoroutine(result):
            result.close()
        raise InterceptorMisuseError(
            f"{who} returned an awaitable for synchronous operation '{operation}'"
        )
    return result


def _bind_sync_terminal(terminal: Terminal, operation: str) -> _Downstream:
    def call(value: Any) -> Any:
        return _reject_awaitable(terminal(value), "Terminal handler", operation)

    return call


def _bind_sync(frame: ChainFrame, next: Next, operation: str) -> _Downstream:
    def call(value: Any) -> Any:
        return _reject_awaitable(
            frame.handler(value, next), f"Interceptor '{frame.name}'", operation
        )

    return call


def build_chain(
    interceptors: Iterable[Any],
    operation: Union[OperationKind, OperationSpec],
    terminal: Terminal | None,
) -> Chain:
    """
    Compose the chain for one operation.

    Raises :class:`InterceptorConfigurationError` if `terminal` is missing.
    Building has no side effects; nothing runs until the chain is invoked.
    """
    spec = OPERATIONS[operation] if isinstance(operation, OperationKind) else operation
    return bind_chain(spec, resolve_handlers(interceptors, spec.method_name), terminal)


def bind_chain(
    operation: OperationSpec,
    frames: tuple[ChainFrame, ...],
    terminal: Terminal | None,
) -> Chain:
    """Attach `terminal` to already resolved frames."""
    return Chain(
        operation=operation,
        frames=frames,
        terminal=_check_terminal(terminal, operation.name),
    )
