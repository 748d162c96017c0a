# SPDX-License-Identifier: MIT
# Copyright (c) 2026 LlamaIndex Inc.
"""
Base classes for interceptors.

There is one base class per category. Every method on a base class forwards
to ``next`` unchanged, so subclasses override only the operations they care
about. Inherited defaults are skipped entirely when a chain is built, which
means an interceptor that does not override a method adds no frame to that
operation's chain.

A single class can extend several bases to take part in several categories:

    class Tracing(WorkflowInboundInterceptor, ClientInterceptor):
        async def execute_workflow(self, input, next):
            ...
            return await next(input)
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, TypeVar

from workflow_interceptors.inputs import (
    CancelWorkflowInput,
    ContinueAsNewInput,
    DescribeWorkflowInput,
    ExecuteActivityInput,
    ExecuteWorkflowInput,
    HandleQueryInput,
    HandleSignalInput,
    HandleUpdateInput,
    HeartbeatInput,
    QueryWorkflowInput,
    ScheduleActivityInput,
    ScheduleLocalActivityInput,
    SignalExternalWorkflowInput,
    SignalWithStartInput,
    SignalWorkflowInput,
    StartChildWorkflowInput,
    StartTimerInput,
    StartWorkflowInput,
    TerminateWorkflowInput,
)

I = TypeVar("I")  # noqa: E741
F = TypeVar("F", bound=Callable[..., Any])

AsyncNext = Callable[[I], Awaitable[Any]]
SyncNext = Callable[[I], Any]

PASSTHROUGH_ATTR = "__interceptor_passthrough__"


def passthrough(fn: F) -> F:
    """Mark a default method that only forwards to ``next``."""
    setattr(fn, PASSTHROUGH_ATTR, True)
    return fn


def is_passthrough(fn: Any) -> bool:
    return bool(getattr(fn, PASSTHROUGH_ATTR, False))


class Interceptor:
    """Common base for every interceptor."""

    _name: str | None = None

    @property
    def name(self) -> str:
        return self._name or type(self).__name__

    @name.setter
    def name(self, value: str) -> None:
        self._name = value


def interceptor_name(interceptor: Any) -> str:
    """Display name for any interceptor, including duck-typed ones."""
    name = getattr(interceptor, "name", None)
    if isinstance(name, str) and name:
        return name
    return type(interceptor).__name__


class WorkflowInboundInterceptor(Interceptor):
    """Calls made into a workflow instance."""

    @passthrough
    async def execute_workflow(
        self, input: ExecuteWorkflowInput, next: AsyncNext[ExecuteWorkflowInput]
    ) -> Any:
        return await next(input)

    @passthrough
    async def handle_signal(
        self, input: HandleSignalInput, next: AsyncNext[HandleSignalInput]
    ) -> None:
        return await next(input)

    @passthrough
    def handle_query(
        self, input: HandleQueryInput, next: SyncNext[HandleQueryInput]
    ) -> Any:
        return next(input)

    @passthrough
    async def handle_update(
        self, input: HandleUpdateInput, next: AsyncNext[HandleUpdateInput]
    ) -> Any:
        return await next(input)

    @passthrough
    def validate_update(
        self, input: HandleUpdateInput, next: SyncNext[HandleUpdateInput]
    ) -> None:
        return next(input)


class WorkflowOutboundInterceptor(Interceptor):
    """Calls made by workflow code out to the runtime."""

    @passthrough
    async def schedule_activity(
        self, input: ScheduleActivityInput, next: AsyncNext[ScheduleActivityInput]
    ) -> Any:
        return await next(input)

    @passthrough
    async def schedule_local_activity(
        self,
        input: ScheduleLocalActivityInput,
        next: AsyncNext[ScheduleLocalActivityInput],
    ) -> Any:
        return await next(input)

    @passthrough
    async def start_timer(
        self, input: StartTimerInput, next: AsyncNext[StartTimerInput]
    ) -> None:
        return await next(input)

    @passthrough
    async def start_child_workflow(
        self,
        input: StartChildWorkflowInput,
        next: AsyncNext[StartChildWorkflowInput],
    ) -> Any:
        return await next(input)

    @passthrough
    async def signal_external_workflow(
        self,
        input: SignalExternalWorkflowInput,
        next: AsyncNext[SignalExternalWorkflowInput],
    ) -> None:
        return await next(input)

    @passthrough
    async def continue_as_new(
        self, input: ContinueAsNewInput, next: AsyncNext[ContinueAsNewInput]
    ) -> Any:
        return await next(input)


class ActivityInboundInterceptor(Interceptor):
    @passthrough
    async def execute_activity(
        self, input: ExecuteActivityInput, next: AsyncNext[ExecuteActivityInput]
    ) -> Any:
        return await next(input)


class ActivityOutboundInterceptor(Interceptor):
    @passthrough
    def heartbeat(self, input: HeartbeatInput, next: SyncNext[HeartbeatInput]) -> None:
        return next(input)


class ClientInterceptor(Interceptor):
    """Calls made through a workflow client."""

    @passthrough
    async def start_workflow(
        self, input: StartWorkflowInput, next: AsyncNext[StartWorkflowInput]
    ) -> Any:
        return await next(input)

    @passthrough
    async def signal_workflow(
        self, input: SignalWorkflowInput, next: AsyncNext[SignalWorkflowInput]
    ) -> None:
        return await next(input)

    @passthrough
    async def signal_with_start(
        self, input: SignalWithStartInput, next: AsyncNext[SignalWithStartInput]
    ) -> Any:
        return await next(input)

    @passthrough
    async def query_workflow(
        self, input: QueryWorkflowInput, next: AsyncNext[QueryWorkflowInput]
    ) -> Any:
        return await next(input)

    @passthrough
    async def terminate_workflow(
        self, input: TerminateWorkflowInput, next: AsyncNext[TerminateWorkflowInput]
    ) -> None:
        return await next(input)

    @passthrough
    async def cancel_workflow(
        self, input: CancelWorkflowInput, next: AsyncNext[CancelWorkflowInput]
    ) -> None:
        return await next(input)

    @passthrough
    async def describe_workflow(
        self, input: DescribeWorkflowInput, next: AsyncNext[DescribeWorkflowInput]
    ) -> Any:
        return await next(input)
