# SPDX-License-Identifier: MIT
# Copyright (c) 2026 LlamaIndex Inc.
"""
Interception for a single workflow instance.

The workflow runtime creates one :class:`WorkflowCalls` per workflow instance
and routes each inbound call (execute, signal, query, update) and each
outbound call (activities, timers, child workflows, ...) through it, passing
the real implementation as the terminal handler.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Iterable, Sequence

from workflow_interceptors.dispatcher import Dispatcher
from workflow_interceptors.inputs import (
    ContinueAsNewInput,
    ExecuteWorkflowInput,
    HandleQueryInput,
    HandleSignalInput,
    HandleUpdateInput,
    ScheduleActivityInput,
    ScheduleLocalActivityInput,
    SignalExternalWorkflowInput,
    StartChildWorkflowInput,
    StartTimerInput,
)
from workflow_interceptors.operations import InterceptorCategory, OperationKind
from workflow_interceptors.registry import InterceptorRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorkflowInfo:
    """Read-only facts about the workflow instance being intercepted."""

    workflow_id: str
    run_id: str
    workflow_type: str
    task_queue: str
    attempt: int = 1


@dataclass
class WorkflowInterceptors:
    inbound: list[Any] = field(default_factory=list)
    outbound: list[Any] = field(default_factory=list)

    @classmethod
    def coerce(cls, value: Any) -> WorkflowInterceptors:
        """
        Normalize a factory result.

        Anything other than a ``WorkflowInterceptors`` is treated as one or
        more interceptors registered for both directions; handlers they do not
        implement are skipped when chains are built.
        """
        if isinstance(value, WorkflowInterceptors):
            return value
        if value is None:
            return cls()
        items = list(value) if isinstance(value, (list, tuple)) else [value]
        return cls(inbound=list(items), outbound=list(items))


WorkflowInterceptorFactory = Callable[[WorkflowInfo], Any]


class WorkflowCalls:
    """Owning context for the interceptor chains of one workflow instance."""

    def __init__(
        self,
        info: WorkflowInfo,
        factories: Iterable[WorkflowInterceptorFactory] = (),
    ) -> None:
        self.info = info
        inbound: list[Any] = []
        outbound: list[Any] = []
        for factory in factories:
            produced = WorkflowInterceptors.coerce(factory(info))
            inbound.extend(produced.inbound)
            outbound.extend(produced.outbound)
        registry = InterceptorRegistry(
            {
                InterceptorCategory.WORKFLOW_INBOUND: inbound,
                InterceptorCategory.WORKFLOW_OUTBOUND: outbound,
            }
        )
        registry.freeze()
        self._dispatcher = Dispatcher(registry)
        logger.debug(
            "Workflow %s/%s intercepted by %d inbound and %d outbound interceptor(s)",
            info.workflow_id,
            info.run_id,
            len(inbound),
            len(outbound),
        )

    @property
    def registry(self) -> InterceptorRegistry:
        return self._dispatcher.registry

    @property
    def inbound(self) -> Sequence[Any]:
        return self.registry.list_for(InterceptorCategory.WORKFLOW_INBOUND)

    @property
    def outbound(self) -> Sequence[Any]:
        return self.registry.list_for(InterceptorCategory.WORKFLOW_OUTBOUND)

    # inbound

    async def execute(
        self,
        input: ExecuteWorkflowInput,
        terminal: Callable[[ExecuteWorkflowInput], Awaitable[Any]],
    ) -> Any:
        return await self._dispatcher.dispatch(
            InterceptorCategory.WORKFLOW_INBOUND,
            OperationKind.WORKFLOW_EXECUTE,
            input,
            terminal,
        )

    async def handle_signal(
        self,
        input: HandleSignalInput,
        terminal: Callable[[HandleSignalInput], Awaitable[None]],
    ) -> None:
        return await self._dispatcher.dispatch(
            InterceptorCategory.WORKFLOW_INBOUND,
            OperationKind.WORKFLOW_SIGNAL,
            input,
            terminal,
        )

    def handle_query(
        self, input: HandleQueryInput, terminal: Callable[[HandleQueryInput], Any]
    ) -> Any:
        return self._dispatcher.dispatch_sync(
            InterceptorCategory.WORKFLOW_INBOUND,
            OperationKind.WORKFLOW_QUERY,
            input,
            terminal,
        )

    async def handle_update(
        self,
        input: HandleUpdateInput,
        terminal: Callable[[HandleUpdateInput], Awaitable[Any]],
    ) -> Any:
        return await self._dispatcher.dispatch(
            InterceptorCategory.WORKFLOW_INBOUND,
            OperationKind.WORKFLOW_UPDATE,
            input,
            terminal,
        )

    def validate_update(
        self, input: HandleUpdateInput, terminal: Callable[[HandleUpdateInput], None]
    ) -> None:
        return self._dispatcher.dispatch_sync(
            InterceptorCategory.WORKFLOW_INBOUND,
            OperationKind.WORKFLOW_VALIDATE_UPDATE,
            input,
            terminal,
        )

    # outbound

    async def schedule_activity(
        self,
        input: ScheduleActivityInput,
        terminal: Callable[[ScheduleActivityInput], Awaitable[Any]],
    ) -> Any:
        return await self._dispatcher.dispatch(
            InterceptorCategory.WORKFLOW_OUTBOUND,
            OperationKind.SCHEDULE_ACTIVITY,
            input,
            terminal,
        )

    async def schedule_local_activity(
        self,
        input: ScheduleLocalActivityInput,
        terminal: Callable[[ScheduleLocalActivityInput], Awaitable[Any]],
    ) -> Any:
        return await self._dispatcher.dispatch(
            InterceptorCategory.WORKFLOW_OUTBOUND,
            OperationKind.SCHEDULE_LOCAL_ACTIVITY,
            input,
            terminal,
        )

    async def start_timer(
        self,
        input: StartTimerInput,
        terminal: Callable[[StartTimerInput], Awaitable[None]],
    ) -> None:
        return await self._dispatcher.dispatch(
            InterceptorCategory.WORKFLOW_OUTBOUND,
            OperationKind.START_TIMER,
            input,
            terminal,
        )

    async def start_child_workflow(
        self,
        input: StartChildWorkflowInput,
        terminal: Callable[[StartChildWorkflowInput], Awaitable[Any]],
    ) -> Any:
        return await self._dispatcher.dispatch(
            InterceptorCategory.WORKFLOW_OUTBOUND,
            OperationKind.START_CHILD_WORKFLOW,
            input,
            terminal,
        )

    async def signal_external_workflow(
        self,
        input: SignalExternalWorkflowInput,
        terminal: Callable[[SignalExternalWorkflowInput], Awaitable[None]],
    ) -> None:
        return await self._dispatcher.dispatch(
            InterceptorCategory.WORKFLOW_OUTBOUND,
            OperationKind.SIGNAL_EXTERNAL_WORKFLOW,
            input,
            terminal,
        )

    async def continue_as_new(
        self,
        input: ContinueAsNewInput,
        terminal: Callable[[ContinueAsNewInput], Awaitable[Any]],
    ) -> Any:
        return await self._dispatcher.dispatch(
            InterceptorCategory.WORKFLOW_OUTBOUND,
            OperationKind.CONTINUE_AS_NEW,
            input,
            terminal,
        )
