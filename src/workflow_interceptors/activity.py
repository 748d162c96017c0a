# SPDX-License-Identifier: MIT
# Copyright (c) 2026 LlamaIndex Inc.

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from workflow_interceptors.dispatcher import Dispatcher
from workflow_interceptors.inputs import ExecuteActivityInput, HeartbeatInput
from workflow_interceptors.operations import InterceptorCategory, OperationKind


@dataclass(frozen=True)
class ActivityInfo:
    """Read-only facts about the activity attempt being intercepted."""

    activity_id: str
    activity_type: str
    workflow_id: str
    task_queue: str
    attempt: int = 1


class ActivityCalls:
    """
    Interception for one activity invocation.

    Shares the worker's dispatcher, so chains built for one activity are
    reused by every other activity on the same worker.
    """

    def __init__(self, info: ActivityInfo, dispatcher: Dispatcher) -> None:
        self.info = info
        self._dispatcher = dispatcher

    async def execute(
        self,
        input: ExecuteActivityInput,
        terminal: Callable[[ExecuteActivityInput], Awaitable[Any]],
    ) -> Any:
        return await self._dispatcher.dispatch(
            InterceptorCategory.ACTIVITY_INBOUND,
            OperationKind.ACTIVITY_EXECUTE,
            input,
            terminal,
        )

    def heartbeat(
        self, input: HeartbeatInput, terminal: Callable[[HeartbeatInput], None]
    ) -> None:
        return self._dispatcher.dispatch_sync(
            InterceptorCategory.ACTIVITY_OUTBOUND,
            OperationKind.ACTIVITY_HEARTBEAT,
            input,
            terminal,
        )
