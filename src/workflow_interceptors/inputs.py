# SPDX-License-Identifier: MIT
# Copyright (c) 2026 LlamaIndex Inc.
"""
Inputs handed to interceptors for each intercepted operation.

Every input is a frozen snapshot. Interceptors that want to change what the
rest of the chain sees build a replacement with ``replace``/``with_headers``
and pass it to ``next``. Unknown keyword fields are kept, so an interceptor
can attach its own metadata for interceptors further down the chain.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from typing_extensions import Self


class InvocationInput(BaseModel):
    """
    Base input for one intercepted call.

    Attributes:
        args: Positional arguments of the call.
        headers: Opaque metadata propagated alongside the call. Headers flow
            unchanged unless an interceptor passes a replacement to ``next``.
    """

    model_config = ConfigDict(
        frozen=True, extra="allow", arbitrary_types_allowed=True
    )

    args: tuple[Any, ...] = ()
    headers: dict[str, Any] = Field(default_factory=dict)

    def replace(self, **changes: Any) -> Self:
        """Return a copy with the given fields (declared or extra) replaced."""
        return self.model_copy(update=changes)

    def with_headers(self, **headers: Any) -> Self:
        """Return a copy whose headers are merged with ``headers``."""
        return self.model_copy(update={"headers": {**self.headers, **headers}})

    @property
    def extras(self) -> dict[str, Any]:
        """Metadata attached by interceptors beyond the declared fields."""
        return dict(self.model_extra or {})


# Workflow inbound


class ExecuteWorkflowInput(InvocationInput):
    workflow_type: str


class HandleSignalInput(InvocationInput):
    signal_name: str


class HandleQueryInput(InvocationInput):
    query_id: str
    query_name: str


class HandleUpdateInput(InvocationInput):
    update_id: str
    update_name: str


# Workflow outbound


class ScheduleActivityInput(InvocationInput):
    activity_type: str
    activity_id: Optional[str] = None
    task_queue: Optional[str] = None
    start_to_close_timeout: Optional[timedelta] = None
    schedule_to_close_timeout: Optional[timedelta] = None
    heartbeat_timeout: Optional[timedelta] = None


class ScheduleLocalActivityInput(InvocationInput):
    activity_type: str
    activity_id: Optional[str] = None
    start_to_close_timeout: Optional[timedelta] = None
    local_retry_threshold: Optional[timedelta] = None


class StartTimerInput(InvocationInput):
    duration: timedelta
    seq: int = 0


class StartChildWorkflowInput(InvocationInput):
    workflow_type: str
    workflow_id: Optional[str] = None
    task_queue: Optional[str] = None


class SignalExternalWorkflowInput(InvocationInput):
    workflow_id: str
    signal_name: str
    run_id: Optional[str] = None


class ContinueAsNewInput(InvocationInput):
    workflow_type: Optional[str] = None
    task_queue: Optional[str] = None


# Activity


class ExecuteActivityInput(InvocationInput):
    activity_type: str


class HeartbeatInput(InvocationInput):
    """Heartbeat details travel in ``args``."""


# Client


class StartWorkflowInput(InvocationInput):
    workflow_type: str
    workflow_id: str
    task_queue: str
    memo: dict[str, Any] = Field(default_factory=dict)


class SignalWorkflowInput(InvocationInput):
    workflow_id: str
    signal_name: str
    run_id: Optional[str] = None


class SignalWithStartInput(InvocationInput):
    workflow_type: str
    workflow_id: str
    task_queue: str
    signal_name: str
    signal_args: tuple[Any, ...] = ()


class QueryWorkflowInput(InvocationInput):
    workflow_id: str
    query_name: str
    run_id: Optional[str] = None


class TerminateWorkflowInput(InvocationInput):
    workflow_id: str
    reason: Optional[str] = None
    run_id: Optional[str] = None


class CancelWorkflowInput(InvocationInput):
    workflow_id: str
    run_id: Optional[str] = None


class DescribeWorkflowInput(InvocationInput):
    workflow_id: str
    run_id: Optional[str] = None
