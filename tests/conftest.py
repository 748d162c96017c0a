# SPDX-License-Identifier: MIT
# Copyright (c) 2026 LlamaIndex Inc.

from __future__ import annotations

from typing import Any

import pytest

from workflow_interceptors.inputs import (
    CancelWorkflowInput,
    DescribeWorkflowInput,
    HandleQueryInput,
    QueryWorkflowInput,
    ScheduleActivityInput,
    SignalWithStartInput,
    SignalWorkflowInput,
    StartWorkflowInput,
    TerminateWorkflowInput,
)
from workflow_interceptors.interceptor import (
    WorkflowInboundInterceptor,
    WorkflowOutboundInterceptor,
)


class RecordingInterceptor(WorkflowInboundInterceptor, WorkflowOutboundInterceptor):
    """Appends ``<name>:before`` / ``<name>:after`` around ``next``."""

    def __init__(self, name: str, log: list[str]) -> None:
        self.name = name
        self.log = log

    async def schedule_activity(self, input: ScheduleActivityInput, next: Any) -> Any:
        self.log.append(f"{self.name}:before")
        try:
            return await next(input)
        finally:
            self.log.append(f"{self.name}:after")

    def handle_query(self, input: HandleQueryInput, next: Any) -> Any:
        self.log.append(f"{self.name}:before")
        try:
            return next(input)
        finally:
            self.log.append(f"{self.name}:after")


class FakeBackend:
    """Client backend that records the inputs it receives."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, Any]] = []

    async def start_workflow(self, input: StartWorkflowInput) -> str:
        self.calls.append(("start_workflow", input))
        return f"run-{input.workflow_id}"

    async def signal_workflow(self, input: SignalWorkflowInput) -> None:
        self.calls.append(("signal_workflow", input))

    async def signal_with_start(self, input: SignalWithStartInput) -> str:
        self.calls.append(("signal_with_start", input))
        return f"run-{input.workflow_id}"

    async def query_workflow(self, input: QueryWorkflowInput) -> Any:
        self.calls.append(("query_workflow", input))
        return {"query": input.query_name, "args": list(input.args)}

    async def terminate_workflow(self, input: TerminateWorkflowInput) -> None:
        self.calls.append(("terminate_workflow", input))

    async def cancel_workflow(self, input: CancelWorkflowInput) -> None:
        self.calls.append(("cancel_workflow", input))

    async def describe_workflow(self, input: DescribeWorkflowInput) -> Any:
        self.calls.append(("describe_workflow", input))
        return {"workflow_id": input.workflow_id, "status": "RUNNING"}


@pytest.fixture()
def log() -> list[str]:
    return []


@pytest.fixture()
def backend() -> FakeBackend:
    return FakeBackend()
