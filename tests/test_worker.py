# SPDX-License-Identifier: MIT
# Copyright (c) 2026 LlamaIndex Inc.

from __future__ import annotations

from typing import Any

import pytest

from workflow_interceptors.activity import ActivityInfo
from workflow_interceptors.config import InterceptorsConfig
from workflow_interceptors.errors import RegistryFrozenError
from workflow_interceptors.inputs import ExecuteActivityInput, HeartbeatInput
from workflow_interceptors.interceptor import (
    ActivityInboundInterceptor,
    ActivityOutboundInterceptor,
)
from workflow_interceptors.operations import InterceptorCategory
from workflow_interceptors.worker import Worker
from workflow_interceptors.workflow import WorkflowInfo


class Timing(ActivityInboundInterceptor):
    def __init__(self) -> None:
        self.seen: list[str] = []

    async def execute_activity(self, input: ExecuteActivityInput, next: Any) -> Any:
        self.seen.append(input.activity_type)
        return await next(input)


class HeartbeatCounter(ActivityOutboundInterceptor):
    def __init__(self) -> None:
        self.count = 0

    def heartbeat(self, input: HeartbeatInput, next: Any) -> None:
        self.count += 1
        return next(input)


def _activity_info(activity_type: str = "sendEmail") -> ActivityInfo:
    return ActivityInfo(
        activity_id="1",
        activity_type=activity_type,
        workflow_id="wf",
        task_queue="emails",
    )


async def test_activity_calls_share_worker_chain() -> None:
    timing = Timing()
    worker = Worker("emails", InterceptorsConfig(activity_inbound=[timing]))

    async def send(input: ExecuteActivityInput) -> str:
        return f"sent:{input.args[0]}"

    first = worker.activity_calls(_activity_info())
    second = worker.activity_calls(_activity_info("sendSms"))

    assert (
        await first.execute(
            ExecuteActivityInput(activity_type="sendEmail", args=("a@example.com",)),
            send,
        )
        == "sent:a@example.com"
    )
    await second.execute(
        ExecuteActivityInput(activity_type="sendSms", args=("+1",)), send
    )

    assert timing.seen == ["sendEmail", "sendSms"]


def test_heartbeat_goes_through_outbound_chain() -> None:
    counter = HeartbeatCounter()
    worker = Worker("emails", InterceptorsConfig(activity_outbound=[counter]))
    details: list[Any] = []

    calls = worker.activity_calls(_activity_info())
    calls.heartbeat(HeartbeatInput(args=(50,)), lambda input: details.extend(input.args))

    assert counter.count == 1
    assert details == [50]


def test_worker_freezes_registry_once_active() -> None:
    worker = Worker("emails")
    worker.registry.register(InterceptorCategory.ACTIVITY_INBOUND, [Timing()])

    worker.workflow_calls(WorkflowInfo("wf", "run", "W", "emails"))

    with pytest.raises(RegistryFrozenError):
        worker.registry.register(InterceptorCategory.ACTIVITY_INBOUND, [])


def test_workflow_calls_use_config_factories() -> None:
    built: list[WorkflowInfo] = []

    def factory(info: WorkflowInfo) -> None:
        built.append(info)

    worker = Worker("orders", InterceptorsConfig(workflow_factories=[factory]))
    info = WorkflowInfo("wf", "run", "OrderWorkflow", "orders")
    worker.workflow_calls(info)

    assert built == [info]
