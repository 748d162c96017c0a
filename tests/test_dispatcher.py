# SPDX-License-Identifier: MIT
# Copyright (c) 2026 LlamaIndex Inc.

from __future__ import annotations

import asyncio
import gc
import weakref
from typing import Any

import pytest
from conftest import RecordingInterceptor
from llama_index_instrumentation.dispatcher import (
    active_instrument_tags,
    instrument_tags,
)

from workflow_interceptors.dispatcher import Dispatcher
from workflow_interceptors.errors import (
    InterceptorConfigurationError,
    InterceptorMisuseError,
    UnknownOperationError,
)
from workflow_interceptors.inputs import (
    HandleQueryInput,
    InvocationInput,
    ScheduleActivityInput,
)
from workflow_interceptors.interceptor import WorkflowOutboundInterceptor
from workflow_interceptors.operations import InterceptorCategory, OperationKind
from workflow_interceptors.registry import InterceptorRegistry

OUTBOUND = InterceptorCategory.WORKFLOW_OUTBOUND
INBOUND = InterceptorCategory.WORKFLOW_INBOUND


class AuthorizationError(Exception):
    pass


def _dispatcher(*interceptors: Any, category: InterceptorCategory = OUTBOUND) -> Dispatcher:
    return Dispatcher(InterceptorRegistry({category: interceptors}))


async def test_log_interceptor_around_schedule_activity() -> None:
    output: list[Any] = []

    class Log(WorkflowOutboundInterceptor):
        async def schedule_activity(self, input: Any, next: Any) -> Any:
            output.append("start")
            result = await next(input)
            output.append("done")
            return result

    terminal_result = {"activity_id": "1", "status": "scheduled"}

    async def terminal(input: ScheduleActivityInput) -> Any:
        output.append(terminal_result)
        return terminal_result

    dispatcher = _dispatcher(Log())
    result = await dispatcher.dispatch(
        OUTBOUND,
        OperationKind.SCHEDULE_ACTIVITY,
        ScheduleActivityInput(activity_type="sendEmail"),
        terminal,
    )

    assert result is terminal_result
    assert output == ["start", terminal_result, "done"]


class Auth(WorkflowOutboundInterceptor):
    def __init__(self, token: str) -> None:
        self.token = token

    async def schedule_activity(self, input: Any, next: Any) -> Any:
        if input.headers.get("auth") != self.token:
            raise AuthorizationError("missing or invalid auth header")
        return await next(input)


async def test_auth_interceptor_rejects_missing_header() -> None:
    reached: list[Any] = []

    async def terminal(input: Any) -> str:
        reached.append(input)
        return "scheduled"

    dispatcher = _dispatcher(Auth("secret"))
    with pytest.raises(AuthorizationError):
        await dispatcher.dispatch(
            OUTBOUND,
            OperationKind.SCHEDULE_ACTIVITY,
            ScheduleActivityInput(activity_type="sendEmail"),
            terminal,
        )
    assert reached == []

    result = await dispatcher.dispatch(
        OUTBOUND,
        OperationKind.SCHEDULE_ACTIVITY,
        ScheduleActivityInput(activity_type="sendEmail", headers={"auth": "secret"}),
        terminal,
    )
    assert result == "scheduled"
    assert len(reached) == 1


async def test_chain_is_cached_per_operation(log: list[str]) -> None:
    async def terminal(input: Any) -> str:
        return "ok"

    dispatcher = _dispatcher(RecordingInterceptor("I1", log))
    first = dispatcher.chain_for(OUTBOUND, OperationKind.SCHEDULE_ACTIVITY, terminal)
    second = dispatcher.chain_for(OUTBOUND, "schedule_activity", terminal)
    timer = dispatcher.chain_for(OUTBOUND, OperationKind.START_TIMER, terminal)

    assert first.frames is second.frames
    assert timer.frames is not first.frames
    assert timer.frames == ()


async def test_different_terminal_reuses_cached_frames(log: list[str]) -> None:
    async def first(input: Any) -> str:
        return "first"

    async def second(input: Any) -> str:
        return "second"

    dispatcher = _dispatcher(RecordingInterceptor("I1", log))
    input = ScheduleActivityInput(activity_type="a")

    assert await dispatcher.dispatch(OUTBOUND, "schedule_activity", input, first) == "first"
    assert (
        await dispatcher.dispatch(OUTBOUND, "schedule_activity", input, second)
        == "second"
    )
    rebound = dispatcher.chain_for(OUTBOUND, "schedule_activity", second)
    assert rebound.terminal is second
    assert [frame.name for frame in rebound.frames] == ["I1"]


async def test_dispatcher_does_not_retain_terminal(log: list[str]) -> None:
    dispatcher = _dispatcher(RecordingInterceptor("I1", log))

    async def terminal(input: Any) -> str:
        return "ok"

    ref = weakref.ref(terminal)
    result = await dispatcher.dispatch(
        OUTBOUND,
        OperationKind.SCHEDULE_ACTIVITY,
        ScheduleActivityInput(activity_type="a"),
        terminal,
    )
    del terminal
    gc.collect()

    assert result == "ok"
    assert ref() is None


async def test_registration_change_rebuilds_chains(log: list[str]) -> None:
    async def terminal(input: Any) -> str:
        return "ok"

    registry = InterceptorRegistry({OUTBOUND: [RecordingInterceptor("old", log)]})
    dispatcher = Dispatcher(registry)
    before = dispatcher.chain_for(OUTBOUND, "schedule_activity", terminal)

    registry.register(OUTBOUND, [RecordingInterceptor("new", log)])
    after = dispatcher.chain_for(OUTBOUND, "schedule_activity", terminal)

    assert after.frames is not before.frames
    assert [frame.name for frame in before.frames] == ["old"]
    assert [frame.name for frame in after.frames] == ["new"]


async def test_failure_propagates_unchanged() -> None:
    error = RuntimeError("boom")

    async def terminal(input: Any) -> Any:
        raise error

    dispatcher = _dispatcher(Auth("t"))
    with pytest.raises(RuntimeError) as exc_info:
        await dispatcher.dispatch(
            OUTBOUND,
            OperationKind.SCHEDULE_ACTIVITY,
            ScheduleActivityInput(activity_type="a", headers={"auth": "t"}),
            terminal,
        )
    assert exc_info.value is error


async def test_cancellation_unwinds_every_entered_frame(log: list[str]) -> None:
    started = asyncio.Event()

    async def terminal(input: Any) -> Any:
        started.set()
        await asyncio.Event().wait()

    class Cleanup(WorkflowOutboundInterceptor):
        def __init__(self, name: str) -> None:
            self.name = name

        async def schedule_activity(self, input: Any, next: Any) -> Any:
            log.append(f"{self.name}:enter")
            try:
                return await next(input)
            except asyncio.CancelledError:
                log.append(f"{self.name}:cancelled")
                raise
            finally:
                log.append(f"{self.name}:cleanup")

    dispatcher = _dispatcher(Cleanup("outer"), Cleanup("inner"))
    task = asyncio.create_task(
        dispatcher.dispatch(
            OUTBOUND,
            OperationKind.SCHEDULE_ACTIVITY,
            ScheduleActivityInput(activity_type="a"),
            terminal,
        )
    )
    await started.wait()
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert log == [
        "outer:enter",
        "inner:enter",
        "inner:cancelled",
        "inner:cleanup",
        "outer:cancelled",
        "outer:cleanup",
    ]


async def test_concurrent_dispatches_are_independent(log: list[str]) -> None:
    async def terminal(input: ScheduleActivityInput) -> str:
        await asyncio.sleep(0)
        return input.activity_type

    dispatcher = _dispatcher(RecordingInterceptor("I1", log))
    results = await asyncio.gather(
        *[
            dispatcher.dispatch(
                OUTBOUND,
                OperationKind.SCHEDULE_ACTIVITY,
                ScheduleActivityInput(activity_type=f"activity-{i}"),
                terminal,
            )
            for i in range(5)
        ]
    )

    assert results == [f"activity-{i}" for i in range(5)]
    assert log.count("I1:before") == 5
    assert log.count("I1:after") == 5


async def test_dispatch_sets_instrument_tags() -> None:
    seen: dict[str, Any] = {}

    async def terminal(input: Any) -> None:
        seen.update(active_instrument_tags.get())

    dispatcher = _dispatcher()
    with instrument_tags({"run_id": "run-1"}):
        await dispatcher.dispatch(
            OUTBOUND,
            OperationKind.SCHEDULE_ACTIVITY,
            ScheduleActivityInput(activity_type="a"),
            terminal,
        )

    assert seen["run_id"] == "run-1"
    assert seen["interceptor_category"] == "workflow_outbound"
    assert seen["interceptor_operation"] == "schedule_activity"


def test_dispatch_sync_for_queries(log: list[str]) -> None:
    dispatcher = _dispatcher(RecordingInterceptor("I1", log), category=INBOUND)

    result = dispatcher.dispatch_sync(
        INBOUND,
        OperationKind.WORKFLOW_QUERY,
        HandleQueryInput(query_id="q1", query_name="status"),
        lambda input: "running",
    )

    assert result == "running"
    assert log == ["I1:before", "I1:after"]


async def test_mismatched_dispatch_mode_is_rejected() -> None:
    dispatcher = _dispatcher()
    with pytest.raises(InterceptorMisuseError):
        await dispatcher.dispatch(
            INBOUND,
            OperationKind.WORKFLOW_QUERY,
            HandleQueryInput(query_id="q1", query_name="status"),
            lambda input: None,
        )
    with pytest.raises(InterceptorMisuseError):
        dispatcher.dispatch_sync(
            OUTBOUND,
            OperationKind.SCHEDULE_ACTIVITY,
            ScheduleActivityInput(activity_type="a"),
            lambda input: None,
        )


async def test_operation_must_belong_to_category() -> None:
    dispatcher = _dispatcher()
    with pytest.raises(UnknownOperationError):
        await dispatcher.dispatch(
            InterceptorCategory.CLIENT,
            OperationKind.SCHEDULE_ACTIVITY,
            ScheduleActivityInput(activity_type="a"),
            lambda input: None,
        )
    with pytest.raises(UnknownOperationError):
        await dispatcher.dispatch(
            OUTBOUND, "not a method", InvocationInput(), lambda input: None
        )
    with pytest.raises(InterceptorConfigurationError):
        await dispatcher.dispatch(
            "no_such_category", "anything", InvocationInput(), lambda input: None
        )


async def test_runtime_defined_operation() -> None:
    class Custom:
        async def record_marker(self, input: InvocationInput, next: Any) -> Any:
            return ["custom", *(await next(input.replace(args=("changed",))))]

    async def terminal(input: InvocationInput) -> list[Any]:
        return list(input.args)

    dispatcher = _dispatcher(Custom())
    result = await dispatcher.dispatch(
        OUTBOUND, "record_marker", InvocationInput(args=("original",)), terminal
    )
    assert result == ["custom", "changed"]


async def test_missing_terminal_is_configuration_error() -> None:
    dispatcher = _dispatcher()
    with pytest.raises(InterceptorConfigurationError):
        await dispatcher.dispatch(
            OUTBOUND,
            OperationKind.SCHEDULE_ACTIVITY,
            ScheduleActivityInput(activity_type="a"),
            None,  # type: ignore[arg-type]
        )
