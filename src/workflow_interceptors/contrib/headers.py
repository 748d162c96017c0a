# SPDX-License-Identifier: MIT
# Copyright (c) 2026 LlamaIndex Inc.
"""
Carry a context variable across process boundaries in call headers.

On the calling side (client calls, and workflow outbound calls that reach
another workflow or activity) the current value of the context variable is
written into a header. Timers and heartbeats have no receiver and are left
alone. On the receiving side (workflow inbound calls and activity execution)
the header is read back and the context variable is set for the duration of
the call.
"""

from __future__ import annotations

from contextvars import ContextVar
from typing import Any, Callable

from workflow_interceptors.inputs import InvocationInput
from workflow_interceptors.interceptor import (
    ActivityInboundInterceptor,
    ClientInterceptor,
    WorkflowInboundInterceptor,
    WorkflowOutboundInterceptor,
)
from workflow_interceptors.operations import OperationKind

_UNSET: Any = object()


def _outbound(operation: OperationKind) -> Callable[..., Any]:
    async def handler(
        self: HeaderPropagationInterceptor, input: InvocationInput, next: Any
    ) -> Any:
        return await next(self.attach(input))

    handler.__name__ = operation.method_name
    return handler


def _inbound(operation: OperationKind) -> Callable[..., Any]:
    if operation.synchronous:

        def sync_handler(
            self: HeaderPropagationInterceptor, input: InvocationInput, next: Any
        ) -> Any:
            if self.header not in input.headers:
                return next(input)
            token = self.context_var.set(input.headers[self.header])
            try:
                return next(input)
            finally:
                self.context_var.reset(token)

        sync_handler.__name__ = operation.method_name
        return sync_handler

    async def async_handler(
        self: HeaderPropagationInterceptor, input: InvocationInput, next: Any
    ) -> Any:
        if self.header not in input.headers:
            return await next(input)
        token = self.context_var.set(input.headers[self.header])
        try:
            return await next(input)
        finally:
            self.context_var.reset(token)

    async_handler.__name__ = operation.method_name
    return async_handler


class HeaderPropagationInterceptor(
    ClientInterceptor,
    WorkflowOutboundInterceptor,
    WorkflowInboundInterceptor,
    ActivityInboundInterceptor,
):
    """
    Args:
        header: Header key used on the wire.
        context_var: Variable whose value is propagated. Unset or ``None``
            values are not written.
    """

    def __init__(self, header: str, context_var: ContextVar[Any]) -> None:
        self.header = header
        self.context_var = context_var

    def attach(self, input: InvocationInput) -> InvocationInput:
        value = self.context_var.get(_UNSET)
        if value is _UNSET or value is None:
            return input
        return input.with_headers(**{self.header: value})

    # client
    start_workflow = _outbound(OperationKind.CLIENT_START)
    signal_workflow = _outbound(OperationKind.CLIENT_SIGNAL)
    signal_with_start = _outbound(OperationKind.CLIENT_SIGNAL_WITH_START)
    query_workflow = _outbound(OperationKind.CLIENT_QUERY)
    terminate_workflow = _outbound(OperationKind.CLIENT_TERMINATE)
    cancel_workflow = _outbound(OperationKind.CLIENT_CANCEL)
    describe_workflow = _outbound(OperationKind.CLIENT_DESCRIBE)

    # workflow outbound
    schedule_activity = _outbound(OperationKind.SCHEDULE_ACTIVITY)
    schedule_local_activity = _outbound(OperationKind.SCHEDULE_LOCAL_ACTIVITY)
    start_child_workflow = _outbound(OperationKind.START_CHILD_WORKFLOW)
    signal_external_workflow = _outbound(OperationKind.SIGNAL_EXTERNAL_WORKFLOW)
    continue_as_new = _outbound(OperationKind.CONTINUE_AS_NEW)

    # inbound
    execute_workflow = _inbound(OperationKind.WORKFLOW_EXECUTE)
    handle_signal = _inbound(OperationKind.WORKFLOW_SIGNAL)
    handle_query = _inbound(OperationKind.WORKFLOW_QUERY)
    handle_update = _inbound(OperationKind.WORKFLOW_UPDATE)
    validate_update = _inbound(OperationKind.WORKFLOW_VALIDATE_UPDATE)
    execute_activity = _inbound(OperationKind.ACTIVITY_EXECUTE)
