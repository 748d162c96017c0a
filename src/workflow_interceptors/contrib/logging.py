# SPDX-License-Identifier: MIT
# Copyright (c) 2026 LlamaIndex Inc.
"""Interceptor that logs the start and outcome of every intercepted call."""

from __future__ import annotations

import logging
from typing import Any, Callable

from workflow_interceptors.interceptor import (
    ActivityInboundInterceptor,
    ActivityOutboundInterceptor,
    ClientInterceptor,
    WorkflowInboundInterceptor,
    WorkflowOutboundInterceptor,
)
from workflow_interceptors.operations import OperationKind

default_logger = logging.getLogger(__name__)


def _logged(operation: OperationKind) -> Callable[..., Any]:
    if operation.synchronous:

        def sync_handler(self: LoggingInterceptor, input: Any, next: Any) -> Any:
            self._started(operation)
            try:
                result = next(input)
            except Exception as e:
                self._failed(operation, e)
                raise
            self._completed(operation)
            return result

        sync_handler.__name__ = operation.method_name
        return sync_handler

    async def async_handler(self: LoggingInterceptor, input: Any, next: Any) -> Any:
        self._started(operation)
        try:
            result = await next(input)
        except Exception as e:
            self._failed(operation, e)
            raise
        self._completed(operation)
        return result

    async_handler.__name__ = operation.method_name
    return async_handler


class LoggingInterceptor(
    WorkflowInboundInterceptor,
    WorkflowOutboundInterceptor,
    ActivityInboundInterceptor,
    ActivityOutboundInterceptor,
    ClientInterceptor,
):
    """
    Logs ``"<operation> started"`` before delegating and
    ``"<operation> completed"`` or ``"<operation> failed"`` afterwards.

    Failures are re-raised unchanged.
    """

    def __init__(
        self, logger: logging.Logger | None = None, level: int = logging.INFO
    ) -> None:
        self.logger = logger or default_logger
        self.level = level

    def _started(self, operation: OperationKind) -> None:
        self.logger.log(self.level, "%s started", operation.value)

    def _completed(self, operation: OperationKind) -> None:
        self.logger.log(self.level, "%s completed", operation.value)

    def _failed(self, operation: OperationKind, error: Exception) -> None:
        self.logger.log(
            max(self.level, logging.WARNING),
            "%s failed: %s",
            operation.value,
            error,
        )

    execute_workflow = _logged(OperationKind.WORKFLOW_EXECUTE)
    handle_signal = _logged(OperationKind.WORKFLOW_SIGNAL)
    handle_query = _logged(OperationKind.WORKFLOW_QUERY)
    handle_update = _logged(OperationKind.WORKFLOW_UPDATE)
    validate_update = _logged(OperationKind.WORKFLOW_VALIDATE_UPDATE)
    schedule_activity = _logged(OperationKind.SCHEDULE_ACTIVITY)
    schedule_local_activity = _logged(OperationKind.SCHEDULE_LOCAL_ACTIVITY)
    start_timer = _logged(OperationKind.START_TIMER)
    start_child_workflow = _logged(OperationKind.START_CHILD_WORKFLOW)
    signal_external_workflow = _logged(OperationKind.SIGNAL_EXTERNAL_WORKFLOW)
    continue_as_new = _logged(OperationKind.CONTINUE_AS_NEW)
    execute_activity = _logged(OperationKind.ACTIVITY_EXECUTE)
    heartbeat = _logged(OperationKind.ACTIVITY_HEARTBEAT)
    start_workflow = _logged(OperationKind.CLIENT_START)
    signal_workflow = _logged(OperationKind.CLIENT_SIGNAL)
    signal_with_start = _logged(OperationKind.CLIENT_SIGNAL_WITH_START)
    query_workflow = _logged(OperationKind.CLIENT_QUERY)
    terminate_workflow = _logged(OperationKind.CLIENT_TERMINATE)
    cancel_workflow = _logged(OperationKind.CLIENT_CANCEL)
    describe_workflow = _logged(OperationKind.CLIENT_DESCRIBE)
