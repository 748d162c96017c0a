# SPDX-License-Identifier: MIT
# Copyright (c) 2026 LlamaIndex Inc.
"""
Categories and operation kinds that can be intercepted.

The runtime decides which operations exist; the chain machinery only needs a
method name to look up on each interceptor, so runtimes may dispatch
operations that are not listed here by passing the method name directly.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from workflow_interceptors.errors import (
    InterceptorConfigurationError,
    UnknownOperationError,
)


class InterceptorCategory(str, Enum):
    WORKFLOW_INBOUND = "workflow_inbound"
    WORKFLOW_OUTBOUND = "workflow_outbound"
    ACTIVITY_INBOUND = "activity_inbound"
    ACTIVITY_OUTBOUND = "activity_outbound"
    CLIENT = "client"


class OperationKind(str, Enum):
    # workflow inbound
    WORKFLOW_EXECUTE = "workflow_execute"
    WORKFLOW_SIGNAL = "workflow_signal"
    WORKFLOW_QUERY = "workflow_query"
    WORKFLOW_UPDATE = "workflow_update"
    WORKFLOW_VALIDATE_UPDATE = "workflow_validate_update"
    # workflow outbound
    SCHEDULE_ACTIVITY = "schedule_activity"
    SCHEDULE_LOCAL_ACTIVITY = "schedule_local_activity"
    START_TIMER = "start_timer"
    START_CHILD_WORKFLOW = "start_child_workflow"
    SIGNAL_EXTERNAL_WORKFLOW = "signal_external_workflow"
    CONTINUE_AS_NEW = "continue_as_new"
    # activity
    ACTIVITY_EXECUTE = "activity_execute"
    ACTIVITY_HEARTBEAT = "activity_heartbeat"
    # client
    CLIENT_START = "client_start"
    CLIENT_SIGNAL = "client_signal"
    CLIENT_SIGNAL_WITH_START = "client_signal_with_start"
    CLIENT_QUERY = "client_query"
    CLIENT_TERMINATE = "client_terminate"
    CLIENT_CANCEL = "client_cancel"
    CLIENT_DESCRIBE = "client_describe"

    @property
    def category(self) -> InterceptorCategory:
        return OPERATIONS[self].category

    @property
    def method_name(self) -> str:
        return OPERATIONS[self].method_name

    @property
    def synchronous(self) -> bool:
        return OPERATIONS[self].synchronous


@dataclass(frozen=True)
class OperationSpec:
    """How an operation is looked up on interceptors and how it is invoked."""

    name: str
    category: InterceptorCategory
    method_name: str
    synchronous: bool = False


_WI = InterceptorCategory.WORKFLOW_INBOUND
_WO = InterceptorCategory.WORKFLOW_OUTBOUND
_AI = InterceptorCategory.ACTIVITY_INBOUND
_AO = InterceptorCategory.ACTIVITY_OUTBOUND
_CL = InterceptorCategory.CLIENT

OPERATIONS: dict[OperationKind, OperationSpec] = {
    op: OperationSpec(op.value, category, method_name, synchronous)
    for op, category, method_name, synchronous in [
        (OperationKind.WORKFLOW_EXECUTE, _WI, "execute_workflow", False),
        (OperationKind.WORKFLOW_SIGNAL, _WI, "handle_signal", False),
        (OperationKind.WORKFLOW_QUERY, _WI, "handle_query", True),
        (OperationKind.WORKFLOW_UPDATE, _WI, "handle_update", False),
        (OperationKind.WORKFLOW_VALIDATE_UPDATE, _WI, "validate_update", True),
        (OperationKind.SCHEDULE_ACTIVITY, _WO, "schedule_activity", False),
        (
            OperationKind.SCHEDULE_LOCAL_ACTIVITY,
            _WO,
            "schedule_local_activity",
            False,
        ),
        (OperationKind.START_TIMER, _WO, "start_timer", False),
        (OperationKind.START_CHILD_WORKFLOW, _WO, "start_child_workflow", False),
        (
            OperationKind.SIGNAL_EXTERNAL_WORKFLOW,
            _WO,
            "signal_external_workflow",
            False,
        ),
        (OperationKind.CONTINUE_AS_NEW, _WO, "continue_as_new", False),
        (OperationKind.ACTIVITY_EXECUTE, _AI, "execute_activity", False),
        (OperationKind.ACTIVITY_HEARTBEAT, _AO, "heartbeat", True),
        (OperationKind.CLIENT_START, _CL, "start_workflow", False),
        (OperationKind.CLIENT_SIGNAL, _CL, "signal_workflow", False),
        (OperationKind.CLIENT_SIGNAL_WITH_START, _CL, "signal_with_start", False),
        (OperationKind.CLIENT_QUERY, _CL, "query_workflow", False),
        (OperationKind.CLIENT_TERMINATE, _CL, "terminate_workflow", False),
        (OperationKind.CLIENT_CANCEL, _CL, "cancel_workflow", False),
        (OperationKind.CLIENT_DESCRIBE, _CL, "describe_workflow", False),
    ]
}

Operation = Union[OperationKind, str]


def operations_for(category: InterceptorCategory) -> list[OperationKind]:
    """All known operations owned by a category, in declaration order."""
    return [op for op in OperationKind if OPERATIONS[op].category == category]


def resolve_category(category: InterceptorCategory | str) -> InterceptorCategory:
    try:
        return InterceptorCategory(category)
    except ValueError:
        raise InterceptorConfigurationError(
            f"Unknown interceptor category: {category!r}"
        ) from None


def resolve_operation(
    category: InterceptorCategory | str,
    operation: Operation,
    synchronous: bool = False,
) -> OperationSpec:
    """
    Look up an operation dispatched under `category`.

    Known operations must belong to the category they are dispatched under.
    Any other string is treated as a runtime-defined operation whose
    interceptor method has the same name.
    """
    resolved_category = resolve_category(category)
    try:
        kind = OperationKind(operation)
    except ValueError:
        if not isinstance(operation, str) or not operation.isidentifier():
            raise UnknownOperationError(
                f"Operation {operation!r} is not a valid interceptor method name"
            ) from None
        return OperationSpec(
            name=operation,
            category=resolved_category,
            method_name=operation,
            synchronous=synchronous,
        )
    spec = OPERATIONS[kind]
    if spec.category != resolved_category:
        raise UnknownOperationError(
            f"Operation '{kind.value}' belongs to category "
            f"'{spec.category.value}', "
            f"not '{resolved_category.value}'"
        )
    return spec
