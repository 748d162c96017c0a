# SPDX-License-Identifier: MIT
# Copyright (c) 2026 LlamaIndex Inc.

from workflow_interceptors.activity import ActivityCalls, ActivityInfo
from workflow_interceptors.chain import Chain, Next, build_chain
from workflow_interceptors.client import ClientBackend, WorkflowClient
from workflow_interceptors.config import InterceptorsConfig
from workflow_interceptors.dispatcher import Dispatcher
from workflow_interceptors.errors import (
    InterceptorConfigurationError,
    InterceptorError,
    InterceptorMisuseError,
    NextAlreadyCalledError,
    RegistryFrozenError,
    UnknownOperationError,
)
from workflow_interceptors.inputs import InvocationInput
from workflow_interceptors.interceptor import (
    ActivityInboundInterceptor,
    ActivityOutboundInterceptor,
    ClientInterceptor,
    Interceptor,
    WorkflowInboundInterceptor,
    WorkflowOutboundInterceptor,
)
from workflow_interceptors.operations import InterceptorCategory, OperationKind
from workflow_interceptors.registry import InterceptorRegistry
from workflow_interceptors.worker import Worker
from workflow_interceptors.workflow import (
    WorkflowCalls,
    WorkflowInfo,
    WorkflowInterceptors,
)

__all__ = [
    "ActivityCalls",
    "ActivityInboundInterceptor",
    "ActivityInfo",
    "ActivityOutboundInterceptor",
    "Chain",
    "ClientBackend",
    "ClientInterceptor",
    "Dispatcher",
    "Interceptor",
    "InterceptorCategory",
    "InterceptorConfigurationError",
    "InterceptorError",
    "InterceptorMisuseError",
    "InterceptorRegistry",
    "InterceptorsConfig",
    "InvocationInput",
    "Next",
    "NextAlreadyCalledError",
    "OperationKind",
    "RegistryFrozenError",
    "UnknownOperationError",
    "Worker",
    "WorkflowCalls",
    "WorkflowClient",
    "WorkflowInboundInterceptor",
    "WorkflowInfo",
    "WorkflowInterceptors",
    "WorkflowOutboundInterceptor",
    "build_chain",
]
