# SPDX-License-Identifier: MIT
# Copyright (c) 2026 LlamaIndex Inc.

from __future__ import annotations

import logging

from workflow_interceptors.activity import ActivityCalls, ActivityInfo
from workflow_interceptors.config import InterceptorsConfig
from workflow_interceptors.dispatcher import Dispatcher
from workflow_interceptors.registry import InterceptorRegistry
from workflow_interceptors.workflow import WorkflowCalls, WorkflowInfo

logger = logging.getLogger(__name__)


class Worker:
    """
    Owning context for the interceptors of a worker process.

    Activity interceptors are registered once for the worker and their chains
    are shared across activity invocations. Workflow interceptors are created
    per workflow instance from ``InterceptorsConfig.workflow_factories``.
    """

    def __init__(
        self,
        task_queue: str,
        interceptors: InterceptorsConfig | None = None,
    ) -> None:
        self.task_queue = task_queue
        self.config = interceptors or InterceptorsConfig()
        self.registry = InterceptorRegistry.from_config(self.config)
        self._dispatcher = Dispatcher(self.registry)

    def _activate(self) -> None:
        if not self.registry.frozen:
            self.registry.freeze()
            logger.debug("Worker on '%s' started: %r", self.task_queue, self.registry)

    def workflow_calls(self, info: WorkflowInfo) -> WorkflowCalls:
        self._activate()
        return WorkflowCalls(info, self.config.workflow_factories)

    def activity_calls(self, info: ActivityInfo) -> ActivityCalls:
        self._activate()
        return ActivityCalls(info, self._dispatcher)
