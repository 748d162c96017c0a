# SPDX-License-Identifier: MIT
# Copyright (c) 2026 LlamaIndex Inc.

from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence

from workflow_interceptors.dispatcher import Dispatcher
from workflow_interceptors.inputs import (
    CancelWorkflowInput,
    DescribeWorkflowInput,
    QueryWorkflowInput,
    SignalWithStartInput,
    SignalWorkflowInput,
    StartWorkflowInput,
    TerminateWorkflowInput,
)
from workflow_interceptors.operations import InterceptorCategory, OperationKind
from workflow_interceptors.registry import InterceptorRegistry


class ClientBackend(Protocol):
    """The transport that actually talks to the orchestration service."""

    async def start_workflow(self, input: StartWorkflowInput) -> Any: ...

    async def signal_workflow(self, input: SignalWorkflowInput) -> None: ...

    async def signal_with_start(self, input: SignalWithStartInput) -> Any: ...

    async def query_workflow(self, input: QueryWorkflowInput) -> Any: ...

    async def terminate_workflow(self, input: TerminateWorkflowInput) -> None: ...

    async def cancel_workflow(self, input: CancelWorkflowInput) -> None: ...

    async def describe_workflow(self, input: DescribeWorkflowInput) -> Any: ...


class WorkflowClient:
    """
    Client whose calls run through the registered client interceptors before
    reaching the backend.

    Args:
        backend: Transport used for the real calls.
        interceptors: Client interceptors, outermost first. Fixed for the
            lifetime of the client.
    """

    def __init__(
        self,
        backend: ClientBackend,
        interceptors: Sequence[Any] = (),
    ) -> None:
        self.backend = backend
        registry = InterceptorRegistry({InterceptorCategory.CLIENT: interceptors})
        registry.freeze()
        self._dispatcher = Dispatcher(registry)

    @property
    def interceptors(self) -> Sequence[Any]:
        return self._dispatcher.registry.list_for(InterceptorCategory.CLIENT)

    async def _call(self, operation: OperationKind, input: Any, terminal: Any) -> Any:
        return await self._dispatcher.dispatch(
            InterceptorCategory.CLIENT, operation, input, terminal
        )

    async def start_workflow(
        self,
        workflow_type: str,
        *args: Any,
        workflow_id: str,
        task_queue: str,
        headers: Optional[dict[str, Any]] = None,
        memo: Optional[dict[str, Any]] = None,
    ) -> Any:
        """
        Start a workflow execution.

        Returns:
            Whatever the backend returns for a started workflow (typically a
            handle or run id).
        """
        input = StartWorkflowInput(
            workflow_type=workflow_type,
            workflow_id=workflow_id,
            task_queue=task_queue,
            args=args,
            headers=headers or {},
            memo=memo or {},
        )
        return await self._call(
            OperationKind.CLIENT_START, input, self.backend.start_workflow
        )

    async def signal_workflow(
        self,
        workflow_id: str,
        signal_name: str,
        *args: Any,
        run_id: Optional[str] = None,
        headers: Optional[dict[str, Any]] = None,
    ) -> None:
        input = SignalWorkflowInput(
            workflow_id=workflow_id,
            signal_name=signal_name,
            run_id=run_id,
            args=args,
            headers=headers or {},
        )
        return await self._call(
            OperationKind.CLIENT_SIGNAL, input, self.backend.signal_workflow
        )

    async def signal_with_start(
        self,
        workflow_type: str,
        *args: Any,
        workflow_id: str,
        task_queue: str,
        signal_name: str,
        signal_args: Sequence[Any] = (),
        headers: Optional[dict[str, Any]] = None,
    ) -> Any:
        input = SignalWithStartInput(
            workflow_type=workflow_type,
            workflow_id=workflow_id,
            task_queue=task_queue,
            signal_name=signal_name,
            signal_args=tuple(signal_args),
            args=args,
            headers=headers or {},
        )
        return await self._call(
            OperationKind.CLIENT_SIGNAL_WITH_START,
            input,
            self.backend.signal_with_start,
        )

    async def query_workflow(
        self,
        workflow_id: str,
        query_name: str,
        *args: Any,
        run_id: Optional[str] = None,
        headers: Optional[dict[str, Any]] = None,
    ) -> Any:
        input = QueryWorkflowInput(
            workflow_id=workflow_id,
            query_name=query_name,
            run_id=run_id,
            args=args,
            headers=headers or {},
        )
        return await self._call(
            OperationKind.CLIENT_QUERY, input, self.backend.query_workflow
        )

    async def terminate_workflow(
        self,
        workflow_id: str,
        reason: Optional[str] = None,
        run_id: Optional[str] = None,
        headers: Optional[dict[str, Any]] = None,
    ) -> None:
        input = TerminateWorkflowInput(
            workflow_id=workflow_id,
            reason=reason,
            run_id=run_id,
            headers=headers or {},
        )
        return await self._call(
            OperationKind.CLIENT_TERMINATE, input, self.backend.terminate_workflow
        )

    async def cancel_workflow(
        self,
        workflow_id: str,
        run_id: Optional[str] = None,
        headers: Optional[dict[str, Any]] = None,
    ) -> None:
        input = CancelWorkflowInput(
            workflow_id=workflow_id, run_id=run_id, headers=headers or {}
        )
        return await self._call(
            OperationKind.CLIENT_CANCEL, input, self.backend.cancel_workflow
        )

    async def describe_workflow(
        self,
        workflow_id: str,
        run_id: Optional[str] = None,
        headers: Optional[dict[str, Any]] = None,
    ) -> Any:
        input = DescribeWorkflowInput(
            workflow_id=workflow_id, run_id=run_id, headers=headers or {}
        )
        return await self._call(
            OperationKind.CLIENT_DESCRIBE, input, self.backend.describe_workflow
        )
