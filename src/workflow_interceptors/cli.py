# SPDX-License-Identifier: MIT
# Copyright (c) 2026 LlamaIndex Inc.
"""CLI entry point for inspecting interceptor configurations."""

from __future__ import annotations

from typing import Any

import click

from workflow_interceptors.chain import build_chain
from workflow_interceptors.config import InterceptorsConfig, import_object
from workflow_interceptors.errors import InterceptorError
from workflow_interceptors.operations import (
    InterceptorCategory,
    OperationKind,
    operations_for,
)
from workflow_interceptors.registry import InterceptorRegistry
from workflow_interceptors.workflow import WorkflowCalls, WorkflowInfo


def _noop_terminal(input: Any) -> Any:
    return None


def _load_config(target: str | None) -> InterceptorsConfig:
    if target is None:
        return InterceptorsConfig.from_env()
    obj = import_object(target)
    if not isinstance(obj, InterceptorsConfig) and callable(obj):
        obj = obj()
    if not isinstance(obj, InterceptorsConfig):
        raise click.BadParameter(
            f"'{target}' is not an InterceptorsConfig (got {type(obj).__name__})",
            param_hint="TARGET",
        )
    return obj


def _registries(
    config: InterceptorsConfig, info: WorkflowInfo
) -> list[InterceptorRegistry]:
    return [
        InterceptorRegistry.from_config(config),
        WorkflowCalls(info, config.workflow_factories).registry,
    ]


@click.group()
def cli() -> None:
    """Tools for working with workflow interceptors."""


@cli.command("show-chain")
@click.argument("target", required=False)
@click.option(
    "--category",
    "categories",
    multiple=True,
    type=click.Choice([c.value for c in InterceptorCategory]),
    help="Only show these categories (repeatable).",
)
@click.option(
    "--workflow-type",
    default="Workflow",
    show_default=True,
    help="Workflow type passed to workflow interceptor factories.",
)
@click.option(
    "--task-queue",
    default="default",
    show_default=True,
    help="Task queue passed to workflow interceptor factories.",
)
def show_chain(
    target: str | None,
    categories: tuple[str, ...],
    workflow_type: str,
    task_queue: str,
) -> None:
    """Print the effective interceptor order for every operation.

    TARGET is a 'package.module:attribute' import path to an
    InterceptorsConfig, or to a callable returning one. Without TARGET the
    configuration is read from WORKFLOW_INTERCEPTORS_* environment variables.
    """
    try:
        config = _load_config(target)
        info = WorkflowInfo(
            workflow_id="show-chain",
            run_id="show-chain",
            workflow_type=workflow_type,
            task_queue=task_queue,
        )
        registries = _registries(config, info)
    except InterceptorError as exc:
        raise click.ClickException(str(exc)) from exc

    selected = [InterceptorCategory(c) for c in categories]
    for category in selected or list(InterceptorCategory):
        click.echo(f"{category.value}:")
        interceptors = [i for r in registries for i in r.list_for(category)]
        for operation in operations_for(category):
            chain = build_chain(interceptors, operation, _noop_terminal)
            names = [frame.name for frame in chain.frames]
            names.append(_terminal_label(operation))
            click.echo(f"  {operation.method_name}: {' -> '.join(names)}")


def _terminal_label(operation: OperationKind) -> str:
    return f"<{operation.value}>"
