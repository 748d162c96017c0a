# SPDX-License-Identifier: MIT
# Copyright (c) 2026 LlamaIndex Inc.
"""
Interceptor configuration supplied when a worker or client is constructed.

Interceptors can be given directly as objects, or as ``module:attribute``
import paths (for example from the environment):

    WORKFLOW_INTERCEPTORS_CLIENT=myapp.interceptors:Auth,myapp.interceptors:Tracing
"""

from __future__ import annotations

import importlib
import logging
import os
from typing import Any, Callable, Iterable, Mapping

from pydantic import BaseModel, ConfigDict, Field
from workflow_interceptors.errors import InterceptorConfigurationError

logger = logging.getLogger(__name__)

ENV_PREFIX = "WORKFLOW_INTERCEPTORS_"

# environment suffix -> config field
ENV_FIELDS = {
    "ACTIVITY_INBOUND": "activity_inbound",
    "ACTIVITY_OUTBOUND": "activity_outbound",
    "CLIENT": "client",
    "WORKFLOW": "workflow_factories",
}


def import_object(path: str) -> Any:
    """Import ``package.module:attribute`` (or ``package.module.attribute``)."""
    module_name, sep, attr = path.strip().partition(":")
    if not sep:
        module_name, _, attr = module_name.rpartition(".")
    if not module_name or not attr:
        raise InterceptorConfigurationError(
            f"Invalid import path {path!r}, expected 'package.module:attribute'"
        )
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise InterceptorConfigurationError(
            f"Unable to import module '{module_name}' for {path!r}: {e}"
        ) from e
    obj = module
    for part in attr.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError:
            raise InterceptorConfigurationError(
                f"Module '{module_name}' has no attribute '{attr}'"
            ) from None
    return obj


def _load_interceptor(path: str) -> Any:
    obj = import_object(path)
    # classes are instantiated with no arguments
    if isinstance(obj, type):
        return obj()
    return obj


def _load_workflow_factory(path: str) -> Callable[..., Any]:
    # classes are constructed per workflow instance with its WorkflowInfo
    obj = import_object(path)
    if not callable(obj):
        raise InterceptorConfigurationError(
            f"Workflow interceptor factory {path!r} is not callable"
        )
    return obj


def _split_paths(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class InterceptorsConfig(BaseModel):
    """
    Interceptors for every category, in registration order.

    Attributes:
        activity_inbound: Wrap activity execution on a worker.
        activity_outbound: Wrap calls made from inside activities.
        client: Wrap calls made through a workflow client.
        workflow_factories: Called once per workflow instance with its
            ``WorkflowInfo``. Each returns a ``WorkflowInterceptors`` or one or
            more interceptor objects, which then take part in both the inbound
            and outbound workflow categories.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    activity_inbound: list[Any] = Field(default_factory=list)
    activity_outbound: list[Any] = Field(default_factory=list)
    client: list[Any] = Field(default_factory=list)
    workflow_factories: list[Callable[..., Any]] = Field(default_factory=list)

    def merge(self, other: InterceptorsConfig) -> InterceptorsConfig:
        """Concatenate two configs; this config's interceptors run outermost."""
        return InterceptorsConfig(
            activity_inbound=[*self.activity_inbound, *other.activity_inbound],
            activity_outbound=[*self.activity_outbound, *other.activity_outbound],
            client=[*self.client, *other.client],
            workflow_factories=[
                *self.workflow_factories,
                *other.workflow_factories,
            ],
        )

    @classmethod
    def from_import_paths(
        cls,
        activity_inbound: Iterable[str] = (),
        activity_outbound: Iterable[str] = (),
        client: Iterable[str] = (),
        workflow_factories: Iterable[str] = (),
    ) -> InterceptorsConfig:
        return cls(
            activity_inbound=[_load_interceptor(p) for p in activity_inbound],
            activity_outbound=[_load_interceptor(p) for p in activity_outbound],
            client=[_load_interceptor(p) for p in client],
            workflow_factories=[_load_workflow_factory(p) for p in workflow_factories],
        )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> InterceptorsConfig:
        """
        Load import paths from ``WORKFLOW_INTERCEPTORS_<CATEGORY>`` variables.

        Unset variables mean no interceptors for that category.
        """
        env = os.environ if environ is None else environ
        paths: dict[str, list[str]] = {}
        for suffix, field_name in ENV_FIELDS.items():
            value = env.get(ENV_PREFIX + suffix)
            if value:
                paths[field_name] = _split_paths(value)
                logger.debug(
                    "Loading %s interceptors from %s%s: %s",
                    field_name,
                    ENV_PREFIX,
                    suffix,
                    paths[field_name],
                )
        return cls.from_import_paths(**paths)
