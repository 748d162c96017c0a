# SPDX-License-Identifier: MIT
# Copyright (c) 2026 LlamaIndex Inc.
"""
Entry point the hosting runtime calls for every intercepted operation.
"""

from __future__ import annotations

import logging
from threading import Lock
from typing import Any

from llama_index_instrumentation import get_dispatcher
from llama_index_instrumentation.dispatcher import (
    active_instrument_tags,
    instrument_tags,
)
from workflow_interceptors.chain import (
    Chain,
    ChainFrame,
    Terminal,
    bind_chain,
    resolve_handlers,
)
from workflow_interceptors.operations import (
    InterceptorCategory,
    Operation,
    resolve_operation,
)
from workflow_interceptors.registry import InterceptorRegistry

logger = logging.getLogger(__name__)

instrumentation = get_dispatcher(__name__)

_CacheKey = tuple[InterceptorCategory, str, bool]


class Dispatcher:
    """
    Looks up (or builds and caches) the chain for an operation and runs it.

    Resolved handlers are cached per ``(category, operation)`` for the
    lifetime of the dispatcher; the terminal is bound per call and never
    cached. If the registry is re-registered before it is frozen, cached
    handlers are discarded and resolved again rather than edited.

    Results are returned unchanged and failures propagate unchanged, including
    ``asyncio.CancelledError``; the dispatcher never wraps or swallows them.
    """

    def __init__(self, registry: InterceptorRegistry | None = None) -> None:
        self.registry = registry if registry is not None else InterceptorRegistry()
        self._frames: dict[_CacheKey, tuple[ChainFrame, ...]] = {}
        self._generation = self.registry.generation
        self._lock = Lock()

    def chain_for(
        self,
        category: InterceptorCategory | str,
        operation: Operation,
        terminal: Terminal | None,
        synchronous: bool = False,
    ) -> Chain:
        spec = resolve_operation(category, operation, synchronous=synchronous)
        key = (spec.category, spec.name, spec.synchronous)

        # Fast path without lock
        frames = self._frames.get(key)
        if frames is None or self._generation != self.registry.generation:
            with self._lock:
                if self._generation != self.registry.generation:
                    logger.debug(
                        "Registration changed, discarding %d cached chain(s)",
                        len(self._frames),
                    )
                    self._frames = {}
                    self._generation = self.registry.generation
                frames = self._frames.get(key)
                if frames is None:
                    frames = resolve_handlers(
                        self.registry.list_for(spec.category), spec.method_name
                    )
                    self._frames[key] = frames
                    logger.debug(
                        "Resolved %s chain for '%s': %s",
                        spec.category.value,
                        spec.name,
                        " -> ".join(frame.name for frame in frames) or "(empty)",
                    )
        return bind_chain(spec, frames, terminal)

    @instrumentation.span
    async def dispatch(
        self,
        category: InterceptorCategory | str,
        operation: Operation,
        input: Any,
        terminal: Terminal,
    ) -> Any:
        chain = self.chain_for(category, operation, terminal)
        with instrument_tags(self._tags(chain)):
            try:
                return await chain.invoke(input)
            except Exception as e:
                logger.debug("'%s' failed: %r", chain.operation.name, e)
                raise

    @instrumentation.span
    def dispatch_sync(
        self,
        category: InterceptorCategory | str,
        operation: Operation,
        input: Any,
        terminal: Terminal,
    ) -> Any:
        chain = self.chain_for(category, operation, terminal, synchronous=True)
        with instrument_tags(self._tags(chain)):
            try:
                return chain.invoke_sync(input)
            except Exception as e:
                logger.debug("'%s' failed: %r", chain.operation.name, e)
                raise

    def _tags(self, chain: Chain) -> dict[str, Any]:
        return {
            **active_instrument_tags.get(),
            "interceptor_category": chain.operation.category.value,
            "interceptor_operation": chain.operation.name,
        }
