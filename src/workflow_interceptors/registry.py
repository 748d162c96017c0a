# SPDX-License-Identifier: MIT
# Copyright (c) 2026 LlamaIndex Inc.

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Iterable

from workflow_interceptors.errors import RegistryFrozenError
from workflow_interceptors.operations import InterceptorCategory, resolve_category

if TYPE_CHECKING:
    from workflow_interceptors.config import InterceptorsConfig

logger = logging.getLogger(__name__)


class InterceptorRegistry:
    """
    Ordered interceptors per category for one owning context (worker, client,
    workflow instance).

    Lists are replaced wholesale and never edited in place. Once the owning
    context is active the registry is frozen and becomes read-only, so chains
    built from it can be shared without locking.
    """

    def __init__(
        self,
        interceptors: dict[InterceptorCategory, Iterable[Any]] | None = None,
    ) -> None:
        self._interceptors: dict[InterceptorCategory, tuple[Any, ...]] = {}
        self._frozen = False
        self._generation = 0
        for category, items in (interceptors or {}).items():
            self.register(category, items)

    @classmethod
    def from_config(cls, config: InterceptorsConfig) -> InterceptorRegistry:
        return cls(
            {
                InterceptorCategory.ACTIVITY_INBOUND: config.activity_inbound,
                InterceptorCategory.ACTIVITY_OUTBOUND: config.activity_outbound,
                InterceptorCategory.CLIENT: config.client,
            }
        )

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def generation(self) -> int:
        """Incremented on each registration; cached chains compare against it."""
        return self._generation

    def register(
        self, category: InterceptorCategory | str, interceptors: Iterable[Any]
    ) -> None:
        resolved = resolve_category(category)
        if self._frozen:
            raise RegistryFrozenError(
                f"Cannot register '{resolved.value}' interceptors after the "
                "owning context has started"
            )
        self._interceptors[resolved] = tuple(interceptors)
        self._generation += 1
        logger.debug(
            "Registered %d %s interceptor(s)",
            len(self._interceptors[resolved]),
            resolved.value,
        )

    def list_for(self, category: InterceptorCategory | str) -> tuple[Any, ...]:
        return self._interceptors.get(resolve_category(category), ())

    def freeze(self) -> None:
        self._frozen = True

    def __repr__(self) -> str:
        counts = ", ".join(
            f"{category.value}={len(items)}"
            for category, items in self._interceptors.items()
        )
        return f"InterceptorRegistry({counts}, frozen={self._frozen})"
