# SPDX-License-Identifier: MIT
# Copyright (c) 2026 LlamaIndex Inc.


class InterceptorError(Exception):
    """Base class for errors raised by the interceptor machinery itself."""


class InterceptorConfigurationError(InterceptorError):
    """An interceptor chain or registry was set up incorrectly."""


class UnknownOperationError(InterceptorConfigurationError):
    """An operation was dispatched under a category that does not own it."""


class RegistryFrozenError(InterceptorError):
    """Interceptors were registered after the owning context became active."""


class InterceptorMisuseError(InterceptorError):
    """An interceptor broke the calling contract of the chain."""


class NextAlreadyCalledError(InterceptorMisuseError):
    """`next` was called more than once for a single invocation."""

    def __init__(self, interceptor_name: str, operation: str) -> None:
        super().__init__(
            f"Interceptor '{interceptor_name}' called next() more than once "
            f"while handling '{operation}'"
        )
        self.interceptor_name = interceptor_name
        self.operation = operation
