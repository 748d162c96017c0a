# SPDX-License-Identifier: MIT
# Copyright (c) 2026 LlamaIndex Inc.
"""Ready-made interceptors."""

from workflow_interceptors.contrib.headers import HeaderPropagationInterceptor
from workflow_interceptors.contrib.logging import LoggingInterceptor

__all__ = ["HeaderPropagationInterceptor", "LoggingInterceptor"]
