# AgriShield - Weather-Triggered Crop Insurance Automation
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Performance monitoring decorator for service operations."""

import inspect
import logging
import time
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import ParamSpec, TypeVar

from beartype import beartype

logger = logging.getLogger(__name__)

P = ParamSpec("P")
T = TypeVar("T")


@beartype
def performance_monitor(
    operation_name: str,
    max_duration_ms: int = 2000,
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """Log duration of an async service operation.

    Slow calls are logged at WARNING, failures at ERROR (and re-raised),
    everything else at DEBUG.

    Args:
        operation_name: Name of the operation for monitoring
        max_duration_ms: Alert threshold in milliseconds
    """

    def decorator(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        if not inspect.iscoroutinefunction(func):
            raise TypeError(f"{operation_name}: performance_monitor needs a coroutine")

        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            start_time = time.perf_counter()
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                duration_ms = (time.perf_counter() - start_time) * 1000
                logger.error(
                    "%s failed after %.2fms: %s", operation_name, duration_ms, e
                )
                raise

            duration_ms = (time.perf_counter() - start_time) * 1000
            if duration_ms > max_duration_ms:
                logger.warning(
                    "Slow operation %s: %.2fms > %dms threshold",
                    operation_name,
                    duration_ms,
                    max_duration_ms,
                )
            else:
                logger.debug("%s completed in %.2fms", operation_name, duration_ms)
            return result

        return wrapper

    return decorator
