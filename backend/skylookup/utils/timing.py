"""
Timing and fault-wrapping decorator for store and resolver calls.

Every coroutine that touches Valkey, the relational store or the network is
wrapped once with ``timed``. The wrapper logs the call duration at DEBUG and
turns library faults into ``InternalFailure``. Calls declared with
``swallow=True`` log the fault and return ``None`` instead, so a failing
write-back or enrichment never blocks the primary result.
"""

import functools
import logging
import time
from typing import Any, Awaitable, Callable, Optional, TypeVar

from .errors import ExternalResolverFailure, InternalFailure, SkyLookupError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def timed(
    swallow: bool = False, name: Optional[str] = None
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[Optional[T]]]]:
    """
    Wrap an async callable with timing and uniform error handling.

    Args:
        swallow: Log faults and return None instead of raising InternalFailure
        name: Label used in log lines, defaults to the function's qualified name

    Returns:
        Decorator applying the wrapper
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[Optional[T]]]:
        label = name or func.__qualname__

        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Optional[T]:
            start = time.perf_counter()
            try:
                return await func(*args, **kwargs)
            except (ExternalResolverFailure, InternalFailure) as e:
                if swallow:
                    logger.error(f"{label} failed: {e.description}")
                    return None
                raise
            except SkyLookupError:
                raise
            except Exception as e:
                logger.error(f"{label} failed: {type(e).__name__}: {e}")
                if swallow:
                    return None
                raise InternalFailure() from e
            finally:
                elapsed_ms = (time.perf_counter() - start) * 1000
                logger.debug(f"{label} took {elapsed_ms:.1f}ms")

        return wrapper

    return decorator
