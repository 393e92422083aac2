"""Async utility functions."""

import asyncio
from typing import Awaitable, Callable, Optional, Tuple, Type, TypeVar

T = TypeVar('T')


async def retry_with_backoff(
    func: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    base_delay: float = 1.0,
    backoff_factor: float = 2.0,
    max_delay: float = 60.0,
    retry_on: Tuple[Type[Exception], ...] = (Exception,),
    on_retry: Optional[Callable[[int, Exception, float], None]] = None,
) -> T:
    """Call func until it succeeds or max_attempts is reached.

    After failed attempt ``n`` (1-based) the wait is
    ``base_delay * backoff_factor ** n``, capped at ``max_delay``. The last
    failure is re-raised. ``on_retry(attempt, error, delay)`` is called
    before each wait.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    for attempt in range(1, max_attempts + 1):
        try:
            return await func()
        except retry_on as e:
            if attempt == max_attempts:
                raise

            delay = min(base_delay * backoff_factor ** attempt, max_delay)
            if on_retry:
                on_retry(attempt, e, delay)
            await asyncio.sleep(delay)

    raise AssertionError("unreachable")
