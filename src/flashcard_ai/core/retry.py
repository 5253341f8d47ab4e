"""core.retry

Reusable retry utilities with exponential back-off + optional jitter.
Designed to run in the **core** layer and depends only on Python stdlib + Pydantic.

The loop is explicit and bounded: one initial attempt plus `max_retries`
retries, strictly sequential. Waiting between attempts is an ``await`` so other
coroutines keep running on the same event loop.
"""

from __future__ import annotations

import asyncio
import functools
import logging
import secrets
from typing import TYPE_CHECKING, ParamSpec, TypeVar

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

P = ParamSpec('P')
T = TypeVar('T')

logger = logging.getLogger(__name__)


class RetryStrategy(BaseModel):
    """Configuration for exponential back-off retry with optional jitter."""

    max_retries: int = Field(default=3, ge=0, description='Retries after the first call')
    base_backoff_sec: float = Field(default=1.0, ge=0.0, description='Delay before the first retry (seconds)')
    max_backoff_sec: float = Field(default=60.0, ge=0.0, description='Upper bound for the exponential part')
    jitter: bool = Field(default=True, description='Add random jitter in [0, 1) seconds to each interval')

    model_config = {
        'frozen': True,
    }

    @property
    def max_attempts(self) -> int:
        """Total attempts including the first call."""
        return self.max_retries + 1

    def compute_delay(self, attempt_index: int) -> float:
        """Sleep duration after attempt `attempt_index` (0-based) failed."""
        delay = min(self.base_backoff_sec * (2**attempt_index), self.max_backoff_sec)

        if self.jitter:
            delay += secrets.randbelow(1000) / 1000

        return delay


def with_retry(
    strategy: RetryStrategy | None = None,
    retry_on: tuple[type[BaseException], ...] | None = None,
    retry_if: Callable[[T], bool] | None = None,
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """Retry decorator for coroutine functions.

    Parameters
    ----------
    strategy
        Retry policy. Defaults to RetryStrategy() if None.
    retry_on
        Exception types that trigger a retry. Defaults to (ConnectionError,).
        Once the budget is spent the last exception propagates unchanged.
    retry_if
        Predicate over a *successful* result that still warrants a retry
        (e.g. a 5xx response). Once the budget is spent the last result is
        returned so the caller can classify it.

    """
    retry_strategy = strategy or RetryStrategy()
    retry_exceptions = retry_on or (ConnectionError,)

    def decorator(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            last_attempt = retry_strategy.max_attempts - 1

            for attempt_index in range(retry_strategy.max_attempts):
                try:
                    result = await func(*args, **kwargs)
                except retry_exceptions as exc:
                    if attempt_index == last_attempt:
                        raise
                    reason = f'{exc.__class__.__name__}: {exc}'
                else:
                    if retry_if is None or attempt_index == last_attempt or not retry_if(result):
                        return result
                    reason = f'retryable result {result!r}'

                delay = retry_strategy.compute_delay(attempt_index)
                logger.warning(
                    'Attempt %d/%d failed (%s); retrying in %.2fs',
                    attempt_index + 1,
                    retry_strategy.max_attempts,
                    reason,
                    delay,
                )
                await asyncio.sleep(delay)

            # max_attempts >= 1, so the loop always returns or raises
            raise AssertionError('unreachable')  # pragma: no cover

        return wrapper

    return decorator
