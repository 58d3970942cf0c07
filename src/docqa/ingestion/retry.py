"""Retry-with-exponential-backoff combinator for async operations."""

from __future__ import annotations

import asyncio
import functools
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryPolicy:
    """Attempt budget plus exponential delay, applicable to any coroutine.

    The operation runs at most *max_attempts* times.  The delay before
    retry ``i`` (0-based) is ``initial_delay * 2**i`` seconds.  When the
    last attempt fails its exception is re-raised unchanged.

    Parameters
    ----------
    max_attempts:
        Total number of attempts, including the first one.
    initial_delay:
        Delay in seconds before the first retry.
    retry_on:
        Exception types that trigger a retry; anything else propagates
        immediately.
    sleep:
        Awaitable sleep function, replaceable in tests.
    """

    def __init__(
        self,
        max_attempts: int = 3,
        initial_delay: float = 1.0,
        *,
        retry_on: tuple[type[BaseException], ...] = (Exception,),
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self.max_attempts = max_attempts
        self.initial_delay = initial_delay
        self.retry_on = retry_on
        self._sleep = sleep

    def delay(self, retry_index: int) -> float:
        """Seconds to wait before retry number *retry_index* (0-based)."""
        return self.initial_delay * 2**retry_index

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=self.initial_delay, exp_base=2, min=0),
            retry=retry_if_exception_type(self.retry_on),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            sleep=self._sleep,
            reraise=True,
        )

    async def call(self, fn: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> T:
        """Await ``fn(*args, **kwargs)``, retrying per this policy."""
        return await self._retrying()(fn, *args, **kwargs)

    def wrap(self, fn: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        """Return *fn* decorated with this policy."""

        @functools.wraps(fn)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            return await self.call(fn, *args, **kwargs)

        return wrapper

    def __repr__(self) -> str:
        return f"RetryPolicy(max_attempts={self.max_attempts}, initial_delay={self.initial_delay})"
