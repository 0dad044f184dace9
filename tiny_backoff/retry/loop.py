"""Retry loops driven by a capped backoff sleeper."""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, Tuple, Type, TypeVar

from tiny_backoff.sleeper.async_backoff import AsyncBackoffSleeper
from tiny_backoff.sleeper.backoff import BackoffSleeper, SleepOutcome

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryError(RuntimeError):
    """Raised when a retried call gives up."""

    def __init__(self, message: str, attempts: int, last_exception: BaseException) -> None:
        super().__init__(message)
        self.attempts = attempts
        self.last_exception = last_exception


class RetryExhaustedError(RetryError):
    """The backoff reached its cap and the final attempt failed too."""


class RetryInterruptedError(RetryError):
    """A backoff wait was interrupted, so no further attempt was made."""


def _name(func: Callable[..., Any]) -> str:
    return getattr(func, "__qualname__", None) or repr(func)


def _give_up(func: Callable[..., Any], outcome: SleepOutcome, attempts: int, exc: Exception) -> RetryError:
    if outcome is SleepOutcome.INTERRUPTED:
        return RetryInterruptedError(
            f"{_name(func)} interrupted after {attempts} attempt(s): {exc}", attempts, exc
        )
    return RetryExhaustedError(f"{_name(func)} failed after {attempts} attempt(s): {exc}", attempts, exc)


def call_with_backoff(
    func: Callable[..., T],
    *args: Any,
    retry_on: Tuple[Type[Exception], ...] = (Exception,),
    sleeper: Optional[BackoffSleeper] = None,
    **kwargs: Any,
) -> T:
    """
    Call func until it succeeds, sleeping with capped exponential backoff between attempts.
    Once the backoff is capped one last attempt is made before giving up.
    Exceptions outside retry_on propagate immediately.
    """
    sleeper = sleeper or BackoffSleeper()
    attempts = 0
    final = False
    while True:
        try:
            return func(*args, **kwargs)
        except retry_on as exc:
            attempts += 1
            if final:
                raise _give_up(func, SleepOutcome.CAPPED, attempts, exc) from exc
            logger.warning(
                "Call %s failed: %s (attempt %d, next wait %dms)",
                _name(func),
                exc,
                attempts,
                sleeper.next_delay_ms,
            )
            outcome = sleeper.sleep()
            if outcome is SleepOutcome.INTERRUPTED:
                raise _give_up(func, outcome, attempts, exc) from exc
            final = outcome is SleepOutcome.CAPPED


async def async_call_with_backoff(
    func: Callable[..., Awaitable[T]],
    *args: Any,
    retry_on: Tuple[Type[Exception], ...] = (Exception,),
    sleeper: Optional[AsyncBackoffSleeper] = None,
    **kwargs: Any,
) -> T:
    """Coroutine counterpart of call_with_backoff. Cancellation is never retried."""
    sleeper = sleeper or AsyncBackoffSleeper()
    attempts = 0
    final = False
    while True:
        try:
            return await func(*args, **kwargs)
        except retry_on as exc:
            if isinstance(exc, asyncio.CancelledError):
                raise
            attempts += 1
            if final:
                raise _give_up(func, SleepOutcome.CAPPED, attempts, exc) from exc
            logger.warning(
                "Call %s failed: %s (attempt %d, next wait %dms)",
                _name(func),
                exc,
                attempts,
                sleeper.next_delay_ms,
            )
            outcome = await sleeper.sleep()
            if outcome is SleepOutcome.INTERRUPTED:
                raise _give_up(func, outcome, attempts, exc) from exc
            final = outcome is SleepOutcome.CAPPED
