"""
Tiny Backoff package entry point.
Provides convenient imports for public API.
"""
from .sleeper.backoff import INITIAL_DELAY_MS, MAX_DELAY_MS, BackoffSleeper, SleepOutcome
from .sleeper.async_backoff import AsyncBackoffSleeper
from .retry.loop import (
    RetryError,
    RetryExhaustedError,
    RetryInterruptedError,
    async_call_with_backoff,
    call_with_backoff,
)
from .http.waiter import ServiceWaiter, WaitResult

__all__ = [
    "INITIAL_DELAY_MS",
    "MAX_DELAY_MS",
    "BackoffSleeper",
    "AsyncBackoffSleeper",
    "SleepOutcome",
    "RetryError",
    "RetryExhaustedError",
    "RetryInterruptedError",
    "call_with_backoff",
    "async_call_with_backoff",
    "ServiceWaiter",
    "WaitResult",
]
