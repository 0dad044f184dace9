"""Backoff sleepers."""
from .backoff import INITIAL_DELAY_MS, MAX_DELAY_MS, BackoffSleeper, SleepOutcome
from .async_backoff import AsyncBackoffSleeper

__all__ = [
    "INITIAL_DELAY_MS",
    "MAX_DELAY_MS",
    "BackoffSleeper",
    "AsyncBackoffSleeper",
    "SleepOutcome",
]
