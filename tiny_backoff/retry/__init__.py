"""Retry loops built on the backoff sleepers."""
from .loop import (
    RetryError,
    RetryExhaustedError,
    RetryInterruptedError,
    async_call_with_backoff,
    call_with_backoff,
)

__all__ = [
    "RetryError",
    "RetryExhaustedError",
    "RetryInterruptedError",
    "async_call_with_backoff",
    "call_with_backoff",
]
