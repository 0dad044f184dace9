"""HTTP readiness polling."""
from .waiter import EXCEED_MAX_RETRY, ServiceWaiter, WaitResult

__all__ = ["EXCEED_MAX_RETRY", "ServiceWaiter", "WaitResult"]
