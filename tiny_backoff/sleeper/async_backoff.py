"""Asyncio flavour of the capped exponential backoff sleeper."""
import asyncio
import logging

from tiny_backoff.sleeper.backoff import INITIAL_DELAY_MS, MAX_DELAY_MS, SleepOutcome, _advance

logger = logging.getLogger(__name__)


async def _wait(event: asyncio.Event, seconds: float) -> bool:
    """Return True if the event fired before the timeout elapsed."""
    try:
        await asyncio.wait_for(event.wait(), timeout=seconds)
    except asyncio.TimeoutError:
        return False
    return True


class AsyncBackoffSleeper:
    """
    Coroutine version of BackoffSleeper.

    The wait yields to the event loop. ``interrupt()`` must be called from the loop
    thread, or before the loop starts. Cancelling the awaiting task still raises
    CancelledError as usual.
    """

    def __init__(self) -> None:
        self._next_delay_ms = INITIAL_DELAY_MS
        # Binds to a loop on first wait, so interrupt() may precede asyncio.run().
        self._interrupted = asyncio.Event()

    @property
    def next_delay_ms(self) -> int:
        return self._next_delay_ms

    @property
    def capped(self) -> bool:
        return self._next_delay_ms >= MAX_DELAY_MS

    def interrupt(self) -> None:
        self._interrupted.set()

    async def sleep(self) -> SleepOutcome:
        event = self._interrupted
        if await _wait(event, self._next_delay_ms / 1000):
            event.clear()
            logger.debug("Backoff wait of %dms interrupted", self._next_delay_ms)
            return SleepOutcome.INTERRUPTED
        self._next_delay_ms, outcome = _advance(self._next_delay_ms)
        return outcome

    async def try_to_sleep(self) -> bool:
        return await self.sleep() is SleepOutcome.CONTINUE

    def __repr__(self) -> str:
        return f"AsyncBackoffSleeper(next_delay_ms={self._next_delay_ms})"
