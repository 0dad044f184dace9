"""Capped exponential backoff sleeper for blocking retry loops."""
import enum
import logging
import threading
from typing import Optional, Tuple

logger = logging.getLogger(__name__)

INITIAL_DELAY_MS = 100
MAX_DELAY_MS = 1000  # 1 second


class SleepOutcome(enum.Enum):
    """Result of a single backoff wait."""

    CONTINUE = "continue"
    CAPPED = "capped"
    INTERRUPTED = "interrupted"


def _advance(delay_ms: int) -> Tuple[int, SleepOutcome]:
    """Double the delay, clamping at the cap."""
    delay_ms *= 2
    if delay_ms >= MAX_DELAY_MS:
        return MAX_DELAY_MS, SleepOutcome.CAPPED
    return delay_ms, SleepOutcome.CONTINUE


class BackoffSleeper:
    """
    Sleep 100ms, 200ms, 400ms, ... up to 1s between attempts of one retry loop.

    Create one instance per retry loop; the accumulated delay belongs to that loop
    only. ``interrupt()`` may be called from any thread to abort the current wait.
    """

    def __init__(self, event: Optional[threading.Event] = None) -> None:
        self._next_delay_ms = INITIAL_DELAY_MS
        self._interrupted = event if event is not None else threading.Event()

    @property
    def next_delay_ms(self) -> int:
        return self._next_delay_ms

    @property
    def capped(self) -> bool:
        return self._next_delay_ms >= MAX_DELAY_MS

    def interrupt(self) -> None:
        """Abort the in-flight (or next) wait."""
        self._interrupted.set()

    def sleep(self) -> SleepOutcome:
        """Block for the current delay, then double it up to the cap."""
        if self._interrupted.wait(self._next_delay_ms / 1000):
            # Consume the interruption so a later call resumes the sequence.
            self._interrupted.clear()
            logger.debug("Backoff wait of %dms interrupted", self._next_delay_ms)
            return SleepOutcome.INTERRUPTED
        self._next_delay_ms, outcome = _advance(self._next_delay_ms)
        return outcome

    def try_to_sleep(self) -> bool:
        """
        Sleep once and report whether another wait is sanctioned.

        Returns False when the cap has been reached or the wait was interrupted.
        """
        return self.sleep() is SleepOutcome.CONTINUE

    def __repr__(self) -> str:
        return f"BackoffSleeper(next_delay_ms={self._next_delay_ms})"
