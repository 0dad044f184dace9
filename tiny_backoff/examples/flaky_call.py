"""Retry a flaky call with capped exponential backoff."""
import logging
import random

from tiny_backoff import BackoffSleeper, RetryError, call_with_backoff
from tiny_backoff.utils.logger import setup_logging

logger = logging.getLogger(__name__)


def flaky_connect(success_rate: float = 0.3) -> str:
    if random.random() > success_rate:
        raise ConnectionError("broker not available")
    return "connected"


def manual_loop() -> bool:
    """The bare sleeper: keep trying until it says stop."""
    sleeper = BackoffSleeper()
    while True:
        try:
            flaky_connect()
            return True
        except ConnectionError as exc:
            logger.info("manual attempt failed: %s", exc)
        if not sleeper.try_to_sleep():
            return False


def main() -> None:
    setup_logging(logging.INFO, trace_sleeps=True)
    logger.info("manual loop connected: %s", manual_loop())
    try:
        logger.info(call_with_backoff(flaky_connect, retry_on=(ConnectionError,)))
    except RetryError as exc:
        logger.error("gave up after %d attempts: %s", exc.attempts, exc)


if __name__ == "__main__":
    main()
