"""Root logger setup for scripts built on tiny_backoff."""
import logging
import sys

LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s - %(message)s"
SLEEPER_LOGGER = "tiny_backoff.sleeper"


def setup_logging(level: int = logging.INFO, trace_sleeps: bool = False) -> None:
    """
    Send log records to stdout with a concise format.

    An existing root handler is left alone. With trace_sleeps, the sleepers log
    interrupted waits at DEBUG even when the root level is higher.
    """
    root = logging.getLogger()
    root.setLevel(level)
    logging.getLogger(SLEEPER_LOGGER).setLevel(logging.DEBUG if trace_sleeps else logging.NOTSET)
    if root.handlers:
        return
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S"))
    root.addHandler(handler)
