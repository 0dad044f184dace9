"""Shared fixtures for tiny_backoff tests."""
import threading
from unittest.mock import MagicMock

import pytest


@pytest.fixture
def instant_event():
    """Event stand-in whose wait() returns immediately as a completed (non-interrupted) wait."""
    event = MagicMock(spec=threading.Event)
    event.wait.return_value = False
    return event


@pytest.fixture
def waited_ms():
    """Return the delays, in milliseconds, that a sleeper asked an event to wait for."""

    def _waited(event) -> list:
        return [round(c.args[0] * 1000) for c in event.wait.call_args_list]

    return _waited
