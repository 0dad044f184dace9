"""
Tests for ServiceWaiter.

Test coverage:
- Ready on first poll, with and without a check function
- Polling until ready, and giving up after max_retry
- Transport errors and invalid JSON counted as failed polls
- wait_all ordering
- Session ownership on close
"""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest

from tiny_backoff import ServiceWaiter, WaitResult
from tiny_backoff.http.waiter import EXCEED_MAX_RETRY


def _response(status=200, payload=None, raw=None):
    """Build the async context manager returned by session.get()."""
    resp = MagicMock()
    resp.status = status
    body = raw if raw is not None else (json.dumps(payload).encode() if payload is not None else b"")
    resp.read = AsyncMock(return_value=body)
    cm = MagicMock()
    cm.__aenter__ = AsyncMock(return_value=resp)
    cm.__aexit__ = AsyncMock(return_value=False)
    return cm


@pytest.fixture
def mock_session():
    session = MagicMock(spec=aiohttp.ClientSession)
    session.closed = False
    session.close = AsyncMock()
    return session


class TestServiceWaiterWait:
    @pytest.mark.asyncio
    async def test_ready_on_first_poll(self, mock_session):
        mock_session.get.return_value = _response(payload={"status": "ok"})
        waiter = ServiceWaiter(session=mock_session)

        result = await waiter.wait("http://svc/health", interval=0)

        assert result == WaitResult(url="http://svc/health", is_success=True, payload={"status": "ok"}, attempts=1)
        mock_session.get.assert_called_once_with("http://svc/health")

    @pytest.mark.asyncio
    async def test_polls_until_check_passes(self, mock_session):
        mock_session.get.side_effect = [
            _response(payload={"state": "STARTING"}),
            _response(status=503, payload={"state": "RUNNING"}),
            _response(payload={"state": "RUNNING"}),
        ]
        waiter = ServiceWaiter(session=mock_session)

        result = await waiter.wait(
            "http://svc/cluster",
            check_fn=lambda body: body["state"] == "RUNNING",
            interval=0,
        )

        assert result.is_success is True
        assert result.attempts == 3
        assert result.error_message is None

    @pytest.mark.asyncio
    async def test_exceed_max_retry(self, mock_session):
        mock_session.get.side_effect = lambda url: _response(payload={"state": "STARTING"})
        waiter = ServiceWaiter(session=mock_session)

        result = await waiter.wait(
            "http://svc/cluster",
            check_fn=lambda body: body["state"] == "RUNNING",
            max_retry=3,
            interval=0,
        )

        assert result.is_success is False
        assert result.error_message == EXCEED_MAX_RETRY == "exceed max retry"
        assert result.attempts == 4
        assert result.payload == {"state": "STARTING"}
        assert mock_session.get.call_count == 4

    @pytest.mark.asyncio
    async def test_check_fn_must_return_true(self, mock_session):
        mock_session.get.return_value = _response(payload={"state": "RUNNING"})
        waiter = ServiceWaiter(session=mock_session)

        result = await waiter.wait("http://svc", check_fn=lambda body: body, max_retry=0, interval=0)

        assert result.is_success is False

    @pytest.mark.asyncio
    async def test_transport_errors_are_retried(self, mock_session, caplog):
        mock_session.get.side_effect = [
            aiohttp.ClientConnectionError("connection refused"),
            _response(raw=b"<html>starting</html>"),
            _response(payload={}),
        ]
        waiter = ServiceWaiter(session=mock_session)

        with caplog.at_level("WARNING", logger="tiny_backoff.http.waiter"):
            result = await waiter.wait("http://svc", interval=0)

        assert result.is_success is True
        assert result.attempts == 3
        assert "connection refused" in caplog.text

    @pytest.mark.asyncio
    async def test_sleeps_interval_between_polls(self, mock_session):
        mock_session.get.side_effect = lambda url: _response(status=500)
        waiter = ServiceWaiter(session=mock_session)

        with patch("tiny_backoff.http.waiter.asyncio.sleep", new=AsyncMock()) as mock_sleep:
            result = await waiter.wait("http://svc", max_retry=2, interval=2.0)

        assert result.is_success is False
        assert mock_sleep.await_count == 2
        mock_sleep.assert_awaited_with(2.0)


    @pytest.mark.asyncio
    async def test_check_fn_error_counts_as_failed_poll(self, mock_session, caplog):
        mock_session.get.side_effect = [
            _response(),
            _response(payload={"state": "RUNNING"}),
        ]
        waiter = ServiceWaiter(session=mock_session)

        with caplog.at_level("WARNING", logger="tiny_backoff.http.waiter"):
            result = await waiter.wait(
                "http://svc/cluster",
                check_fn=lambda body: body["state"] == "RUNNING",
                interval=0,
            )

        assert result.is_success is True
        assert result.attempts == 2
        assert "Readiness check failed (http://svc/cluster)" in caplog.text


class TestServiceWaiterWaitAll:
    @pytest.mark.asyncio
    async def test_results_keep_input_order(self, mock_session):
        def get(url):
            if url.endswith("/broken"):
                return _response(status=500)
            return _response(payload={"url": url})

        mock_session.get.side_effect = get
        waiter = ServiceWaiter(session=mock_session)
        urls = ["http://a/ok", "http://b/broken", "http://c/ok"]

        results = await waiter.wait_all(urls, max_retry=1, interval=0, concurrency=2)

        assert [r.url for r in results] == urls
        assert [r.is_success for r in results] == [True, False, True]
        assert results[1].error_message == EXCEED_MAX_RETRY

    @pytest.mark.asyncio
    async def test_empty_urls(self, mock_session):
        waiter = ServiceWaiter(session=mock_session)
        assert await waiter.wait_all([]) == []


    @pytest.mark.asyncio
    async def test_check_fn_error_does_not_drop_other_results(self, mock_session):
        def get(url):
            if url.endswith("/list"):
                return _response(payload=[])
            return _response(payload={"state": "RUNNING"})

        mock_session.get.side_effect = get
        waiter = ServiceWaiter(session=mock_session)

        results = await waiter.wait_all(
            ["http://a/ok", "http://b/list"],
            check_fn=lambda body: body["state"] == "RUNNING",
            max_retry=1,
            interval=0,
        )

        assert [r.is_success for r in results] == [True, False]
        assert results[1].error_message == EXCEED_MAX_RETRY
        assert results[1].payload == []


class TestServiceWaiterSession:
    @pytest.mark.asyncio
    async def test_injected_session_not_closed(self, mock_session):
        waiter = ServiceWaiter(session=mock_session)
        await waiter.close()
        mock_session.close.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_owned_session_closed(self):
        waiter = ServiceWaiter(timeout=1.0)
        session = await waiter._get_session()
        assert isinstance(session, aiohttp.ClientSession)

        await waiter.close()
        assert session.closed
