"""Poll HTTP endpoints until they report ready."""
import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Sequence, Tuple

import aiohttp
from aiohttp import ClientSession, ClientTimeout
from tqdm.asyncio import tqdm

logger = logging.getLogger(__name__)

CheckFn = Callable[[Any], bool]

EXCEED_MAX_RETRY = "exceed max retry"


@dataclass
class WaitResult:
    url: str
    is_success: bool
    payload: Any = None
    error_message: Optional[str] = None
    attempts: int = 0


class ServiceWaiter:
    """
    Poll a URL at a fixed interval until check_fn accepts its JSON body.
    Transport errors count as a failed poll rather than aborting the wait.
    """

    def __init__(self, timeout: float = 15.0, session: Optional[ClientSession] = None) -> None:
        self.timeout = timeout
        self._session = session
        self._owns_session = session is None

    async def _get_session(self) -> ClientSession:
        if not self._session or self._session.closed:
            self._session = ClientSession(timeout=ClientTimeout(total=self.timeout))
            self._owns_session = True
        return self._session

    async def _poll_once(self, url: str) -> Tuple[int, Any]:
        session = await self._get_session()
        async with session.get(url) as resp:
            body = await resp.read()
            status = resp.status
        if not body:
            return status, None
        return status, json.loads(body)

    @staticmethod
    def _accepts(check_fn: Optional[CheckFn], url: str, payload: Any) -> bool:
        """Run check_fn; an error inside it counts as not ready."""
        if check_fn is None:
            return True
        try:
            return check_fn(payload) is True
        except Exception as exc:
            logger.warning("Readiness check failed (%s): %r", url, exc)
            return False

    async def wait(
        self,
        url: str,
        check_fn: Optional[CheckFn] = None,
        max_retry: int = 10,
        interval: float = 2.0,
    ) -> WaitResult:
        """
        Return as soon as a poll gets a 2xx response that check_fn accepts.
        Gives up with "exceed max retry" after max_retry + 1 polls.
        """
        payload: Any = None
        retry_count = 0
        while True:
            try:
                status, payload = await self._poll_once(url)
                if 200 <= status < 300 and self._accepts(check_fn, url, payload):
                    return WaitResult(url=url, is_success=True, payload=payload, attempts=retry_count + 1)
                logger.debug("Service %s not ready (status %s)", url, status)
            except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as exc:
                logger.warning("Poll error (%s): %s (attempt %d/%d)", url, exc, retry_count + 1, max_retry + 1)

            if retry_count >= max_retry:
                return WaitResult(
                    url=url,
                    is_success=False,
                    payload=payload,
                    error_message=EXCEED_MAX_RETRY,
                    attempts=retry_count + 1,
                )
            await asyncio.sleep(interval)
            retry_count += 1

    async def wait_all(
        self,
        urls: Sequence[str],
        check_fn: Optional[CheckFn] = None,
        max_retry: int = 10,
        interval: float = 2.0,
        concurrency: int = 8,
    ) -> List[WaitResult]:
        """Wait on several URLs concurrently; results keep the order of urls."""
        semaphore = asyncio.Semaphore(concurrency)

        async def worker(url: str) -> WaitResult:
            async with semaphore:
                return await self.wait(url, check_fn=check_fn, max_retry=max_retry, interval=interval)

        tasks = [asyncio.create_task(worker(url)) for url in urls]
        try:
            for future in tqdm(asyncio.as_completed(tasks), total=len(tasks), desc="waiting for services"):
                await future
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
            if tasks:
                await asyncio.gather(*tasks, return_exceptions=True)
        return [task.result() for task in tasks]

    async def close(self) -> None:
        """Close the session if this waiter created it."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
        self._session = None
