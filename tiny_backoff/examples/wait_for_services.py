"""Wait until a set of services answer their health endpoint."""
import argparse
import asyncio
import logging

from tiny_backoff import ServiceWaiter
from tiny_backoff.utils.logger import setup_logging


def is_healthy(payload) -> bool:
    return isinstance(payload, dict) and payload.get("status") == "ok"


async def run(urls, max_retry: int, interval: float) -> int:
    waiter = ServiceWaiter(timeout=5.0)
    try:
        results = await waiter.wait_all(urls, check_fn=is_healthy, max_retry=max_retry, interval=interval)
    finally:
        await waiter.close()
    failed = [r for r in results if not r.is_success]
    for r in failed:
        logging.error("%s: %s after %d attempts", r.url, r.error_message, r.attempts)
    return 1 if failed else 0


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("urls", nargs="+")
    parser.add_argument("--max-retry", type=int, default=10)
    parser.add_argument("--interval", type=float, default=2.0)
    args = parser.parse_args()

    setup_logging(logging.INFO)
    raise SystemExit(asyncio.run(run(args.urls, args.max_retry, args.interval)))


if __name__ == "__main__":
    main()
