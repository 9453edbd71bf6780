#!/usr/bin/env python3
"""
02_retry_handling.py - Retries with exponential backoff

Demonstrates:
- 5xx responses retried until the attempt ceiling
- Extending the retryable status set
- Rate-limit counters per attempt ordinal

Note: This example intentionally uses failing URLs to demonstrate retry behaviour.
Requires internet connection to run.
"""

import asyncio

from apify_http import ApiError, HttpClient, RequestFailedError
from apify_http.infrastructure.logging import configure_logger


async def main() -> None:
    configure_logger(level="WARNING")

    print("=" * 70)
    print("httpbin.org/status/500 with 3 attempts, 200ms base delay")
    print("=" * 70)
    async with HttpClient({"base_url": "https://httpbin.org"}) as client:
        try:
            await client.call(
                url="/status/500",
                method="GET",
                exp_backoff_millis=200,
                exp_backoff_max_repeats=3,
            )
        except RequestFailedError as e:
            print(f"\n{e} (status {e.details.status_code})")

        print("\n" + "=" * 70)
        print("httpbin.org/status/429: counted per attempt")
        print("=" * 70)
        try:
            await client.call(
                url="/status/429",
                method="GET",
                exp_backoff_millis=200,
                exp_backoff_max_repeats=3,
            )
        except RequestFailedError as e:
            print(f"\n{e}")
        print(f"Rate limits by attempt: {dict(client.stats.rate_limit_errors)}")

        print("\n" + "=" * 70)
        print("httpbin.org/status/409: terminal unless listed as retryable")
        print("=" * 70)
        try:
            await client.call(url="/status/409", method="GET")
        except ApiError as e:
            print(f"Not retried: status {e.status_code}")
        try:
            await client.call(
                url="/status/409",
                method="GET",
                exp_backoff_millis=200,
                exp_backoff_max_repeats=2,
                retry_on_status_codes={409},
            )
        except RequestFailedError as e:
            print(f"Retried: {e}")


if __name__ == "__main__":
    asyncio.run(main())
