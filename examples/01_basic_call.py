#!/usr/bin/env python3
"""
01_basic_call.py - Single API call with structured errors

Demonstrates:
- Client-level defaults (base URL, token) merged into each call
- Reading the decoded JSON payload
- Telling input errors (ApiError) apart from exhausted retries

Set APIFY_TOKEN to list your own actors. Requires internet connection.
"""

import asyncio
import os

from apify_http import ApiError, HttpClient, InvalidParameterError, RequestFailedError
from apify_http.utils import pluck_data


async def main() -> None:
    options = {"base_url": "https://api.apify.com", "token": os.getenv("APIFY_TOKEN")}

    async with HttpClient(options) as client:
        try:
            acts = pluck_data(
                await client.call(
                    url="/v2/acts",
                    method="GET",
                    params={"limit": 5},
                    auth_required=True,
                )
            )
        except InvalidParameterError as e:
            print(f"Not sent: {e}")
            return
        except ApiError as e:
            print(f"Rejected by the API:\n{e}")
            return
        except RequestFailedError as e:
            print(f"Gave up after {e.details.attempt} attempts: {e.details.error}")
            return

        for act in acts["items"]:
            print(f"  {act['id']}  {act['name']}")
        print(f"\nStats: {client.stats}")


if __name__ == "__main__":
    asyncio.run(main())
