from typing import Any

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential


async def fetch_json(
    client: httpx.AsyncClient,
    url: str,
    attempts: int = 3,
    wait=wait_exponential(multiplier=1, min=1, max=10),
) -> Any:
    """GET a JSON document, retrying connection-level failures only.

    4xx/5xx responses raise ``httpx.HTTPStatusError`` straight away.
    """
    payload = None
    async for attempt in AsyncRetrying(
        stop=stop_after_attempt(attempts),
        wait=wait,
        retry=retry_if_exception_type(httpx.TransportError),
        reraise=True,
    ):
        with attempt:
            response = await client.get(url)
            response.raise_for_status()
            payload = response.json()
    return payload
