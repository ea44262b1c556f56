# core/http.py

import asyncio
import logging
from typing import Optional

import httpx

logger = logging.getLogger(__name__)


async def post_with_retries(
    url: str,
    *,
    timeout: float = 10.0,
    max_retries: int = 3,
    backoff_factor: float = 1.0,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    **kwargs,
) -> httpx.Response:
    """
    POST with retries on network errors/timeouts.
    HTTP status errors are raised immediately.
    """
    delay = backoff_factor
    for attempt in range(1, max_retries + 1):
        try:
            async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
                resp = await client.post(url, **kwargs)
                resp.raise_for_status()
                return resp
        except (httpx.ConnectError, httpx.ReadTimeout, httpx.RemoteProtocolError) as e:
            logger.warning("Request to %s failed (attempt %d/%d): %s",
                           url, attempt, max_retries, e)
            if attempt == max_retries:
                logger.error("Max retries reached for %s", url)
                raise
            await asyncio.sleep(delay)
            delay *= 2
        except httpx.HTTPStatusError as e:
            # 4xx or 5xx: no point retrying
            logger.error("Server returned HTTP %d for %s", e.response.status_code, url)
            raise
