"""HTTP GET with exponential backoff on server errors."""

import asyncio
import json
from dataclasses import dataclass
from typing import Any, Mapping, Optional

import aiohttp

from ..config import RetryOptions
from .security import get_secure_logger

logger = get_secure_logger(__name__)


@dataclass
class HttpResponse:
    """Status and body of a completed HTTP exchange."""

    status: int
    body: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def server_error(self) -> bool:
        return self.status >= 500

    def json(self) -> Any:
        """
        Decode the body as JSON.

        Raises:
            ValueError: If the body is not valid JSON
        """
        return json.loads(self.body)


def get_delay(retry_options: RetryOptions, attempt: int) -> float:
    """Delay in seconds before retry number ``attempt + 1``."""
    return retry_options.initial_delay_in_millis * (2**attempt) / 1000.0


async def exponential_backoff(
    url: str,
    headers: Mapping[str, str],
    retry_options: Optional[RetryOptions] = None,
    timeout: Optional[aiohttp.ClientTimeout] = None,
) -> HttpResponse:
    """
    Issue a GET request, retrying with exponential backoff while the server
    answers with a 5xx status.

    Client errors (4xx) and successes are returned immediately. Transport
    failures such as DNS errors or connection resets are not retried and
    propagate as ``aiohttp.ClientError`` or ``asyncio.TimeoutError``.

    Args:
        url: Request URL
        headers: Request headers
        retry_options: Retry count and initial delay, defaults applied if None
        timeout: Optional aiohttp timeout for the session

    Returns:
        The last response received
    """
    retry_options = retry_options or RetryOptions()

    async with aiohttp.ClientSession(timeout=timeout) as session:
        attempt = 0
        while True:
            async with session.request("GET", url, headers=dict(headers)) as response:
                result = HttpResponse(status=response.status, body=await response.text())

            if not result.server_error or attempt >= retry_options.max_retries:
                return result

            delay = get_delay(retry_options, attempt)
            attempt += 1
            logger.debug(
                f"server error {result.status}, retry {attempt}/{retry_options.max_retries} "
                f"in {delay:.3f}s"
            )
            await asyncio.sleep(delay)
