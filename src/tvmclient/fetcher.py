"""Requests to the token vending machine."""

import asyncio
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlencode

import aiohttp

from .config import TvmConfig
from .errors import ResponseError, TransportError
from .models import ResourceType
from .utils.networking import exponential_backoff
from .utils.security import get_secure_logger

logger = get_secure_logger(__name__)


class CredentialFetcher:
    """
    Fetches credential records from the TVM for one caller identity.

    Requests are ``GET {api_host}/{endpoint}/{namespace}[?query]`` with the
    raw auth token in the ``Authorization`` header. Server errors are retried
    with exponential backoff; any other non-2xx status fails immediately.
    """

    def __init__(self, config: TvmConfig, timeout: Optional[aiohttp.ClientTimeout] = None):
        self.config = config
        self.timeout = timeout

    def build_url(
        self, resource_type: ResourceType, params: Optional[Mapping[str, Any]] = None
    ) -> str:
        url = f"{self.config.api_host}/{resource_type.endpoint}/{self.config.namespace}"
        if params:
            url = f"{url}?{urlencode(list(params.items()))}"
        return url

    async def fetch(
        self, resource_type: ResourceType, params: Optional[Mapping[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Fetch a credential record.

        Args:
            resource_type: Credential kind to request
            params: Query parameters, in the order they should appear

        Returns:
            The decoded JSON body, empty for an empty 2xx response

        Raises:
            ResponseError: If the TVM answered with a non-2xx status after retries
            TransportError: If the request failed or the body is not a JSON object
        """
        namespace = self.config.namespace
        url = self.build_url(resource_type, params)
        headers = {"Authorization": self.config.auth_token}

        try:
            response = await exponential_backoff(
                url, headers, self.config.retry_options, timeout=self.timeout
            )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(
                f"request to tvm for {resource_type.endpoint} failed for namespace {namespace}: "
                f"{type(e).__name__}"
            )
            raise TransportError(f"request to TVM server failed: {type(e).__name__}", cause=e)

        if not response.ok:
            error = ResponseError(response.status, body=response.body)
            logger.error(f"{error} for {resource_type.endpoint} and namespace {namespace}")
            raise error

        if not response.body.strip():
            return {}

        try:
            body = response.json()
        except ValueError as e:
            logger.error(
                f"invalid json response from tvm for {resource_type.endpoint} "
                f"and namespace {namespace}"
            )
            raise TransportError("TVM server returned an invalid JSON body", cause=e)

        if not isinstance(body, dict):
            logger.error(
                f"unexpected response from tvm for {resource_type.endpoint} "
                f"and namespace {namespace}"
            )
            raise TransportError(
                f"TVM server returned {type(body).__name__} instead of a JSON object"
            )

        return body
