"""TVM client: cached retrieval of short-lived cloud credentials."""

import os
from typing import Any, Dict, Mapping, Optional

import aiohttp

from .cache import CacheBackend, FileBackend, MemoryCache, TwoTierCache, derive_key, is_fresh
from .cache.expiry import get_expiration
from .config import (
    AUTH_TOKEN_ENV,
    DEFAULT_API_HOST,
    DEFAULT_CACHE_FILE,
    NAMESPACE_ENV,
    RetryOptions,
    TvmConfig,
)
from .errors import BadArgumentError, MissingOptionError
from .fetcher import CredentialFetcher
from .models import (
    AwsS3Credential,
    AzureBlobCredential,
    AzureCosmosCredential,
    AzurePresignCredential,
    CredentialRecord,
    ResourceType,
    build_credential,
)
from .utils.security import get_secure_logger, log_sanitizer

logger = get_secure_logger(__name__)


class TvmClient:
    """
    Client for the token vending machine.

    Each cacheable credential kind is looked up in the two-tier cache under
    a key derived from the caller identity. Fresh records are returned
    without a request; missing or expired ones are fetched and merged back
    into the cache. Presign and revoke calls are never cached.

    The memory tier is shared by every client in the process unless a
    dedicated :class:`MemoryCache` is passed in.
    """

    DEFAULT_API_HOST = DEFAULT_API_HOST
    DEFAULT_CACHE_FILE = DEFAULT_CACHE_FILE

    def __init__(
        self,
        config: TvmConfig,
        memory_cache: Optional[MemoryCache] = None,
        backend: Optional[CacheBackend] = None,
        timeout: Optional[aiohttp.ClientTimeout] = None,
    ):
        """
        Initialize the client from a validated configuration.

        Args:
            config: Validated configuration
            memory_cache: Memory tier, defaults to the process-wide instance
            backend: Persisted store replacing the default file backend. Only
                     used when the configuration enables persistence.
            timeout: Optional aiohttp timeout for TVM requests
        """
        self.config = config
        log_sanitizer.register_secret(config.auth_token)

        if config.cache_file is None:
            backend = None
        elif backend is None:
            backend = FileBackend(config.cache_file)

        self.cache = TwoTierCache(backend=backend, memory=memory_cache)
        self.fetcher = CredentialFetcher(config, timeout=timeout)

    @classmethod
    def init(
        cls,
        config: Optional[Mapping[str, Any]] = None,
        memory_cache: Optional[MemoryCache] = None,
        backend: Optional[CacheBackend] = None,
    ) -> "TvmClient":
        """
        Validate a configuration mapping and create a client.

        Args:
            config: Keys namespace, auth_token, api_host, cache_file and
                    retry_options. namespace and auth_token fall back to the
                    __OW_NAMESPACE and __OW_API_KEY environment variables.
                    A falsy cache_file disables the persisted cache.
            memory_cache: Memory tier, defaults to the process-wide instance
            backend: Persisted store replacing the default file backend

        Returns:
            TvmClient instance

        Raises:
            BadArgumentError: If the configuration is invalid
        """
        namespace, auth_token = _identity_hint(config)
        log_sanitizer.register_secret(auth_token)

        try:
            tvm_config = TvmConfig.from_mapping(config)
        except BadArgumentError as e:
            logger.error(f"{e} (namespace: {namespace})")
            raise

        client = cls(tvm_config, memory_cache=memory_cache, backend=backend)
        client._log_configuration()
        return client

    @property
    def namespace(self) -> str:
        return self.config.namespace

    @property
    def api_host(self) -> str:
        return self.config.api_host

    @property
    def cache_file(self) -> Optional[str]:
        return self.config.cache_file

    @property
    def retry_options(self) -> RetryOptions:
        return self.config.retry_options

    def __repr__(self) -> str:
        return (
            f"TvmClient(namespace={self.namespace!r}, api_host={self.api_host!r}, "
            f"cache_file={self.cache_file!r})"
        )

    async def get_aws_s3_credentials(self) -> AwsS3Credential:
        """Get temporary AWS S3 credentials for the namespace."""
        return await self._get_cached_credentials(ResourceType.AWS_S3)

    async def get_azure_blob_credentials(self) -> AzureBlobCredential:
        """Get Azure blob SAS URLs for the namespace."""
        return await self._get_cached_credentials(ResourceType.AZURE_BLOB)

    async def get_azure_cosmos_credentials(self) -> AzureCosmosCredential:
        """Get Azure Cosmos DB resource tokens for the namespace."""
        return await self._get_cached_credentials(ResourceType.AZURE_COSMOS)

    async def get_azure_blob_presign_credentials(
        self,
        blob_name: Optional[str] = None,
        expiry_in_seconds: Optional[int] = None,
        permissions: Optional[str] = None,
    ) -> AzurePresignCredential:
        """
        Get a signature for a presigned blob URL. Never cached.

        Args:
            blob_name: Blob to presign
            expiry_in_seconds: Lifetime of the signature
            permissions: Permission string such as "r" or "rw"

        Raises:
            MissingOptionError: If any argument is missing
            ResponseError: If the TVM answered with a non-2xx status
            TransportError: If the request failed
        """
        if not blob_name or not expiry_in_seconds or not permissions:
            error = MissingOptionError(
                "missing one or more of required options blobName, expiryInSeconds and permissions"
            )
            logger.error(f"{error} (namespace: {self.namespace})")
            raise error

        params = {
            "expiryInSeconds": expiry_in_seconds,
            "blobName": blob_name,
            "permissions": permissions,
        }
        record = await self.fetcher.fetch(ResourceType.AZURE_PRESIGN, params)
        logger.debug(f"successfully fetched presign credentials from tvm for {self.namespace}")
        return AzurePresignCredential(record)

    async def revoke_azure_blob_presign_credentials(self) -> Dict[str, Any]:
        """
        Revoke every presigned URL issued for the namespace. Never cached.

        Returns:
            The TVM response body
        """
        response = await self.fetcher.fetch(ResourceType.AZURE_REVOKE_PRESIGN)
        logger.debug(f"successfully revoked presign credentials from tvm for {self.namespace}")
        return response

    def get_cache_stats(self) -> Dict[str, Any]:
        return self.cache.get_stats()

    def clear_cache(self) -> int:
        """Drop all cached credentials, in memory and in the cache file."""
        return self.cache.clear()

    def cache_key(
        self, resource_type: ResourceType, params: Optional[Mapping[str, Any]] = None
    ) -> str:
        return derive_key(
            self.namespace, self.config.auth_token, resource_type.endpoint, params=params
        )

    async def _get_cached_credentials(self, resource_type: ResourceType) -> CredentialRecord:
        if not resource_type.cacheable:
            raise BadArgumentError(f"{resource_type.endpoint} credentials cannot be cached")

        key = self.cache_key(resource_type)

        cached = self.cache.get(key)
        if cached is not None:
            if is_fresh(cached):
                return build_credential(resource_type, cached)
            logger.debug(f"cached credentials with key {key} have expired")

        # a failed fetch leaves the slot untouched
        record = await self.fetcher.fetch(resource_type)
        logger.debug(
            f"fetched credentials from tvm for {resource_type.endpoint} and {self.namespace}"
        )

        if get_expiration(record) is None:
            logger.warning(
                f"credentials for {resource_type.endpoint} have no valid expiration, not caching them"
            )
        else:
            self.cache.put(key, record)

        return build_credential(resource_type, record)

    def _log_configuration(self) -> None:
        config = self.config
        logger.debug(f"tvm client initialized for namespace {config.namespace}")

        if "api_host" in config.defaults:
            logger.debug(f"using default api host {DEFAULT_API_HOST}")
        else:
            logger.debug(f"using api host {config.api_host}")

        if "cache_file" in config.defaults:
            logger.debug(f"using default cache file {DEFAULT_CACHE_FILE}")
        elif config.cache_file is None:
            logger.debug("cache file disabled, caching credentials in memory only")
        else:
            logger.debug(f"using cache file {config.cache_file}")

        if "retry_options" in config.defaults:
            logger.debug(f"using default retry options {config.retry_options.to_dict()}")


def _identity_hint(config: Optional[Mapping[str, Any]]):
    """Best-effort namespace and token, for logging before validation."""
    namespace = auth_token = None
    if isinstance(config, Mapping):
        namespace = config.get("namespace")
        auth_token = config.get("auth_token")
    return (
        namespace or os.environ.get(NAMESPACE_ENV),
        auth_token or os.environ.get(AUTH_TOKEN_ENV),
    )
