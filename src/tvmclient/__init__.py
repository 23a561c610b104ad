"""tvm-client - cached access to short-lived cloud credentials from a token vending machine."""

from .cache import FileBackend, MemoryCache, TwoTierCache, derive_key, get_process_cache, is_fresh
from .client import TvmClient
from .config import DEFAULT_API_HOST, DEFAULT_CACHE_FILE, RetryOptions, TvmConfig, load_config_file
from .errors import BadArgumentError, MissingOptionError, ResponseError, TransportError, TvmError
from .models import (
    AwsS3Credential,
    AzureBlobCredential,
    AzureCosmosCredential,
    AzurePresignCredential,
    CredentialRecord,
    ResourceType,
)


def _get_version():
    """Get the version from package metadata or pyproject.toml."""
    try:
        from importlib.metadata import PackageNotFoundError, version

        return version("tvm-client")
    except PackageNotFoundError:
        # Fallback for running from a source checkout
        import re
        from pathlib import Path

        pyproject_path = Path(__file__).parent.parent.parent / "pyproject.toml"
        if not pyproject_path.exists():
            return "0.0.0"

        with open(pyproject_path, "r", encoding="utf-8") as f:
            version_match = re.search(r'version\s*=\s*["\']([^"\']+)["\']', f.read())
        return version_match.group(1) if version_match else "0.0.0"


__version__ = _get_version()

__all__ = [
    "__version__",
    # Client
    "TvmClient",
    "TvmConfig",
    "RetryOptions",
    "load_config_file",
    "DEFAULT_API_HOST",
    "DEFAULT_CACHE_FILE",
    # Records
    "ResourceType",
    "CredentialRecord",
    "AwsS3Credential",
    "AzureBlobCredential",
    "AzureCosmosCredential",
    "AzurePresignCredential",
    # Cache
    "TwoTierCache",
    "MemoryCache",
    "FileBackend",
    "derive_key",
    "is_fresh",
    "get_process_cache",
    # Errors
    "TvmError",
    "BadArgumentError",
    "MissingOptionError",
    "ResponseError",
    "TransportError",
]
