"""Configuration for the TVM client."""

import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Union

import yaml

from .errors import BadArgumentError

DEFAULT_API_HOST = "https://adobeio.adobeioruntime.net/apis/tvm"
DEFAULT_CACHE_FILE = os.path.join(tempfile.gettempdir(), ".tvmCache")
DEFAULT_CONFIG_FILE = Path.home() / ".tvm" / "config.yaml"

# Environment fallbacks for the caller identity
NAMESPACE_ENV = "__OW_NAMESPACE"
AUTH_TOKEN_ENV = "__OW_API_KEY"

DEFAULT_MAX_RETRIES = 3
DEFAULT_INITIAL_DELAY_IN_MILLIS = 100

ALLOWED_KEYS = ("namespace", "auth_token", "api_host", "cache_file", "retry_options")
ALLOWED_RETRY_KEYS = ("max_retries", "initial_delay_in_millis")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _reject_unknown_keys(config: Mapping[str, Any], allowed: Tuple[str, ...], where: str) -> None:
    for key in config:
        if key not in allowed:
            raise BadArgumentError(
                f"'{key}' is not allowed in {where}, allowed keys are: {', '.join(allowed)}"
            )


@dataclass(frozen=True)
class RetryOptions:
    """Backoff settings for server errors returned by the TVM."""

    max_retries: int = DEFAULT_MAX_RETRIES
    initial_delay_in_millis: float = DEFAULT_INITIAL_DELAY_IN_MILLIS

    def __post_init__(self):
        if not isinstance(self.max_retries, int) or isinstance(self.max_retries, bool):
            raise BadArgumentError("'retry_options.max_retries' must be an integer")
        if self.max_retries < 0:
            raise BadArgumentError("'retry_options.max_retries' must not be negative")
        if not _is_number(self.initial_delay_in_millis) or self.initial_delay_in_millis <= 0:
            raise BadArgumentError("'retry_options.initial_delay_in_millis' must be a positive number")

    @classmethod
    def from_mapping(cls, options: Optional[Mapping[str, Any]]) -> "RetryOptions":
        if options is None:
            return cls()
        if not isinstance(options, Mapping):
            raise BadArgumentError("'retry_options' must be a mapping")
        _reject_unknown_keys(options, ALLOWED_RETRY_KEYS, "retry_options")
        return cls(**dict(options))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "max_retries": self.max_retries,
            "initial_delay_in_millis": self.initial_delay_in_millis,
        }


@dataclass(frozen=True)
class TvmConfig:
    """
    Validated client configuration.

    ``cache_file`` is None when persistence is disabled. ``defaults`` names
    the settings that fell back to their default value.
    """

    namespace: str
    auth_token: str = field(repr=False)
    api_host: str = DEFAULT_API_HOST
    cache_file: Optional[str] = DEFAULT_CACHE_FILE
    retry_options: RetryOptions = field(default_factory=RetryOptions)
    defaults: Tuple[str, ...] = ()

    @classmethod
    def from_mapping(
        cls,
        config: Optional[Mapping[str, Any]] = None,
        env: Optional[Mapping[str, str]] = None,
    ) -> "TvmConfig":
        """
        Validate a configuration mapping.

        Args:
            config: Keys namespace, auth_token, api_host, cache_file and
                    retry_options. A missing namespace or auth_token is read
                    from the environment.
            env: Environment to read fallbacks from, defaults to os.environ

        Returns:
            TvmConfig instance

        Raises:
            BadArgumentError: If a key is unknown or a value is missing or invalid
        """
        if config is None:
            config = {}
        if not isinstance(config, Mapping):
            raise BadArgumentError("config must be a mapping")
        env = os.environ if env is None else env

        _reject_unknown_keys(config, ALLOWED_KEYS, "config")
        defaults = []

        namespace = config.get("namespace") or env.get(NAMESPACE_ENV)
        if not namespace:
            raise BadArgumentError(f"'namespace' is required, pass it or set {NAMESPACE_ENV}")
        if not isinstance(namespace, str):
            raise BadArgumentError("'namespace' must be a string")

        auth_token = config.get("auth_token") or env.get(AUTH_TOKEN_ENV)
        if not auth_token:
            raise BadArgumentError(f"'auth_token' is required, pass it or set {AUTH_TOKEN_ENV}")
        if not isinstance(auth_token, str):
            raise BadArgumentError("'auth_token' must be a string")

        if config.get("api_host") is None:
            api_host = DEFAULT_API_HOST
            defaults.append("api_host")
        else:
            api_host = config["api_host"]
            if not isinstance(api_host, str) or not api_host.strip():
                raise BadArgumentError("'api_host' must be a non-empty string")
            api_host = api_host.strip().rstrip("/")

        cache_file = cls._resolve_cache_file(config, defaults)

        if config.get("retry_options") is None:
            defaults.append("retry_options")
        retry_options = RetryOptions.from_mapping(config.get("retry_options"))

        return cls(
            namespace=namespace,
            auth_token=auth_token,
            api_host=api_host,
            cache_file=cache_file,
            retry_options=retry_options,
            defaults=tuple(defaults),
        )

    @staticmethod
    def _resolve_cache_file(config: Mapping[str, Any], defaults: list) -> Optional[str]:
        if "cache_file" not in config:
            defaults.append("cache_file")
            return DEFAULT_CACHE_FILE

        cache_file = config["cache_file"]
        if not cache_file:
            return None
        if isinstance(cache_file, (str, os.PathLike)):
            return os.fspath(cache_file)
        raise BadArgumentError("'cache_file' must be a path or a falsy value to disable it")


def load_config_file(
    path: Union[str, Path, None] = None, missing_ok: bool = False
) -> Dict[str, Any]:
    """
    Load client configuration from a YAML file.

    Args:
        path: File to read, defaults to ~/.tvm/config.yaml
        missing_ok: Return an empty mapping instead of failing when the file
                    does not exist

    Returns:
        Configuration mapping suitable for TvmClient.init

    Raises:
        BadArgumentError: If the file is missing, unreadable or not a mapping
    """
    config_path = Path(path).expanduser() if path else DEFAULT_CONFIG_FILE

    if not config_path.exists():
        if missing_ok:
            return {}
        raise BadArgumentError(f"config file {config_path} does not exist")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            content = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise BadArgumentError(f"cannot read config file {config_path}", cause=e)

    if content is None:
        return {}
    if not isinstance(content, dict):
        raise BadArgumentError(f"config file {config_path} must contain a mapping")
    return content
