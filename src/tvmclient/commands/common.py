"""Common command infrastructure for tvm CLI commands.

This module provides shared functionality for all CLI commands including:
- Identity and connection options
- Client construction from options and the YAML config file
- Error reporting
"""

from typing import Any, Dict, Optional

import typer
from rich.console import Console
from rich.markup import escape

from ..client import TvmClient
from ..config import load_config_file
from ..errors import TvmError
from ..utils.logging_config import LoggingConfig, LogLevel, setup_logging

# Shared instances
console = Console()


def namespace_option() -> Any:
    return typer.Option(
        None, "--namespace", "-n", help="Namespace to request credentials for (env: __OW_NAMESPACE)"
    )


def auth_option() -> Any:
    return typer.Option(
        None,
        "--auth",
        "-a",
        help="Auth token of the namespace (env: __OW_API_KEY)",
        show_default=False,
    )


def api_host_option() -> Any:
    return typer.Option(None, "--api-host", help="TVM API host, overrides the config file")


def cache_file_option() -> Any:
    return typer.Option(None, "--cache-file", help="Credential cache file to use")


def no_cache_option() -> Any:
    return typer.Option(
        False, "--no-cache", help="Do not read or write the credential cache file"
    )


def config_option() -> Any:
    return typer.Option(
        None, "--config", "-c", help="YAML config file (default: ~/.tvm/config.yaml if present)"
    )


def verbose_option() -> Any:
    return typer.Option(False, "--verbose", "-v", help="Show debug logs on stderr")


def build_config(
    namespace: Optional[str] = None,
    auth: Optional[str] = None,
    api_host: Optional[str] = None,
    cache_file: Optional[str] = None,
    no_cache: bool = False,
    config_file: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Merge the YAML config file with command line options.

    Command line options win over the file, --no-cache wins over both.
    """
    config = dict(load_config_file(config_file, missing_ok=config_file is None))

    overrides = {
        "namespace": namespace,
        "auth_token": auth,
        "api_host": api_host,
        "cache_file": cache_file,
    }
    config.update({key: value for key, value in overrides.items() if value is not None})

    if no_cache:
        config["cache_file"] = None

    return config


def create_client(
    namespace: Optional[str] = None,
    auth: Optional[str] = None,
    api_host: Optional[str] = None,
    cache_file: Optional[str] = None,
    no_cache: bool = False,
    config_file: Optional[str] = None,
    verbose: bool = False,
) -> TvmClient:
    """Create a client from command options, exiting with code 1 on bad input."""
    if verbose:
        setup_logging(LoggingConfig(level=LogLevel.DEBUG))
    else:
        setup_logging()

    try:
        config = build_config(namespace, auth, api_host, cache_file, no_cache, config_file)
        return TvmClient.init(config)
    except TvmError as e:
        exit_with_error(e)


def exit_with_error(error: Exception) -> None:
    console.print(f"[red]Error: {escape(str(error))}[/red]")
    raise typer.Exit(1)
