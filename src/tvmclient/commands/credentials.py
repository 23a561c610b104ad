"""Credential commands for tvm."""

import asyncio
import json
from typing import Optional

import typer

from ..errors import TvmError
from ..models import ResourceType
from .common import (
    api_host_option,
    auth_option,
    cache_file_option,
    config_option,
    console,
    create_client,
    exit_with_error,
    namespace_option,
    no_cache_option,
    verbose_option,
)

app = typer.Typer(help="Request credentials from the token vending machine.")

_CACHED_COMMANDS = {
    "aws-s3": ResourceType.AWS_S3,
    "azure-blob": ResourceType.AZURE_BLOB,
    "azure-cosmos": ResourceType.AZURE_COSMOS,
}


def _print_json(data) -> None:
    console.print_json(json.dumps(data))


@app.command("get")
def get_credentials(
    resource: str = typer.Argument(..., help="Credential kind: aws-s3, azure-blob, azure-cosmos"),
    namespace: Optional[str] = namespace_option(),
    auth: Optional[str] = auth_option(),
    api_host: Optional[str] = api_host_option(),
    cache_file: Optional[str] = cache_file_option(),
    no_cache: bool = no_cache_option(),
    config_file: Optional[str] = config_option(),
    verbose: bool = verbose_option(),
):
    """Get cached or freshly vended credentials and print them as JSON.

    Examples:
        tvm credentials get aws-s3 --namespace my-ns
        tvm credentials get azure-blob --no-cache
    """
    resource_type = _CACHED_COMMANDS.get(resource)
    if resource_type is None:
        console.print(f"[red]Error: Unknown credential kind '{resource}'.[/red]")
        console.print(f"Valid kinds: {', '.join(_CACHED_COMMANDS)}")
        raise typer.Exit(1)

    client = create_client(namespace, auth, api_host, cache_file, no_cache, config_file, verbose)
    getters = {
        ResourceType.AWS_S3: client.get_aws_s3_credentials,
        ResourceType.AZURE_BLOB: client.get_azure_blob_credentials,
        ResourceType.AZURE_COSMOS: client.get_azure_cosmos_credentials,
    }

    try:
        credentials = asyncio.run(getters[resource_type]())
    except TvmError as e:
        exit_with_error(e)

    _print_json(credentials.to_dict())


@app.command("presign")
def presign(
    blob_name: str = typer.Option(..., "--blob-name", help="Blob to presign"),
    expiry: int = typer.Option(..., "--expiry", help="Signature lifetime in seconds", min=1),
    permissions: str = typer.Option(..., "--permissions", help="Permissions such as r or rw"),
    namespace: Optional[str] = namespace_option(),
    auth: Optional[str] = auth_option(),
    api_host: Optional[str] = api_host_option(),
    config_file: Optional[str] = config_option(),
    verbose: bool = verbose_option(),
):
    """Get a signature for a presigned Azure blob URL."""
    client = create_client(namespace, auth, api_host, None, True, config_file, verbose)

    try:
        credentials = asyncio.run(
            client.get_azure_blob_presign_credentials(
                blob_name=blob_name, expiry_in_seconds=expiry, permissions=permissions
            )
        )
    except TvmError as e:
        exit_with_error(e)

    _print_json(credentials.to_dict())


@app.command("revoke")
def revoke(
    force: bool = typer.Option(False, "--force", "-f", help="Revoke without confirmation"),
    namespace: Optional[str] = namespace_option(),
    auth: Optional[str] = auth_option(),
    api_host: Optional[str] = api_host_option(),
    config_file: Optional[str] = config_option(),
    verbose: bool = verbose_option(),
):
    """Revoke every presigned Azure blob URL issued for the namespace."""
    client = create_client(namespace, auth, api_host, None, True, config_file, verbose)

    if not force:
        confirm = typer.confirm(
            f"Revoke all presigned URLs for namespace '{client.namespace}'?"
        )
        if not confirm:
            console.print("[blue]Revoke cancelled.[/blue]")
            return

    try:
        response = asyncio.run(client.revoke_azure_blob_presign_credentials())
    except TvmError as e:
        exit_with_error(e)

    console.print(f"[green]Revoked presigned URLs for namespace {client.namespace}[/green]")
    if response:
        _print_json(response)
