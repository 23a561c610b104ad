#!/usr/bin/env python3
"""
tvm - Token Vending Machine client

A CLI tool for requesting and caching short-lived cloud credentials.
"""

import typer
from rich.console import Console

from . import __version__
from .commands import cache, credentials

app = typer.Typer(
    help="Token Vending Machine client - request short-lived cloud credentials and manage their cache.",
    add_completion=True,
    no_args_is_help=True,
)
console = Console()

app.add_typer(credentials.app, name="credentials")
app.add_typer(cache.app, name="cache")


@app.command()
def version():
    """Show the application version and exit."""
    console.print(f"tvm version: {__version__}")
    raise typer.Exit()


if __name__ == "__main__":
    app()
