"""Credential cache commands for tvm."""

from typing import Optional

import typer
from rich.table import Table

from ..cache import FileBackend, MemoryCache, TwoTierCache
from ..config import DEFAULT_CACHE_FILE, load_config_file
from ..errors import TvmError
from .common import cache_file_option, config_option, console, exit_with_error

app = typer.Typer(help="Inspect and clear the credential cache file.")


def get_file_cache(cache_file: Optional[str], config_file: Optional[str]) -> TwoTierCache:
    """Open the cache file named on the command line, in the config file, or the default one."""
    if cache_file is None:
        try:
            config = load_config_file(config_file, missing_ok=config_file is None)
        except TvmError as e:
            exit_with_error(e)
        cache_file = config.get("cache_file", DEFAULT_CACHE_FILE)

    if not cache_file:
        console.print("[yellow]The credential cache file is disabled.[/yellow]")
        raise typer.Exit()

    # A private memory tier, this process has nothing cached
    return TwoTierCache(backend=FileBackend(cache_file), memory=MemoryCache())


@app.command("status")
def cache_status(
    cache_file: Optional[str] = cache_file_option(),
    config_file: Optional[str] = config_option(),
):
    """Show how many credentials are cached and how many are still fresh."""
    cache = get_file_cache(cache_file, config_file)
    stats = cache.get_stats()

    console.print("[bold blue]Credential Cache Status[/bold blue]")
    table = Table(show_header=True, header_style="bold blue")
    table.add_column("Setting", style="green", no_wrap=True)
    table.add_column("Value", style="cyan")

    table.add_row("Cache File", stats["location"])
    table.add_row("Total Entries", str(stats["total_entries"]))
    table.add_row("Fresh Entries", str(stats["fresh_entries"]))
    table.add_row("Expired Entries", str(stats["expired_entries"]))
    console.print(table)

    if stats["total_entries"] == 0:
        console.print("No cached credentials found.")


@app.command("clear")
def clear_cache(
    force: bool = typer.Option(False, "--force", "-f", help="Force clear without confirmation"),
    cache_file: Optional[str] = cache_file_option(),
    config_file: Optional[str] = config_option(),
):
    """Remove every cached credential from the cache file.

    The file is shared by all namespaces, so every caller will request fresh
    credentials from the TVM afterwards.
    """
    cache = get_file_cache(cache_file, config_file)
    stats = cache.get_stats()

    if stats["total_entries"] == 0:
        console.print("[green]Cache is already empty.[/green]")
        return

    if not force:
        confirm = typer.confirm(
            f"Clear {stats['total_entries']} cached credentials from {stats['location']}?"
        )
        if not confirm:
            console.print("[blue]Cache clear cancelled.[/blue]")
            return

    cleared = cache.clear()
    console.print(f"[green]Cleared {cleared} cached credentials.[/green]")
