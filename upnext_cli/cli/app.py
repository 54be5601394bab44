"""
Defines the command-line interface for the application using Typer.
"""

import asyncio
import logging
import os
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from upnext_cli import __version__
from upnext_cli.api.client import ReadingListClient
from upnext_cli.core.service import ReadingListService
from upnext_cli.exceptions import ConfigurationError, UpNextError
from upnext_cli.models.config import DEFAULT_API_BASE_URL, DEFAULT_CACHE_KEY, AppConfig
from upnext_cli.storage.cache import CacheStore
from upnext_cli.storage.config_manager import ConfigManager

from .formatters import print_config, print_reading_list, print_validation_table

console = Console()

logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[
        RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            show_level=False,
            markup=True,
        )
    ],
)
log = logging.getLogger("upnext_cli")

app = typer.Typer(
    name="upnext",
    help=(
        "Shows which titles on your reading list have unread chapters, closest"
        " to caught up first. Use 'upnext <command> --help' for more info."
    ),
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)


def get_config_dir() -> Path:
    if os.name == "nt":
        base_dir = Path(os.getenv("APPDATA", "~\\AppData\\Roaming"))
    else:
        base_dir = Path(os.getenv("XDG_CONFIG_HOME", "~/.config"))
    return base_dir.expanduser() / "upnext-cli"


CONFIG_DIR = get_config_dir()
CONFIG_FILE = CONFIG_DIR / "config.ini"


def _load_config() -> AppConfig:
    try:
        return ConfigManager(CONFIG_FILE).load_config()
    except UpNextError as e:
        console.print(f"[bold red]Error: {e}[/bold red]")
        raise typer.Exit(code=1) from e


async def _run_service(
    config: AppConfig, refresh: bool, force_clear: bool
) -> ReadingListService:
    """Loads the cached list and refreshes it when asked or when it is empty."""
    async with ReadingListClient(config) as client:
        service = ReadingListService(
            client, CacheStore(config.cache_dir, config.cache_key)
        )
        if refresh or force_clear:
            service.load_cache()
            await service.refresh(force_clear=force_clear)
        else:
            await service.initialize()
        return service


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity (-vv for debug).",
    ),
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", is_eager=True
    ),
    show_config: bool = typer.Option(
        False, "--show-config", help="Display the current configuration."
    ),
    clear_cache: bool = typer.Option(
        False, "--clear-cache", help="Clear the cached reading list and exit."
    ),
):
    """Up Next reading-list tracker"""
    if version:
        console.print(f"[bold]upnext-cli[/bold] version [cyan]{__version__}[/cyan]")
        raise typer.Exit()

    log_level = "INFO"
    if verbose >= 2:
        log_level = "DEBUG"
    logging.getLogger("upnext_cli").setLevel(log_level)

    if clear_cache:
        try:
            cache_key = ConfigManager(CONFIG_FILE).load_config().cache_key
        except ConfigurationError:
            cache_key = DEFAULT_CACHE_KEY
        cache = CacheStore(CONFIG_DIR, cache_key)
        console.print("[cyan]Clearing cached reading list...[/cyan]")

        had_entry = cache.exists
        if cache.clear():
            detail = "1 entry removed" if had_entry else "nothing was cached"
            console.print(f"[green]✓ Cache cleared successfully ({detail}).[/green]")
        else:
            console.print("[red]✗ Failed to clear cache.[/red]")
        raise typer.Exit()

    if show_config:
        if not CONFIG_FILE.is_file():
            console.print(
                "[red]✗ Config file not found.[/] Run [cyan]upnext init[/cyan]"
                " first."
            )
            raise typer.Exit(code=1)
        try:
            config_data = ConfigManager(CONFIG_FILE).read_settings()
        except UpNextError as e:
            console.print(f"[red]✗ {e}[/red]")
            raise typer.Exit(code=1) from e
        print_config(CONFIG_FILE, config_data)
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


@app.command()
def init(
    username: str = typer.Argument(..., help="The user whose reading list to track."),
    api_url: str = typer.Option(
        DEFAULT_API_BASE_URL,
        "--api-url",
        help="Base URL of the reading-list API.",
    ),
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite an existing configuration."
    ),
):
    """Initialize configuration for a user."""
    if (
        CONFIG_FILE.exists()
        and not force
        and not typer.confirm("Configuration file already exists. Overwrite it?")
    ):
        raise typer.Abort()

    settings = {"username": username, "api_base_url": api_url}
    try:
        AppConfig(**settings, config_path=str(CONFIG_DIR))
        ConfigManager(CONFIG_FILE).save_new_config(settings)
    except (UpNextError, ValueError) as e:
        console.print(f"[red]✗ Could not save configuration: {e}[/red]")
        raise typer.Exit(code=1) from e

    console.print(f"\n[bold green]✓ Configuration saved to '{CONFIG_FILE}'[/bold green]")
    console.print("Ready! Try: [cyan]upnext list[/cyan]")


@app.command(name="list")
def list_command(
    refresh: bool = typer.Option(
        False, "--refresh", "-r", help="Fetch a fresh list even if one is cached."
    ),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Discard the cached list before fetching.",
    ),
):
    """Show titles with unread chapters."""
    config = _load_config()
    service = asyncio.run(_run_service(config, refresh=refresh, force_clear=force))

    if service.last_error is not None:
        console.print(f"[yellow]⚠️  Could not refresh: {service.last_error}[/yellow]")
    print_reading_list(service.entries, service.cache.saved_at())


@app.command()
def refresh(
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Discard the cached list before fetching.",
    ),
):
    """Fetch the reading list and update the cache."""
    config = _load_config()
    service = asyncio.run(_run_service(config, refresh=True, force_clear=force))

    if service.last_error is not None:
        console.print(f"[yellow]⚠️  Refresh failed: {service.last_error}[/yellow]")
        kept = "no list is cached" if not service.entries else "kept the cached list"
        console.print(f"[dim]Nothing was updated; {kept}.[/dim]")
    else:
        console.print(
            f"[green]✓ Reading list updated: {len(service.entries)} titles behind."
            "[/green]"
        )
    print_reading_list(service.entries, service.cache.saved_at())


@app.command()
def validate():
    """Validate the current configuration."""
    try:
        config_manager = ConfigManager(CONFIG_FILE)
        config = config_manager.load_config()
        print_validation_table(config)
    except UpNextError as e:
        console.print(f"[red]✗ Configuration is invalid: {e}[/red]")
        raise typer.Exit(code=1) from e


@app.command()
def diagnose():
    """Diagnose common configuration and connectivity issues."""
    console.print("\n[bold cyan]Running diagnostics...[/bold cyan]\n")
    issues_found = False
    if CONFIG_FILE.is_file():
        console.print(f"[green]✓[/] Config file exists at: [dim]{CONFIG_FILE}[/dim]")
    else:
        console.print("[red]✗ Config file not found.[/] Run [cyan]upnext init[/cyan].")
        raise typer.Exit(code=1)
    try:
        config = ConfigManager(CONFIG_FILE).load_config()
        console.print("[green]✓[/] Configuration file is valid and can be loaded.")
    except UpNextError as e:
        console.print(f"[red]✗ Configuration validation failed: {e}[/red]")
        raise typer.Exit(code=1) from e

    cache = CacheStore(config.cache_dir, config.cache_key)
    if cache.exists:
        console.print(f"[green]✓[/] Cached reading list found: [dim]{cache.cache_path}[/dim]")
    else:
        console.print("[yellow]•[/] No cached reading list yet.")

    console.print(f"\n[dim]Testing connectivity to {config.endpoint}...[/dim]")

    async def test_connection() -> bool:
        async with ReadingListClient(config) as client:
            outcome = await client.fetch()
        if outcome.ok:
            console.print(
                f"[green]✓[/] Reading list reachable ({len(outcome.entries)} items)."
            )
            return True
        console.print(f"[red]✗ Connection test failed: {outcome.error}[/red]")
        return False

    if not asyncio.run(test_connection()):
        issues_found = True
    console.print()
    if not issues_found:
        console.print(
            "[bold green]✓ All checks passed! Your setup looks good.[/bold green]\n"
        )
    else:
        console.print(
            "[bold red]✗ Some issues were found. "
            "Please review the messages above.[/bold red]\n"
        )
        raise typer.Exit(code=1)
