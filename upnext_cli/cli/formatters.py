"""
Functions for formatting and displaying data in the console using Rich.
"""

import re
import time
from pathlib import Path
from typing import Any

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.progress_bar import ProgressBar
from rich.table import Table
from rich.text import Text

from upnext_cli.models.config import AppConfig
from upnext_cli.models.entries import DEFAULT_COLOR, OutdatedEntry
from upnext_cli.utils.formatting import (
    clean_number,
    format_chapter_progress,
    format_duration,
)

_HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}$")

UP_TO_DATE_MESSAGE = "You're up to date! 🎉"


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    suggestions_map = {
        "ConfigurationError": [
            "• Run `upnext init <username>` to create a configuration file.",
            "• Run `upnext validate` to see which setting is rejected.",
        ],
    }

    suggestions = suggestions_map.get(
        error_type, ["• Run the command with -vv for detailed logs."]
    )

    error_text = Text()
    error_text.append(f"{error_type}: ", style="bold red")
    error_text.append(error_msg)

    suggestion_text = Text("\n".join(suggestions))

    content = Table.grid(padding=(1, 0))
    content.add_row(error_text)
    content.add_row()
    content.add_row(Text("Suggestions", style="bold yellow"))
    content.add_row(suggestion_text)

    if context:
        content.add_row()
        content.add_row(Text(f"Context: {context}", style="dim"))

    return Panel(
        content,
        title="[bold red]An Error Occurred[/bold red]",
        border_style="red",
        expand=False,
    )


def safe_color(color_hex: str) -> str:
    """Returns the color if it is a '#RRGGBB' string, else the default color."""
    return color_hex if _HEX_COLOR.match(color_hex or "") else DEFAULT_COLOR


def print_reading_list(
    entries: list[OutdatedEntry], saved_at: float | None = None
) -> None:
    """Displays the outdated titles, closest to caught up first."""
    console = Console()

    if not entries:
        console.print(
            Panel(
                Text(UP_TO_DATE_MESSAGE, justify="center"),
                title="[bold]Up Next[/bold]",
                border_style="green",
            )
        )
        return

    table = Table(
        title="[bold]Up Next[/bold]",
        box=box.ROUNDED,
        show_lines=False,
        header_style="bold cyan",
    )
    table.add_column("#", justify="right", style="dim")
    table.add_column("Title", overflow="fold")
    table.add_column("Progress", no_wrap=True)
    table.add_column("Behind", justify="right", no_wrap=True)
    table.add_column("", width=12, no_wrap=True)

    for index, entry in enumerate(entries, start=1):
        color = safe_color(entry.color)
        table.add_row(
            str(index),
            Text(entry.title, style=f"bold {color}"),
            format_chapter_progress(entry),
            clean_number(entry.chapters_left),
            ProgressBar(
                total=1.0,
                completed=entry.progress_value,
                width=12,
                complete_style=color,
                finished_style=color,
            ),
        )

    console.print(table)

    if saved_at is not None:
        age = format_duration(max(0.0, time.time() - saved_at))
        console.print(f"[dim]{len(entries)} titles behind, updated {age} ago.[/dim]")


def print_config(config_path: Path, config_data: dict[str, Any]):
    """Displays the current configuration."""
    console = Console()
    content = ""
    for key, value in config_data.items():
        if value is None or value == "":
            value = "[dim]<unset>[/dim]"
        content += f"{key} = {value}\n"

    console.print(
        Panel(
            content.strip(),
            title=f"Configuration ([dim]{config_path}[/dim])",
            border_style="cyan",
        )
    )


def print_validation_table(config: AppConfig):
    """Displays a summary of the current settings."""
    console = Console()
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column()

    timeout = (
        f"{clean_number(config.request_timeout)}s"
        if config.request_timeout
        else "None"
    )

    table.add_row("Username:", f"[green]{config.username}[/green]")
    table.add_row("Endpoint:", f"[dim]{config.endpoint}[/dim]")
    table.add_row("Only Unread:", "✓ Enabled" if config.only_unread else "✗ Disabled")
    table.add_row("Request Timeout:", timeout)
    table.add_row("Cache Key:", config.cache_key)

    console.print(
        Panel(
            table,
            title="[bold green]✓ Validated Settings[/bold green]",
            border_style="green",
        )
    )
