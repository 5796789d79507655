"""Terminal front end: list dev servers, open, copy or stop them, edit the allowlist."""

from __future__ import annotations

import json
from typing import List, Optional

import typer
from rich import box
from rich.console import Console
from rich.table import Table

from .actions import copy_to_clipboard, open_in_browser, terminate
from .config import (
    WhatThePortConfig,
    add_to_allowlist,
    load_config,
    remove_from_allowlist,
    reset_allowlist,
    save_config,
)
from .models import ListeningPort
from .monitor import PortMonitor
from .utils import format_uptime, localhost_url

console = Console()
app = typer.Typer(
    help="[bold cyan]whattheport[/]: see what's running on your dev ports",
    rich_markup_mode="rich",
    no_args_is_help=True,
)
allow_app = typer.Typer(
    help="Manage which process names count as dev servers",
    no_args_is_help=True,
)
app.add_typer(allow_app, name="allow")


def _scan(config: WhatThePortConfig) -> List[ListeningPort]:
    monitor = PortMonitor.from_config(config)
    return monitor.refresh().ports


def _lookup(port: int) -> ListeningPort:
    config = load_config()
    for entry in _scan(config):
        if entry.port == port:
            return entry
    console.print(f"[red]✗  Nothing from the allowlist is listening on :{port}[/]")
    raise typer.Exit(1)


@app.command("list", help="Show dev servers listening in the configured port range")
def cmd_list(
    as_json: bool = typer.Option(False, "--json", help="Print the snapshot as JSON"),
) -> None:
    config = load_config()
    ports = _scan(config)

    if as_json:
        typer.echo(json.dumps([entry.to_dict() for entry in ports], indent=2))
        return

    if not ports:
        console.print(
            f"[yellow]No dev servers running on ports {config.min_port}-{config.max_port}[/]"
        )
        return

    table = Table(box=box.ROUNDED, border_style="bright_black", header_style="bold cyan")
    table.add_column("Port", style="green")
    table.add_column("Project")
    table.add_column("Process")
    table.add_column("PID", style="dim", justify="right")
    table.add_column("Uptime", justify="right")
    for entry in ports:
        table.add_row(
            f":{entry.port}",
            entry.project_name or "[dim]-[/]",
            entry.process,
            str(entry.pid),
            format_uptime(entry.start_time),
        )
    console.print(table)


@app.command("url", help="Print the local URL of a dev server")
def cmd_url(port: int = typer.Argument(..., help="Listening port")) -> None:
    entry = _lookup(port)
    typer.echo(localhost_url(entry.port))


@app.command("open", help="Open a dev server in the browser")
def cmd_open(port: int = typer.Argument(..., help="Listening port")) -> None:
    entry = _lookup(port)
    url = localhost_url(entry.port)
    if not open_in_browser(url):
        console.print(f"[red]✗  Could not open {url}[/]")
        raise typer.Exit(1)
    console.print(f"[green]✓  Opened {url}[/]")


@app.command("copy", help="Copy the local URL of a dev server to the clipboard")
def cmd_copy(port: int = typer.Argument(..., help="Listening port")) -> None:
    entry = _lookup(port)
    url = localhost_url(entry.port)
    if not copy_to_clipboard(url):
        console.print(f"[red]✗  Could not copy {url}, no clipboard tool found[/]")
        raise typer.Exit(1)
    console.print(f"[green]✓  Copied {url} to clipboard[/]")


@app.command("stop", help="Send SIGTERM to the process listening on a port")
def cmd_stop(
    port: int = typer.Argument(..., help="Listening port"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation"),
) -> None:
    entry = _lookup(port)
    name = entry.project_name or entry.process
    if not yes and not typer.confirm(f"Stop {name} on port {entry.port}?", default=False):
        raise typer.Exit(0)
    if terminate(entry.pid):
        console.print(f"[green]✓  Stopped process {entry.pid}[/]")
    else:
        console.print(f"[red]✗  Failed to stop process {entry.pid}[/]")
        raise typer.Exit(1)


@allow_app.command("list", help="Show the allowlisted process names")
def cmd_allow_list() -> None:
    for name in sorted(load_config().allowlist):
        typer.echo(name)


@allow_app.command("add", help="Allowlist one or more process names")
def cmd_allow_add(names: List[str] = typer.Argument(..., help="Process names, exact case")) -> None:
    config = add_to_allowlist(load_config(), names)
    save_config(config)
    console.print(f"[green]✓  {len(config.allowlist)} process names allowlisted[/]")


@allow_app.command("remove", help="Drop process names from the allowlist")
def cmd_allow_remove(names: List[str] = typer.Argument(..., help="Process names")) -> None:
    config = load_config()
    missing = sorted(set(names) - config.allowlist)
    if missing:
        console.print(f"[yellow]⚠  Not allowlisted: {', '.join(missing)}[/]")
    save_config(remove_from_allowlist(config, names))


@allow_app.command("reset", help="Restore the default allowlist")
def cmd_allow_reset() -> None:
    save_config(reset_allowlist(load_config()))
    console.print("[green]✓  Allowlist reset to defaults[/]")


def main(argv: Optional[List[str]] = None) -> None:
    app(args=argv)


__all__ = ["app", "main"]
