"""Command-line interface."""

import json
import os
import threading
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.syntax import Syntax

from .plugin import Plugin
from .preferences import YAML_SCHEMA_PREFERENCE, PreferenceStore, initialize_default_preferences
from .util.error import NamedError
from .util.log import Log, LogLevel
from .yaml.settings import SchemaMapping, build_settings

app = typer.Typer(
    name="yamlls-bridge",
    help="Run yaml-language-server with schema settings and workspace folders kept in sync",
    no_args_is_help=True,
)
schema_app = typer.Typer(help="Show or edit the schema preference")
app.add_typer(schema_app, name="schema")

console = Console()


def _store(preferences: Optional[Path]) -> PreferenceStore:
    store = PreferenceStore(preferences)
    initialize_default_preferences(store)
    store.load()
    return store


def _print_json(data) -> None:
    console.print(Syntax(json.dumps(data, indent=2), "json"))


@app.callback()
def main(
    print_logs: bool = typer.Option(False, "--print-logs", help="Print logs to stderr"),
    log_level: LogLevel = typer.Option(LogLevel.INFO, "--log-level", help="Minimum log level"),
):
    Log.init(print_logs, log_level)


@app.command()
def settings(
    preferences: Optional[Path] = typer.Option(None, "--preferences", help="Preferences file"),
):
    """Print the settings the server receives."""
    _print_json(build_settings(_store(preferences)))


@schema_app.command("show")
def schema_show(
    preferences: Optional[Path] = typer.Option(None, "--preferences", help="Preferences file"),
):
    """Print the schema preference."""
    value = _store(preferences).get_string(YAML_SCHEMA_PREFERENCE)
    if not value.strip():
        console.print("[dim]No schemas configured[/dim]")
        return
    console.print(Syntax(value, "json"))


@schema_app.command("set")
def schema_set(
    value: str = typer.Argument(..., help='JSON object, e.g. {"https://example.com/s.json": "*.yml"}'),
    preferences: Optional[Path] = typer.Option(None, "--preferences", help="Preferences file"),
):
    """Replace the schema preference."""
    try:
        SchemaMapping.model_validate_json(value)
    except ValueError as e:
        console.print(f"[red]Error: invalid schema mapping: {e}[/red]")
        raise typer.Exit(1)

    store = _store(preferences)
    store.set_value(YAML_SCHEMA_PREFERENCE, value)
    store.save()
    console.print("[green]Schema preference saved[/green]")


@schema_app.command("clear")
def schema_clear(
    preferences: Optional[Path] = typer.Option(None, "--preferences", help="Preferences file"),
):
    """Reset the schema preference to empty."""
    store = _store(preferences)
    store.set_to_default(YAML_SCHEMA_PREFERENCE)
    store.save()
    console.print("[green]Schema preference cleared[/green]")


@app.command()
def run(
    projects: List[Path] = typer.Argument(None, help="Project directories"),
    preferences: Optional[Path] = typer.Option(None, "--preferences", help="Preferences file"),
):
    """Launch the YAML language server and keep it in sync until interrupted."""
    plugin = Plugin(store=PreferenceStore(preferences))
    stop = threading.Event()
    try:
        plugin.start()
        plugin.add_projects(projects or [])
        session = plugin.start_yaml_server(os.getcwd())
        console.print(f"[green]Started[/green] {session}")
        stop.wait()
    except KeyboardInterrupt:
        console.print("[dim]Stopping[/dim]")
    except NamedError as e:
        console.print(f"[red]Error: {e.message}[/red]")
        raise typer.Exit(1)
    finally:
        plugin.stop()
        Log.close()


if __name__ == "__main__":
    app()
