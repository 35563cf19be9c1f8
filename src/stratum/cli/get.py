"""
stratum get - Print a single resolved value.
"""

import json
from pathlib import Path

import typer

from stratum.cli.common import build_store, err_console
from stratum.config.sentinels import MISSING


def get(
    key: str = typer.Argument(..., help="Key in dot.notation or colon:notation"),
    files: list[Path] = typer.Argument(None, help="Configuration files (JSON, YAML), merged in order"),
    default: str = typer.Option(None, "--default", help="Printed when the key is missing"),
    use_env: bool = typer.Option(False, "--env", help="Resolve ${env:...} against the process environment"),
    env_pick: list[str] = typer.Option(None, "--env-pick", help="Merge this environment variable into the tree"),
    overrides: list[str] = typer.Option(None, "--set", "-s", metavar="KEY=VALUE", help="Override a value"),
    allow_code: bool = typer.Option(False, "--allow-code", help="Allow Python configuration files"),
    strict: bool = typer.Option(False, "--strict", help="Fail on placeholder cycles"),
    log_level: str = typer.Option("warning", "--log-level", help="Log level"),
) -> None:
    """
    Print the resolved value at KEY. Containers and non-string scalars print as JSON.
    """
    store = build_store(files, use_env, env_pick, overrides, allow_code, strict, log_level)
    value = store.get(key, MISSING)

    if value is MISSING:
        if default is None:
            err_console.print(f"[yellow]Key not found: {key}[/yellow]")
            raise typer.Exit(1)
        value = default

    typer.echo(value if isinstance(value, str) else json.dumps(value, default=str))
