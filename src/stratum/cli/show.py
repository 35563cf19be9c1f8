"""
stratum show - Display definition and resolved configuration.
"""

from pathlib import Path

import typer
from rich.console import Console

from stratum.cli.common import build_store

console = Console()


def show(
    files: list[Path] = typer.Argument(None, help="Configuration files (JSON, YAML), merged in order"),
    flat: bool = typer.Option(False, "--flat", help="Show dotted keys"),
    sort: bool = typer.Option(False, "--sort", help="Sort keys"),
    debug: bool = typer.Option(False, "--debug", help="Only show unresolved keys"),
    use_env: bool = typer.Option(False, "--env", help="Resolve ${env:...} against the process environment"),
    env_pick: list[str] = typer.Option(None, "--env-pick", help="Merge this environment variable into the tree"),
    overrides: list[str] = typer.Option(None, "--set", "-s", metavar="KEY=VALUE", help="Override a value"),
    allow_code: bool = typer.Option(False, "--allow-code", help="Allow Python configuration files"),
    strict: bool = typer.Option(False, "--strict", help="Fail on placeholder cycles"),
    log_level: str = typer.Option("warning", "--log-level", help="Log level"),
) -> None:
    """
    Show the definition tree next to the resolved tree.
    """
    store = build_store(files, use_env, env_pick, overrides, allow_code, strict, log_level)
    store.print(flat=flat, sort=sort, debug=debug, console=console)
