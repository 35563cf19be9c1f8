"""Shared option handling for CLI commands."""

import os
from pathlib import Path

import typer
from rich.console import Console

from stratum.config.loader import load_config
from stratum.config.sources import parse_args
from stratum.config.store import ConfigStore
from stratum.exceptions import StratumError
from stratum.utils.logging import setup_logging

err_console = Console(stderr=True)


def build_store(
    files: list[Path] | None,
    use_env: bool = False,
    env_pick: list[str] | None = None,
    overrides: list[str] | None = None,
    allow_code: bool = False,
    strict: bool = False,
    log_level: str = "warning",
) -> ConfigStore:
    """
    Load files, picked environment variables and ``--set`` overrides.

    Exits with code 1 for missing files and 2 for configuration errors.
    """
    setup_logging(log_level)

    try:
        store = load_config(
            *(files or []),
            environ=os.environ if env_pick else None,
            env_pick=env_pick or None,
            dictionary={"env": dict(os.environ)} if use_env else None,
            allow_code=allow_code,
            strict=strict,
        )
        if overrides:
            store.merge(parse_args(overrides))
    except FileNotFoundError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e
    except StratumError as e:
        err_console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(2) from e

    return store
