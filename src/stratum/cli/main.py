"""
Main CLI entry point.
"""

import typer

from stratum import __version__
from stratum.cli import get, show


def version_callback(value: bool):
    """Callback to display version and exit."""
    if value:
        typer.echo(f"stratum version {__version__}")
        raise typer.Exit()


app = typer.Typer(
    name="stratum",
    help="Stratum - layered configuration with placeholder substitution",
    add_completion=False,
)

app.command(name="show")(show.show)
app.command(name="get")(get.get)


@app.callback(invoke_without_command=True)
def entrypoint(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
):
    """
    Stratum - layered configuration with placeholder substitution.

    Run 'stratum <command> --help' for help on a specific command.
    """
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


def main():
    """Main CLI entry point."""
    app()


if __name__ == "__main__":
    main()
