"""gypsum-index CLI: entry point for the indexing workflow."""

from __future__ import annotations

import logging

import typer

from gypsum_indexer.cli import index_cmd, keys_cmd

app = typer.Typer(
    name="gypsum-index",
    help="Index uploaded gypsum project versions.",
    no_args_is_help=True,
)


class _State:
    """Global CLI state shared across subcommands."""

    json_output: bool = False


state = _State()


def _version_callback(value: bool) -> None:
    if value:
        try:
            from importlib.metadata import version

            v = version("gypsum-indexer")
        except Exception:
            v = "unknown"
        print(f"gypsum-index {v}")
        raise typer.Exit()


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        "INFO",
        "--log-level",
        envvar="GYPSUM_LOG_LEVEL",
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output when supported"),
    version: bool = typer.Option(
        False, "--version", help="Show version", is_eager=True, callback=_version_callback
    ),
) -> None:
    """Global options for all gypsum-index commands."""
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise typer.BadParameter(f"Unknown log level '{log_level}'", param_hint="--log-level")
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger().setLevel(level)
    state.json_output = json_output


app.command(name="run")(index_cmd.index_cmd)
app.command(name="keys")(keys_cmd.keys_cmd)


def main() -> None:
    """Entry point for the gypsum-index CLI."""
    app()
