"""gypsum-index keys — show the object keys used for a project version."""

from __future__ import annotations

import typer

from gypsum_indexer import keys
from gypsum_indexer.cli import _exitcodes as ec
from gypsum_indexer.cli._output import print_error, print_table
from gypsum_indexer.errors import InvalidParameters
from gypsum_indexer.params import JobParameters


def keys_cmd(
    project: str = typer.Argument(..., help="Project name"),
    version: str = typer.Argument(..., help="Version name"),
) -> None:
    """List the lock, summary and pointer keys for PROJECT/VERSION."""
    from gypsum_indexer.cli import state

    try:
        JobParameters.from_dict({"project": project, "version": version, "timestamp": 0})
    except InvalidParameters as e:
        print_error(str(e))
        raise typer.Exit(ec.USAGE_ERROR)

    rows = [
        ["lock", keys.lock(project, version)],
        ["expiry", keys.expiry(project, version)],
        ["revision", keys.version_metadata(project, version)],
        ["aggregated", keys.aggregated(project, version)],
        ["permissions", keys.permissions(project)],
        ["latest", keys.latest_persistent(project)],
        ["latest_all", keys.latest_all(project)],
    ]
    print_table(["name", "key"], rows, json_mode=state.json_output)
