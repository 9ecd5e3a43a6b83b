"""gypsum-index run — index one uploaded project version."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Callable, Optional

import typer

from gypsum_indexer.cli import _exitcodes as ec
from gypsum_indexer.cli._output import print_error, print_object
from gypsum_indexer.config import IndexerConfig
from gypsum_indexer.errors import ConfigurationError
from gypsum_indexer.indexer import run
from gypsum_indexer.params import JobParameters


def _params_loader(
    parameter_path: Path | None, parameters: str | None
) -> Callable[[], JobParameters]:
    if parameter_path is not None:
        return lambda: JobParameters.from_path(parameter_path)
    assert parameters is not None
    return lambda: JobParameters.from_json(parameters)


def index_cmd(
    bucket: Optional[str] = typer.Option(
        None, "--r2bucket", envvar="R2_BUCKET_NAME", help="Name of the R2 bucket"
    ),
    repository: Optional[str] = typer.Option(
        None, "--ghrepo", envvar="GITHUB_REPOSITORY", help="CI repository (owner/repo)"
    ),
    issue_number: Optional[int] = typer.Option(
        None, "--ghissue", help="Number of the issue that requested indexing"
    ),
    parameter_path: Optional[Path] = typer.Option(
        None, "--parameter-path", help="Path to a JSON file with the indexing parameters"
    ),
    parameters: Optional[str] = typer.Option(
        None, "--parameters", help="Indexing parameters as inline JSON (usually the issue body)"
    ),
    account_id: Optional[str] = typer.Option(
        None, "--cfid", envvar=["R2_ACCOUNT_ID", "CF_ACCOUNT_ID"], help="Cloudflare account id"
    ),
    access_key_id: Optional[str] = typer.Option(
        None, "--r2key", envvar="R2_ACCESS_KEY_ID", help="R2 access key id"
    ),
    secret_access_key: Optional[str] = typer.Option(
        None, "--r2secret", envvar="R2_SECRET_ACCESS_KEY", help="R2 secret access key"
    ),
    github_token: Optional[str] = typer.Option(
        None, "--ghtoken", envvar="GH_BOT_TOKEN", help="GitHub token for the bot account"
    ),
    endpoint_url: Optional[str] = typer.Option(
        None, "--endpoint-url", envvar="R2_ENDPOINT_URL", help="Override the S3 endpoint URL"
    ),
    schemas: Optional[Path] = typer.Option(
        None, "--schemas", help="Directory of JSON schemas to validate documents against"
    ),
    strict: bool = typer.Option(
        False, "--strict", help="Non-zero exit when a failure was reported on the issue"
    ),
) -> None:
    """Index a project version and close the requesting issue."""
    from gypsum_indexer.cli import state

    json_mode = state.json_output

    if (parameter_path is None) == (parameters is None):
        print_error("Exactly one of --parameter-path or --parameters is required")
        raise typer.Exit(ec.USAGE_ERROR)

    config = IndexerConfig(
        bucket=bucket or "",
        repository=repository or "",
        issue_number=issue_number or 0,
        r2_account_id=account_id,
        r2_access_key_id=access_key_id,
        r2_secret_access_key=secret_access_key,
        github_token=github_token,
        s3_endpoint_url=endpoint_url,
        schema_dir=schemas,
    )
    try:
        config.validate()
    except ConfigurationError as e:
        print_error(str(e))
        raise typer.Exit(ec.USAGE_ERROR)

    outcome = asyncio.run(run(config, _params_loader(parameter_path, parameters)))

    if outcome.ok:
        assert outcome.result is not None
        result = outcome.result
        data = {
            "status": "indexed",
            "project": result.project,
            "version": result.version,
            "index_time": result.index_time,
            "aggregated": result.aggregated_count,
            "permissions_written": result.permissions_written,
            "latest_written": result.latest_written,
            "expiry_job_id": result.expiry_job_id,
        }
        print_object(data, json_mode=json_mode)
        return

    # Failures were already reported on the issue, so the job itself succeeds.
    print_object({"status": "failed", "error": outcome.error}, json_mode=json_mode)
    if strict:
        raise typer.Exit(ec.EXECUTION_FAILURE)
