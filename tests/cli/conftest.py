"""Shared fixtures for CLI tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from typer.testing import CliRunner

from gypsum_indexer.cli import app, index_cmd
from gypsum_indexer.indexer import IndexResult, RunOutcome

if TYPE_CHECKING:
    from click.testing import Result

ENV_VARS = [
    "R2_BUCKET_NAME",
    "GITHUB_REPOSITORY",
    "R2_ACCOUNT_ID",
    "CF_ACCOUNT_ID",
    "R2_ACCESS_KEY_ID",
    "R2_SECRET_ACCESS_KEY",
    "GH_BOT_TOKEN",
    "R2_ENDPOINT_URL",
    "GYPSUM_LOG_LEVEL",
]

CREDENTIALS = [
    "--cfid",
    "acct",
    "--r2key",
    "key",
    "--r2secret",
    "secret",
    "--ghtoken",
    "tok",
]


@pytest.fixture
def runner(monkeypatch):
    """Create a CLI test runner with no credentials leaking in from the environment."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return CliRunner()


class FakeRun:
    """Replacement for the indexer entry point that records its inputs."""

    def __init__(self) -> None:
        self.calls: list[tuple] = []
        self.outcome = RunOutcome(
            ok=True,
            result=IndexResult(
                project="p",
                version="v1",
                index_time=1_700_000_000_000,
                metadata={"upload_time": "x", "index_time": "y", "expiry_job_id": 9},
                aggregated_count=2,
                permissions_written=True,
                latest_written=["p/..latest_all"],
            ),
        )

    async def __call__(self, config, load_params):
        self.calls.append((config, load_params()))
        return self.outcome


@pytest.fixture
def fake_run(monkeypatch):
    fake = FakeRun()
    monkeypatch.setattr(index_cmd, "run", fake)
    return fake


def invoke(runner: CliRunner, args: list[str]) -> "Result":
    return runner.invoke(app, args, catch_exceptions=False)
