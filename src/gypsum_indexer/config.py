"""Configuration for a single indexing run."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from gypsum_indexer.errors import ConfigurationError


@dataclass(frozen=True)
class IndexerConfig:
    """Credentials and targets for one run, built once at startup."""

    bucket: str
    repository: str
    issue_number: int
    r2_account_id: str | None = None
    r2_access_key_id: str | None = None
    r2_secret_access_key: str | None = None
    github_token: str | None = None
    s3_endpoint_url: str | None = None
    s3_region: str = "auto"
    s3_request_timeout_s: float = 30.0
    github_api_url: str = "https://api.github.com"
    github_timeout_s: float = 30.0
    schema_dir: Path | None = None

    @property
    def endpoint_url(self) -> str:
        if self.s3_endpoint_url:
            return self.s3_endpoint_url
        return f"https://{self.r2_account_id}.r2.cloudflarestorage.com"

    def validate(self) -> None:
        """Raise ConfigurationError naming every missing setting."""
        missing: list[str] = []
        if not self.bucket:
            missing.append("bucket")
        if not self.repository:
            missing.append("repository")
        if self.issue_number < 1:
            missing.append("issue_number")
        if not self.r2_account_id and not self.s3_endpoint_url:
            missing.append("r2_account_id")
        if not self.r2_access_key_id:
            missing.append("r2_access_key_id")
        if not self.r2_secret_access_key:
            missing.append("r2_secret_access_key")
        if not self.github_token:
            missing.append("github_token")
        if missing:
            raise ConfigurationError(missing)
