"""Job parameters supplied by the upload-complete issue."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

from gypsum_indexer.errors import InvalidParameters

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def parse_timestamp(value: Any) -> int:
    """Convert epoch milliseconds or an ISO-8601 string to epoch milliseconds."""
    if isinstance(value, bool):
        raise InvalidParameters(f"Invalid timestamp: {value!r}")
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as e:
            raise InvalidParameters(f"Invalid timestamp: {value!r}") from e
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return (parsed - _EPOCH) // timedelta(milliseconds=1)
    raise InvalidParameters(f"Invalid timestamp: {value!r}")


def format_ms(ms: int) -> str:
    """Render epoch milliseconds as a UTC ISO-8601 string, e.g. 2024-01-01T00:00:00.000Z."""
    dt = _EPOCH + timedelta(milliseconds=ms)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def _require_id(body: dict[str, Any], name: str) -> str:
    value = body.get(name)
    if not isinstance(value, str) or not value:
        raise InvalidParameters(f"Parameters must include a non-empty string '{name}'")
    if "/" in value:
        raise InvalidParameters(f"'{name}' must not contain '/': {value!r}")
    return value


@dataclass(frozen=True)
class JobParameters:
    project: str
    version: str
    timestamp: int
    overwrite_permissions: bool = False
    permissions: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, body: Any) -> JobParameters:
        if not isinstance(body, dict):
            raise InvalidParameters("Parameters must be a JSON object")
        project = _require_id(body, "project")
        version = _require_id(body, "version")
        if "timestamp" not in body:
            raise InvalidParameters("Parameters must include 'timestamp'")
        permissions = body.get("permissions", {})
        if permissions is None:
            permissions = {}
        if not isinstance(permissions, dict):
            raise InvalidParameters("'permissions' must be a JSON object")
        return cls(
            project=project,
            version=version,
            timestamp=parse_timestamp(body["timestamp"]),
            overwrite_permissions=bool(body.get("overwrite_permissions", False)),
            permissions=permissions,
        )

    @classmethod
    def from_json(cls, text: str) -> JobParameters:
        try:
            body = json.loads(text)
        except json.JSONDecodeError as e:
            raise InvalidParameters(f"Parameters are not valid JSON: {e}") from e
        return cls.from_dict(body)

    @classmethod
    def from_path(cls, path: str | Path) -> JobParameters:
        try:
            text = Path(path).read_text(encoding="utf-8")
        except OSError as e:
            raise InvalidParameters(f"Cannot read parameter file '{path}': {e}") from e
        return cls.from_json(text)
