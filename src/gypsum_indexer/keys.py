"""Object keys used by the indexer."""

from __future__ import annotations

JSON_SUFFIX = ".json"


def version_prefix(project: str, version: str) -> str:
    return f"{project}/{version}/"


def lock(project: str, version: str) -> str:
    return f"{project}/{version}/..LOCK"


def expiry(project: str, version: str) -> str:
    return f"{project}/{version}/..expiry"


def version_metadata(project: str, version: str) -> str:
    return f"{project}/{version}/..revision"


def aggregated(project: str, version: str) -> str:
    return f"{project}/{version}/..aggregated"


def permissions(project: str) -> str:
    return f"{project}/..permissions"


def latest_persistent(project: str) -> str:
    return f"{project}/..latest"


def latest_all(project: str) -> str:
    return f"{project}/..latest_all"


def is_json(key: str) -> bool:
    return key.endswith(JSON_SUFFIX)
