"""Latest-version pointers and their precedence rules."""

from __future__ import annotations

from typing import Any

from gypsum_indexer.errors import MalformedState

# Index time recorded by the placeholder pointer that expiring versions write.
PLACEHOLDER_INDEX_TIME = -1


def format_latest(version: str, index_time: int) -> dict[str, Any]:
    return {"version": version, "index_time": index_time}


def placeholder() -> dict[str, Any]:
    return format_latest("", PLACEHOLDER_INDEX_TIME)


def should_replace(key: str, current: Any | None, candidate_time: int) -> bool:
    """Return True if a pointer with ``candidate_time`` supersedes ``current``.

    Only a strictly newer index time wins; ties keep the stored pointer.
    """
    if current is None:
        return True
    stored = current.get("index_time") if isinstance(current, dict) else None
    if isinstance(stored, bool) or not isinstance(stored, (int, float)):
        raise MalformedState(key, "latest file should contain a 'index_time' number")
    return stored < candidate_time


def persistent_candidate(version: str, index_time: int, *, has_expiry: bool) -> dict[str, Any]:
    """Pointer proposed for ``..latest``.

    Expiring versions only ever propose the placeholder, so any real version
    takes precedence over them.
    """
    if has_expiry:
        return placeholder()
    return format_latest(version, index_time)
