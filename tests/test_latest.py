"""Tests for latest-pointer precedence."""

from __future__ import annotations

import pytest

from gypsum_indexer.errors import MalformedState
from gypsum_indexer.latest import (
    PLACEHOLDER_INDEX_TIME,
    format_latest,
    persistent_candidate,
    should_replace,
)


def test_absent_pointer_is_always_replaced() -> None:
    assert should_replace("p/..latest", None, PLACEHOLDER_INDEX_TIME)
    assert should_replace("p/..latest", None, 10)


@pytest.mark.parametrize(
    ("stored", "candidate", "expected"),
    [
        (100, 101, True),
        (100, 100, False),
        (100, 99, False),
        (-1, 0, True),
        (100.5, 101, True),
    ],
)
def test_only_strictly_newer_index_time_wins(stored, candidate, expected) -> None:
    current = format_latest("v0", stored)
    assert should_replace("p/..latest", current, candidate) is expected


@pytest.mark.parametrize(
    "current",
    [
        {"version": "v1"},
        {"version": "v1", "index_time": "2024-01-01"},
        {"version": "v1", "index_time": True},
        ["v1", 100],
    ],
)
def test_pointer_without_numeric_clock_is_malformed(current) -> None:
    with pytest.raises(MalformedState, match="index_time"):
        should_replace("p/..latest_all", current, 100)


def test_expiring_versions_only_propose_placeholder() -> None:
    assert persistent_candidate("v2", 500, has_expiry=True) == {"version": "", "index_time": -1}
    assert persistent_candidate("v2", 500, has_expiry=False) == {"version": "v2", "index_time": 500}


def test_placeholder_never_displaces_an_existing_pointer() -> None:
    placeholder = persistent_candidate("v2", 500, has_expiry=True)
    for existing in (format_latest("", PLACEHOLDER_INDEX_TIME), format_latest("v1", 1)):
        assert not should_replace("p/..latest", existing, placeholder["index_time"])
