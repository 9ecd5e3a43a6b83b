"""Index a version of a gypsum project.

Indexing mostly involves creating summary JSON files for each project
version, given that the bucket itself has no search capabilities:

- ``..revision``: upload and index times, plus expiry details if any.
- ``..aggregated``: every ``.json`` document under the version, in one array.
- ``..permissions``: the project permissions, if absent or overwritten.
- ``..latest`` / ``..latest_all``: which version of the project is current.

Once everything is written the lock object is deleted and the issue that
requested the run is closed. Failures are reported as a comment on that
issue instead; the lock is left in place for manual inspection.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable

from gypsum_indexer import keys, latest
from gypsum_indexer.config import IndexerConfig
from gypsum_indexer.errors import MalformedState
from gypsum_indexer.lease import AdvisoryLease
from gypsum_indexer.params import JobParameters, format_ms
from gypsum_indexer.schemas import SchemaRegistry
from gypsum_indexer.storage import ObjectStore
from gypsum_indexer.tracker import IssueTracker

logger = logging.getLogger(__name__)

PURGE_TITLE = "purge project"


def now_ms() -> int:
    return time.time_ns() // 1_000_000


@dataclass
class IndexResult:
    project: str
    version: str
    index_time: int
    metadata: dict[str, Any]
    aggregated_count: int
    permissions_written: bool
    latest_written: list[str] = field(default_factory=list)

    @property
    def expiry_job_id(self) -> int | None:
        return self.metadata.get("expiry_job_id")


@dataclass
class RunOutcome:
    ok: bool
    result: IndexResult | None = None
    error: str | None = None


async def _read_expires_in(store: ObjectStore, project: str, version: str) -> int | None:
    key = keys.expiry(project, version)
    info = await store.get_json(key)
    if info is None:
        return None
    expires_in = info.get("expires_in") if isinstance(info, dict) else None
    if isinstance(expires_in, bool) or not isinstance(expires_in, (int, float)):
        raise MalformedState(key, "expiry file should contain an 'expires_in' number")
    return int(expires_in)


async def _schedule_expiry(
    tracker: IssueTracker, project: str, version: str, delete_after: int
) -> int:
    body = json.dumps(
        {
            "project": project,
            "version": version,
            "mode": "expiry",
            "delete_after": delete_after,
        }
    )
    return await tracker.create_issue(PURGE_TITLE, body)


async def aggregate(
    store: ObjectStore, prefix: str, schemas: SchemaRegistry | None = None
) -> list[Any]:
    """Fetch every JSON document under ``prefix`` concurrently, in listing order."""
    json_keys = [k for k in await store.list_keys(prefix) if keys.is_json(k)]
    documents = await asyncio.gather(*(store.get_json(k) for k in json_keys))
    if schemas is not None:
        for key, doc in zip(json_keys, documents):
            schemas.validate(key, doc)
    return list(documents)


async def _latest_update(
    store: ObjectStore, key: str, candidate: dict[str, Any]
) -> dict[str, Any] | None:
    current = await store.get_json(key)
    if latest.should_replace(key, current, candidate["index_time"]):
        return candidate
    logger.debug("Keeping %s at %s", key, current)
    return None


async def index_version(
    store: ObjectStore,
    tracker: IssueTracker,
    params: JobParameters,
    *,
    issue_number: int,
    now: Callable[[], int] = now_ms,
    schemas: SchemaRegistry | None = None,
) -> IndexResult:
    project = params.project
    version = params.version
    writes: dict[str, Any] = {}

    lease = AdvisoryLease(store, project, version)
    await lease.check()

    index_time = now()
    metadata: dict[str, Any] = {
        "upload_time": format_ms(params.timestamp),
        "index_time": format_ms(index_time),
    }

    expires_in = await _read_expires_in(store, project, version)
    has_expiry = expires_in is not None
    if expires_in is not None:
        expired = index_time + expires_in
        metadata["expiry_time"] = format_ms(expired)
        metadata["expiry_job_id"] = await _schedule_expiry(tracker, project, version, expired)
        logger.info("Scheduled expiry of %s/%s at %s", project, version, metadata["expiry_time"])
    writes[keys.version_metadata(project, version)] = metadata

    documents = await aggregate(store, keys.version_prefix(project, version), schemas)
    writes[keys.aggregated(project, version)] = documents
    logger.info("Aggregated %d JSON documents for %s/%s", len(documents), project, version)

    permissions_key = keys.permissions(project)
    write_permissions = params.overwrite_permissions or not await store.exists(permissions_key)
    if write_permissions:
        writes[permissions_key] = params.permissions

    latest_written: list[str] = []
    candidates = [
        (
            keys.latest_persistent(project),
            latest.persistent_candidate(version, index_time, has_expiry=has_expiry),
        ),
        (keys.latest_all(project), latest.format_latest(version, index_time)),
    ]
    for key, candidate in candidates:
        update = await _latest_update(store, key, candidate)
        if update is not None:
            writes[key] = update
            latest_written.append(key)

    await asyncio.gather(*(store.put_json(k, v) for k, v in writes.items()))

    await lease.release()
    await tracker.close_issue(issue_number)

    return IndexResult(
        project=project,
        version=version,
        index_time=index_time,
        metadata=metadata,
        aggregated_count=len(documents),
        permissions_written=write_permissions,
        latest_written=latest_written,
    )


async def run(
    config: IndexerConfig,
    load_params: Callable[[], JobParameters],
    *,
    store: ObjectStore | None = None,
    tracker: IssueTracker | None = None,
    now: Callable[[], int] = now_ms,
) -> RunOutcome:
    """Index one project version, reporting any failure on the originating issue.

    Errors never propagate out of here; callers inspect ``RunOutcome.ok``.
    """
    store = store or ObjectStore.from_config(config)
    tracker = tracker or IssueTracker.from_config(config)
    schemas = SchemaRegistry(config.schema_dir) if config.schema_dir is not None else None

    async with tracker:
        try:
            params = load_params()
            result = await index_version(
                store,
                tracker,
                params,
                issue_number=config.issue_number,
                now=now,
                schemas=schemas,
            )
        except Exception as e:
            logger.exception("Indexing failed for issue #%d", config.issue_number)
            try:
                await tracker.comment(config.issue_number, str(e))
            except Exception:
                logger.exception("Failed to comment on issue #%d", config.issue_number)
            return RunOutcome(ok=False, error=str(e))

    logger.info("Indexed %s/%s", result.project, result.version)
    return RunOutcome(ok=True, result=result)
