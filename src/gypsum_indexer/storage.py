"""Object storage access for the indexer (Cloudflare R2 through the S3 API)."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from gypsum_indexer.config import IndexerConfig
from gypsum_indexer.errors import RemoteCallFailed

logger = logging.getLogger(__name__)


def _is_not_found(err: Exception) -> bool:
    if isinstance(err, ClientError):
        code = err.response.get("Error", {}).get("Code", "")
        return code in {"NoSuchKey", "404", "NotFound"}
    return False


def _status_of(err: Exception) -> int | None:
    if isinstance(err, ClientError):
        status = err.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
        return status if isinstance(status, int) else None
    return None


def _remote_error(operation: str, key: str, err: Exception) -> RemoteCallFailed:
    return RemoteCallFailed(operation, f"{key}: {err}", status=_status_of(err))


def create_client(config: IndexerConfig) -> Any:
    """Build a boto3 S3 client for the configured R2 account."""
    session = boto3.Session(
        aws_access_key_id=config.r2_access_key_id,
        aws_secret_access_key=config.r2_secret_access_key,
        region_name=config.s3_region,
    )
    return session.client(
        "s3",
        endpoint_url=config.endpoint_url,
        config=BotoConfig(
            signature_version="s3v4",
            connect_timeout=config.s3_request_timeout_s,
            read_timeout=config.s3_request_timeout_s,
            retries={"max_attempts": 1, "mode": "standard"},
        ),
    )


class ObjectStore:
    """Async facade over a synchronous boto3 client bound to one bucket.

    Each call runs the blocking boto3 request in a worker thread so that
    independent requests can be awaited together with ``asyncio.gather``.
    """

    def __init__(self, *, bucket: str, client: Any) -> None:
        self.bucket = bucket
        self._s3 = client

    @classmethod
    def from_config(cls, config: IndexerConfig) -> ObjectStore:
        return cls(bucket=config.bucket, client=create_client(config))

    # --- Synchronous helpers ---

    def _head_sync(self, key: str) -> dict[str, Any]:
        try:
            return self._s3.head_object(Bucket=self.bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            raise _remote_error("head_object", key, e) from e

    def _exists_sync(self, key: str) -> bool:
        try:
            self._s3.head_object(Bucket=self.bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            if _is_not_found(e):
                return False
            raise _remote_error("head_object", key, e) from e
        return True

    def _get_bytes_sync(self, key: str) -> bytes | None:
        try:
            resp = self._s3.get_object(Bucket=self.bucket, Key=key)
            return resp["Body"].read()
        except (ClientError, BotoCoreError) as e:
            if _is_not_found(e):
                return None
            raise _remote_error("get_object", key, e) from e

    def _put_bytes_sync(self, key: str, body: bytes, content_type: str) -> None:
        try:
            self._s3.put_object(Bucket=self.bucket, Key=key, Body=body, ContentType=content_type)
        except (ClientError, BotoCoreError) as e:
            raise _remote_error("put_object", key, e) from e

    def _delete_sync(self, key: str) -> None:
        try:
            self._s3.delete_object(Bucket=self.bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            raise _remote_error("delete_object", key, e) from e

    def _list_keys_sync(self, prefix: str) -> list[str]:
        params: dict[str, Any] = {"Bucket": self.bucket, "Prefix": prefix}
        keys: list[str] = []
        while True:
            try:
                info = self._s3.list_objects_v2(**params)
            except (ClientError, BotoCoreError) as e:
                raise _remote_error("list_objects_v2", prefix, e) from e
            for entry in info.get("Contents", []):
                keys.append(entry["Key"])
            if not info.get("IsTruncated"):
                break
            params["ContinuationToken"] = info["NextContinuationToken"]
        return keys

    # --- Public API ---

    async def head(self, key: str) -> dict[str, Any]:
        return await asyncio.to_thread(self._head_sync, key)

    async def exists(self, key: str) -> bool:
        return await asyncio.to_thread(self._exists_sync, key)

    async def get_json(self, key: str) -> Any | None:
        """Return the parsed object at ``key``, or None if it does not exist."""
        body = await asyncio.to_thread(self._get_bytes_sync, key)
        if body is None:
            return None
        return json.loads(body.decode("utf-8"))

    async def put_json(self, key: str, obj: Any) -> None:
        body = json.dumps(obj, sort_keys=True, separators=(",", ":")).encode("utf-8")
        await asyncio.to_thread(self._put_bytes_sync, key, body, "application/json")
        logger.debug("Wrote %s (%d bytes)", key, len(body))

    async def delete(self, key: str) -> None:
        await asyncio.to_thread(self._delete_sync, key)

    async def list_keys(self, prefix: str) -> list[str]:
        """List every key under ``prefix``, following continuation tokens."""
        return await asyncio.to_thread(self._list_keys_sync, prefix)
