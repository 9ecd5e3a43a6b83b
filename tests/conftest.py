"""Shared test fixtures for gypsum-indexer tests."""

from __future__ import annotations

import io
import json
from typing import Any

import httpx
import pytest
from botocore.exceptions import ClientError

from gypsum_indexer.storage import ObjectStore
from gypsum_indexer.tracker import IssueTracker

BUCKET = "gypsum-test"
REPOSITORY = "ArtifactDB/gypsum-actions"
ISSUE = 12
INDEX_TIME = 1_700_000_000_000


def _client_error(code: str, status: int, operation: str) -> ClientError:
    return ClientError(
        {
            "Error": {"Code": code, "Message": code},
            "ResponseMetadata": {"HTTPStatusCode": status},
        },
        operation,
    )


class FakeS3Client:
    """In-memory stand-in for the subset of the boto3 S3 client we call."""

    def __init__(self, page_size: int = 1000) -> None:
        self.objects: dict[str, bytes] = {}
        self.page_size = page_size
        self.calls: list[tuple[str, str]] = []
        self.denied: set[str] = set()

    # --- Test helpers ---

    def put(self, key: str, obj: Any) -> None:
        self.objects[key] = json.dumps(obj).encode("utf-8")

    def read(self, key: str) -> Any:
        return json.loads(self.objects[key].decode("utf-8"))

    def writes(self) -> list[str]:
        return [key for op, key in self.calls if op in {"put_object", "delete_object"}]

    def _check(self, op: str, key: str, operation: str) -> None:
        self.calls.append((op, key))
        if key in self.denied:
            raise _client_error("AccessDenied", 403, operation)

    # --- boto3 surface ---

    def head_object(self, *, Bucket: str, Key: str) -> dict[str, Any]:
        self._check("head_object", Key, "HeadObject")
        if Key not in self.objects:
            raise _client_error("404", 404, "HeadObject")
        return {"ContentLength": len(self.objects[Key])}

    def get_object(self, *, Bucket: str, Key: str) -> dict[str, Any]:
        self._check("get_object", Key, "GetObject")
        if Key not in self.objects:
            raise _client_error("NoSuchKey", 404, "GetObject")
        return {"Body": io.BytesIO(self.objects[Key])}

    def put_object(self, *, Bucket: str, Key: str, Body: bytes, ContentType: str) -> dict[str, Any]:
        self._check("put_object", Key, "PutObject")
        self.objects[Key] = Body
        return {"ETag": '"etag"'}

    def delete_object(self, *, Bucket: str, Key: str) -> dict[str, Any]:
        self._check("delete_object", Key, "DeleteObject")
        self.objects.pop(Key, None)
        return {}

    def list_objects_v2(
        self, *, Bucket: str, Prefix: str, ContinuationToken: str | None = None
    ) -> dict[str, Any]:
        self._check("list_objects_v2", Prefix, "ListObjectsV2")
        matching = sorted(k for k in self.objects if k.startswith(Prefix))
        start = int(ContinuationToken) if ContinuationToken else 0
        page = matching[start : start + self.page_size]
        resp: dict[str, Any] = {"KeyCount": len(page)}
        if page:
            resp["Contents"] = [{"Key": k} for k in page]
        end = start + len(page)
        resp["IsTruncated"] = end < len(matching)
        if resp["IsTruncated"]:
            resp["NextContinuationToken"] = str(end)
        return resp


class GitHubRecorder:
    """httpx transport handler emulating the GitHub issues endpoints."""

    def __init__(self) -> None:
        self.requests: list[tuple[str, str, Any]] = []
        self.next_number = 101
        self.fail_paths: dict[str, int] = {}

    def handler(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content.decode("utf-8")) if request.content else None
        path = request.url.path
        self.requests.append((request.method, path, payload))
        if path in self.fail_paths:
            return httpx.Response(self.fail_paths[path], json={"message": "nope"})
        if request.method == "POST" and path.endswith("/issues"):
            number = self.next_number
            self.next_number += 1
            return httpx.Response(201, json={"number": number})
        if request.method == "POST" and path.endswith("/comments"):
            return httpx.Response(201, json={"id": 1})
        if request.method == "PATCH":
            return httpx.Response(200, json={"state": "closed"})
        return httpx.Response(404, json={"message": "Not Found"})

    def created(self) -> list[dict[str, Any]]:
        return [p for m, path, p in self.requests if m == "POST" and path.endswith("/issues")]

    def comments(self) -> list[str]:
        return [p["body"] for m, path, p in self.requests if path.endswith("/comments")]

    def closed(self) -> list[str]:
        return [path for m, path, _p in self.requests if m == "PATCH"]


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def s3():
    return FakeS3Client()


@pytest.fixture
def store(s3):
    return ObjectStore(bucket=BUCKET, client=s3)


@pytest.fixture
def github():
    return GitHubRecorder()


@pytest.fixture
def tracker(github):
    client = httpx.AsyncClient(
        transport=httpx.MockTransport(github.handler),
        base_url="https://api.github.test",
    )
    return IssueTracker(REPOSITORY, client)
