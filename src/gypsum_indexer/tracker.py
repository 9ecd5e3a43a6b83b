"""GitHub issues client used to coordinate indexing jobs."""

from __future__ import annotations

import logging
from typing import Any

from httpx import AsyncClient, HTTPError, Response, Timeout

from gypsum_indexer.config import IndexerConfig
from gypsum_indexer.errors import RemoteCallFailed

logger = logging.getLogger(__name__)


class IssueTracker:
    """Create, close and comment on issues of a single repository."""

    def __init__(self, repository: str, client: AsyncClient) -> None:
        self.repository = repository
        self._client = client

    @classmethod
    def from_config(cls, config: IndexerConfig) -> IssueTracker:
        client = AsyncClient(
            base_url=config.github_api_url,
            headers={
                "Accept": "application/vnd.github+json",
                "Authorization": f"Bearer {config.github_token}",
            },
            timeout=Timeout(config.github_timeout_s),
        )
        return cls(config.repository, client)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> IssueTracker:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def _request(self, operation: str, method: str, path: str, payload: dict[str, Any]) -> Response:
        try:
            res = await self._client.request(method, f"/repos/{self.repository}{path}", json=payload)
        except HTTPError as e:
            raise RemoteCallFailed(operation, str(e)) from e
        if not res.is_success:
            raise RemoteCallFailed(
                operation,
                f"{method} {path} returned {res.status_code}: {res.text}",
                status=res.status_code,
            )
        return res

    async def create_issue(self, title: str, body: str) -> int:
        """Open an issue and return its number."""
        res = await self._request("create_issue", "POST", "/issues", {"title": title, "body": body})
        number = int(res.json()["number"])
        logger.info("Created issue #%d in %s: %s", number, self.repository, title)
        return number

    async def close_issue(self, number: int) -> None:
        await self._request("close_issue", "PATCH", f"/issues/{number}", {"state": "closed"})
        logger.info("Closed issue #%d in %s", number, self.repository)

    async def comment(self, number: int, body: str) -> None:
        await self._request("comment", "POST", f"/issues/{number}/comments", {"body": body})
