"""Advisory lease over a project version, backed by the lock object.

The upload step creates ``{project}/{version}/..LOCK`` before it requests
indexing. The lease is only a convention between cooperating jobs: checking
it is a plain HEAD request followed later by a DELETE, with no
test-and-set in between. Two jobs holding the same lease are not prevented
from running concurrently. Do not use it where mutual exclusion is required.
"""

from __future__ import annotations

import logging

from gypsum_indexer import keys
from gypsum_indexer.errors import IndexerError, PreconditionFailed
from gypsum_indexer.storage import ObjectStore

logger = logging.getLogger(__name__)


class AdvisoryLease:
    def __init__(self, store: ObjectStore, project: str, version: str) -> None:
        self._store = store
        self.key = keys.lock(project, version)

    async def check(self) -> None:
        """Raise PreconditionFailed unless the lock object is present and readable."""
        try:
            await self._store.head(self.key)
        except IndexerError as e:
            raise PreconditionFailed(self.key) from e
        logger.info("Lease present at %s", self.key)

    async def release(self) -> None:
        await self._store.delete(self.key)
        logger.info("Released lease at %s", self.key)
