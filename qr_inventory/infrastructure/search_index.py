"""Meilisearch Item Index — SearchStore implementation over meilisearch-python-sdk.

Invariants:
    - Writes wait for the Meilisearch task to finish before returning (durable completion)
    - Any SDK, task, HTTP or payload failure is mapped to SearchIndexError
    - No retries: the registry is authoritative, a failed write is reported as out of sync

Design Decisions:
    - Wrapper over raw client: keeps SDK types out of services
    - Hits carry _rankingScore (show_ranking_score=True); it is stripped from the document
"""

import logging
from typing import Sequence

import httpx
from meilisearch_python_sdk import AsyncClient
from meilisearch_python_sdk.errors import (
    InvalidDocumentError, MeilisearchError, PayloadTooLarge,
)

from qr_inventory.core.errors import SearchIndexError

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 1000
_RANKING_KEY = "_rankingScore"

# The SDK raises the last two outside the MeilisearchError tree
_INDEX_FAILURES = (
    MeilisearchError, httpx.HTTPError, InvalidDocumentError, PayloadTooLarge,
)


class MeilisearchItemIndex:
    """Mirrors item documents into one Meilisearch index."""

    def __init__(
        self,
        client: AsyncClient,
        index_name: str = "items",
        timeout_seconds: float = 5.0,
    ):
        self.client = client
        self.index_name = index_name
        self.timeout_ms = int(timeout_seconds * 1000)

    @classmethod
    def connect(
        cls,
        url: str,
        api_key: str | None = None,
        index_name: str = "items",
        timeout_seconds: float = 5.0,
    ) -> "MeilisearchItemIndex":
        client = AsyncClient(url, api_key, timeout=int(timeout_seconds))
        return cls(client, index_name, timeout_seconds)

    async def upsert_documents(self, documents: Sequence[dict]) -> None:
        if not documents:
            return
        index = self.client.index(self.index_name)
        try:
            task = await index.add_documents(list(documents), primary_key="id")
            await self._wait(task.task_uid)
        except _INDEX_FAILURES as e:
            raise SearchIndexError(str(e), "upsert")

    async def delete_documents(self, ids: Sequence[str]) -> None:
        if not ids:
            return
        index = self.client.index(self.index_name)
        try:
            task = await index.delete_documents(list(ids))
            await self._wait(task.task_uid)
        except _INDEX_FAILURES as e:
            raise SearchIndexError(str(e), "delete")

    async def search(self, query: str) -> list[tuple[dict, float | None]]:
        index = self.client.index(self.index_name)
        try:
            result = await index.search(
                query, limit=SEARCH_LIMIT, show_ranking_score=True,
            )
        except _INDEX_FAILURES as e:
            raise SearchIndexError(str(e), "search")
        hits = []
        for hit in result.hits:
            document = dict(hit)
            ranking = document.pop(_RANKING_KEY, None)
            hits.append((document, ranking))
        return hits

    async def aclose(self) -> None:
        await self.client.aclose()

    async def _wait(self, task_uid: int) -> None:
        """Block until the task settles; a failed task raises."""
        result = await self.client.wait_for_task(
            task_uid, timeout_in_ms=self.timeout_ms, raise_for_status=True,
        )
        logger.debug(
            f"Meilisearch task {task_uid} settled: {result.status}",
            extra={"operation": "index_task"},
        )
