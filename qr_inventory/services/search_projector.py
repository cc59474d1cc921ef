"""Search Projector — eventually-consistent mirror of items in the full-text index.

Invariants:
    - upsert and delete are idempotent (replace-or-insert / delete-if-present by id)
    - Every store call is bounded by the timeout; a timeout is a SearchIndexError
    - search(keywords) issues one query per keyword, in order, then unions the
      results de-duplicated by item id (first-seen hit wins)
    - Empty or all-blank keyword lists return [] without touching the store

Design Decisions:
    - No transactional link to the registry: callers decide what a failure means
      (ItemRegistry turns it into an out-of-sync WriteOutcome)
    - Calls are made inline within the request; there is no background queue
"""

import asyncio
import logging
import uuid
from typing import Iterable, Sequence

from pydantic import ValidationError

from qr_inventory.core.errors import SearchIndexError
from qr_inventory.core.repository_protocols import SearchStore
from qr_inventory.core.search_merge import merge_keyword_hits, normalize_keywords
from qr_inventory.schemas.item import Item, SearchHit

logger = logging.getLogger(__name__)


class SearchProjector:
    """Upserts, deletes and searches item documents."""

    def __init__(self, store: SearchStore, timeout: float = 5.0):
        self.store = store
        self.timeout = timeout

    async def upsert(self, items: Sequence[Item]) -> None:
        documents = [item.to_document() for item in items]
        await self._call("upsert", self.store.upsert_documents(documents))
        logger.info(
            f"Indexed {len(documents)} item(s)", extra={"operation": "upsert"},
        )

    async def delete(self, ids: Iterable[uuid.UUID]) -> None:
        keys = [str(i) for i in ids]
        await self._call("delete", self.store.delete_documents(keys))
        logger.info(
            f"Removed {len(keys)} item(s) from index",
            extra={"operation": "delete"},
        )

    async def search(self, keywords: Iterable[str]) -> list[SearchHit]:
        """Union of per-keyword results, de-duplicated by item id."""
        terms = normalize_keywords(keywords)
        if not terms:
            return []
        per_keyword = []
        for term in terms:
            raw_hits = await self._call("search", self.store.search(term))
            per_keyword.append(self._to_hits(raw_hits))
        merged = merge_keyword_hits(per_keyword)
        logger.info(
            "Search finished",
            extra={"keyword_count": len(terms), "hit_count": len(merged)},
        )
        return merged

    async def _call(self, operation: str, awaitable):
        try:
            async with asyncio.timeout(self.timeout):
                return await awaitable
        except TimeoutError:
            raise SearchIndexError(
                f"No response within {self.timeout}s", operation,
            )

    def _to_hits(self, raw_hits: list[tuple[dict, float | None]]) -> list[SearchHit]:
        hits = []
        for document, ranking in raw_hits:
            try:
                hits.append(SearchHit(item=Item.model_validate(document), ranking=ranking))
            except ValidationError as e:
                # Document written by an older schema; skip it, resync fixes it
                logger.warning(
                    f"Skipping malformed index document: {e}",
                    extra={"item_id": document.get("id")},
                )
        return hits
