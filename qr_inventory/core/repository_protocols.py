"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - The search store is only reached through SearchStore
    - Implementations provided by shell via constructor injection

Design Decisions:
    - Protocol over ABC: structural subtyping, fakes in tests need no base class
    - Documents are plain dicts keyed by "id"; the store owns ranking
"""

from typing import Protocol, Sequence


class SearchStore(Protocol):
    """Contract for the full-text index that mirrors items."""

    async def upsert_documents(self, documents: Sequence[dict]) -> None:
        """Replace-or-insert by "id"; returns only once the write is durable."""
        ...

    async def delete_documents(self, ids: Sequence[str]) -> None:
        """Delete by "id"; missing ids are not an error."""
        ...

    async def search(self, query: str) -> list[tuple[dict, float | None]]:
        """Ranked hits as (document, ranking score) pairs, best first."""
        ...
