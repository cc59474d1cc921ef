"""Search Merge — union of per-keyword hit lists, de-duplicated by item id.

Invariants:
    - Pure function: no IO, no async
    - First occurrence of an id wins (ranking included); keyword order is the tie-break
    - Output order is first-seen order across the concatenated keyword results
    - Empty input yields an empty list
"""

from typing import Iterable

from qr_inventory.schemas.item import SearchHit


def merge_keyword_hits(per_keyword: Iterable[list[SearchHit]]) -> list[SearchHit]:
    """Concatenate hit lists in keyword order and drop repeated item ids."""
    seen = set()
    merged = []
    for hits in per_keyword:
        for hit in hits:
            if hit.item.id in seen:
                continue
            seen.add(hit.item.id)
            merged.append(hit)
    return merged


def normalize_keywords(keywords: Iterable[str]) -> list[str]:
    """Strip keywords and drop blanks, keeping order."""
    return [k.strip() for k in keywords if k and k.strip()]
