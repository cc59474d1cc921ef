"""Write Outcome — result of a registry write that is mirrored into the search index.

Invariants:
    - A WriteOutcome only exists when the registry write committed
    - index_synced=False means the index copy is stale and index_error says why;
      operators reconcile with ItemRegistry.resync()
"""

from dataclasses import dataclass
from typing import Generic, TypeVar

from qr_inventory.core.errors import SearchIndexError

T = TypeVar("T")


@dataclass
class WriteOutcome(Generic[T]):
    value: T
    index_synced: bool = True
    index_error: SearchIndexError | None = None

    @property
    def out_of_sync(self) -> bool:
        return not self.index_synced
