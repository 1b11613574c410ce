"""Abstract base class for vector-store backends.

The ingestion and query pipelines only talk to :class:`VectorStoreBase`,
so a different backend needs nothing more than a subclass implementing
the abstract methods below.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from mini_rag.retrieval.models import SearchHit, StoreStats, VectorRecord


class VectorStoreBase(ABC):
    """Backend-agnostic vector-store interface."""

    # -- lifecycle ------------------------------------------------------------

    def open(self) -> VectorStoreBase:
        """Acquire resources / load persisted state.  Returns ``self``."""
        return self

    def flush(self) -> None:
        """Make the current in-memory state durable."""

    def close(self) -> None:
        """Release resources.  The store must be re-opened before reuse."""

    def __enter__(self) -> VectorStoreBase:
        return self.open()

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # -- required overrides ---------------------------------------------------

    @abstractmethod
    def add(self, records: Sequence[VectorRecord]) -> None:
        """Append *records* and persist the whole store."""
        ...

    @abstractmethod
    def clear(self) -> None:
        """Remove every record and persist the empty store."""
        ...

    @abstractmethod
    def similarity_search(self, query_embedding: Sequence[float], k: int = 3) -> list[SearchHit]:
        """Return the top-*k* records for *query_embedding*, best first.

        Fewer than *k* hits are returned when the store holds fewer
        records; an empty store yields an empty list.
        """
        ...

    @abstractmethod
    def stats(self) -> StoreStats:
        """Return chunk and source counts."""
        ...

    @abstractmethod
    def health_check(self) -> bool:
        """Return ``True`` when the backend is ready to serve requests."""
        ...
