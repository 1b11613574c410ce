"""Flat-file vector store with brute-force cosine search.

The whole store lives in memory and is rewritten to a single JSON array
on every mutation.  Search is linear in the number of records, which is
fine for the small corpora this project targets.
"""

from __future__ import annotations

import logging
import math
import os
import tempfile
from collections.abc import Sequence
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from mini_rag.errors import DimensionMismatchError, StorePersistenceError
from mini_rag.retrieval.base import VectorStoreBase
from mini_rag.retrieval.models import SearchHit, StoreStats, VectorRecord

logger = logging.getLogger(__name__)

_RECORDS = TypeAdapter(list[VectorRecord])


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity of *a* and *b* in a single pass.

    Returns ``0.0`` when either vector has zero norm.

    Raises
    ------
    DimensionMismatchError
        If the vectors have different lengths.
    """
    if len(a) != len(b):
        raise DimensionMismatchError(f"Vector dimensions don't match: {len(a)} vs {len(b)}")

    dot = norm_a = norm_b = 0.0
    for x, y in zip(a, b):
        dot += x * y
        norm_a += x * x
        norm_b += y * y

    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    return dot / (math.sqrt(norm_a) * math.sqrt(norm_b))


class JsonVectorStore(VectorStoreBase):
    """In-memory vector store persisted to one JSON file.

    Parameters
    ----------
    path:
        Location of the JSON array of :class:`VectorRecord` objects.
        Parent directories are created on the first write.

    Usage::

        with JsonVectorStore("data/vectors.json") as store:
            store.add(records)
            hits = store.similarity_search(query_embedding, k=3)
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._records: list[VectorRecord] = []
        self._open = False

    # -- lifecycle ------------------------------------------------------------

    def open(self) -> JsonVectorStore:
        """Load the persisted records.

        A missing file means an empty store.  An unreadable or corrupt
        file is logged and the store starts empty.
        """
        self._records = self._read()
        self._open = True
        return self

    def flush(self) -> None:
        """Rewrite the whole file atomically.

        Raises
        ------
        StorePersistenceError
            If the file cannot be written.
        """
        self._ensure_open()
        payload = _RECORDS.dump_json(self._records, by_alias=True, indent=2)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "wb") as fh:
                    fh.write(payload)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            logger.error("Error saving vectors to %s: %s", self.path, exc)
            raise StorePersistenceError(f"Could not write vector store {self.path}: {exc}") from exc
        logger.info("Saved %d vectors to store", len(self._records))

    def close(self) -> None:
        self._records = []
        self._open = False

    # -- VectorStoreBase overrides --------------------------------------------

    def add(self, records: Sequence[VectorRecord]) -> None:
        """Append *records* and rewrite the file.

        On a write failure the in-memory store is rolled back before the
        error propagates, so memory and disk stay identical.
        """
        self._ensure_open()
        previous = list(self._records)
        self._records.extend(records)
        try:
            self.flush()
        except StorePersistenceError:
            self._records = previous
            raise

    def clear(self) -> None:
        self._ensure_open()
        previous = self._records
        self._records = []
        try:
            self.flush()
        except StorePersistenceError:
            self._records = previous
            raise

    def similarity_search(self, query_embedding: Sequence[float], k: int = 3) -> list[SearchHit]:
        """Score every record and return the best *k*.

        Ties on score are broken by ascending record ``id`` so the
        ordering is reproducible.
        """
        self._ensure_open()
        if k < 1:
            raise ValueError(f"k must be >= 1, got {k}")
        if not self._records:
            return []

        scored = [(cosine_similarity(query_embedding, rec.embedding), rec) for rec in self._records]
        scored.sort(key=lambda pair: (-pair[0], pair[1].id))

        return [
            SearchHit(**rec.model_dump(), score=score)
            for score, rec in scored[:k]
        ]

    def stats(self) -> StoreStats:
        self._ensure_open()
        sources = list(dict.fromkeys(rec.source for rec in self._records))
        return StoreStats(
            total_chunks=len(self._records),
            sources=sources,
            source_count=len(sources),
        )

    def health_check(self) -> bool:
        return self._open

    # -- helpers --------------------------------------------------------------

    @property
    def records(self) -> list[VectorRecord]:
        """Copy of the stored records, in insertion order."""
        self._ensure_open()
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def _ensure_open(self) -> None:
        if not self._open:
            raise RuntimeError(f"Vector store {self.path} is not open")

    def _read(self) -> list[VectorRecord]:
        if not self.path.exists():
            return []
        try:
            records = _RECORDS.validate_json(self.path.read_bytes())
        except (OSError, ValidationError) as exc:
            logger.error("Error loading vectors from %s: %s", self.path, exc)
            return []
        logger.info("Loaded %d vectors from store", len(records))
        return records
