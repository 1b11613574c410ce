"""
Retrieval — vector storage and similarity search.

Public surface
--------------
- :class:`VectorStoreBase` — abstract backend.
- :class:`JsonVectorStore` — in-memory store persisted to one JSON file.
- :func:`cosine_similarity` — the scoring function used by the store.
- Data models: :class:`Document`, :class:`Chunk`, :class:`VectorRecord`,
  :class:`SearchHit`, :class:`StoreStats`, :class:`SourceRef`,
  :class:`QueryAnswer`, :class:`IngestReport`.
"""

from mini_rag.retrieval.base import VectorStoreBase
from mini_rag.retrieval.json_store import JsonVectorStore, cosine_similarity
from mini_rag.retrieval.models import (
    Chunk,
    Document,
    IngestReport,
    QueryAnswer,
    SearchHit,
    SourceRef,
    StoreStats,
    VectorRecord,
)

__all__ = [
    "Chunk",
    "Document",
    "IngestReport",
    "JsonVectorStore",
    "QueryAnswer",
    "SearchHit",
    "SourceRef",
    "StoreStats",
    "VectorRecord",
    "VectorStoreBase",
    "cosine_similarity",
]
