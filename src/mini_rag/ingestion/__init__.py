"""
Ingestion — document loading, chunking, and embedding into the vector store.

Public surface
--------------
- :func:`load_directory` — read ``.txt`` / ``.md`` files from a directory.
- :func:`chunk_text`, :func:`chunk_documents` — fixed-size overlapping chunks.
- :func:`embed_in_batches` — sequential, order-preserving batch embedding.
- :func:`ingest_directory` — the whole load → chunk → embed → store run.
"""

from mini_rag.ingestion.chunker import chunk_documents, chunk_text
from mini_rag.ingestion.embedder import embed_in_batches
from mini_rag.ingestion.loader import load_directory, load_file
from mini_rag.ingestion.pipeline import ingest_directory

__all__ = [
    "chunk_documents",
    "chunk_text",
    "embed_in_batches",
    "ingest_directory",
    "load_directory",
    "load_file",
]
