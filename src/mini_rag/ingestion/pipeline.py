"""Ingestion pipeline — load, chunk, embed, store."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import ValidationError

from mini_rag.errors import ProviderError
from mini_rag.ingestion.chunker import chunk_documents
from mini_rag.ingestion.embedder import embed_in_batches
from mini_rag.ingestion.loader import load_directory
from mini_rag.retrieval.models import IngestReport, VectorRecord

if TYPE_CHECKING:
    from mini_rag.generation.llm import LLMProvider
    from mini_rag.retrieval.base import VectorStoreBase

logger = logging.getLogger(__name__)


def ingest_directory(
    directory: str | Path,
    *,
    store: VectorStoreBase,
    provider: LLMProvider,
    chunk_size: int = 500,
    chunk_overlap: int = 50,
    batch_size: int = 10,
) -> IngestReport:
    """Rebuild *store* from the files in *directory*.

    Every chunk is embedded before the store is touched, so a provider
    failure leaves the previous contents in place.  An empty or missing
    directory leaves the store untouched as well.

    Returns
    -------
    IngestReport
        Document / chunk counts and the sources now in the store.
    """
    documents = load_directory(directory)
    if not documents:
        logger.warning("No documents found in %s; add .txt or .md files", directory)
        return IngestReport()

    chunks = chunk_documents(documents, chunk_size, chunk_overlap)
    logger.info("Embedding %d chunks with model=%s, batch_size=%d",
                len(chunks), provider.embedding_model, batch_size)
    embeddings = embed_in_batches(provider, [c.text for c in chunks], batch_size)

    try:
        records = [
            VectorRecord(**chunk.model_dump(), embedding=embedding)
            for chunk, embedding in zip(chunks, embeddings, strict=True)
        ]
    except ValidationError as exc:
        raise ProviderError(f"Provider returned an invalid embedding: {exc}") from exc

    store.clear()
    store.add(records)

    stats = store.stats()
    logger.info("Ingestion complete: %d chunks from %d documents",
                stats.total_chunks, stats.source_count)
    return IngestReport(documents=len(documents), chunks=len(records), sources=stats.sources)
