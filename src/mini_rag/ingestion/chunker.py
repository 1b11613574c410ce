"""Fixed-size character chunking with overlap."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from mini_rag.retrieval.models import Chunk, Document

logger = logging.getLogger(__name__)


def chunk_text(text: str, chunk_size: int = 500, chunk_overlap: int = 50) -> list[str]:
    """Split *text* into overlapping windows.

    A window of *chunk_size* characters slides over the text, advancing
    by ``chunk_size - chunk_overlap`` each step, and stops once a window
    reaches the end of the text.  Windows are stripped; blank ones are
    dropped.

    Parameters
    ----------
    text:
        Raw document text.
    chunk_size:
        Window length in characters.
    chunk_overlap:
        Characters shared by consecutive windows.  Must be smaller
        than *chunk_size*.

    Returns
    -------
    list[str]
        Chunk texts in document order.
    """
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    if chunk_overlap < 0:
        raise ValueError(f"chunk_overlap must be >= 0, got {chunk_overlap}")
    if chunk_overlap >= chunk_size:
        raise ValueError(
            f"chunk_overlap ({chunk_overlap}) must be < chunk_size ({chunk_size})"
        )

    chunks: list[str] = []
    step = chunk_size - chunk_overlap
    start = 0
    while start < len(text):
        end = min(start + chunk_size, len(text))
        piece = text[start:end].strip()
        if piece:
            chunks.append(piece)
        if end >= len(text):
            break
        start += step

    return chunks


def chunk_documents(
    documents: Sequence[Document],
    chunk_size: int = 500,
    chunk_overlap: int = 50,
) -> list[Chunk]:
    """Chunk every document and attach source metadata.

    Chunk ids are ``"<filename>_chunk_<n>"`` where *n* numbers the
    non-blank chunks of each document from zero.
    """
    chunks: list[Chunk] = []
    for doc in documents:
        for idx, piece in enumerate(chunk_text(doc.content, chunk_size, chunk_overlap)):
            chunks.append(
                Chunk(
                    id=f"{doc.filename}_chunk_{idx}",
                    text=piece,
                    source=doc.filename,
                    chunk_index=idx,
                )
            )

    logger.info("Created %d chunks from %d documents", len(chunks), len(documents))
    return chunks
