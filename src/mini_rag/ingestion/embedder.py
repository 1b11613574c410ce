"""Sequential batch embedding."""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from typing import TYPE_CHECKING

from mini_rag.errors import ProviderError

if TYPE_CHECKING:
    from mini_rag.generation.llm import LLMProvider

logger = logging.getLogger(__name__)


def embed_in_batches(
    provider: LLMProvider,
    texts: Sequence[str],
    batch_size: int = 10,
) -> list[list[float]]:
    """Embed *texts* in fixed-size batches, one batch at a time.

    The returned list lines up with *texts* index for index.

    Raises
    ------
    ProviderError
        If a batch fails or the provider returns the wrong number of
        vectors for it.
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be >= 1, got {batch_size}")

    embeddings: list[list[float]] = []
    t0 = time.monotonic()
    for start in range(0, len(texts), batch_size):
        batch = texts[start : start + batch_size]
        vectors = provider.embed_many(batch)
        if len(vectors) != len(batch):
            raise ProviderError(
                f"Provider returned {len(vectors)} embeddings for a batch of {len(batch)}"
            )
        embeddings.extend(vectors)
        logger.info("  embedded %d / %d", len(embeddings), len(texts))

    if embeddings:
        logger.info(
            "Embedding complete: %d vectors (dim=%d) in %.1fs",
            len(embeddings), len(embeddings[0]), time.monotonic() - t0,
        )
    return embeddings
