"""Query pipeline — embed, retrieve, assemble context, generate."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from mini_rag.generation.prompts import NO_KNOWLEDGE_ANSWER, build_system_prompt
from mini_rag.retrieval.models import QueryAnswer, SearchHit, SourceRef

if TYPE_CHECKING:
    from mini_rag.generation.llm import LLMProvider
    from mini_rag.retrieval.base import VectorStoreBase

logger = logging.getLogger(__name__)


def retrieve(
    question: str,
    *,
    store: VectorStoreBase,
    provider: LLMProvider,
    top_k: int = 3,
) -> list[SearchHit]:
    """Embed *question* and return the *top_k* closest chunks."""
    query_embedding = provider.embed(question)
    hits = store.similarity_search(query_embedding, k=top_k)
    logger.info("Retrieved %d chunks for question (top_k=%d)", len(hits), top_k)
    return hits


def answer_question(
    question: str,
    *,
    store: VectorStoreBase,
    provider: LLMProvider,
    top_k: int = 3,
) -> QueryAnswer:
    """Answer *question* from the knowledge base.

    When nothing is retrieved the chat model is not called and a canned
    answer with no sources is returned.  Provider errors propagate.
    """
    hits = retrieve(question, store=store, provider=provider, top_k=top_k)
    if not hits:
        return QueryAnswer(answer=NO_KNOWLEDGE_ANSWER, sources=[])

    answer = provider.complete(build_system_prompt(hits), question)
    return QueryAnswer(
        answer=answer,
        sources=[SourceRef.from_hit(hit) for hit in hits],
    )
