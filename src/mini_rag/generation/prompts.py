"""Prompt templates and context assembly for the query pipeline.

Keeping prompts in one place makes them easy to audit and tweak.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from langchain_core.messages import HumanMessage, SystemMessage

if TYPE_CHECKING:
    from langchain_core.messages import BaseMessage

    from mini_rag.retrieval.models import SearchHit

CONTEXT_SEPARATOR = "\n\n---\n\n"

NO_KNOWLEDGE_ANSWER = "I don't have any knowledge base loaded. Please run ingestion first."

SYSTEM_PROMPT = """\
You are a helpful assistant that answers questions based on the provided context.
Use ONLY the information from the context to answer. If the context doesn't contain enough information, say so.
Do not make up facts that are not in the context.
Be concise and direct in your answers.

Context:
{context}"""


def format_context(hits: Sequence[SearchHit]) -> str:
    """Label each retrieved chunk with its source and join them."""
    return CONTEXT_SEPARATOR.join(f"[Source: {hit.source}]\n{hit.text}" for hit in hits)


def build_system_prompt(hits: Sequence[SearchHit]) -> str:
    """Grounding instructions followed by the assembled context."""
    return SYSTEM_PROMPT.format(context=format_context(hits))


def build_messages(system_prompt: str, user_message: str) -> list[BaseMessage]:
    """Wrap a system prompt and a user turn as LangChain messages."""
    return [
        SystemMessage(content=system_prompt),
        HumanMessage(content=user_message),
    ]
