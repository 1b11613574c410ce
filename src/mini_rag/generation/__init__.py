"""
Generation — provider clients, prompt construction and the query pipeline.

Public API
----------
- :func:`build_provider` — pick Ollama or an OpenAI-compatible backend.
- :func:`answer_question` — retrieve context and generate a cited answer.
"""

from mini_rag.generation.llm import (
    LLMProvider,
    OllamaProvider,
    OpenAIProvider,
    ProviderStatus,
    build_provider,
)
from mini_rag.generation.query import answer_question, retrieve

__all__ = [
    "LLMProvider",
    "OllamaProvider",
    "OpenAIProvider",
    "ProviderStatus",
    "answer_question",
    "build_provider",
    "retrieve",
]
