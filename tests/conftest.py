"""Shared pytest configuration and fixtures."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from pathlib import Path

import pytest

from mini_rag.config import Settings
from mini_rag.errors import ProviderError
from mini_rag.generation.llm import LLMProvider, ProviderStatus
from mini_rag.retrieval.json_store import JsonVectorStore

KEYWORDS = ("hello", "world", "python", "cooking", "music")


def keyword_vector(text: str) -> list[float]:
    """Dumb embedding: keyword counts plus a constant so the norm is never zero."""
    lowered = text.lower()
    return [float(lowered.count(k)) for k in KEYWORDS] + [0.1]


class FakeProvider(LLMProvider):
    """Deterministic in-process provider that records every call."""

    embedding_model = "fake-embed"
    chat_model = "fake-chat"

    def __init__(
        self,
        *,
        answer: str = "fake answer",
        fail_on_batch: int | None = None,
        ready: bool = True,
    ) -> None:
        self.answer = answer
        self.fail_on_batch = fail_on_batch
        self.ready = ready
        self.embed_calls: list[list[str]] = []
        self.complete_calls: list[tuple[str, str]] = []

    def embed_many(self, texts: Sequence[str]) -> list[list[float]]:
        self.embed_calls.append(list(texts))
        if self.fail_on_batch is not None and len(self.embed_calls) - 1 == self.fail_on_batch:
            raise ProviderError("embedding backend exploded")
        return [keyword_vector(t) for t in texts]

    def complete(self, system_prompt: str, user_message: str) -> str:
        self.complete_calls.append((system_prompt, user_message))
        return self.answer

    def check(self) -> ProviderStatus:
        return ProviderStatus(
            ok=self.ready,
            error=None if self.ready else "connection refused",
            models=["fake-embed", "fake-chat"] if self.ready else [],
            has_embedding=self.ready,
            has_chat=self.ready,
            embedding_model=self.embedding_model,
            chat_model=self.chat_model,
        )


@pytest.fixture()
def fake_provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture()
def store_path(tmp_path: Path) -> Path:
    return tmp_path / "data" / "vectors.json"


@pytest.fixture()
def store(store_path: Path) -> Iterator[JsonVectorStore]:
    with JsonVectorStore(store_path) as s:
        yield s


@pytest.fixture()
def knowledge_dir(tmp_path: Path) -> Path:
    """Two documents: a long ``a.txt`` and a short ``b.md``."""
    root = tmp_path / "knowledge"
    root.mkdir()
    (root / "a.txt").write_text("hello world " * 10, encoding="utf-8")
    (root / "b.md").write_text("Python is a programming language.", encoding="utf-8")
    return root


@pytest.fixture()
def settings(tmp_path: Path, knowledge_dir: Path, store_path: Path) -> Settings:
    return Settings(
        _env_file=None,
        provider="ollama",
        knowledge_dir=knowledge_dir,
        store_path=store_path,
        chunk_size=50,
        chunk_overlap=10,
        top_k=3,
        embed_batch_size=2,
    )
