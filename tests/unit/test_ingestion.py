"""Unit tests for batch embedding and the ingestion pipeline."""

from __future__ import annotations

import json
import math
from collections.abc import Sequence
from pathlib import Path

import pytest
from conftest import FakeProvider, keyword_vector

from mini_rag.errors import DocumentLoadError, ProviderError
from mini_rag.ingestion.embedder import embed_in_batches
from mini_rag.ingestion.pipeline import ingest_directory
from mini_rag.retrieval.json_store import JsonVectorStore
from mini_rag.retrieval.models import IngestReport, VectorRecord


class _ShortProvider(FakeProvider):
    """Drops the last vector of every batch."""

    def embed_many(self, texts: Sequence[str]) -> list[list[float]]:
        return super().embed_many(texts)[:-1]


class _NanProvider(FakeProvider):
    """Returns a NaN component in the first vector of every batch."""

    def embed_many(self, texts: Sequence[str]) -> list[list[float]]:
        vectors = super().embed_many(texts)
        vectors[0][0] = math.nan
        return vectors


PREVIOUS = [
    VectorRecord(id="old.txt_chunk_0", text="old", source="old.txt", chunk_index=0, embedding=[1, 0, 0, 0, 0, 0]),
]


# ── embed_in_batches ───────────────────────────────────────────────────


class TestEmbedInBatches:
    def test_sequential_batches_preserve_order(self, fake_provider: FakeProvider) -> None:
        texts = [f"hello {'world ' * i}" for i in range(25)]
        vectors = embed_in_batches(fake_provider, texts, batch_size=10)

        assert [len(call) for call in fake_provider.embed_calls] == [10, 10, 5]
        assert vectors == [keyword_vector(t) for t in texts]

    def test_empty_input_makes_no_calls(self, fake_provider: FakeProvider) -> None:
        assert embed_in_batches(fake_provider, [], batch_size=4) == []
        assert fake_provider.embed_calls == []

    def test_count_mismatch_raises(self) -> None:
        with pytest.raises(ProviderError, match="returned 1 embeddings for a batch of 2"):
            embed_in_batches(_ShortProvider(), ["a", "b", "c"], batch_size=2)

    def test_provider_error_propagates(self) -> None:
        provider = FakeProvider(fail_on_batch=1)
        with pytest.raises(ProviderError):
            embed_in_batches(provider, ["a", "b", "c"], batch_size=2)
        assert len(provider.embed_calls) == 2

    def test_invalid_batch_size(self, fake_provider: FakeProvider) -> None:
        with pytest.raises(ValueError):
            embed_in_batches(fake_provider, ["a"], batch_size=0)


# ── ingest_directory ───────────────────────────────────────────────────


class TestIngestDirectory:
    def _ingest(self, directory: Path, store: JsonVectorStore, provider: FakeProvider) -> IngestReport:
        return ingest_directory(
            directory,
            store=store,
            provider=provider,
            chunk_size=50,
            chunk_overlap=10,
            batch_size=2,
        )

    def test_two_documents(
        self, knowledge_dir: Path, store: JsonVectorStore, fake_provider: FakeProvider
    ) -> None:
        report = self._ingest(knowledge_dir, store, fake_provider)

        # a.txt is 120 chars -> 3 windows; b.md fits in one.
        assert report == IngestReport(documents=2, chunks=4, sources=["a.txt", "b.md"])
        assert [r.id for r in store.records] == [
            "a.txt_chunk_0",
            "a.txt_chunk_1",
            "a.txt_chunk_2",
            "b.md_chunk_0",
        ]
        stats = store.stats()
        assert stats.total_chunks == 4
        assert stats.source_count == 2

    def test_embeddings_attached_positionally(
        self, knowledge_dir: Path, store: JsonVectorStore, fake_provider: FakeProvider
    ) -> None:
        self._ingest(knowledge_dir, store, fake_provider)
        for record in store.records:
            assert record.embedding == keyword_vector(record.text)
        assert [len(c) for c in fake_provider.embed_calls] == [2, 2]

    def test_reingest_replaces_contents(
        self, knowledge_dir: Path, store: JsonVectorStore, fake_provider: FakeProvider
    ) -> None:
        store.add(PREVIOUS)
        self._ingest(knowledge_dir, store, fake_provider)
        self._ingest(knowledge_dir, store, fake_provider)

        assert len(store) == 4
        assert "old.txt" not in store.stats().sources

    def test_provider_failure_leaves_previous_store(
        self, knowledge_dir: Path, store: JsonVectorStore, store_path: Path
    ) -> None:
        store.add(PREVIOUS)
        on_disk = store_path.read_bytes()

        with pytest.raises(ProviderError):
            self._ingest(knowledge_dir, store, FakeProvider(fail_on_batch=1))

        assert store.records == PREVIOUS
        assert store_path.read_bytes() == on_disk

    def test_nan_embedding_leaves_previous_store(
        self, knowledge_dir: Path, store: JsonVectorStore, store_path: Path
    ) -> None:
        store.add(PREVIOUS)
        on_disk = store_path.read_bytes()

        with pytest.raises(ProviderError, match="invalid embedding"):
            self._ingest(knowledge_dir, store, _NanProvider())

        assert store.records == PREVIOUS
        assert store_path.read_bytes() == on_disk

    def test_empty_directory_leaves_store_untouched(
        self, tmp_path: Path, store: JsonVectorStore, fake_provider: FakeProvider
    ) -> None:
        store.add(PREVIOUS)
        empty = tmp_path / "empty"
        empty.mkdir()

        assert self._ingest(empty, store, fake_provider) == IngestReport()
        assert self._ingest(tmp_path / "missing", store, fake_provider) == IngestReport()
        assert store.records == PREVIOUS
        assert fake_provider.embed_calls == []

    def test_unreadable_file_aborts_before_store_changes(
        self, knowledge_dir: Path, store: JsonVectorStore, fake_provider: FakeProvider
    ) -> None:
        store.add(PREVIOUS)
        (knowledge_dir / "broken.txt").write_bytes(b"\xff\xfe bad bytes")

        with pytest.raises(DocumentLoadError):
            self._ingest(knowledge_dir, store, fake_provider)
        assert store.records == PREVIOUS

    def test_persisted_file_matches_records(
        self, knowledge_dir: Path, store: JsonVectorStore, store_path: Path, fake_provider: FakeProvider
    ) -> None:
        self._ingest(knowledge_dir, store, fake_provider)
        data = json.loads(store_path.read_text(encoding="utf-8"))
        assert [d["source"] for d in data] == ["a.txt", "a.txt", "a.txt", "b.md"]
        assert [d["chunkIndex"] for d in data] == [0, 1, 2, 0]
