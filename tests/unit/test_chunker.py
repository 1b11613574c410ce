"""Unit tests for the chunker module."""

from __future__ import annotations

import math
from pathlib import Path

import pytest

from mini_rag.ingestion.chunker import chunk_documents, chunk_text
from mini_rag.retrieval.models import Document


def _expected_count(length: int, size: int, overlap: int) -> int:
    if length == 0:
        return 0
    if length <= size:
        return 1
    return math.ceil((length - overlap) / (size - overlap))


class TestChunkText:
    def test_short_text_is_single_stripped_chunk(self) -> None:
        assert chunk_text("  hello there \n", chunk_size=50, chunk_overlap=10) == ["hello there"]

    def test_empty_and_blank_text(self) -> None:
        assert chunk_text("", chunk_size=10, chunk_overlap=2) == []
        assert chunk_text("   \n\t  ", chunk_size=10, chunk_overlap=2) == []

    def test_window_lengths_and_count(self) -> None:
        text = "abcdefghij" * 10  # 100 chars, no whitespace
        chunks = chunk_text(text, chunk_size=30, chunk_overlap=10)
        assert len(chunks) == 5
        assert all(len(c) == 30 for c in chunks[:-1])
        assert chunks[-1] == text[80:]

    def test_overlap_regions_match(self) -> None:
        text = "".join(chr(ord("a") + i % 26) for i in range(237))
        chunks = chunk_text(text, chunk_size=40, chunk_overlap=15)
        for left, right in zip(chunks, chunks[1:]):
            assert left[-15:] == right[:15]

    def test_exact_fit_does_not_emit_tail_chunk(self) -> None:
        chunks = chunk_text("x" * 50, chunk_size=30, chunk_overlap=10)
        assert len(chunks) == 2

    def test_blank_windows_are_dropped(self) -> None:
        text = "a" + " " * 40 + "b"
        assert chunk_text(text, chunk_size=10, chunk_overlap=0) == ["a", "b"]

    @pytest.mark.parametrize("size", [5, 17, 50])
    @pytest.mark.parametrize("overlap_kind", ["zero", "one", "max"])
    @pytest.mark.parametrize("length", [0, 1, 5, 17, 50, 163])
    def test_count_formula_and_termination(self, size: int, overlap_kind: str, length: int) -> None:
        overlap = {"zero": 0, "one": 1, "max": size - 1}[overlap_kind]
        chunks = chunk_text("x" * length, chunk_size=size, chunk_overlap=overlap)
        assert len(chunks) == _expected_count(length, size, overlap)

    @pytest.mark.parametrize(
        ("size", "overlap"),
        [(10, 10), (10, 11), (0, 0), (-5, 0), (10, -1)],
    )
    def test_invalid_parameters_rejected(self, size: int, overlap: int) -> None:
        with pytest.raises(ValueError):
            chunk_text("some text", chunk_size=size, chunk_overlap=overlap)


class TestChunkDocuments:
    def _doc(self, name: str, content: str) -> Document:
        return Document(filename=name, content=content, path=Path("/kb") / name)

    def test_ids_and_metadata(self) -> None:
        docs = [self._doc("a.txt", "hello world " * 10), self._doc("b.md", "short")]
        chunks = chunk_documents(docs, chunk_size=50, chunk_overlap=10)

        assert [c.id for c in chunks] == [
            "a.txt_chunk_0",
            "a.txt_chunk_1",
            "a.txt_chunk_2",
            "b.md_chunk_0",
        ]
        assert [c.chunk_index for c in chunks] == [0, 1, 2, 0]
        assert [c.source for c in chunks] == ["a.txt"] * 3 + ["b.md"]

    def test_ids_are_deterministic(self) -> None:
        docs = [self._doc("a.txt", "lorem ipsum " * 30)]
        first = chunk_documents(docs, chunk_size=40, chunk_overlap=5)
        second = chunk_documents(docs, chunk_size=40, chunk_overlap=5)
        assert first == second

    def test_blank_document_yields_nothing(self) -> None:
        assert chunk_documents([self._doc("empty.txt", "  \n ")]) == []

    def test_empty_input(self) -> None:
        assert chunk_documents([]) == []
