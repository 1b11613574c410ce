"""Domain models for documents, chunks, stored vectors and answers."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, FiniteFloat

PREVIEW_CHARS = 100


class Document(BaseModel):
    """A knowledge file read fully into memory.

    Attributes
    ----------
    filename:
        Bare file name, used as the source label of every derived chunk.
    content:
        Entire file contents.
    path:
        Location the file was read from.
    """

    model_config = ConfigDict(frozen=True)

    filename: str
    content: str
    path: Path


class Chunk(BaseModel):
    """A bounded slice of a :class:`Document`; the unit of retrieval.

    ``id`` is ``"<filename>_chunk_<n>"`` so re-ingesting the same files
    produces the same identifiers.  ``chunk_index`` serializes as
    ``chunkIndex``; both spellings are accepted on input.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    text: str
    source: str
    chunk_index: int = Field(alias="chunkIndex", ge=0)


class VectorRecord(Chunk):
    """A chunk together with its embedding, as persisted by the store.

    NaN and infinite components are rejected; JSON has no encoding for them.
    """

    embedding: list[FiniteFloat]


class SearchHit(VectorRecord):
    """A stored record scored against a query embedding."""

    score: float


class StoreStats(BaseModel):
    """Summary of the vector store contents."""

    total_chunks: int = 0
    sources: list[str] = Field(default_factory=list)
    source_count: int = 0


class SourceRef(BaseModel):
    """Citation returned alongside an answer."""

    source: str
    score: float
    preview: str

    @classmethod
    def from_hit(cls, hit: SearchHit) -> SourceRef:
        return cls(
            source=hit.source,
            score=round(hit.score, 3),
            preview=hit.text[:PREVIEW_CHARS] + "...",
        )


class QueryAnswer(BaseModel):
    """Generated answer plus the chunks it was grounded on."""

    answer: str
    sources: list[SourceRef] = Field(default_factory=list)


class IngestReport(BaseModel):
    """Outcome of one ingestion run."""

    documents: int = 0
    chunks: int = 0
    sources: list[str] = Field(default_factory=list)
