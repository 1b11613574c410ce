"""FastAPI application exposing ingestion and question answering over HTTP."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from mini_rag import __version__
from mini_rag.config import Settings
from mini_rag.errors import (
    DimensionMismatchError,
    DocumentLoadError,
    ProviderError,
    ProviderUnavailableError,
    StorePersistenceError,
)
from mini_rag.generation.llm import LLMProvider, ProviderStatus, build_provider
from mini_rag.generation.query import answer_question
from mini_rag.ingestion.pipeline import ingest_directory
from mini_rag.retrieval.base import VectorStoreBase
from mini_rag.retrieval.json_store import JsonVectorStore
from mini_rag.retrieval.models import IngestReport, QueryAnswer, StoreStats

logger = logging.getLogger(__name__)


# ── Request schemas ───────────────────────────────────────────────────
class QueryRequest(BaseModel):
    """Incoming question from the user."""

    question: str = Field(min_length=1)
    top_k: int | None = Field(default=None, gt=0)


# ── Application factory ───────────────────────────────────────────────
def create_app(
    settings: Settings | None = None,
    *,
    store: VectorStoreBase | None = None,
    provider: LLMProvider | None = None,
) -> FastAPI:
    """Build the API around an explicitly supplied store and provider.

    When *store* is omitted a :class:`JsonVectorStore` at
    ``settings.store_path`` is opened on startup and closed on shutdown.
    A supplied store is used as-is and its lifecycle stays with the
    caller.  Handlers are ``async`` and call the pipelines directly, so
    requests are processed one at a time.
    """
    settings = settings or Settings()
    owns_store = store is None
    if store is None:
        store = JsonVectorStore(settings.store_path)
    if provider is None:
        provider = build_provider(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if owns_store:
            store.open()
        try:
            yield
        finally:
            if owns_store:
                store.close()

    app = FastAPI(
        title="mini-rag API",
        version=__version__,
        description="Retrieval-augmented question answering over a local knowledge directory.",
        lifespan=lifespan,
    )

    @app.exception_handler(ProviderUnavailableError)
    async def _provider_unavailable(request: Request, exc: ProviderUnavailableError) -> JSONResponse:
        logger.error("Provider unavailable: %s", exc)
        return JSONResponse(status_code=503, content={"detail": str(exc)})

    @app.exception_handler(ProviderError)
    async def _provider_failed(request: Request, exc: ProviderError) -> JSONResponse:
        logger.error("Provider call failed: %s", exc)
        return JSONResponse(status_code=502, content={"detail": str(exc)})

    @app.exception_handler(StorePersistenceError)
    async def _store_failed(request: Request, exc: StorePersistenceError) -> JSONResponse:
        return JSONResponse(status_code=500, content={"detail": str(exc)})

    @app.exception_handler(DocumentLoadError)
    async def _document_unreadable(request: Request, exc: DocumentLoadError) -> JSONResponse:
        logger.error("Ingestion aborted: %s", exc)
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    # Stored vectors no longer match the embedding model; re-ingest.
    @app.exception_handler(DimensionMismatchError)
    async def _dimension_mismatch(request: Request, exc: DimensionMismatchError) -> JSONResponse:
        logger.error("Query failed: %s", exc)
        return JSONResponse(status_code=409, content={"detail": str(exc)})

    # ── Routes ────────────────────────────────────────────────────────
    @app.get("/health")
    async def health() -> dict[str, str]:
        """Liveness probe."""
        return {"status": "ok" if store.health_check() else "unavailable"}

    @app.get("/check", response_model=ProviderStatus)
    async def check() -> ProviderStatus:
        """Provider reachability and model availability."""
        return provider.check()

    @app.get("/stats", response_model=StoreStats)
    async def stats() -> StoreStats:
        return store.stats()

    @app.post("/query", response_model=QueryAnswer)
    async def query(request: QueryRequest) -> QueryAnswer:
        """Answer a question from the knowledge base."""
        return answer_question(
            request.question,
            store=store,
            provider=provider,
            top_k=request.top_k or settings.top_k,
        )

    @app.post("/ingest", response_model=IngestReport)
    async def ingest() -> IngestReport:
        """Re-ingest the configured knowledge directory."""
        return ingest_directory(
            settings.knowledge_dir,
            store=store,
            provider=provider,
            chunk_size=settings.chunk_size,
            chunk_overlap=settings.chunk_overlap,
            batch_size=settings.embed_batch_size,
        )

    return app
