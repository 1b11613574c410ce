"""Command-line entry point: provider check, ingestion, interactive chat, API server."""

from __future__ import annotations

import argparse
import logging
from collections.abc import Callable
from pathlib import Path

from pydantic import ValidationError

from mini_rag.config import Settings
from mini_rag.errors import MiniRagError
from mini_rag.generation.llm import LLMProvider, build_provider
from mini_rag.generation.query import answer_question
from mini_rag.ingestion.pipeline import ingest_directory
from mini_rag.retrieval.base import VectorStoreBase
from mini_rag.retrieval.json_store import JsonVectorStore

logger = logging.getLogger(__name__)

CHAT_COMMANDS = "/quit, /stats, /sources, /check"


def _configure_logging(level: str, verbosity: int) -> None:
    if verbosity >= 1:
        level = "DEBUG"
    logging.basicConfig(level=level.upper(), format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mini-rag",
        description="Ask questions about a folder of .txt / .md files.",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--ingest", action="store_true", help="Ingest documents from the knowledge directory")
    mode.add_argument("--chat", action="store_true", help="Start the interactive chat (default)")
    mode.add_argument("--check", action="store_true", help="Check provider connectivity and models, then exit")
    mode.add_argument("--serve", action="store_true", help="Serve the HTTP API")
    parser.add_argument(
        "--force",
        action="store_true",
        help="Continue even if the provider check fails",
    )
    parser.add_argument("--knowledge-dir", type=Path, default=None, help="Overrides KNOWLEDGE_DIR")
    parser.add_argument("--store", type=Path, default=None, help="Overrides STORE_PATH")
    parser.add_argument("--host", default="127.0.0.1", help="API bind address (with --serve)")
    parser.add_argument("--port", type=int, default=8000, help="API port (with --serve)")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Enable debug logging")
    return parser


def check_setup(provider: LLMProvider, settings: Settings) -> bool:
    """Print provider status; return ``True`` when both models are available."""
    print("\nChecking provider setup...")
    status = provider.check()

    if not status.ok:
        print(f"Provider not available: {status.error}")
        if settings.provider == "ollama":
            print("\nMake sure Ollama is running:")
            print("  ollama serve")
        return False

    print(f"Connected to {settings.provider} provider")
    print(f"   Available models: {', '.join(status.models) or 'none'}")
    if not status.has_embedding:
        print(f"\nEmbedding model '{status.embedding_model}' not found.")
        if settings.provider == "ollama":
            print(f"   Run: ollama pull {status.embedding_model}")
    if not status.has_chat:
        print(f"\nChat model '{status.chat_model}' not found.")
        if settings.provider == "ollama":
            print(f"   Run: ollama pull {status.chat_model}")

    return status.ready


def run_ingest(settings: Settings, store: VectorStoreBase, provider: LLMProvider) -> None:
    print(f"\nIngesting documents from {settings.knowledge_dir} ...")
    report = ingest_directory(
        settings.knowledge_dir,
        store=store,
        provider=provider,
        chunk_size=settings.chunk_size,
        chunk_overlap=settings.chunk_overlap,
        batch_size=settings.embed_batch_size,
    )
    if report.documents == 0:
        print(f"No documents found. Add .txt or .md files to {settings.knowledge_dir}.")
        return
    print("\nIngestion complete!")
    print(f"   - {report.chunks} chunks from {report.documents} documents")


def chat_loop(
    settings: Settings,
    store: VectorStoreBase,
    provider: LLMProvider,
    *,
    input_fn: Callable[[str], str] | None = None,
) -> None:
    """Read questions until ``/quit`` or end of input."""
    read = input_fn or input
    print("\nMini RAG Chatbot")
    print("================")
    print(f"   LLM: {settings.chat_model}")
    print(f"   Embeddings: {settings.embedding_model}")

    stats = store.stats()
    if stats.total_chunks == 0:
        print("\nNo knowledge base found. Run with --ingest first.")
    else:
        print(f"\nKnowledge base: {stats.total_chunks} chunks from {stats.source_count} sources")
    print(f"\nCommands: {CHAT_COMMANDS}")
    print("Ask anything about your knowledge base!\n")

    while True:
        try:
            line = read("You: ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\nGoodbye!")
            return

        if not line:
            continue
        if line in ("/quit", "/exit"):
            print("Goodbye!")
            return
        if line == "/stats":
            s = store.stats()
            print(f"\nStats: {s.total_chunks} chunks, {s.source_count} sources\n")
            continue
        if line == "/sources":
            s = store.stats()
            print(f"\nSources: {', '.join(s.sources) or 'none'}\n")
            continue
        if line == "/check":
            check_setup(provider, settings)
            print()
            continue

        try:
            print("\nSearching...")
            result = answer_question(line, store=store, provider=provider, top_k=settings.top_k)
        except MiniRagError as exc:
            logger.debug("Query failed", exc_info=True)
            print(f"\nError: {exc}\n")
            continue
        except KeyboardInterrupt:
            print("\nInterrupted.\n")
            continue

        print(f"\nAssistant: {result.answer}")
        if result.sources:
            print("\nSources:")
            for i, src in enumerate(result.sources, 1):
                print(f"   {i}. {src.source} (relevance: {src.score:.3f})")
        print()


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    overrides: dict[str, Path] = {}
    if args.knowledge_dir is not None:
        overrides["knowledge_dir"] = args.knowledge_dir
    if args.store is not None:
        overrides["store_path"] = args.store
    try:
        settings = Settings(**overrides)
    except ValidationError as exc:
        print(f"Invalid configuration:\n{exc}")
        return 2

    _configure_logging(settings.log_level, args.verbose)

    try:
        provider = build_provider(settings)
    except MiniRagError as exc:
        print(f"Could not set up provider: {exc}")
        return 1

    if args.check:
        check_setup(provider, settings)
        return 0

    if not check_setup(provider, settings) and not args.force:
        print("\nRun with --force to continue anyway, or fix the issues above.")
        return 1

    with JsonVectorStore(settings.store_path) as store:
        if args.ingest:
            try:
                run_ingest(settings, store, provider)
            except MiniRagError as exc:
                logger.error("Ingestion failed: %s", exc)
                print(f"\nIngestion failed: {exc}")
                return 1
            return 0

        if args.serve:
            import uvicorn

            from mini_rag.serving.app import create_app

            uvicorn.run(create_app(settings, store=store, provider=provider), host=args.host, port=args.port)
            return 0

        chat_loop(settings, store, provider)
    return 0
