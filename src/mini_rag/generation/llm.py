"""Embedding / chat providers — single place to swap backends.

Supports two modes:

1. **Ollama** (default) — talks to the local Ollama REST API
   (``/api/embed``, ``/api/chat``, ``/api/tags``) with ``requests``.
2. **OpenAI-compatible** — set ``PROVIDER=openai``.  Uses ``ChatOpenAI``
   and ``OpenAIEmbeddings``; set ``LLM_BASE_URL`` to point them at any
   server exposing ``/v1/chat/completions`` and ``/v1/embeddings``.

Every provider preserves input order for batched embedding calls and
surfaces failures as :class:`~mini_rag.errors.ProviderError`.  Nothing is
retried.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

import requests
from langchain_openai import ChatOpenAI, OpenAIEmbeddings
from openai import APIConnectionError, OpenAI, OpenAIError
from pydantic import BaseModel, Field

from mini_rag.config import Settings
from mini_rag.errors import ProviderError, ProviderUnavailableError
from mini_rag.generation.prompts import build_messages

logger = logging.getLogger(__name__)


class ProviderStatus(BaseModel):
    """Result of :meth:`LLMProvider.check`."""

    ok: bool
    error: str | None = None
    models: list[str] = Field(default_factory=list)
    has_embedding: bool = False
    has_chat: bool = False
    embedding_model: str = ""
    chat_model: str = ""

    @property
    def ready(self) -> bool:
        """Reachable and both configured models are available."""
        return self.ok and self.has_embedding and self.has_chat


def _model_listed(model: str, available: Sequence[str]) -> bool:
    """``True`` if any available name contains *model* without its tag."""
    base = model.split(":")[0]
    return any(base in name for name in available)


class LLMProvider(ABC):
    """Common interface for embedding + chat backends."""

    embedding_model: str
    chat_model: str

    @abstractmethod
    def embed_many(self, texts: Sequence[str]) -> list[list[float]]:
        """Embed *texts*; result ``i`` belongs to ``texts[i]``."""
        ...

    def embed(self, text: str) -> list[float]:
        """Embed a single text."""
        return self.embed_many([text])[0]

    @abstractmethod
    def complete(self, system_prompt: str, user_message: str) -> str:
        """Return the chat model's reply to *user_message*."""
        ...

    @abstractmethod
    def check(self) -> ProviderStatus:
        """Probe the backend.  Never raises for connectivity problems."""
        ...

    def _checked(self, embeddings: Any, expected: int) -> list[list[float]]:
        if not isinstance(embeddings, list) or len(embeddings) != expected:
            got = len(embeddings) if isinstance(embeddings, list) else type(embeddings).__name__
            raise ProviderError(f"Expected {expected} embeddings from provider, got {got}")
        return embeddings


# ── Ollama ────────────────────────────────────────────────────────────


class OllamaProvider(LLMProvider):
    """Provider backed by a local Ollama server.

    Parameters
    ----------
    base_url:
        Ollama root URL, e.g. ``http://localhost:11434``.
    embedding_model / chat_model:
        Ollama model names.
    temperature / max_tokens:
        Sampling options forwarded as ``options.temperature`` and
        ``options.num_predict``.
    timeout:
        Per-request timeout in seconds.
    session:
        Optional pre-configured ``requests.Session``.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        *,
        embedding_model: str = "nomic-embed-text",
        chat_model: str = "qwen2.5:3b",
        temperature: float = 0.7,
        max_tokens: int = 1000,
        timeout: float = 120.0,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.embedding_model = embedding_model
        self.chat_model = chat_model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout
        self._session = session or requests.Session()

    def embed_many(self, texts: Sequence[str]) -> list[list[float]]:
        if not texts:
            return []
        data = self._request(
            "POST",
            "/api/embed",
            json={"model": self.embedding_model, "input": list(texts)},
        )
        return self._checked(data.get("embeddings"), len(texts))

    def complete(self, system_prompt: str, user_message: str) -> str:
        data = self._request(
            "POST",
            "/api/chat",
            json={
                "model": self.chat_model,
                "messages": [
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_message},
                ],
                "stream": False,
                "options": {
                    "temperature": self.temperature,
                    "num_predict": self.max_tokens,
                },
            },
        )
        try:
            return data["message"]["content"]
        except (KeyError, TypeError) as exc:
            raise ProviderError("Malformed chat response from Ollama: missing message.content") from exc

    def check(self) -> ProviderStatus:
        try:
            data = self._request("GET", "/api/tags")
        except ProviderError as exc:
            logger.warning("Ollama health-check failed: %s", exc)
            return ProviderStatus(
                ok=False,
                error=str(exc),
                embedding_model=self.embedding_model,
                chat_model=self.chat_model,
            )

        entries = data.get("models")
        if not isinstance(entries, list):
            entries = []
        models = [m["name"] for m in entries if isinstance(m, dict) and isinstance(m.get("name"), str)]
        return ProviderStatus(
            ok=True,
            models=models,
            has_embedding=_model_listed(self.embedding_model, models),
            has_chat=_model_listed(self.chat_model, models),
            embedding_model=self.embedding_model,
            chat_model=self.chat_model,
        )

    def _request(self, method: str, endpoint: str, **kwargs: Any) -> dict[str, Any]:
        url = f"{self.base_url}{endpoint}"
        logger.debug("%s %s", method, url)
        try:
            response = self._session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.ConnectionError as exc:
            raise ProviderUnavailableError(f"Ollama not reachable at {self.base_url}: {exc}") from exc
        except requests.RequestException as exc:
            raise ProviderError(f"Request to Ollama failed: {exc}") from exc

        if not response.ok:
            raise ProviderError(
                f"Ollama {endpoint} failed with HTTP {response.status_code}: {response.text}"
            )
        try:
            data = response.json()
        except ValueError as exc:
            raise ProviderError(f"Ollama {endpoint} returned invalid JSON") from exc
        if not isinstance(data, dict):
            raise ProviderError(f"Ollama {endpoint} returned an unexpected payload")
        return data


# ── OpenAI-compatible ─────────────────────────────────────────────────


class OpenAIProvider(LLMProvider):
    """Provider backed by the OpenAI API or any compatible server.

    When *base_url* is set the clients are pointed at it instead of the
    OpenAI cloud; a dummy key (``"EMPTY"``) is used if none is given
    because most self-hosted servers do not check it.
    """

    def __init__(
        self,
        *,
        embedding_model: str,
        chat_model: str,
        api_key: str = "",
        base_url: str = "",
        temperature: float = 0.7,
        max_tokens: int = 1000,
        timeout: float = 120.0,
    ) -> None:
        self.embedding_model = embedding_model
        self.chat_model = chat_model
        self._api_key = (api_key or "EMPTY") if base_url else api_key
        self._base_url = base_url or None
        self._timeout = timeout

        if base_url:
            logger.info("Using OpenAI-compatible endpoint: %s", base_url)

        try:
            self._llm = ChatOpenAI(
                model=chat_model,
                temperature=temperature,
                max_tokens=max_tokens,
                timeout=timeout,
                api_key=self._api_key or None,
                base_url=self._base_url,
            )
            self._embeddings = OpenAIEmbeddings(
                model=embedding_model,
                api_key=self._api_key or None,
                base_url=self._base_url,
                # Non-OpenAI servers expect raw strings, not tiktoken ids.
                check_embedding_ctx_length=base_url == "",
            )
        except OpenAIError as exc:
            raise ProviderError(f"Could not configure OpenAI client: {exc}") from exc

    def embed_many(self, texts: Sequence[str]) -> list[list[float]]:
        if not texts:
            return []
        try:
            embeddings = self._embeddings.embed_documents(list(texts))
        except APIConnectionError as exc:
            raise ProviderUnavailableError(f"Embedding endpoint not reachable: {exc}") from exc
        except OpenAIError as exc:
            raise ProviderError(f"Embedding failed: {exc}") from exc
        return self._checked(embeddings, len(texts))

    def complete(self, system_prompt: str, user_message: str) -> str:
        try:
            response = self._llm.invoke(build_messages(system_prompt, user_message))
        except APIConnectionError as exc:
            raise ProviderUnavailableError(f"Chat endpoint not reachable: {exc}") from exc
        except OpenAIError as exc:
            raise ProviderError(f"Chat failed: {exc}") from exc

        if not isinstance(response.content, str):
            raise ProviderError("Chat model returned non-text content")
        return response.content

    def check(self) -> ProviderStatus:
        try:
            client = OpenAI(api_key=self._api_key or None, base_url=self._base_url, timeout=self._timeout)
            models = [m.id for m in client.models.list()]
        except OpenAIError as exc:
            logger.warning("OpenAI health-check failed: %s", exc)
            return ProviderStatus(
                ok=False,
                error=str(exc),
                embedding_model=self.embedding_model,
                chat_model=self.chat_model,
            )

        return ProviderStatus(
            ok=True,
            models=models,
            has_embedding=_model_listed(self.embedding_model, models),
            has_chat=_model_listed(self.chat_model, models),
            embedding_model=self.embedding_model,
            chat_model=self.chat_model,
        )


def build_provider(settings: Settings) -> LLMProvider:
    """Return the provider selected by ``settings.provider``."""
    if settings.provider == "openai":
        return OpenAIProvider(
            embedding_model=settings.embedding_model,
            chat_model=settings.chat_model,
            api_key=settings.openai_api_key,
            base_url=settings.llm_base_url,
            temperature=settings.chat_temperature,
            max_tokens=settings.chat_max_tokens,
            timeout=settings.request_timeout,
        )
    return OllamaProvider(
        settings.ollama_base_url,
        embedding_model=settings.embedding_model,
        chat_model=settings.chat_model,
        temperature=settings.chat_temperature,
        max_tokens=settings.chat_max_tokens,
        timeout=settings.request_timeout,
    )
