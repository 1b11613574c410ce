"""Exception hierarchy shared by every layer of the pipeline."""

from __future__ import annotations


class MiniRagError(Exception):
    """Base class for all errors raised by this package."""


class ProviderError(MiniRagError):
    """An embedding or chat provider call failed or returned garbage."""


class ProviderUnavailableError(ProviderError):
    """The provider could not be reached at all."""


class StorePersistenceError(MiniRagError):
    """The vector store could not be written to disk."""


class DocumentLoadError(MiniRagError):
    """A knowledge file could not be read."""


class DimensionMismatchError(MiniRagError, ValueError):
    """Two embeddings being compared have different lengths."""
