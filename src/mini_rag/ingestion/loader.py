"""Document loading — read a flat directory of text / Markdown files."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from mini_rag.errors import DocumentLoadError
from mini_rag.retrieval.models import Document

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS: tuple[str, ...] = (".txt", ".md")


def load_file(path: str | Path) -> Document:
    """Read a single file as UTF-8.

    Raises
    ------
    DocumentLoadError
        If the file cannot be read or decoded.
    """
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise DocumentLoadError(f"Could not read {path}: {exc}") from exc
    return Document(filename=path.name, content=content, path=path)


def load_directory(
    path: str | Path,
    extensions: Iterable[str] = SUPPORTED_EXTENSIONS,
) -> list[Document]:
    """Load every supported file directly inside *path*.

    Parameters
    ----------
    path:
        Knowledge directory.  Sub-directories are not visited.
    extensions:
        File suffixes to keep, compared case-insensitively.

    Returns
    -------
    list[Document]
        One document per file, ordered by file name.  A missing
        directory yields an empty list.

    Raises
    ------
    DocumentLoadError
        If any matching file cannot be read; nothing is returned then.
    """
    root = Path(path)
    if not root.is_dir():
        logger.warning("Directory not found: %s", root)
        return []

    wanted = {ext.lower() for ext in extensions}
    documents: list[Document] = []
    for entry in sorted(root.iterdir()):
        if not entry.is_file() or entry.suffix.lower() not in wanted:
            continue
        documents.append(load_file(entry))
        logger.info("Loaded: %s", entry.name)

    return documents
