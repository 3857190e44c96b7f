# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import enum
import logging
from pathlib import Path
from typing import Dict, List, Protocol

from docman.core.errors import DocumentExists, DocumentNotFound

logger = logging.getLogger(__name__)

# common file system limit for a single path component
MAX_FILE_NAME_BYTES = 255


class RenderMode(str, enum.Enum):
    PLAIN_TEXT = "text"
    MARKDOWN = "markdown"


def render_mode(name: str) -> RenderMode:
    """Classify a document by suffix only.

    ``.md`` is converted to HTML; ``.txt`` and every other suffix are served
    verbatim as plain text.
    """
    if Path(name).suffix == ".md":
        return RenderMode.MARKDOWN
    return RenderMode.PLAIN_TEXT


class DocumentRepository(Protocol):
    def list(self) -> List[str]: ...

    def exists(self, name: str) -> bool: ...

    def read(self, name: str) -> bytes: ...

    def write(self, name: str, content: bytes) -> None: ...

    def create(self, name: str, content: bytes = b"") -> None: ...

    def delete(self, name: str) -> None: ...


class FileDocumentRepository:
    """Documents stored as files directly inside one directory."""

    def __init__(self, root: Path):
        self.root = Path(root).resolve()

    def _path(self, name: str) -> Path:
        n = str(name or "")
        if not n or n in {".", ".."} or "/" in n or "\\" in n or "\x00" in n:
            raise DocumentNotFound(n)
        if len(n.encode("utf-8", errors="surrogatepass")) > MAX_FILE_NAME_BYTES:
            raise DocumentNotFound(n)
        p = self.root / n
        if p.resolve().parent != self.root:
            raise DocumentNotFound(n)
        return p

    def list(self) -> List[str]:
        if not self.root.exists():
            return []
        return [p.name for p in self.root.iterdir() if p.is_file()]

    def exists(self, name: str) -> bool:
        try:
            return self._path(name).is_file()
        except DocumentNotFound:
            return False

    def read(self, name: str) -> bytes:
        p = self._path(name)
        if not p.is_file():
            raise DocumentNotFound(name)
        return p.read_bytes()

    def write(self, name: str, content: bytes) -> None:
        p = self._path(name)
        p.write_bytes(content)
        logger.debug("wrote %d bytes to %s", len(content), p)

    def create(self, name: str, content: bytes = b"") -> None:
        p = self._path(name)
        try:
            # "x" fails if the file appeared since the caller's uniqueness check
            with p.open("xb") as fh:
                fh.write(content)
        except FileExistsError:
            raise DocumentExists(name) from None

    def delete(self, name: str) -> None:
        p = self._path(name)
        try:
            p.unlink()
        except FileNotFoundError:
            raise DocumentNotFound(name) from None


class InMemoryDocumentRepository:
    def __init__(self, documents: Dict[str, bytes] | None = None):
        self._docs: Dict[str, bytes] = dict(documents or {})

    def list(self) -> List[str]:
        return list(self._docs)

    def exists(self, name: str) -> bool:
        return name in self._docs

    def read(self, name: str) -> bytes:
        try:
            return self._docs[name]
        except KeyError:
            raise DocumentNotFound(name) from None

    def write(self, name: str, content: bytes) -> None:
        self._docs[name] = bytes(content)

    def create(self, name: str, content: bytes = b"") -> None:
        if name in self._docs:
            raise DocumentExists(name)
        self._docs[name] = bytes(content)

    def delete(self, name: str) -> None:
        try:
            del self._docs[name]
        except KeyError:
            raise DocumentNotFound(name) from None
