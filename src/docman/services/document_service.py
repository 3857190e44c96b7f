# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Union

import markdown

from docman.core.errors import DocumentExists
from docman.core.naming import MSG_NOT_UNIQUE, clean_document_name, error_for_document_name
from docman.infra.document_repo import DocumentRepository, RenderMode, render_mode

logger = logging.getLogger(__name__)

MEDIA_TYPES = {
    RenderMode.PLAIN_TEXT: "text/plain",
    RenderMode.MARKDOWN: "text/html",
}


@dataclass(frozen=True)
class RenderedDocument:
    name: str
    body: Union[str, bytes]
    media_type: str


def list_documents(repo: DocumentRepository) -> List[str]:
    return sorted(repo.list(), key=str.lower)


def markdown_to_html(text: str) -> str:
    return markdown.markdown(text, output_format="html")


def render_document(repo: DocumentRepository, name: str) -> RenderedDocument:
    """Read a document and convert it for display.

    Markdown is converted on every call. Plain text is returned as the
    stored bytes, whatever their encoding.
    """
    raw = repo.read(name)
    mode = render_mode(name)
    logger.debug("rendering %s as %s", name, mode.value)
    if mode is RenderMode.MARKDOWN:
        return RenderedDocument(
            name=name,
            body=markdown_to_html(raw.decode("utf-8", errors="replace")),
            media_type=MEDIA_TYPES[mode],
        )
    return RenderedDocument(name=name, body=raw, media_type=MEDIA_TYPES[mode])


def read_source(repo: DocumentRepository, name: str) -> str:
    """Content for the edit form. Raises UnicodeDecodeError when it is not UTF-8."""
    return repo.read(name).decode("utf-8")


def create_document(repo: DocumentRepository, raw_name: Optional[str], *, username: str = "") -> tuple[str, Optional[str]]:
    """Validate and create an empty document.

    Returns ``(name, error)``: the trimmed name and the rejection reason
    (None when the document was created).
    """
    name = clean_document_name(raw_name)
    error = error_for_document_name(name, repo.list())
    if error:
        return name, error
    try:
        repo.create(name, b"")
    except DocumentExists:
        # lost a race with a concurrent creation of the same name
        return name, MSG_NOT_UNIQUE
    logger.info("document %s created by %s", name, username or "-")
    return name, None


def update_document(repo: DocumentRepository, name: str, content: Optional[str], *, username: str = "") -> None:
    repo.write(name, (content or "").encode("utf-8"))
    logger.info("document %s updated by %s", name, username or "-")


def delete_document(repo: DocumentRepository, name: str, *, username: str = "") -> None:
    repo.delete(name)
    logger.info("document %s deleted by %s", name, username or "-")
