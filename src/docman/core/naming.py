# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Rules for naming new documents.

A valid name is made of ASCII letters, one dot and a 2-3 letter extension
(``history.txt``, ``notes.md``). Digits, path separators, spaces and
non-ASCII letters are all rejected by the same rule, which keeps new names
safe to use as file names in the data directory.
"""

from __future__ import annotations

import re
from typing import Iterable, Optional

NAME_PATTERN = re.compile(r"^[a-zA-Z]+\.[a-zA-Z]{2,3}$", re.ASCII)

MIN_LENGTH = 1
MAX_LENGTH = 100

MSG_NOT_UNIQUE = "The document name must be unique."
MSG_NO_EXTENSION = "The document name must contain an extension."
MSG_BAD_LENGTH = f"The document name must be between {MIN_LENGTH} and {MAX_LENGTH} characters."


def clean_document_name(raw: Optional[str]) -> str:
    return (raw or "").strip()


def error_for_document_name(name: str, existing: Iterable[str]) -> Optional[str]:
    """Return the reason ``name`` is rejected, or None when it is acceptable.

    Rules are checked in order and the first failure wins:
    uniqueness, then the letters/extension pattern, then length.
    Callers strip surrounding whitespace first (see ``clean_document_name``).
    """
    if name in set(existing):
        return MSG_NOT_UNIQUE
    # fullmatch: "$" alone would also accept a trailing newline
    if not NAME_PATTERN.fullmatch(name):
        return MSG_NO_EXTENSION
    if not (MIN_LENGTH <= len(name) <= MAX_LENGTH):
        return MSG_BAD_LENGTH
    return None
