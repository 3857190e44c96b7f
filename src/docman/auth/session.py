# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from itsdangerous import BadSignature, URLSafeTimedSerializer

COOKIE_NAME = os.getenv("DOCMAN_COOKIE_NAME", "docman_session")
DEFAULT_MAX_AGE_SECONDS = int(os.getenv("DOCMAN_SESSION_MAX_AGE", "28800"))  # 8 hours


def _serializer() -> URLSafeTimedSerializer:
    secret = os.getenv("SECRET_KEY") or os.getenv("DOCMAN_SECRET_KEY")
    if not secret:
        raise RuntimeError("SECRET_KEY (or DOCMAN_SECRET_KEY) is not set")
    salt = os.getenv("DOCMAN_SESSION_SALT", "docman.session.v1")
    return URLSafeTimedSerializer(secret_key=secret, salt=salt)


@dataclass
class SessionData:
    """Per-browser state: who is signed in plus one-shot flash messages."""

    username: Optional[str] = None
    message: Optional[str] = None
    error: Optional[str] = None

    @property
    def signed_in(self) -> bool:
        return bool(self.username)

    def is_empty(self) -> bool:
        return not (self.username or self.message or self.error)

    def pop_flash(self) -> tuple[Optional[str], Optional[str]]:
        message, error = self.message, self.error
        self.message = None
        self.error = None
        return message, error


def sign_session(session: SessionData) -> str:
    s = _serializer()
    payload = {}
    if session.username:
        payload["u"] = session.username
    if session.message:
        payload["m"] = session.message
    if session.error:
        payload["e"] = session.error
    return s.dumps(payload)


def _clean(v) -> Optional[str]:
    v = str(v or "").strip()
    return v or None


def verify_session(token: str, *, max_age: int = DEFAULT_MAX_AGE_SECONDS) -> SessionData:
    """Decode a session cookie. Missing, tampered or expired cookies give an empty session."""
    if not token:
        return SessionData()
    s = _serializer()
    try:
        data = s.loads(token, max_age=max_age)
    except BadSignature:
        return SessionData()
    if not isinstance(data, dict):
        return SessionData()
    return SessionData(
        username=_clean(data.get("u")),
        message=_clean(data.get("m")),
        error=_clean(data.get("e")),
    )
