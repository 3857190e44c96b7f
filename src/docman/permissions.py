# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from docman.auth.session import COOKIE_NAME, SessionData, verify_session
from docman.core.errors import SignInRequired

logger = logging.getLogger(__name__)

SIGN_IN_REQUIRED_MESSAGE = "You must be signed in to do that."
SIGN_IN_REDIRECT = "/"


@dataclass(frozen=True)
class GateDecision:
    authorized: bool
    message: Optional[str] = None
    redirect_to: Optional[str] = None


def require_signed_in(session: SessionData) -> GateDecision:
    """Decide whether the session may perform a mutating operation.

    A refusal carries the side effect the caller must apply before doing
    anything else: flash ``message`` and redirect to ``redirect_to``.
    """
    if session.signed_in:
        return GateDecision(authorized=True)
    return GateDecision(
        authorized=False,
        message=SIGN_IN_REQUIRED_MESSAGE,
        redirect_to=SIGN_IN_REDIRECT,
    )


def load_session_from_request(request: Request) -> SessionData:
    return verify_session(request.cookies.get(COOKIE_NAME, ""))


def current_session(request: Request) -> SessionData:
    s = getattr(request.state, "session", None)
    if s is not None:
        return s
    s = load_session_from_request(request)
    request.state.session = s
    return s


def require_user(request: Request) -> str:
    """FastAPI dependency guarding mutating routes; returns the username."""
    session = current_session(request)
    decision = require_signed_in(session)
    if not decision.authorized:
        logger.info("refused %s %s: not signed in", request.method, request.url.path)
        session.message = decision.message
        raise SignInRequired(decision.redirect_to)
    return session.username


def cookie_settings() -> dict:
    secure = os.getenv("DOCMAN_COOKIE_SECURE", "false").lower() in {"1", "true", "yes", "y"}
    return {"httponly": True, "samesite": "lax", "secure": secure}
