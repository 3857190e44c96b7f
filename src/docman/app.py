# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
import os
from pathlib import Path

from fastapi import Depends, FastAPI, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from docman.auth.session import COOKIE_NAME, DEFAULT_MAX_AGE_SECONDS, SessionData, sign_session
from docman.auth.users import DEFAULT_USERS_PATH, CredentialStore, YamlCredentialStore, sign_up
from docman.core.errors import DocumentNotFound, SignInRequired
from docman.core.naming import MAX_LENGTH
from docman.infra.document_repo import DocumentRepository, FileDocumentRepository
from docman.permissions import cookie_settings, current_session, load_session_from_request, require_user
from docman.services.document_service import (
    create_document,
    delete_document,
    list_documents,
    read_source,
    render_document,
    update_document,
)

logger = logging.getLogger(__name__)

app = FastAPI()


@app.middleware("http")
async def _session_middleware(request: Request, call_next):
    request.state.session = load_session_from_request(request)
    response = await call_next(request)
    session: SessionData = request.state.session
    if session.is_empty():
        if COOKIE_NAME in request.cookies:
            response.delete_cookie(COOKIE_NAME)
    else:
        response.set_cookie(
            COOKIE_NAME,
            sign_session(session),
            max_age=DEFAULT_MAX_AGE_SECONDS,
            **cookie_settings(),
        )
    return response


@app.exception_handler(SignInRequired)
async def _sign_in_required(request: Request, exc: SignInRequired):
    url = exc.args[0] if exc.args else "/"
    return RedirectResponse(url=url, status_code=302)


BASE_DIR = Path(__file__).resolve().parent

app.mount("/static", StaticFiles(directory=str(BASE_DIR / "static")), name="static")
templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))

DATA_DIR = Path(os.getenv("DOCMAN_DATA_DIR", "data")).resolve()
DATA_DIR.mkdir(parents=True, exist_ok=True)

USERS_PATH = Path(os.getenv("DOCMAN_USERS_PATH", str(DEFAULT_USERS_PATH))).resolve()

documents = FileDocumentRepository(DATA_DIR)
credentials = YamlCredentialStore(USERS_PATH)


def get_documents() -> DocumentRepository:
    return documents


def get_credentials() -> CredentialStore:
    return credentials


def _render(request: Request, template_name: str, ctx: dict | None = None, *, status_code: int = 200):
    """TemplateResponse wrapper injecting the session user and one-shot flash messages."""
    session = current_session(request)
    message, error = session.pop_flash()
    base_ctx = {
        "current_user": session.username,
        "flash_message": message,
        "flash_error": error,
    }
    merged = {**base_ctx, **(ctx or {})}
    return templates.TemplateResponse(request, template_name, merged, status_code=status_code)


def _redirect(url: str = "/") -> RedirectResponse:
    return RedirectResponse(url=url, status_code=302)


def _flash(request: Request, message: str) -> None:
    current_session(request).message = message


def _display_name(file_name: str) -> str:
    # flashes travel in the session cookie, keep them well under its size limit
    if len(file_name) <= MAX_LENGTH:
        return file_name
    return file_name[:MAX_LENGTH] + "..."


def _not_found(request: Request, file_name: str) -> RedirectResponse:
    _flash(request, f"The {_display_name(file_name)} file does not exist.")
    return _redirect("/")


# ------------------ Routes ------------------


@app.get("/favicon.ico", include_in_schema=False)
def favicon():
    return Response(status_code=204)


@app.get("/", response_class=HTMLResponse)
def index(request: Request, repo: DocumentRepository = Depends(get_documents)):
    return _render(request, "index.html", {"files": list_documents(repo)})


@app.get("/users/signin", response_class=HTMLResponse)
def signin_get(request: Request):
    if current_session(request).signed_in:
        return _redirect("/")
    return _render(request, "signin.html", {"username": ""})


@app.post("/users/signin")
def signin_post(
    request: Request,
    username: str = Form(""),
    password: str = Form(""),
    store: CredentialStore = Depends(get_credentials),
):
    session = current_session(request)
    u = username.strip()
    if not store.verify(u, password):
        logger.warning("failed sign-in for %r", u)
        session.error = "Invalid credentials."
        return _render(request, "signin.html", {"username": u}, status_code=422)
    logger.info("%s signed in", u)
    session.username = u
    session.message = "Welcome!"
    return _redirect("/")


@app.get("/users/signup", response_class=HTMLResponse)
def signup_get(request: Request):
    if current_session(request).signed_in:
        return _redirect("/")
    return _render(request, "signup.html", {"username": ""})


@app.post("/users/signup")
def signup_post(
    request: Request,
    username: str = Form(""),
    password: str = Form(""),
    password_confirmation: str = Form(""),
    store: CredentialStore = Depends(get_credentials),
):
    session = current_session(request)
    u = username.strip()
    error = sign_up(store, u, password, password_confirmation)
    if error:
        session.error = error
        return _render(request, "signup.html", {"username": u}, status_code=422)
    logger.info("account %s created", u)
    session.username = u
    session.message = "Your account has been created."
    return _redirect("/")


@app.post("/users/signout")
def signout_post(request: Request):
    session = current_session(request)
    session.username = None
    session.message = "You have been signed out."
    return _redirect("/")


@app.get("/new_document", response_class=HTMLResponse)
def new_document_form(request: Request, user: str = Depends(require_user)):
    return _render(request, "new_document.html", {"new_document_name": ""})


@app.post("/add_new_document")
def add_new_document(
    request: Request,
    user: str = Depends(require_user),
    new_document_name: str = Form(""),
    repo: DocumentRepository = Depends(get_documents),
):
    name, error = create_document(repo, new_document_name, username=user)
    if error:
        current_session(request).error = error
        return _render(request, "new_document.html", {"new_document_name": name}, status_code=422)
    _flash(request, f"The new document {name} has been created.")
    return _redirect("/")


@app.get("/{file_name}")
def view_document(request: Request, file_name: str, repo: DocumentRepository = Depends(get_documents)):
    try:
        doc = render_document(repo, file_name)
    except DocumentNotFound:
        return _not_found(request, file_name)
    return Response(content=doc.body, media_type=doc.media_type)


@app.get("/{file_name}/edit", response_class=HTMLResponse)
def edit_document_form(
    request: Request,
    file_name: str,
    user: str = Depends(require_user),
    repo: DocumentRepository = Depends(get_documents),
):
    try:
        content = read_source(repo, file_name)
    except DocumentNotFound:
        return _not_found(request, file_name)
    except UnicodeDecodeError:
        current_session(request).error = f"The {_display_name(file_name)} file is not UTF-8 text and cannot be edited here."
        return _redirect("/")
    return _render(request, "edit.html", {"file_name": file_name, "file_content": content})


@app.post("/{file_name}")
def update_document_content(
    request: Request,
    file_name: str,
    user: str = Depends(require_user),
    file_content: str = Form(""),
    repo: DocumentRepository = Depends(get_documents),
):
    try:
        update_document(repo, file_name, file_content, username=user)
    except DocumentNotFound:
        return _not_found(request, file_name)
    _flash(request, f"The {_display_name(file_name)} file has been updated.")
    return _redirect("/")


@app.post("/{file_name}/delete")
def delete_document_route(
    request: Request,
    file_name: str,
    user: str = Depends(require_user),
    repo: DocumentRepository = Depends(get_documents),
):
    try:
        delete_document(repo, file_name, username=user)
    except DocumentNotFound:
        return _not_found(request, file_name)
    if request.headers.get("x-requested-with") == "XMLHttpRequest":
        return Response(status_code=204)
    _flash(request, f"The {_display_name(file_name)} file has been deleted.")
    return _redirect("/")
