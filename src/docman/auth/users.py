# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, Optional, Protocol

import yaml

from docman.auth.passwords import hash_password, verify_password
from docman.core.errors import CredentialStoreError, DuplicateUser

logger = logging.getLogger(__name__)

# Anchor the default users.yml path to the project root, not the working directory.
BASE_DIR = Path(__file__).resolve().parents[3]
DEFAULT_USERS_PATH = Path(
    os.getenv("DOCMAN_USERS_PATH", str(BASE_DIR / "users.yml"))
).resolve()

MSG_USERNAME_EMPTY = "Username can't be empty."
MSG_PASSWORD_EMPTY = "Password can't be empty."
MSG_PASSWORD_MISMATCH = "Passwords do not match."
MSG_USERNAME_TAKEN = "That username is already taken."


class CredentialStore(Protocol):
    def exists(self, username: str) -> bool: ...

    def verify(self, username: str, password: str) -> bool: ...

    def create(self, username: str, password: str) -> None: ...


class YamlCredentialStore:
    """username -> argon2 hash mapping kept in a YAML file.

    File layout::

        version: 1
        users:
          alice:
            password_hash: $argon2id$...

    The file is read on every call so accounts added by another process or
    request are visible immediately. ``create`` rewrites the whole file.
    """

    def __init__(self, path: Path = DEFAULT_USERS_PATH):
        self.path = Path(path)

    def _load_raw(self) -> dict:
        if not self.path.exists():
            return {"version": 1, "users": {}}
        raw = yaml.safe_load(self.path.read_text(encoding="utf-8")) or {}
        if not isinstance(raw, dict):
            raise CredentialStoreError(f"{self.path}: expected a mapping at top level")
        users = raw.get("users")
        if users is None:
            raw["users"] = {}
        elif not isinstance(users, dict):
            raise CredentialStoreError(f"{self.path}: 'users' must be a mapping")
        return raw

    def _hashes(self) -> Dict[str, str]:
        out: Dict[str, str] = {}
        for uname, udata in self._load_raw()["users"].items():
            username = str(uname).strip()
            if not username:
                continue
            # accept both "name: {password_hash: ...}" and the short "name: hash"
            if isinstance(udata, dict):
                ph = str(udata.get("password_hash") or "").strip()
            else:
                ph = str(udata or "").strip()
            out[username] = ph
        return out

    def _password_hash(self, username: str) -> Optional[str]:
        return self._hashes().get(username)

    def exists(self, username: str) -> bool:
        return username in self._hashes()

    def verify(self, username: str, password: str) -> bool:
        ph = self._password_hash(username)
        if ph is None:
            return False
        return verify_password(ph, password)

    def create(self, username: str, password: str) -> None:
        raw = self._load_raw()
        if username in {str(k).strip() for k in raw["users"]}:
            raise DuplicateUser(username)
        raw["users"][username] = {"password_hash": hash_password(password)}
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            yaml.safe_dump(raw, sort_keys=False, allow_unicode=True), encoding="utf-8"
        )
        logger.info("account %s stored in %s", username, self.path)


class InMemoryCredentialStore:
    def __init__(self, hashes: Dict[str, str] | None = None):
        self._hashes: Dict[str, str] = dict(hashes or {})

    def exists(self, username: str) -> bool:
        return username in self._hashes

    def verify(self, username: str, password: str) -> bool:
        ph = self._hashes.get(username)
        if ph is None:
            return False
        return verify_password(ph, password)

    def create(self, username: str, password: str) -> None:
        if username in self._hashes:
            raise DuplicateUser(username)
        self._hashes[username] = hash_password(password)


def error_for_signup(username: str, password: str, confirmation: str) -> Optional[str]:
    """Form-level checks run before the store is touched; first failure wins."""
    if not username:
        return MSG_USERNAME_EMPTY
    if not password:
        return MSG_PASSWORD_EMPTY
    if password != confirmation:
        return MSG_PASSWORD_MISMATCH
    return None


def sign_up(store: CredentialStore, username: str, password: str, confirmation: str) -> Optional[str]:
    """Create an account; return a rejection reason or None on success."""
    u = (username or "").strip()
    error = error_for_signup(u, password or "", confirmation or "")
    if error:
        return error
    try:
        store.create(u, password)
    except DuplicateUser:
        return MSG_USERNAME_TAKEN
    return None
