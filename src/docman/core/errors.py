# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations


class DocumentNotFound(LookupError):
    """No document with that name exists in the store."""

    def __init__(self, name: str):
        super().__init__(name)
        self.name = name


class DocumentExists(FileExistsError):
    """Raised by the create-if-absent primitive when the name is taken."""

    def __init__(self, name: str):
        super().__init__(name)
        self.name = name


class DuplicateUser(ValueError):
    def __init__(self, username: str):
        super().__init__(username)
        self.username = username


class CredentialStoreError(RuntimeError):
    """The users file exists but cannot be interpreted."""


class SignInRequired(Exception):
    """Raised by the session gate; converted into a flash + redirect by the app."""
