#!/usr/bin/env python3
from __future__ import annotations

import os
from getpass import getpass
from pathlib import Path

from docman.auth.users import DEFAULT_USERS_PATH, YamlCredentialStore, sign_up

USERS_PATH = Path(os.getenv("DOCMAN_USERS_PATH", str(DEFAULT_USERS_PATH))).resolve()


def main() -> None:
    store = YamlCredentialStore(USERS_PATH)

    username = input("Username: ").strip()
    pw1 = getpass("Password: ")
    pw2 = getpass("Repeat password: ")

    error = sign_up(store, username, pw1, pw2)
    if error:
        raise SystemExit(error)
    print(f"OK -> {USERS_PATH}")


if __name__ == "__main__":
    main()
