import os
import sys
from pathlib import Path as _Path
sys.path.insert(0, str(_Path(__file__).resolve().parents[1] / "src"))

os.environ.setdefault("SECRET_KEY", "test-secret-key")

import importlib
from pathlib import Path

import pytest
import yaml
from fastapi.testclient import TestClient

from docman.auth.passwords import hash_password

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "secret"


@pytest.fixture()
def data_dir(tmp_path: Path) -> Path:
    """A documents directory seeded with a few text and markdown files."""
    d = tmp_path / "data"
    d.mkdir()
    (d / "about.txt").write_text("about.txt", encoding="utf-8")
    (d / "changes.txt").write_text("new content", encoding="utf-8")
    (d / "history.txt").write_text("1993 - Yukihiro Matsumoto dreams up Ruby.", encoding="utf-8")
    (d / "titles.md").write_text("# title\n\nSome *markdown* from the test env.\n", encoding="utf-8")
    return d


@pytest.fixture()
def users_path(tmp_path: Path) -> Path:
    p = tmp_path / "users.yml"
    raw = {"version": 1, "users": {ADMIN_USERNAME: {"password_hash": hash_password(ADMIN_PASSWORD)}}}
    p.write_text(yaml.safe_dump(raw, sort_keys=False), encoding="utf-8")
    return p


@pytest.fixture()
def app_module(data_dir, users_path, monkeypatch):
    monkeypatch.setenv("DOCMAN_DATA_DIR", str(data_dir))
    monkeypatch.setenv("DOCMAN_USERS_PATH", str(users_path))

    import docman.app as app_module
    importlib.reload(app_module)
    return app_module


@pytest.fixture()
def client(app_module):
    return TestClient(app_module.app)


@pytest.fixture()
def admin_client(client):
    r = client.post(
        "/users/signin",
        data={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD},
        follow_redirects=False,
    )
    assert r.status_code == 302
    return client
