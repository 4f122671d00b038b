import sqlite3
import tempfile

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.engine import URL

from main import create_app
from utils import database


@pytest.fixture()
def sqlite_db_path(tmp_path):
    db_path = tmp_path / "shop.db"
    conn = sqlite3.connect(db_path)
    try:
        conn.execute("CREATE TABLE items (id INTEGER PRIMARY KEY, price REAL)")
        conn.executemany(
            "INSERT INTO items (id, price) VALUES (?, ?)",
            [(1, 9.5), (2, 10)],
        )
        conn.execute("CREATE TABLE notes (id INTEGER, title TEXT, raw BLOB, comment TEXT)")
        conn.executemany(
            "INSERT INTO notes (id, title, raw, comment) VALUES (?, ?, ?, ?)",
            [
                (1, "Ada", "héllo".encode("utf-8"), None),
                (2, "=SUM(A1:A2)", b"plain", "ok"),
            ],
        )
        conn.execute("CREATE TABLE broken (id INTEGER, raw BLOB)")
        conn.execute("INSERT INTO broken (id, raw) VALUES (1, ?)", (b"\xff\xfe",))
        conn.commit()
    finally:
        conn.close()
    return db_path


@pytest.fixture()
def export_dir(tmp_path, monkeypatch):
    """Points the process temporary directory at an empty, watched folder."""
    path = tmp_path / "exports"
    path.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(path))
    return path


@pytest.fixture()
def sqlite_backend(sqlite_db_path, monkeypatch):
    """Routes every export to the SQLite fixture database instead of MySQL."""
    monkeypatch.setattr(
        database,
        "build_url",
        lambda payload: URL.create("sqlite", database=str(sqlite_db_path)),
    )
    return sqlite_db_path


@pytest.fixture()
def client():
    return TestClient(create_app())


@pytest.fixture()
def export_body():
    def _body(query, **overrides):
        body = {
            "db_user": "u",
            "db_password": "p",
            "db_host": "localhost",
            "db_name": "shop",
            "query": query,
        }
        body.update(overrides)
        return body
    return _body
