# tests/offline/conftest.py
from __future__ import annotations

import sqlite3

import pytest

from breathe.offline.cache_store import CacheStorage
from offline_fakes import ORIGIN, FakeNetwork


@pytest.fixture()
def storage():
    # Use an in-memory DB for speed + isolation
    conn = sqlite3.connect(":memory:", check_same_thread=False)
    store = CacheStorage(conn)
    yield store
    conn.close()


@pytest.fixture()
def network() -> FakeNetwork:
    return FakeNetwork(
        {
            f"{ORIGIN}/": (200, b"<html>root</html>"),
            f"{ORIGIN}/breathe": (200, b"<html>breathe</html>"),
            f"{ORIGIN}/manifest.json": (200, b"{}"),
            f"{ORIGIN}/favicon.ico": (200, b"ico"),
            f"{ORIGIN}/app.js": (200, b"console.log(1)"),
            f"{ORIGIN}/broken.js": (500, b"oops"),
        }
    )
