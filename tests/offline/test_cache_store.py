# tests/offline/test_cache_store.py

from __future__ import annotations

import asyncio

import httpx
import pytest

from breathe.offline.cache_store import CacheStorage, request_key
from offline_fakes import ORIGIN, FakeNetwork


def test_open_creates_named_cache_once(storage):
    storage.open("v1")
    storage.open("v1")
    storage.open("v2")
    assert storage.keys() == ["v1", "v2"]
    assert storage.has("v1") is True
    assert storage.has("v3") is False


def test_put_then_match_and_last_write_wins(storage):
    cache = storage.open("v1")
    cache.put(f"{ORIGIN}/app.js", httpx.Response(200, content=b"one"))
    cache.put(f"{ORIGIN}/app.js", httpx.Response(200, content=b"two", headers={"etag": "x2"}))

    hit = cache.match(f"{ORIGIN}/app.js")
    assert hit.content == b"two"
    assert hit.headers["etag"] == "x2"
    assert str(hit.request.url) == f"{ORIGIN}/app.js"
    assert cache.keys() == [("GET", f"{ORIGIN}/app.js")]


def test_entries_are_keyed_by_method_and_url(storage):
    cache = storage.open("v1")
    cache.put(httpx.Request("HEAD", f"{ORIGIN}/a"), httpx.Response(200, content=b""))
    assert cache.match(f"{ORIGIN}/a") is None
    assert cache.match(httpx.Request("HEAD", f"{ORIGIN}/a")) is not None


def test_fragment_is_not_part_of_the_key():
    assert request_key(f"{ORIGIN}/#top") == request_key(f"{ORIGIN}/")


def test_encoding_headers_are_not_replayed(storage):
    cache = storage.open("v1")
    response = httpx.Response(200, content=b"plain body", headers={"content-encoding": "identity"})
    cache.put(f"{ORIGIN}/x", response)

    hit = cache.match(f"{ORIGIN}/x")
    assert "content-encoding" not in hit.headers
    assert hit.headers["content-length"] == str(len(b"plain body"))


def test_delete_entry_and_cache(storage):
    cache = storage.open("v1")
    cache.put(f"{ORIGIN}/a", httpx.Response(200, content=b"a"))
    assert cache.delete(f"{ORIGIN}/a") is True
    assert cache.delete(f"{ORIGIN}/a") is False

    cache.put(f"{ORIGIN}/b", httpx.Response(200, content=b"b"))
    assert storage.delete("v1") is True
    assert storage.delete("v1") is False
    assert storage.match(f"{ORIGIN}/b") is None


def test_storage_match_searches_all_caches_oldest_first(storage):
    storage.open("old").put(f"{ORIGIN}/a", httpx.Response(200, content=b"old"))
    storage.open("new").put(f"{ORIGIN}/a", httpx.Response(200, content=b"new"))
    storage.open("new").put(f"{ORIGIN}/b", httpx.Response(200, content=b"only new"))

    assert storage.match(f"{ORIGIN}/a").content == b"old"
    assert storage.match(f"{ORIGIN}/b").content == b"only new"
    assert storage.stats() == [("old", 1), ("new", 2)]


def test_storage_persists_across_connections(tmp_path):
    path = tmp_path / "cache.db"
    first = CacheStorage(path)
    first.open("v1").put(f"{ORIGIN}/", httpx.Response(200, content=b"root"))
    first.close()

    second = CacheStorage(str(path))
    try:
        assert second.match(f"{ORIGIN}/").content == b"root"
    finally:
        second.close()


@pytest.mark.asyncio
async def test_add_all_is_all_or_nothing(storage):
    network = FakeNetwork({f"{ORIGIN}/a": (200, b"a"), f"{ORIGIN}/b": (404, b"")})
    cache = storage.open("v1")

    with pytest.raises(httpx.HTTPStatusError):
        await cache.add_all(
            [httpx.Request("GET", f"{ORIGIN}/a"), httpx.Request("GET", f"{ORIGIN}/b")],
            network.fetch,
        )
    assert cache.keys() == []

    stored = await cache.add_all([httpx.Request("GET", f"{ORIGIN}/a")], network.fetch)
    assert stored == 1
    assert cache.match(f"{ORIGIN}/a").content == b"a"


@pytest.mark.asyncio
async def test_add_all_cancels_outstanding_fetches_on_failure(storage):
    cancelled = []

    async def fetch(request):
        if request.url.path == "/bad":
            raise httpx.ConnectError("refused", request=request)
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            cancelled.append(request.url.path)
            raise

    cache = storage.open("v1")
    with pytest.raises(httpx.ConnectError):
        await cache.add_all(
            [httpx.Request("GET", f"{ORIGIN}/slow"), httpx.Request("GET", f"{ORIGIN}/bad")],
            fetch,
        )

    assert cancelled == ["/slow"]
    assert cache.keys() == []
