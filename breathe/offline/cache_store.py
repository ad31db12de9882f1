# breathe/offline/cache_store.py
from __future__ import annotations

import asyncio
import json
import sqlite3
import threading
from collections.abc import Awaitable, Callable, Iterable
from datetime import datetime, timezone
from pathlib import Path
from typing import Union

import httpx
from loguru import logger

RequestLike = Union[httpx.Request, httpx.URL, str]
Fetch = Callable[[httpx.Request], Awaitable[httpx.Response]]

# Stored bodies are already decoded; these would no longer describe them
_HOP_HEADERS = {"content-encoding", "content-length", "transfer-encoding", "connection"}


def _as_request(request: RequestLike) -> httpx.Request:
    if isinstance(request, httpx.Request):
        return request
    return httpx.Request("GET", request)


def request_key(request: RequestLike) -> tuple[str, str]:
    """Cache identity of a request: (METHOD, URL without fragment)."""
    req = _as_request(request)
    return req.method.upper(), str(req.url).split("#", 1)[0]


class CacheStorage:
    """
    Named, versioned response caches persisted in SQLite.

    One row per (cache, method, url); writing an existing key replaces it
    (last write wins). Every write is its own committed transaction.
    """

    def __init__(self, db: sqlite3.Connection | str | Path):
        # Normalize to a raw sqlite3 connection
        if isinstance(db, (str, Path)):
            db = sqlite3.connect(str(db), check_same_thread=False)
        self.conn: sqlite3.Connection = db.conn if hasattr(db, "conn") else db  # type: ignore[attr-defined]
        self.conn.row_factory = sqlite3.Row
        self._lock = threading.RLock()
        self._ensure_schema()

    # ---------- schema ----------
    def _ensure_schema(self) -> None:
        with self._lock:
            cur = self.conn.cursor()
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS caches (
                    name TEXT PRIMARY KEY,
                    created_at TEXT NOT NULL
                )
                """
            )
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS cache_entries (
                    cache_name TEXT NOT NULL,
                    method TEXT NOT NULL,
                    url TEXT NOT NULL,
                    status INTEGER NOT NULL,
                    headers TEXT NOT NULL,
                    body BLOB NOT NULL,
                    stored_at TEXT NOT NULL,
                    PRIMARY KEY (cache_name, method, url)
                )
                """
            )
            self.conn.commit()

    # ---------- named caches ----------
    def open(self, name: str) -> Cache:
        """Return the cache called `name`, creating it if absent."""
        with self._lock:
            self.conn.execute(
                "INSERT OR IGNORE INTO caches(name, created_at) VALUES (?, ?)",
                (name, datetime.now(timezone.utc).isoformat()),
            )
            self.conn.commit()
        return Cache(self, name)

    def keys(self) -> list[str]:
        with self._lock:
            rows = self.conn.execute("SELECT name FROM caches ORDER BY rowid").fetchall()
        return [r["name"] for r in rows]

    def has(self, name: str) -> bool:
        with self._lock:
            row = self.conn.execute("SELECT 1 FROM caches WHERE name = ?", (name,)).fetchone()
        return row is not None

    def delete(self, name: str) -> bool:
        with self._lock:
            self.conn.execute("DELETE FROM cache_entries WHERE cache_name = ?", (name,))
            cur = self.conn.execute("DELETE FROM caches WHERE name = ?", (name,))
            self.conn.commit()
        return cur.rowcount > 0

    def match(self, request: RequestLike) -> httpx.Response | None:
        """First stored response for `request` across all caches, oldest cache first."""
        method, url = request_key(request)
        with self._lock:
            row = self.conn.execute(
                """
                SELECT e.* FROM cache_entries e
                JOIN caches c ON c.name = e.cache_name
                WHERE e.method = ? AND e.url = ?
                ORDER BY c.rowid
                LIMIT 1
                """,
                (method, url),
            ).fetchone()
        return self._to_response(row) if row else None

    def stats(self) -> list[tuple[str, int]]:
        with self._lock:
            rows = self.conn.execute(
                """
                SELECT c.name AS name, COUNT(e.url) AS entries
                FROM caches c LEFT JOIN cache_entries e ON e.cache_name = c.name
                GROUP BY c.name ORDER BY c.rowid
                """
            ).fetchall()
        return [(r["name"], int(r["entries"])) for r in rows]

    def close(self) -> None:
        self.conn.close()

    @staticmethod
    def _to_response(row: sqlite3.Row) -> httpx.Response:
        headers = [tuple(h) for h in json.loads(row["headers"])]
        return httpx.Response(
            row["status"],
            headers=headers,
            content=bytes(row["body"]),
            request=httpx.Request(row["method"], row["url"]),
        )


class Cache:
    """One named cache inside a `CacheStorage`."""

    def __init__(self, storage: CacheStorage, name: str):
        self.storage = storage
        self.name = name

    def put(self, request: RequestLike, response: httpx.Response) -> None:
        """Store a fully read response under `request`, replacing any previous entry."""
        method, url = request_key(request)
        headers = [
            [k.decode("latin-1"), v.decode("latin-1")]
            for k, v in response.headers.raw
            if k.decode("latin-1").lower() not in _HOP_HEADERS
        ]
        with self.storage._lock:
            self.storage.conn.execute(
                """
                INSERT OR REPLACE INTO cache_entries
                    (cache_name, method, url, status, headers, body, stored_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    self.name,
                    method,
                    url,
                    response.status_code,
                    json.dumps(headers),
                    sqlite3.Binary(response.content),
                    datetime.now(timezone.utc).isoformat(),
                ),
            )
            self.storage.conn.commit()

    def match(self, request: RequestLike) -> httpx.Response | None:
        method, url = request_key(request)
        with self.storage._lock:
            row = self.storage.conn.execute(
                "SELECT * FROM cache_entries WHERE cache_name = ? AND method = ? AND url = ?",
                (self.name, method, url),
            ).fetchone()
        return self.storage._to_response(row) if row else None

    def delete(self, request: RequestLike) -> bool:
        method, url = request_key(request)
        with self.storage._lock:
            cur = self.storage.conn.execute(
                "DELETE FROM cache_entries WHERE cache_name = ? AND method = ? AND url = ?",
                (self.name, method, url),
            )
            self.storage.conn.commit()
        return cur.rowcount > 0

    def keys(self) -> list[tuple[str, str]]:
        with self.storage._lock:
            rows = self.storage.conn.execute(
                "SELECT method, url FROM cache_entries WHERE cache_name = ? ORDER BY rowid",
                (self.name,),
            ).fetchall()
        return [(r["method"], r["url"]) for r in rows]

    async def add_all(self, requests: Iterable[httpx.Request], fetch: Fetch) -> int:
        """
        Fetch every request and store the responses, all or nothing:
        if any fetch fails or answers with a non-200 status, nothing is stored.
        """
        reqs = list(requests)
        tasks = [asyncio.ensure_future(fetch(r)) for r in reqs]
        try:
            responses = await asyncio.gather(*tasks)
        except BaseException:
            # cancel the fetches still in flight
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        for req, resp in zip(reqs, responses):
            if resp.status_code != 200:
                raise httpx.HTTPStatusError(
                    f"Pre-cache of {req.url} failed with status {resp.status_code}",
                    request=req,
                    response=resp,
                )
        for req, resp in zip(reqs, responses):
            self.put(req, resp)
        logger.debug(f"[Cache] {self.name}: stored {len(reqs)} entries")
        return len(reqs)
