# breathe/offline/worker.py
from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

import httpx
from loguru import logger

from breathe.offline.cache_store import CacheStorage, Fetch
from breathe.offline.manifest import CACHE_NAME, PRECACHE_URLS, ROOT_DOCUMENT

CACHEABLE_SCHEMES = ("http", "https")

# Pre-cache requests skip intermediate HTTP caches and revalidate with the origin
RELOAD_HEADERS = {"Cache-Control": "no-cache", "Pragma": "no-cache"}


class WorkerHost(Protocol):
    def skip_waiting(self) -> None: ...

    def claim_clients(self) -> None: ...


def is_navigation(request: httpx.Request) -> bool:
    """Full page loads, as opposed to scripts, styles, images and API calls."""
    mode = request.extensions.get("mode") or request.headers.get("sec-fetch-mode")
    if mode:
        return mode == "navigate"
    if request.method != "GET":
        return False
    accept = request.headers.get("accept", "")
    return accept.split(",")[0].strip().startswith("text/html")


def is_cacheable(request: httpx.Request, response: httpx.Response) -> bool:
    return response.status_code == 200 and request.url.scheme in CACHEABLE_SCHEMES


class OfflineCacheWorker:
    """
    Offline support for the application shell.

    - install: pre-cache the manifest under the current version name
    - activate: drop caches from previous versions, take over open clients
    - fetch: network-first for navigations, cache-first for everything else

    `fetch` is the network; it must return a fully read response and raise
    `httpx.RequestError` when the request cannot be completed.
    """

    def __init__(
        self,
        storage: CacheStorage,
        fetch: Fetch,
        *,
        version: str = CACHE_NAME,
        manifest: Sequence[str] = PRECACHE_URLS,
        origin: str = "http://localhost",
        host: WorkerHost | None = None,
    ):
        self.storage = storage
        self.fetch = fetch
        self.version = version
        self.manifest = tuple(manifest)
        self.origin = origin.rstrip("/")
        self.host = host
        self.state = "parsed"

    def url_for(self, path: str) -> str:
        return f"{self.origin}{path}"

    # ---------- lifecycle ----------
    async def on_install(self) -> None:
        self.state = "installing"
        if self.host is not None:
            self.host.skip_waiting()  # activate immediately
        try:
            cache = self.storage.open(self.version)
            logger.info(f"[CacheWorker] Opened cache {self.version}; caching initial assets")
            requests = [httpx.Request("GET", self.url_for(p), headers=RELOAD_HEADERS) for p in self.manifest]
            await cache.add_all(requests, self.fetch)
        except Exception as e:
            logger.exception(f"[CacheWorker] Failed to open cache or add initial URLs: {e}")
        self.state = "installed"

    async def on_activate(self) -> None:
        self.state = "activating"
        try:
            for name in self.storage.keys():
                if name != self.version:
                    logger.info(f"[CacheWorker] Deleting old cache: {name}")
                    self.storage.delete(name)
        except Exception as e:
            logger.exception(f"[CacheWorker] Failed to clean up old caches: {e}")
        if self.host is not None:
            self.host.claim_clients()
        self.state = "activated"

    # ---------- fetch ----------
    async def on_fetch(self, request: httpx.Request) -> httpx.Response:
        if request.method != "GET":
            return await self.fetch(request)
        if is_navigation(request):
            return await self._network_first(request)
        return await self._cache_first(request)

    async def _network_first(self, request: httpx.Request) -> httpx.Response:
        try:
            response = await self.fetch(request)
        except httpx.RequestError:
            cached = self.storage.match(request) or self.storage.match(self.url_for(ROOT_DOCUMENT))
            if cached is None:
                raise
            logger.info(f"[CacheWorker] offline, serving cached page for {request.url}")
            return cached
        self._store(request, response)
        return response

    async def _cache_first(self, request: httpx.Request) -> httpx.Response:
        cached = self.storage.match(request)
        if cached is not None:
            return cached
        try:
            response = await self.fetch(request)
        except httpx.RequestError as e:
            logger.error(f"[CacheWorker] fetch error for {request.url}: {e}")
            raise
        self._store(request, response)
        return response

    def _store(self, request: httpx.Request, response: httpx.Response) -> None:
        if not is_cacheable(request, response):
            return
        try:
            self.storage.open(self.version).put(request, response)
        except Exception as e:
            logger.warning(f"[CacheWorker] could not cache {request.url}: {e}")
