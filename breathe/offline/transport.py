# breathe/offline/transport.py
from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

import httpx
from loguru import logger

from breathe.offline.cache_store import CacheStorage
from breathe.offline.worker import OfflineCacheWorker
from config.config import Settings, settings as default_settings

Handler = Callable[..., Awaitable[object]]


class OfflineTransport(httpx.AsyncBaseTransport):
    """
    Request interception host for an `OfflineCacheWorker`.

    Holds the worker's three callbacks (install, activate, fetch). Install and
    activate run once, in that order, before the first request is let
    through; every request afterwards is answered by the fetch callback.
    Callers never invoke the callbacks themselves, they just use an
    `httpx.AsyncClient` mounted on this transport.
    """

    def __init__(self, inner: httpx.AsyncBaseTransport | None = None):
        self.inner = inner or httpx.AsyncHTTPTransport()
        self.handlers: dict[str, Handler] = {}
        self.waiting = True
        self.controlling = False
        self._ready = False
        self._ready_lock = asyncio.Lock()

    def register(self, worker: OfflineCacheWorker) -> None:
        self.handlers = {
            "install": worker.on_install,
            "activate": worker.on_activate,
            "fetch": worker.on_fetch,
        }
        self._ready = False

    # ---------- host capabilities used by the worker ----------
    def skip_waiting(self) -> None:
        self.waiting = False

    def claim_clients(self) -> None:
        self.controlling = True
        logger.info("[OfflineTransport] worker now controls this client")

    async def network_fetch(self, request: httpx.Request) -> httpx.Response:
        response = await self.inner.handle_async_request(request)
        try:
            await response.aread()
        finally:
            await response.aclose()
        return response

    # ---------- lifecycle ----------
    async def ready(self) -> None:
        if self._ready:
            return
        if not self.handlers:
            raise RuntimeError("No offline worker registered")
        async with self._ready_lock:
            if self._ready:
                return
            await self.handlers["install"]()
            await self.handlers["activate"]()
            self._ready = True

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        await self.ready()
        return await self.handlers["fetch"](request)  # type: ignore[return-value]

    async def aclose(self) -> None:
        await self.inner.aclose()


def build_offline_transport(
    storage: CacheStorage,
    *,
    inner: httpx.AsyncBaseTransport | None = None,
    cfg: Settings | None = None,
) -> tuple[OfflineTransport, OfflineCacheWorker]:
    cfg = cfg or default_settings
    transport = OfflineTransport(inner)
    worker = OfflineCacheWorker(
        storage,
        transport.network_fetch,
        version=cfg.cache_version,
        origin=cfg.app_origin,
        host=transport,
    )
    transport.register(worker)
    return transport, worker


def offline_client(
    storage: CacheStorage,
    *,
    inner: httpx.AsyncBaseTransport | None = None,
    cfg: Settings | None = None,
    **client_kwargs,
) -> httpx.AsyncClient:
    """An AsyncClient whose requests all go through the offline cache worker."""
    cfg = cfg or default_settings
    transport, _ = build_offline_transport(storage, inner=inner, cfg=cfg)
    client_kwargs.setdefault("base_url", cfg.app_origin)
    return httpx.AsyncClient(transport=transport, **client_kwargs)
