# tests/offline/offline_fakes.py
from __future__ import annotations

import httpx

ORIGIN = "http://app.test"


class FakeNetwork:
    """Stands in for the network: fixed routes, optional outage, request log."""

    def __init__(self, routes: dict[str, tuple[int, bytes]] | None = None):
        self.routes = dict(routes or {})
        self.offline = False
        self.requests: list[httpx.Request] = []

    async def fetch(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.offline:
            raise httpx.ConnectError("network unreachable", request=request)
        status, body = self.routes.get(str(request.url), (404, b"not found"))
        return httpx.Response(status, content=body, headers={"content-type": "text/plain"}, request=request)

    def urls(self) -> list[str]:
        return [str(r.url) for r in self.requests]


class SpyHost:
    def __init__(self):
        self.skipped_waiting = False
        self.claimed = False

    def skip_waiting(self):
        self.skipped_waiting = True

    def claim_clients(self):
        self.claimed = True


def navigate(path: str, method: str = "GET") -> httpx.Request:
    return httpx.Request(method, f"{ORIGIN}{path}", headers={"Sec-Fetch-Mode": "navigate"})


def subresource(path: str) -> httpx.Request:
    return httpx.Request("GET", f"{ORIGIN}{path}", headers={"Sec-Fetch-Mode": "no-cors", "Accept": "*/*"})
