from breathe.offline.cache_store import Cache, CacheStorage, request_key
from breathe.offline.manifest import CACHE_NAME, PRECACHE_URLS
from breathe.offline.transport import OfflineTransport, build_offline_transport, offline_client
from breathe.offline.worker import OfflineCacheWorker, is_cacheable, is_navigation

__all__ = [
    "CACHE_NAME",
    "PRECACHE_URLS",
    "Cache",
    "CacheStorage",
    "OfflineCacheWorker",
    "OfflineTransport",
    "build_offline_transport",
    "is_cacheable",
    "is_navigation",
    "offline_client",
    "request_key",
]
