# breathe/offline/manifest.py
"""Application shell pre-cached on install. Bump CACHE_NAME whenever this list changes."""

CACHE_NAME = "breatheeasy-cache-v1"

PRECACHE_URLS: tuple[str, ...] = (
    "/",
    "/manifest.json",
    "/icons/icon-192x192.png",
    "/icons/icon-512x512.png",
    "/icons/icon-maskable-192x192.png",
    "/icons/icon-maskable-512x512.png",
    "/icons/apple-touch-icon.png",
    "/icons/apple-touch-icon-152x152.png",
    "/icons/apple-touch-icon-180x180.png",
    "/icons/apple-touch-icon-167x167.png",
    "/icons/mstile-70x70.png",
    "/icons/mstile-150x150.png",
    "/icons/mstile-310x150.png",
    "/icons/mstile-310x310.png",
    "/favicon.ico",
    # Hashed JS/CSS bundles are picked up on first load by the fetch handler
)

ROOT_DOCUMENT = "/"
