from __future__ import annotations

from typing import Protocol


class CacheStore(Protocol):
    """String key/value store partitioned by namespace, with per-entry expiry."""

    def get(self, namespace: str, key: str) -> str | None: ...

    def put(self, namespace: str, key: str, value: str, ttl_seconds: int) -> None: ...

    def invalidate(self, namespace: str, key: str | None = None) -> None: ...

    def clear(self) -> int: ...
