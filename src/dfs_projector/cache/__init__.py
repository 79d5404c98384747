from dfs_projector.cache.protocol import CacheStore
from dfs_projector.cache.sqlite_store import SqliteCacheStore

__all__ = ["CacheStore", "SqliteCacheStore"]
