"""
Cache Backends - Memory

In-process TTL cache for development, testing and single-process servers.
Data is lost when the application restarts.
"""

import time
from typing import Any, Dict, Optional

from .base import CacheBackend


class MemoryCache(CacheBackend):
    """
    Dictionary-backed cache with optional per-entry TTL.

    The `ttl` param sets the lifetime used when `set()` is called without one.
    """

    def __init__(self, params: Optional[Dict[str, Any]] = None, name: str = "memory"):
        super().__init__(params, name)
        self._data: Dict[str, Any] = {}
        self._expiry: Dict[str, float] = {}
        self.default_ttl: Optional[int] = self.params.get("ttl")

    def _expired(self, key: str) -> bool:
        if key in self._expiry and time.time() > self._expiry[key]:
            self._data.pop(key, None)
            self._expiry.pop(key, None)
            return True
        return False

    def get(self, key: str) -> Any:
        if self._expired(key):
            return None
        return self._data.get(key)

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        ttl = ttl if ttl is not None else self.default_ttl
        self._data[key] = value
        if ttl:
            self._expiry[key] = time.time() + ttl
        elif key in self._expiry:
            del self._expiry[key]

    def has(self, key: str) -> bool:
        if self._expired(key):
            return False
        return key in self._data

    def delete(self, key: str) -> bool:
        existed = key in self._data
        self._data.pop(key, None)
        self._expiry.pop(key, None)
        return existed

    def clear(self) -> None:
        self._data.clear()
        self._expiry.clear()

    def cleanup_expired(self) -> int:
        """Drop expired entries and return how many were removed."""
        current_time = time.time()
        expired_keys = [key for key, expiry_time in self._expiry.items() if current_time > expiry_time]
        for key in expired_keys:
            self._data.pop(key, None)
            self._expiry.pop(key, None)
        return len(expired_keys)

    def __len__(self) -> int:
        return len(self._data)
