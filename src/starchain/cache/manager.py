"""
Cache Manager

Holds the named cache backends of an application, in registration order.
Reads scan the backends in order; writes go to exactly one backend.
"""

import logging
from typing import Any, Dict, List, Optional, TYPE_CHECKING

from .base import CacheBackend

if TYPE_CHECKING:
    from ..datasource.manager import DatasourceManager
    from ..logs.manager import LoggerManager

logger = logging.getLogger(__name__)


class CacheManager:
    """
    Prioritised collection of cache backends.

    Example:
        ```python
        manager = CacheManager({"mem": MemoryCache({"is_default": True}, "mem")})
        manager.set("key", "value", ttl=60)
        manager.get("key")  # "value"
        ```
    """

    def __init__(self, caches: Optional[Dict[str, CacheBackend]] = None):
        self.caches: Dict[str, CacheBackend] = dict(caches or {})

    def set_logger_manager(self, manager: 'LoggerManager') -> None:
        for cache in self.caches.values():
            cache.logger_manager = manager

    def set_datasource_manager(self, manager: 'DatasourceManager') -> None:
        for cache in self.caches.values():
            cache.datasource_manager = manager

    def get_cache_by_name(self, name: str) -> Optional[CacheBackend]:
        return self.caches.get(name)

    def get_cache_names(self) -> List[str]:
        return list(self.caches)

    def get_default_cache(self) -> Optional[CacheBackend]:
        for cache in self.caches.values():
            if cache.is_default():
                return cache
        return None

    def get(self, key: str) -> Any:
        """Return the first non-None value found, scanning backends in order."""
        for cache in self.caches.values():
            value = cache.get(key)
            if value is not None:
                return value
        return None

    def set(self, key: str, value: Any, ttl: Optional[int] = None, cache: Optional[str] = None) -> None:
        """
        Store `value` in the named cache, or in the default cache.

        Nothing is stored when neither exists.
        """
        if cache is not None and cache in self.caches:
            self.caches[cache].set(key, value, ttl)
            return

        default = self.get_default_cache()
        if default is None:
            logger.debug(f"No default cache configured, not storing {key}")
            return
        default.set(key, value, ttl)

    def has(self, key: str) -> bool:
        return any(cache.has(key) for cache in self.caches.values())

    def which_cache_has(self, key: str) -> Optional[str]:
        for name, cache in self.caches.items():
            if cache.has(key):
                return name
        return None

    def delete(self, key: str) -> None:
        """Remove `key` from every backend."""
        for cache in self.caches.values():
            cache.delete(key)

    def clear(self) -> None:
        for cache in self.caches.values():
            cache.clear()

    def __len__(self) -> int:
        return len(self.caches)
