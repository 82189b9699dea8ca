"""
Cache Backends - Base Class

Abstract interface for the named cache backends a CacheManager holds.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, TYPE_CHECKING

from ..core.errors import ConfigurationError
from ..core.filters import apply_filter

if TYPE_CHECKING:
    from ..datasource.manager import DatasourceManager
    from ..logs.manager import LoggerManager


def is_default_param(params: Dict[str, Any]) -> bool:
    """Read the `is_default` (or `isDefault`) flag from facility params."""
    value = params.get("is_default", params.get("isDefault"))
    if value is None:
        return False
    try:
        return apply_filter("boolean", value)
    except ValueError as e:
        raise ConfigurationError(f"is_default must be a boolean, got {value!r}") from e


class CacheBackend(ABC):
    """
    Abstract base class for cache backends.

    Args:
        params: Backend configuration; `is_default` marks the backend that
            receives writes when no cache is named
        name: Name the backend is registered under
    """

    def __init__(self, params: Optional[Dict[str, Any]] = None, name: str = "unknown_cache"):
        self.params = dict(params or {})
        self.name = name
        self.default = is_default_param(self.params)
        self.logger_manager: Optional['LoggerManager'] = None
        self.datasource_manager: Optional['DatasourceManager'] = None

    def is_default(self) -> bool:
        return self.default

    def init(self) -> None:
        """Prepare the backend for use. Called once when the manager is built."""
        pass

    @abstractmethod
    def get(self, key: str) -> Any:
        """
        Get a cached value.

        Returns:
            The value, or None if it is absent or expired
        """
        pass

    @abstractmethod
    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        """
        Store a value.

        Args:
            key: Cache key
            value: Value to store
            ttl: Time-to-live in seconds (optional)
        """
        pass

    @abstractmethod
    def has(self, key: str) -> bool:
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        pass

    @abstractmethod
    def clear(self) -> None:
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r}, default={self.default})"
