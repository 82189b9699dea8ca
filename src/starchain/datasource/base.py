"""
Datasources - Base Class

A datasource is a named handle to some external store (a database
engine, a client connection). It is initialised lazily on first use.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, TYPE_CHECKING

from ..cache.base import is_default_param

if TYPE_CHECKING:
    from ..cache.manager import CacheManager
    from ..logs.manager import LoggerManager


class Datasource(ABC):
    """
    Abstract base class for datasources.

    Args:
        params: Datasource configuration; `is_default` marks the one
            returned when no name is given
        name: Name the datasource is registered under
    """

    def __init__(self, params: Optional[Dict[str, Any]] = None, name: str = "unknown_datasource"):
        self.params = dict(params or {})
        self.name = name
        self.default = is_default_param(self.params)
        self.logger_manager: Optional['LoggerManager'] = None
        self.cache_manager: Optional['CacheManager'] = None

    def is_default(self) -> bool:
        return self.default

    @abstractmethod
    def init(self) -> None:
        pass

    @abstractmethod
    def get(self) -> Any:
        """Return the underlying handle."""
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r}, default={self.default})"
