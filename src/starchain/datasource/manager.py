"""
Datasource Manager

Looks up datasources by name and initialises each one the first time it
is requested.
"""

import logging
import threading
from typing import Dict, Optional, Set, TYPE_CHECKING

from .base import Datasource

if TYPE_CHECKING:
    from ..cache.manager import CacheManager
    from ..logs.manager import LoggerManager

logger = logging.getLogger(__name__)


class DatasourceManager:

    def __init__(self, datasources: Optional[Dict[str, Datasource]] = None):
        self.datasources: Dict[str, Datasource] = dict(datasources or {})
        self._initialized: Set[str] = set()
        self._init_lock = threading.RLock()

    def set_cache_manager(self, manager: 'CacheManager') -> None:
        for ds in self.datasources.values():
            ds.cache_manager = manager

    def set_logger_manager(self, manager: 'LoggerManager') -> None:
        for ds in self.datasources.values():
            ds.logger_manager = manager

    def get_datasource_by_name(self, name: str) -> Optional[Datasource]:
        return self.datasources.get(name)

    def get_default_datasource(self) -> Optional[Datasource]:
        for ds in self.datasources.values():
            if ds.is_default():
                return ds
        return None

    def datasource(self, name: Optional[str] = None) -> Optional[Datasource]:
        """Return the named (or default) datasource, initialising it once."""
        ds = self.get_datasource_by_name(name) if name else self.get_default_datasource()
        if ds is None or ds.name in self._initialized:
            return ds
        with self._init_lock:
            if ds.name not in self._initialized:
                logger.debug(f"Initialising datasource {ds.name}")
                ds.init()
                self._initialized.add(ds.name)
        return ds

    def initialize_all(self) -> None:
        for name in self.datasources:
            self.datasource(name)

    def is_initialized(self, name: str) -> bool:
        return name in self._initialized

    def __len__(self) -> int:
        return len(self.datasources)
