"""
Logger Manager

Fans application log entries out to every configured backend. Logging
never raises: a failing backend is reported through `logging` and skipped.
"""

import logging
from typing import Any, Dict, List, Optional, TYPE_CHECKING

from .base import LoggerBackend

if TYPE_CHECKING:
    from ..app.output import OutputChannel
    from ..cache.manager import CacheManager
    from ..datasource.manager import DatasourceManager

logger = logging.getLogger(__name__)


class LoggerManager:

    def __init__(self, loggers: Optional[Dict[str, LoggerBackend]] = None):
        self.loggers: Dict[str, LoggerBackend] = dict(loggers or {})

    def set_cache_manager(self, manager: 'CacheManager') -> None:
        for backend in self.loggers.values():
            backend.cache_manager = manager

    def set_datasource_manager(self, manager: 'DatasourceManager') -> None:
        for backend in self.loggers.values():
            backend.datasource_manager = manager

    def set_output(self, output: Optional['OutputChannel']) -> None:
        for backend in self.loggers.values():
            backend.output = output

    def get_logger_by_name(self, name: str) -> Optional[LoggerBackend]:
        return self.loggers.get(name)

    def get_messages(self) -> List[str]:
        messages: List[str] = []
        for backend in self.loggers.values():
            messages.extend(backend.get_messages())
        return messages

    def log(self, message: Any, category: str, details: str = "") -> None:
        for name, backend in self.loggers.items():
            try:
                backend.raw_log(message, category, details)
            except Exception as e:
                logger.error(f"Logger {name} failed while logging {category}: {e}")

    def __len__(self) -> int:
        return len(self.loggers)
