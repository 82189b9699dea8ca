"""
Stdlib logger: forwards application log entries to the `logging` module.
"""

import logging
from typing import Any, Dict, Optional

from ..core.errors import LOG_FATAL, LOG_RECOVERABLE, LOG_USER
from .base import LoggerBackend

CATEGORY_LEVELS: Dict[str, int] = {
    LOG_FATAL: logging.ERROR,
    LOG_RECOVERABLE: logging.WARNING,
    LOG_USER: logging.INFO,
}


class StdlibLogger(LoggerBackend):
    """
    Sends entries to `logging.getLogger(params["logger"])`.

    Unknown categories are logged at ERROR.
    """

    def __init__(self, params: Optional[Dict[str, Any]] = None, name: str = "stdlib"):
        super().__init__(params, name)
        self.logger = logging.getLogger(self.params.get("logger", "starchain.app"))

    def log(self, message: str, category: str, details: str) -> None:
        level = CATEGORY_LEVELS.get(category, logging.ERROR)
        if details:
            self.logger.log(level, f"[{category}] {message}\n{details}")
        else:
            self.logger.log(level, f"[{category}] {message}")
