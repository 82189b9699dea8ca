"""
Logger Backends - Base Class

Abstract interface for application loggers. Each backend may restrict
itself to a set of categories; an empty set means every category.
"""

import traceback
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Set, TYPE_CHECKING

from fastcore.basics import listify

if TYPE_CHECKING:
    from ..app.output import OutputChannel


class LoggerBackend(ABC):
    """
    Abstract base class for logger backends.

    Args:
        params: Backend configuration. `categories` is a list or a
            comma-separated string of categories to accept.
        name: Name the backend is registered under
    """

    def __init__(self, params: Optional[Dict[str, Any]] = None, name: str = "unknown_logger"):
        self.params = dict(params or {})
        self.name = name
        self.output: Optional['OutputChannel'] = None

        categories = self.params.get("categories")
        if isinstance(categories, str):
            categories = [c.strip() for c in categories.split(",")]
        self.categories: Set[str] = set(listify(categories))

    def init(self) -> None:
        pass

    def is_logging_this_category(self, category: str) -> bool:
        return not self.categories or category in self.categories

    def get_messages(self) -> List[str]:
        return []

    def raw_log(self, message: Any, category: str = "General Error", details: str = "") -> None:
        """Normalise `message` (exceptions included) and pass it to `log()`."""
        if not self.is_logging_this_category(category):
            return

        if isinstance(message, BaseException):
            buffer = str(message)
            if not details:
                details = "".join(traceback.format_exception(type(message), message, message.__traceback__))
        else:
            buffer = str(message)
        self.log(buffer, category, details)

    @abstractmethod
    def log(self, message: str, category: str, details: str) -> None:
        pass
