"""
Array logger: keeps log entries in memory so they can be inspected or
injected into a page later.
"""

from typing import Any, Dict, List, Optional, Tuple

from ..core.filters import apply_filter
from .base import LoggerBackend


class ArrayLogger(LoggerBackend):
    """Collects formatted messages in `messages` and raw entries in `entries`."""

    def __init__(self, params: Optional[Dict[str, Any]] = None, name: str = "array"):
        super().__init__(params, name)
        self.messages: List[str] = []
        self.entries: List[Tuple[str, str, str]] = []
        self.html = apply_filter("boolean", self.params.get("html", False))

    def get_messages(self) -> List[str]:
        return list(self.messages)

    def log(self, message: str, category: str, details: str) -> None:
        severity = category.replace(" ", "-")
        self.entries.append((category, message, details))
        if self.html:
            self.messages.append(
                f'<div class="log-item {severity}">{message}<pre class="log-details">{details}</pre></div>'
            )
        else:
            self.messages.append(f"{severity}: {message}")

    def clear(self) -> None:
        self.messages.clear()
        self.entries.clear()
