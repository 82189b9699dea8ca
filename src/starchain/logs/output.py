"""
Output logger: writes log entries straight into the response output.
"""

import sys
from typing import Any, Dict, Optional

from ..core.filters import apply_filter
from .base import LoggerBackend


class OutputLogger(LoggerBackend):
    """
    Writes each entry to the bound output channel, or to stdout when none is bound.

    Set the `html` param to wrap entries in markup.
    """

    def __init__(self, params: Optional[Dict[str, Any]] = None, name: str = "output"):
        super().__init__(params, name)
        self.html = apply_filter("boolean", self.params.get("html", False))

    def log(self, message: str, category: str, details: str) -> None:
        if self.html:
            severity = category.replace(" ", "-")
            message = message.replace("\n", "<br/>")
            text = (
                f'<div class="log-item {severity}"><strong>{category}</strong> {message} '
                f'<pre class="log-details">{details}</pre></div>'
            )
        else:
            text = f"{category}: {message} -- {details}\n"

        if self.output is not None:
            self.output.write(text)
        else:
            sys.stdout.write(text)
