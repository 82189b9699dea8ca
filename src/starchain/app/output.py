"""
Output Channel

Where commands write response output. Carries the response status and
headers so an adapter can turn the written text into an HTTP response.
"""

import io
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional, TextIO


class CapturedOutput:
    """Handle yielded by `OutputChannel.capture()`; `text` is filled in on exit."""

    def __init__(self):
        self.text = ""


class OutputChannel:
    """
    Text sink with nested capture.

    Args:
        sink: Stream to write to. Without one, output is collected in memory
            and returned by `getvalue()`.
    """

    def __init__(self, sink: Optional[TextIO] = None):
        self.sink = sink
        self.status: int = 200
        self.headers: Dict[str, str] = {}
        self._parts: List[str] = []
        self._buffers: List[io.StringIO] = []

    def write(self, text: str) -> None:
        if not text:
            return
        if self._buffers:
            self._buffers[-1].write(text)
        elif self.sink is not None:
            self.sink.write(text)
        else:
            self._parts.append(text)

    @contextmanager
    def capture(self) -> Iterator[CapturedOutput]:
        """
        Buffer everything written inside the block.

        On exit the buffer is always flushed to the enclosing sink, even when
        the block raised, and its text is available as `captured.text`.
        """
        captured = CapturedOutput()
        buffer = io.StringIO()
        self._buffers.append(buffer)
        try:
            yield captured
        finally:
            self._buffers.pop()
            captured.text = buffer.getvalue()
            self.write(captured.text)

    def getvalue(self) -> str:
        return "".join(self._parts)

    def redirect(self, location: str, status: int = 302) -> None:
        self.status = status
        self.headers["Location"] = location


__all__ = ["OutputChannel", "CapturedOutput"]
