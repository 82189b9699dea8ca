"""
Parameter Resolution

Resolves a command's configured parameters from request sources
(query string, form body, cookies, session, context, environment, server
variables, argv and uploaded files) with ordered fallback.
"""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple, TYPE_CHECKING

from .errors import ConfigurationError, ParameterError

if TYPE_CHECKING:
    from .context import ExecutionContext
    from .request import CommandDescriptor


SOURCE_ALIASES: Dict[str, str] = {
    "g": "get", "get": "get",
    "p": "post", "post": "post",
    "c": "cookie", "cookie": "cookie", "cookies": "cookie",
    "s": "session", "session": "session",
    "x": "cxt", "cmd": "cxt", "cxt": "cxt", "context": "cxt",
    "e": "env", "env": "env", "environment": "env",
    "v": "server", "server": "server",
    "r": "request", "request": "request",
    "a": "argv", "arg": "argv", "argv": "argv",
    "f": "files", "file": "files", "files": "files",
}


def parse_source(expression: str) -> Tuple[str, str]:
    """Split `source:key` and normalise the source alias."""
    proto, sep, key = expression.partition(":")
    if not sep or not key:
        raise ConfigurationError(f"Malformed parameter source '{expression}', expected source:key")
    source = SOURCE_ALIASES.get(proto.strip().lower())
    if source is None:
        raise ConfigurationError(f"Unknown parameter source '{proto}' in '{expression}'")
    return source, key


@dataclass
class RequestSources:
    """
    The request-external values a resolver can read from.

    Adapters fill this from the incoming request; tests and CLI callers
    can build it directly.
    """
    get: Mapping[str, Any] = field(default_factory=dict)
    post: Mapping[str, Any] = field(default_factory=dict)
    cookie: Mapping[str, Any] = field(default_factory=dict)
    session: Mapping[str, Any] = field(default_factory=dict)
    env: Mapping[str, Any] = field(default_factory=lambda: os.environ)
    server: Mapping[str, Any] = field(default_factory=dict)
    argv: Sequence[Any] = field(default_factory=list)
    files: Mapping[str, Any] = field(default_factory=dict)

    def fetch(self, source: str, key: str, context: Optional['ExecutionContext'] = None) -> Any:
        """Return the value at `source:key`, or None when absent."""
        if source == "cxt":
            return context.get(key) if context is not None else None
        if source == "request":
            value = self.get.get(key)
            return value if value is not None else self.post.get(key)
        if source == "argv":
            try:
                index = int(key)
            except ValueError:
                return None
            return self.argv[index] if 0 <= index < len(self.argv) else None
        return getattr(self, source).get(key)


class ParameterResolver:
    """Builds the input map for a command from its ParamSpecs."""

    def __init__(self, sources: Optional[RequestSources] = None):
        self.sources = sources if sources is not None else RequestSources()

    def fetch(self, expression: str, context: Optional['ExecutionContext'] = None) -> Any:
        source, key = parse_source(expression)
        return self.sources.fetch(source, key, context)

    def resolve(
        self, descriptor: 'CommandDescriptor', context: 'ExecutionContext', strict: bool = True,
    ) -> Dict[str, Any]:
        """
        Resolve every configured parameter of `descriptor`.

        Absent optional parameters are left out of the result so the command's
        own defaults can apply. With `strict=False` absent required parameters
        are left out too.

        Raises:
            ParameterError: A required parameter resolved to nothing
        """
        params: Dict[str, Any] = {}
        for name, spec in descriptor.params.items():
            value = None
            for expression in spec.from_:
                value = self.fetch(expression, context)
                if value is not None:
                    break
            if value is None:
                value = spec.value
            if value is None:
                if spec.required and strict:
                    raise ParameterError(
                        f"Expected param {name} in command {descriptor.name}",
                        parameter=name,
                        command=descriptor.name,
                    )
                continue
            params[name] = value
        return params


__all__ = ["SOURCE_ALIASES", "parse_source", "RequestSources", "ParameterResolver"]
