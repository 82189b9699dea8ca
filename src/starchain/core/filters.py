"""
Parameter Filters

Validation and sanitisation applied to a command's parameters after they
are resolved. Every filter either returns the (possibly converted) value or
raises ValueError.
"""

import re
from typing import Any, Callable, Dict, NamedTuple, Optional

from pydantic import AnyUrl, TypeAdapter

_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

_int = TypeAdapter(int)
_float = TypeAdapter(float)
_bool = TypeAdapter(bool)
_url = TypeAdapter(AnyUrl)

FILTER_ALIASES: Dict[str, str] = {
    "integer": "int", "validate_int": "int",
    "validate_float": "float",
    "bool": "boolean", "validate_boolean": "boolean",
    "str": "string",
    "validate_url": "url",
    "validate_email": "email",
    "regexp": "regex", "validate_regexp": "regex",
}


class ParameterFilter(NamedTuple):
    type: str
    options: Any = None


def _regex_pattern(options: Any) -> str:
    if isinstance(options, str):
        return options
    if isinstance(options, dict):
        # Accept both {"regexp": ...} and the nested {"options": {"regexp": ...}} form.
        options = options.get("options", options)
        pattern = options.get("regexp") or options.get("regex")
        if pattern:
            return pattern
    raise ValueError("regex filter needs a pattern")


def _url_filter(payload: Any) -> Any:
    _url.validate_python(str(payload))
    return payload


def _email_filter(payload: Any) -> Any:
    if not isinstance(payload, str) or not _EMAIL.match(payload):
        raise ValueError(f"{payload!r} is not an email address")
    return payload


def _regex_filter(payload: Any, options: Any) -> Any:
    if re.search(_regex_pattern(options), str(payload)) is None:
        raise ValueError(f"{payload!r} does not match")
    return payload


def apply_filter(filter_type: str, payload: Any, options: Any = None, owner: Optional[object] = None) -> Any:
    """
    Run one filter over `payload`.

    `this` calls the method named by `options` on `owner`; `callback` calls
    `options` directly. Both fail by raising ValueError.
    """
    name = FILTER_ALIASES.get(filter_type, filter_type)
    if name == "int":
        return _int.validate_python(payload)
    if name == "float":
        return _float.validate_python(payload)
    if name == "boolean":
        return _bool.validate_python(payload)
    if name == "string":
        return str(payload)
    if name == "url":
        return _url_filter(payload)
    if name == "email":
        return _email_filter(payload)
    if name == "regex":
        return _regex_filter(payload, options)
    if name == "this":
        func: Callable = getattr(owner, options)
        return func(payload)
    if name == "callback":
        if not callable(options):
            raise ValueError("callback filter needs a callable")
        return options(payload)
    raise ValueError(f"Unknown filter {filter_type}")


def describe_filter(flt: ParameterFilter) -> str:
    """Human-readable filter name for explain output."""
    if flt.type in ("callback", "this"):
        target = getattr(flt.options, "__name__", flt.options)
        return f"{flt.type}: {target}"
    if FILTER_ALIASES.get(flt.type, flt.type) == "regex":
        return f"regex: {_regex_pattern(flt.options)}"
    return flt.type


__all__ = ["ParameterFilter", "FILTER_ALIASES", "apply_filter", "describe_filter"]
