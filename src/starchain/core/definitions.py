"""
Declarative Configuration Models

Pydantic models for the structure a Registry builds: requests made of
command specs, groups, listeners and the logger/cache/datasource facilities.
A plain dict of the same shape can be validated directly.
"""

from typing import Any, Dict, List, Optional

from fastcore.basics import listify
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ImportString, field_validator


def _named(values: Any) -> Any:
    """Fill in `name` on dict entries from their key."""
    if not isinstance(values, dict):
        return values
    named = {}
    for key, value in values.items():
        if value is None:
            value = {"name": key}
        elif isinstance(value, dict):
            value = {"name": key, **value}
        named[key] = value
    return named


class ParamSpec(BaseModel):
    """
    Where a command parameter comes from.

    `from_` holds ordered `source:key` expressions; the first one that yields
    a value wins, then `value` is used as the default.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True, populate_by_name=True)

    name: str
    value: Any = None
    from_: List[str] = Field(default_factory=list, alias="from")
    required: bool = False

    @field_validator("from_", mode="before")
    @classmethod
    def _split_sources(cls, value: Any) -> List[str]:
        # Accepts "get:a post:a" as well as ["get:a", "post:a"].
        return [expr for item in listify(value) for expr in str(item).split()]


class CommandSpec(BaseModel):
    """A single command entry of a request or group."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    implementation: Optional[ImportString] = Field(default=None, validation_alias=AliasChoices("implementation", "class"))
    params: Dict[str, ParamSpec] = Field(default_factory=dict)
    caching: bool = False
    listeners: Dict[str, List[Any]] = Field(default_factory=dict)

    @field_validator("params", mode="before")
    @classmethod
    def _fill_param_names(cls, value: Any) -> Any:
        return _named(value)


class RequestSpec(BaseModel):
    """A named, ordered chain of commands."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    description: str = ""
    commands: List[CommandSpec] = Field(default_factory=list)
    caching: bool = Field(default=False, validation_alias=AliasChoices("caching", "#caching"))
    explaining: bool = Field(default=False, validation_alias=AliasChoices("explaining", "#explaining"))


class FacilitySpec(BaseModel):
    """A logger, cache or datasource to be instantiated with `params`."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    implementation: Optional[ImportString] = Field(default=None, validation_alias=AliasChoices("implementation", "class"))
    params: Dict[str, Any] = Field(default_factory=dict)


class Configuration(BaseModel):
    """Everything a Dispatcher needs to know about an application."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: Optional[str] = None
    requests: Dict[str, RequestSpec] = Field(default_factory=dict)
    groups: Dict[str, List[CommandSpec]] = Field(default_factory=dict)
    loggers: Dict[str, FacilitySpec] = Field(default_factory=dict)
    caches: Dict[str, FacilitySpec] = Field(default_factory=dict)
    datasources: Dict[str, FacilitySpec] = Field(default_factory=dict)
    request_mapper: Optional[ImportString] = None

    @field_validator("requests", "loggers", "caches", "datasources", mode="before")
    @classmethod
    def _fill_names(cls, value: Any) -> Any:
        return _named(value)


__all__ = [
    "ParamSpec",
    "CommandSpec",
    "RequestSpec",
    "FacilitySpec",
    "Configuration",
]
