"""
Registry - Application Configuration Builder

`Registry` is a fluent builder for the requests, groups and facilities of an
application. `RegistryReader` turns the resulting Configuration into
runnable Request objects and facility instances.

Example:
    ```python
    registry = Registry("demo")
    registry.cache("memory").which_invokes(MemoryCache).using("is_default", True)

    (registry.request("hello")
        .does(AddToContext, "greeting").using("text", "Hello")
        .does(EchoText, "echo").with_param("text").from_("get:text cxt:greeting"))
    ```
"""

import copy
import logging
import re
from typing import Any, Callable, Dict, List, Mapping, Optional, Type, Union

from pydantic import ValidationError

from ..cache.base import CacheBackend
from ..core.command import Command
from ..core.definitions import CommandSpec, Configuration, FacilitySpec
from ..core.errors import ConfigurationError, RequestNotFoundError
from ..core.params import parse_source
from ..core.request import CommandDescriptor, Request
from ..datasource.base import Datasource
from ..logs.base import LoggerBackend
from .mapper import RequestMapper

logger = logging.getLogger(__name__)

REQUESTS = "requests"
GROUPS = "groups"
LOGGERS = "loggers"
CACHES = "caches"
DATASOURCES = "datasources"
REQUEST_MAPPER = "request_mapper"
LISTENERS = "listeners"

FACILITIES = (LOGGERS, CACHES, DATASOURCES)
CHAINS = (REQUESTS, GROUPS)

_LEGAL_NAME = re.compile(r"^[_a-zA-Z0-9-]+$")
_LEGAL_INTERNAL_NAME = re.compile(r"^@?[_a-zA-Z0-9-]+$")


def _class_name(klass: Union[str, type]) -> str:
    if isinstance(klass, str):
        return klass.replace(":", ".").rsplit(".", 1)[-1]
    return klass.__name__


class Registry:
    """
    Fluent configuration builder.

    Every method returns the registry, so calls can be chained. Methods
    apply to the most recently opened request, group or facility, and to
    its most recently added command.
    """

    def __init__(self, name: Optional[str] = None):
        self.name = name
        self._config: Dict[str, Any] = {
            REQUESTS: {},
            GROUPS: {},
            LOGGERS: {},
            CACHES: {},
            DATASOURCES: {},
            REQUEST_MAPPER: None,
        }
        self._listeners: Dict[str, Dict[str, List[Callable]]] = {}
        self._category: Optional[str] = None
        self._name: Optional[str] = None
        self._command: Optional[Dict[str, Any]] = None
        self._param: Optional[str] = None

    # Opening sections

    def request(self, name: str, description: str = "") -> 'Registry':
        self._open(REQUESTS, name)
        self._config[REQUESTS][name] = {"description": description, "commands": []}
        return self

    route = request

    def group(self, name: str) -> 'Registry':
        self._open(GROUPS, name)
        self._config[GROUPS][name] = []
        return self

    def logger(self, klass: Union[str, type], name: Optional[str] = None) -> 'Registry':
        if not name:
            name = klass if isinstance(klass, str) else f"{klass.__module__}.{klass.__qualname__}"
            name = name.replace(".", "_")
        return self._facility(LOGGERS, name).which_invokes(klass)

    def cache(self, name: str) -> 'Registry':
        return self._facility(CACHES, name)

    def datasource(self, name: str) -> 'Registry':
        return self._facility(DATASOURCES, name)

    def use_request_mapper(self, klass: Union[str, type]) -> 'Registry':
        self._open(REQUEST_MAPPER, None)
        self._config[REQUEST_MAPPER] = klass
        return self

    def listener(self, klass: Union[str, type], event: str, callback: Callable) -> 'Registry':
        """Bind `callback` to `event` on every command of `klass` added after this call."""
        self._open(LISTENERS, None)
        self._listeners.setdefault(self._listener_key(klass), {}).setdefault(event, []).append(callback)
        return self

    # Commands

    def does(self, klass: Union[str, type], name: Optional[str] = None) -> 'Registry':
        """Add a command running `klass`. The name defaults to the class name."""
        if not name:
            name = self._unused_name(_class_name(klass))
        return self.does_command(name).which_invokes(klass)

    def does_command(self, name: str) -> 'Registry':
        commands = self._commands("add a command to")
        if any(cmd["name"] == name for cmd in commands):
            raise ConfigurationError(f"Duplicate command name {name} in {self._name}")
        self._command = {"name": name, "params": {}, "listeners": {}}
        self._param = None
        commands.append(self._command)
        return self

    def which_invokes(self, klass: Union[str, type]) -> 'Registry':
        if self._category in FACILITIES:
            self._section()["implementation"] = klass
        elif self._category in CHAINS and self._command is not None:
            self._command["implementation"] = klass
            for event, callbacks in self._listeners.get(self._listener_key(klass), {}).items():
                self._command["listeners"].setdefault(event, []).extend(callbacks)
        else:
            raise ConfigurationError(f"Tried to add a class to {self._category}")
        return self

    def uses_group(self, name: str) -> 'Registry':
        """Append a copy of group `name`'s commands to the current request."""
        if self._category != REQUESTS:
            raise ConfigurationError(f"Tried to use group {name} in {self._category}")
        if name not in self._config[GROUPS]:
            raise ConfigurationError(f"Unknown group {name}")
        commands = self._commands("use a group in")
        for cmd in self._config[GROUPS][name]:
            if any(existing["name"] == cmd["name"] for existing in commands):
                raise ConfigurationError(f"Duplicate command name {cmd['name']} in {self._name}")
            commands.append(copy.deepcopy(cmd))
        self._command = commands[-1] if commands else None
        return self

    # Parameters

    def using(self, param: str, value: Any = None) -> 'Registry':
        return self.with_param(param).whose_value_is(value)

    def with_param(self, param: str) -> 'Registry':
        self._param = param
        if self._category in FACILITIES:
            self._section().setdefault("params", {})[param] = None
        elif self._category in CHAINS:
            self._current_command("add a param to")["params"][param] = {}
        else:
            raise ConfigurationError(f"Tried to add a param to {self._category}")
        return self

    def whose_value_is(self, value: Any) -> 'Registry':
        if self._category in FACILITIES:
            self._section().setdefault("params", {})[self._current_param()] = value
        else:
            self._current_param_spec("add a param value to")["value"] = value
        return self

    def from_(self, *sources: Union[str, List[str]]) -> 'Registry':
        """Set the ordered `source:key` expressions the current param is read from."""
        expressions: List[str] = []
        for source in sources:
            expressions.extend(source if isinstance(source, (list, tuple)) else [source])
        self._current_param_spec("add a param source to")["from"] = expressions
        return self

    def which_is_required(self) -> 'Registry':
        self._current_param_spec("require a param in")["required"] = True
        return self

    # Events and flags

    def bind(self, event: str, callback: Callable) -> 'Registry':
        cmd = self._current_command("add an event listener to")
        cmd["listeners"].setdefault(event, []).append(callback)
        return self

    def is_caching(self, flag: bool = True) -> 'Registry':
        """Turn whole-request output caching on for the current request."""
        if self._category == REQUESTS:
            self._section()["caching"] = flag
        return self

    def is_explaining(self, flag: bool = True) -> 'Registry':
        if self._category == REQUESTS:
            self._section()["explaining"] = flag
        return self

    def with_caching(self, flag: bool = True) -> 'Registry':
        """Enable result caching for the current command (it must be Cacheable)."""
        self._current_command("enable caching on")["caching"] = flag
        return self

    # Output

    def configuration(self) -> Configuration:
        """
        Validate the builder state into a Configuration.

        Raises:
            ConfigurationError: An implementation cannot be imported or a field is malformed
        """
        return load_configuration({"name": self.name, **self._config})

    def to_dict(self) -> Dict[str, Any]:
        return copy.deepcopy({"name": self.name, **self._config})

    # Internals

    def _open(self, category: str, name: Optional[str]) -> None:
        self._category = category
        self._name = name
        self._command = None
        self._param = None

    def _facility(self, category: str, name: str) -> 'Registry':
        self._open(category, name)
        self._config[category][name] = {"params": {}}
        return self

    def _section(self) -> Any:
        return self._config[self._category][self._name]

    def _commands(self, action: str) -> List[Dict[str, Any]]:
        if self._category == REQUESTS:
            return self._section()["commands"]
        if self._category == GROUPS:
            return self._section()
        raise ConfigurationError(f"Tried to {action} {self._category}")

    def _current_command(self, action: str) -> Dict[str, Any]:
        if self._category not in CHAINS or self._command is None:
            raise ConfigurationError(f"Tried to {action} {self._category} without a command")
        return self._command

    def _current_param(self) -> str:
        if self._param is None:
            raise ConfigurationError("with_param() must be called first")
        return self._param

    def _current_param_spec(self, action: str) -> Dict[str, Any]:
        if self._category not in CHAINS:
            raise ConfigurationError(f"Tried to {action} {self._category}")
        return self._current_command(action)["params"][self._current_param()]

    def _unused_name(self, base: str) -> str:
        taken = {cmd["name"] for cmd in self._commands("add a command to")}
        name, n = base, 1
        while name in taken:
            n += 1
            name = f"{base}_{n}"
        return name

    @staticmethod
    def _listener_key(klass: Union[str, type]) -> str:
        if isinstance(klass, str):
            return klass.replace(":", ".")
        return f"{klass.__module__}.{klass.__qualname__}"


def load_configuration(config: Union[Configuration, Mapping[str, Any], Registry]) -> Configuration:
    if isinstance(config, Configuration):
        return config
    if isinstance(config, Registry):
        return config.configuration()
    try:
        return Configuration.model_validate(dict(config))
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


class RegistryReader:
    """
    Builds requests and facilities from a Configuration.

    Requests are rebuilt on every call to `get_request()`, so command
    instances are never shared between dispatches.
    """

    def __init__(self, registry: Union[Registry, Configuration, Mapping[str, Any], None] = None):
        self.config = load_configuration(registry if registry is not None else {})

    @staticmethod
    def is_legal_request_name(name: str, allow_internal: bool = False) -> bool:
        regex = _LEGAL_INTERNAL_NAME if allow_internal else _LEGAL_NAME
        return isinstance(name, str) and regex.match(name) is not None

    def has_request(self, name: str, allow_internal: bool = False) -> bool:
        return self.is_legal_request_name(name, allow_internal) and name in self.config.requests

    def get_request(self, name: str, allow_internal: bool = False) -> Request:
        """
        Build the Request called `name`.

        Raises:
            RequestNotFoundError: The name is illegal or unknown
            ConfigurationError: A command could not be built
        """
        if not self.is_legal_request_name(name, allow_internal):
            raise RequestNotFoundError(f"Illegal request name {name!r}")
        spec = self.config.requests.get(name)
        if spec is None:
            raise RequestNotFoundError(f"Request {name} not found")

        seen = set()
        descriptors = []
        for command in spec.commands:
            if command.name in seen:
                raise ConfigurationError(f"Duplicate command name {command.name} in {name}")
            seen.add(command.name)
            descriptors.append(self.create_command_descriptor(command))

        return Request(
            name=name,
            commands=tuple(descriptors),
            caching=spec.caching,
            explaining=spec.explaining,
            description=spec.description,
        )

    def create_command_descriptor(self, spec: CommandSpec) -> CommandDescriptor:
        klass = spec.implementation
        if klass is None:
            raise ConfigurationError(f"No class specified for {spec.name}")
        if not (isinstance(klass, type) and issubclass(klass, Command)):
            raise ConfigurationError(f"{klass!r} for {spec.name} is not a Command")

        for param in spec.params.values():
            for expression in param.from_:
                parse_source(expression)

        listeners = {event: list(callbacks) for event, callbacks in spec.listeners.items()}
        for event, callbacks in listeners.items():
            for callback in callbacks:
                if not callable(callback):
                    raise ConfigurationError(f"Listener {callback!r} for {spec.name}.{event} is not callable")

        return CommandDescriptor(
            name=spec.name,
            implementation=klass,
            instance=klass(spec.name, spec.caching),
            params=dict(spec.params),
            listeners=listeners,
            caching=spec.caching,
        )

    # Facilities

    def get_loggers(self) -> Dict[str, LoggerBackend]:
        loggers = self._facilities(self.config.loggers, LoggerBackend)
        for backend in loggers.values():
            backend.init()
        return loggers

    def get_caches(self) -> Dict[str, CacheBackend]:
        caches = self._facilities(self.config.caches, CacheBackend)
        for cache in caches.values():
            cache.init()
        return caches

    def get_datasources(self) -> Dict[str, Datasource]:
        return self._facilities(self.config.datasources, Datasource)

    def get_request_mapper(self, default: Type[RequestMapper] = RequestMapper) -> type:
        return self.config.request_mapper or default

    def _facilities(self, specs: Dict[str, FacilitySpec], base: type) -> Dict[str, Any]:
        facilities = {}
        for name, spec in specs.items():
            klass = spec.implementation
            if klass is None:
                raise ConfigurationError(f"No class specified for {name}")
            if not (isinstance(klass, type) and issubclass(klass, base)):
                raise ConfigurationError(f"{klass!r} for {name} is not a {base.__name__}")
            try:
                facilities[name] = klass(spec.params, name)
            except (ValueError, TypeError) as e:
                raise ConfigurationError(f"Invalid params for {name}: {e}") from e
        return facilities


__all__ = ["Registry", "RegistryReader", "load_configuration"]
