"""
Commands

A command is one unit of work in a request chain. It declares the
parameters it expects, does its work against the execution context, and
leaves at most one result in the context under its own name.

Capabilities (cacheable, observable, explainable) are interfaces that a
command class implements; they are resolved into flags when the command
is constructed.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional, TYPE_CHECKING

from .errors import ConfigurationError, FatalError, ParameterError
from .filters import ParameterFilter, apply_filter, describe_filter

if TYPE_CHECKING:
    from .context import ExecutionContext

logger = logging.getLogger(__name__)


class Explainable(ABC):
    """A command that can describe its own parameters and events."""

    @abstractmethod
    def explain(self) -> str:
        pass


class Observable(ABC):
    """A command that fires events to bound listeners."""

    @abstractmethod
    def set_event_handlers(self, listeners: Dict[str, List[Callable]]) -> None:
        pass

    @abstractmethod
    def fire_event(self, event_name: str, data: Any = None) -> List[Any]:
        pass


class Cacheable(ABC):
    """
    A command whose result can be served from the cache manager.

    Only `cache_key` is mandatory. Returning None from it disables caching
    for that execution.
    """

    @abstractmethod
    def cache_key(self) -> Optional[str]:
        pass

    def cache_lifetime(self) -> Optional[int]:
        """TTL in seconds; None means the backend default."""
        return None

    def cache_backend(self) -> Optional[str]:
        """Name of the cache to use; None means the default cache."""
        return None

    def is_caching(self) -> bool:
        return bool(getattr(self, "caching", False))


class Command(ABC):
    """
    Minimal command contract.

    Args:
        name: Name of the command within its request; results are stored under it
        caching: Whether caching was enabled for this command in configuration
    """

    escalate_parameter_errors: bool = False

    def __init__(self, name: str, caching: bool = False):
        self.name = name
        self.caching = caching
        self.cacheable = isinstance(self, Cacheable)
        self.observable = isinstance(self, Observable)
        self.explainable = isinstance(self, Explainable)

    @abstractmethod
    def execute(self, params: Dict[str, Any], context: 'ExecutionContext') -> None:
        pass

    def on_parameter_error(self, error: ParameterError) -> None:
        """Raise `error`, or a FatalError when this command escalates parameter errors."""
        if self.escalate_parameter_errors:
            raise FatalError(str(error)) from error
        raise error

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"


@dataclass
class ParameterDefinition:
    """A parameter a command declares it expects."""
    name: str
    description: str = ""
    default: Any = None
    required: bool = False
    filters: List[ParameterFilter] = field(default_factory=list)


class ParameterCollection:
    """
    Fluent declaration of a command's parameters, events and return value.

    Example:
        ```python
        def expects(self):
            return (self.description("Greets someone.")
                .uses_param("name", "Who to greet").which_is_required()
                .uses_param("greeting", "The greeting").which_has_default("Hello")
                .with_filter("string")
                .and_returns("The greeting text."))
        ```
    """

    def __init__(self, description: str = ""):
        self.description = description
        self.params: List[ParameterDefinition] = []
        self.events: Dict[str, str] = {}
        self.returns = "Nothing"

    def _current(self) -> ParameterDefinition:
        if not self.params:
            raise ConfigurationError("uses_param() must be called before configuring a parameter")
        return self.params[-1]

    def uses_param(self, name: str, description: str = "") -> 'ParameterCollection':
        self.params.append(ParameterDefinition(name, description))
        return self

    def with_filter(self, filter_type: str, options: Any = None) -> 'ParameterCollection':
        self._current().filters.append(ParameterFilter(filter_type, options))
        return self

    def which_is_required(self) -> 'ParameterCollection':
        self._current().required = True
        return self

    def which_has_default(self, value: Any) -> 'ParameterCollection':
        self._current().default = value
        return self

    def declares_event(self, name: str, description: str) -> 'ParameterCollection':
        self.events[name] = description
        return self

    def and_returns(self, description: str) -> 'ParameterCollection':
        self.returns = description
        return self

    def __iter__(self) -> Iterator[ParameterDefinition]:
        return iter(self.params)

    def __len__(self) -> int:
        return len(self.params)


class BaseCommand(Command, Explainable, Observable):
    """
    Base class for most commands.

    Subclasses implement `expects()` to declare parameters and
    `do_command()` to do the work. The return value of `do_command()` is
    stored in the context under the command's name.
    """

    def __init__(self, name: str, caching: bool = False):
        super().__init__(name, caching)
        self.context: Optional['ExecutionContext'] = None
        self.parameters: Dict[str, Any] = {}
        self.listeners: Dict[str, List[Callable]] = {}
        self._declared: Optional[ParameterCollection] = None

    @abstractmethod
    def expects(self) -> ParameterCollection:
        pass

    @abstractmethod
    def do_command(self) -> Any:
        pass

    def description(self, text: str) -> ParameterCollection:
        return ParameterCollection(text)

    def declared(self) -> ParameterCollection:
        if self._declared is None:
            self._declared = self.expects()
        return self._declared

    # Helpers for do_command()

    def param(self, name: str, default: Any = None) -> Any:
        value = self.parameters.get(name)
        return default if value is None else value

    def from_context(self, name: str, default: Any = None) -> Any:
        return self.context.get(name, default)

    def url(self, request: str, params: Optional[Dict[str, Any]] = None) -> str:
        return self.context.url(request, params)

    def write(self, text: str) -> None:
        self.context.write(text)

    # Execution

    def execute(self, params: Dict[str, Any], context: 'ExecutionContext') -> None:
        self.context = context
        self.prepare_parameters(params)

        key = self.cache_key() if self.cacheable and self.is_caching() else None
        if key is not None:
            result = self.execute_with_cache(key)
        else:
            result = self.do_command()

        context.add(self.name, result)

    def execute_with_cache(self, key: str) -> Any:
        """Serve the result from cache, or compute and store it."""
        manager = self.context.cache_manager
        if manager is None:
            return self.do_command()

        backend = self.cache_backend()
        if backend is None:
            if manager.get_default_cache() is None:
                return self.do_command()
            result = manager.get(key)
        else:
            cache = manager.get_cache_by_name(backend)
            if cache is None:
                return self.do_command()
            result = cache.get(key)

        if result is not None:
            logger.debug(f"Cache hit for {self.name}: {key}")
            return result

        result = self.do_command()
        if result is not None:
            manager.set(key, result, self.cache_lifetime(), backend)
        return result

    # Parameters

    def prepare_parameters(self, params: Dict[str, Any]) -> None:
        """Apply declared requirements, defaults and filters to `params`."""
        self.parameters = {}
        for definition in self.declared():
            name = definition.name
            payload = params.get(name)
            if payload is None:
                if definition.required:
                    self.on_parameter_error(ParameterError(
                        f"Expected param {name} in command {self.name}", parameter=name, command=self.name,
                    ))
                payload = definition.default

            if payload is not None:
                for flt in definition.filters:
                    payload = self.validate(name, flt, payload)

            self.parameters[name] = payload

    def validate(self, name: str, flt: ParameterFilter, payload: Any) -> Any:
        try:
            return apply_filter(flt.type, payload, flt.options, owner=self)
        except (ValueError, TypeError):
            return self.handle_illegal_parameter(name, flt, payload)

    def handle_illegal_parameter(self, name: str, flt: ParameterFilter, payload: Any) -> Any:
        """Called when a filter rejects a value. Override to substitute a value instead."""
        self.on_parameter_error(ParameterError(
            f"Filter {flt.type} failed for {name} in command {self.name} (value: {payload!r})",
            parameter=name,
            command=self.name,
        ))

    # Events

    def set_event_handlers(self, listeners: Dict[str, List[Callable]]) -> None:
        self.listeners = listeners or {}

    def fire_event(self, event_name: str, data: Any = None) -> List[Any]:
        results = []
        for listener in self.listeners.get(event_name, []):
            if not callable(listener):
                raise FatalError(f"Attempting to call uncallable item {listener!r}")
            results.append(listener(data))
        return results

    # Explain

    def explain(self) -> str:
        declared = self.declared()
        lines = [f"CMD: {self.name} ({self.__class__.__module__}.{self.__class__.__qualname__}): {declared.description}"]
        lines.append("\tPARAMS:")
        for definition in declared:
            desc = definition.description
            if definition.required:
                desc += " !REQUIRED!"
            elif definition.default is not None:
                desc += f" [{definition.default!r}]"
            filters = ", ".join(describe_filter(f) for f in definition.filters) or "no filters"
            lines.append(f"\t* {definition.name} ({filters}): {desc}")

        if declared.events:
            lines.append("\tEVENTS:")
            lines.extend(f"\t* {event}: {desc}" for event, desc in declared.events.items())

        lines.append(f"\tRETURNS: {declared.returns}")
        return "\n".join(lines) + "\n\n"


__all__ = [
    "Command",
    "BaseCommand",
    "Cacheable",
    "Observable",
    "Explainable",
    "ParameterDefinition",
    "ParameterCollection",
]
