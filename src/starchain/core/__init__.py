"""
StarChain Core

Execution context, command contracts, parameter resolution and the
control-flow taxonomy shared by every other module.
"""

from .errors import (
    LOG_FATAL, LOG_RECOVERABLE, LOG_USER,
    StarChainError, RecoverableError, ParameterError, FatalError,
    ConfigurationError, RequestNotFoundError, Interrupt, ForwardRequest,
)
from .outcome import Flow, CommandOutcome
from .context import ExecutionContext
from .definitions import ParamSpec, CommandSpec, RequestSpec, FacilitySpec, Configuration
from .filters import ParameterFilter, apply_filter
from .params import SOURCE_ALIASES, RequestSources, ParameterResolver, parse_source
from .command import (
    Command, BaseCommand, Cacheable, Observable, Explainable,
    ParameterDefinition, ParameterCollection,
)
from .request import CommandDescriptor, Request

__all__ = [
    # Errors and signals
    "LOG_FATAL",
    "LOG_RECOVERABLE",
    "LOG_USER",
    "StarChainError",
    "RecoverableError",
    "ParameterError",
    "FatalError",
    "ConfigurationError",
    "RequestNotFoundError",
    "Interrupt",
    "ForwardRequest",
    "Flow",
    "CommandOutcome",

    # Context and configuration models
    "ExecutionContext",
    "ParamSpec",
    "CommandSpec",
    "RequestSpec",
    "FacilitySpec",
    "Configuration",

    # Parameters
    "ParameterFilter",
    "apply_filter",
    "SOURCE_ALIASES",
    "RequestSources",
    "ParameterResolver",
    "parse_source",

    # Commands
    "Command",
    "BaseCommand",
    "Cacheable",
    "Observable",
    "Explainable",
    "ParameterDefinition",
    "ParameterCollection",
    "CommandDescriptor",
    "Request",
]
