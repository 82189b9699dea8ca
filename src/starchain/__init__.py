"""
StarChain - Chain-of-Commands Front Controller

Map named requests to ordered chains of commands that share one
execution context, with parameter resolution from request sources,
per-command and whole-request caching, forwarding and explain mode.
"""

from .core import (
    ExecutionContext,
    Command, BaseCommand, Cacheable, Observable, Explainable,
    ParameterCollection,
    RequestSources,
    Flow, CommandOutcome,
    StarChainError, RecoverableError, ParameterError, FatalError,
    ConfigurationError, RequestNotFoundError, Interrupt, ForwardRequest,
    LOG_FATAL, LOG_RECOVERABLE, LOG_USER,
)
from .app import Dispatcher, Registry, RegistryReader, RequestMapper, OutputChannel
from .cache import CacheBackend, CacheManager, MemoryCache
from .logs import LoggerBackend, LoggerManager, ArrayLogger, OutputLogger, StdlibLogger
from .datasource import Datasource, DatasourceManager, SQLModelDatasource
from .config import StarChainConfig, DispatcherConfig, LoggingConfig, WebConfig, Environment, configure_logging

__version__ = "0.1.0"

__all__ = [
    # Application
    'Dispatcher',
    'Registry',
    'RegistryReader',
    'RequestMapper',
    'OutputChannel',
    'ExecutionContext',
    'RequestSources',

    # Commands
    'Command',
    'BaseCommand',
    'Cacheable',
    'Observable',
    'Explainable',
    'ParameterCollection',

    # Control flow
    'Flow',
    'CommandOutcome',
    'StarChainError',
    'RecoverableError',
    'ParameterError',
    'FatalError',
    'ConfigurationError',
    'RequestNotFoundError',
    'Interrupt',
    'ForwardRequest',
    'LOG_FATAL',
    'LOG_RECOVERABLE',
    'LOG_USER',

    # Facilities
    'CacheBackend',
    'CacheManager',
    'MemoryCache',
    'LoggerBackend',
    'LoggerManager',
    'ArrayLogger',
    'OutputLogger',
    'StdlibLogger',
    'Datasource',
    'DatasourceManager',
    'SQLModelDatasource',

    # Configuration
    'StarChainConfig',
    'DispatcherConfig',
    'LoggingConfig',
    'WebConfig',
    'Environment',
    'configure_logging',
]
