"""
Request Dispatcher

Front controller that resolves an identifier to a request and runs its
command chain against a shared execution context. Every command's result,
error or signal is reduced to a CommandOutcome, and the dispatcher decides
from its Flow whether to continue, stop, recover or forward.
"""

import logging
from typing import Any, Mapping, Optional, Union

from ..cache.manager import CacheManager
from ..config import StarChainConfig
from ..core.context import ExecutionContext
from ..core.errors import (
    LOG_FATAL, LOG_RECOVERABLE, LOG_USER,
    ConfigurationError, FatalError, ParameterError, RequestNotFoundError,
)
from ..core.outcome import CommandOutcome, Flow
from ..core.params import ParameterResolver, RequestSources
from ..core.request import CommandDescriptor, Request
from ..datasource.manager import DatasourceManager
from ..logs.manager import LoggerManager
from .output import OutputChannel
from .registry import Registry, RegistryReader

logger = logging.getLogger(__name__)

NOT_FOUND_BODY = "<h1>Not Found</h1>"


class Dispatcher:
    """
    Runs requests from a Registry.

    A dispatcher owns the facility managers built from the registry and
    one output channel. Build one per incoming HTTP request (or per CLI run).

    Args:
        registry: Registry, RegistryReader, Configuration or plain dict
        config: Runtime settings (fallback request, forward depth, base URL)
        sources: Request values the parameter resolver reads from
        output: Where commands write; a fresh in-memory channel by default
        initial_context: Values every fresh context starts with
        cache_manager: Shared cache manager; built from the registry when omitted
        datasource_manager: Shared datasource manager; built from the registry when omitted
    """

    def __init__(
        self,
        registry: Union[Registry, RegistryReader, Any],
        config: Optional[StarChainConfig] = None,
        sources: Optional[RequestSources] = None,
        output: Optional[OutputChannel] = None,
        initial_context: Optional[Mapping[str, Any]] = None,
        cache_manager: Optional[CacheManager] = None,
        datasource_manager: Optional[DatasourceManager] = None,
    ):
        self.config = config or StarChainConfig()
        self.reader = registry if isinstance(registry, RegistryReader) else RegistryReader(registry)
        self.output = output if output is not None else OutputChannel()
        self.resolver = ParameterResolver(sources)
        self.initial_context = dict(initial_context or {})

        self.logger_manager = LoggerManager(self.reader.get_loggers())
        if cache_manager is None:
            caches = self.reader.get_caches()
            cache_manager = CacheManager(caches) if caches else None
        self.cache_manager = cache_manager
        if datasource_manager is None:
            datasource_manager = DatasourceManager(self.reader.get_datasources())
        self.datasource_manager = datasource_manager

        self.logger_manager.set_output(self.output)
        self.logger_manager.set_datasource_manager(self.datasource_manager)
        self.datasource_manager.set_logger_manager(self.logger_manager)
        if self.cache_manager is not None:
            self.logger_manager.set_cache_manager(self.cache_manager)
            self.datasource_manager.set_cache_manager(self.cache_manager)
            self.cache_manager.set_logger_manager(self.logger_manager)
            self.cache_manager.set_datasource_manager(self.datasource_manager)

        mapper_class = self.reader.get_request_mapper()
        self.request_mapper = mapper_class(
            self.logger_manager, self.cache_manager, self.datasource_manager, base_url=self.config.web.base_url,
        )

    # Public API

    def handle_request(
        self,
        identifier: Optional[str] = None,
        initial_context: Optional[Union[ExecutionContext, Mapping[str, Any]]] = None,
        allow_internal: bool = False,
    ) -> None:
        """
        Run the request named by `identifier`.

        Never raises: failures are logged through the logger manager and
        end the request.
        """
        identifier = identifier or self.config.dispatcher.default_request
        try:
            self._dispatch(identifier, initial_context, allow_internal, depth=0)
        except Exception as e:
            logger.exception(f"Unhandled error while dispatching {identifier}")
            self.logger_manager.log(e, LOG_FATAL)

    def run(self, identifier: Optional[str] = None, **kwargs) -> str:
        """Handle a request and return everything written to the in-memory output."""
        self.handle_request(identifier, **kwargs)
        return self.output.getvalue()

    def gen_cache_key(self, request_name: str) -> str:
        return f"request-{request_name}"

    def explain_request(self, request: Request) -> str:
        out = f"REQUEST: {request.name}\n"
        for descriptor in request:
            if descriptor.instance.explainable:
                out += descriptor.instance.explain()
            else:
                klass = descriptor.implementation
                out += (
                    f"CMD: {descriptor.name} ({klass.__module__}.{klass.__qualname__}): "
                    "Unexplainable command, unknown parameters.\n"
                )
        return out + "\n"

    def new_context(self, initial: Optional[Mapping[str, Any]] = None) -> ExecutionContext:
        """Build a context wired to this dispatcher's facilities."""
        values = dict(self.initial_context)
        values.update(initial or {})
        return ExecutionContext(
            values,
            logger=self.logger_manager,
            datasources=self.datasource_manager,
            cache_manager=self.cache_manager,
            request_mapper=self.request_mapper,
            output=self.output,
        )

    def execute_command(self, descriptor: CommandDescriptor, context: ExecutionContext) -> CommandOutcome:
        """Resolve parameters for one command, run it, and classify what happened."""
        command = descriptor.instance
        try:
            try:
                params = self.resolver.resolve(descriptor, context)
            except ParameterError as e:
                command.on_parameter_error(e)
                params = self.resolver.resolve(descriptor, context, strict=False)

            if command.observable and descriptor.listeners:
                command.set_event_handlers(descriptor.listeners)

            command.execute(params, context)
        except Exception as e:
            return CommandOutcome.from_exception(e, descriptor.name)
        return CommandOutcome.proceed(descriptor.name)

    # Internals

    def _dispatch(
        self,
        identifier: str,
        initial_context: Optional[Union[ExecutionContext, Mapping[str, Any]]],
        allow_internal: bool,
        depth: int,
    ) -> None:
        request = self._resolve_request(identifier, allow_internal)
        if request is None:
            return

        if request.explaining:
            self.output.write(self.explain_request(request))
            return

        cache_key = None
        if request.caching and self.cache_manager is not None:
            cache_key = self.gen_cache_key(request.name)
            try:
                cached = self.cache_manager.get(cache_key)
            except Exception as e:
                logger.error(f"Request cache read failed for {cache_key}: {e}")
                self.logger_manager.log(e, LOG_FATAL)
                return
            if cached is not None:
                logger.debug(f"Serving {request.name} from request cache")
                self.output.write(cached)
                return

        if isinstance(initial_context, ExecutionContext):
            context = initial_context
        else:
            context = self.new_context(initial_context)

        if cache_key is None:
            self._run_commands(request, context, depth)
            return

        with self.output.capture() as captured:
            cacheable = self._run_commands(request, context, depth)

        if cacheable:
            try:
                self.cache_manager.set(cache_key, captured.text)
            except Exception as e:
                logger.error(f"Request cache write failed for {cache_key}: {e}")
                self.logger_manager.log(e, LOG_FATAL)

    def _resolve_request(self, identifier: str, allow_internal: bool) -> Optional[Request]:
        try:
            name = self.request_mapper.identifier_to_request_name(identifier)
            return self.reader.get_request(name, allow_internal)
        except RequestNotFoundError as e:
            logger.info(f"Request not found: {identifier}")
            self.logger_manager.log(e, LOG_USER)
        except ConfigurationError as e:
            logger.error(f"Could not build request {identifier}: {e}")
            self.logger_manager.log(e, LOG_FATAL)
            return None

        fallback = self.request_mapper.identifier_to_request_name(self.config.dispatcher.not_found_request)
        if self.reader.has_request(fallback, allow_internal):
            try:
                return self.reader.get_request(fallback, allow_internal)
            except ConfigurationError as e:
                logger.error(f"Could not build fallback request {fallback}: {e}")
                self.logger_manager.log(e, LOG_FATAL)
                return None

        self.output.status = 404
        self.output.write(NOT_FOUND_BODY)
        return None

    def _run_commands(self, request: Request, context: ExecutionContext, depth: int) -> bool:
        """Run the chain. Returns True when every command completed normally."""
        clean = True
        for descriptor in request:
            outcome = self.execute_command(descriptor, context)
            flow = outcome.flow
            if flow.disqualifies_cache:
                clean = False

            if flow is Flow.RECOVER:
                logger.warning(f"Recoverable error in {request.name}.{descriptor.name}: {outcome.error}")
                self.logger_manager.log(outcome.error, LOG_RECOVERABLE)
            elif flow is Flow.STOP_SILENT:
                logger.debug(f"Request {request.name} interrupted by {descriptor.name}")
            elif flow is Flow.STOP_FATAL:
                logger.error(f"Fatal error in {request.name}.{descriptor.name}: {outcome.error}")
                self.logger_manager.log(outcome.error, LOG_FATAL)
            elif flow is Flow.FORWARD:
                self._forward(request, outcome, depth)

            if flow.stops:
                break
        return clean

    def _forward(self, request: Request, outcome: CommandOutcome, depth: int) -> None:
        limit = self.config.dispatcher.max_forward_depth
        if depth >= limit:
            error = FatalError(f"Forward from {request.name} to {outcome.destination} exceeds depth {limit}")
            logger.error(str(error))
            self.logger_manager.log(error, LOG_FATAL)
            return

        logger.debug(f"Forwarding {request.name} to {outcome.destination}")
        self._dispatch(outcome.destination, outcome.context, outcome.allow_internal, depth + 1)


__all__ = ["Dispatcher", "NOT_FOUND_BODY"]
