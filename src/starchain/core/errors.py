"""
Control-Flow Signals and Errors

Commands communicate with the dispatcher by raising one of these.
The dispatcher turns each into a CommandOutcome (see outcome.py).
"""

from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .context import ExecutionContext


# Log categories used by the dispatcher and the logger facilities.
LOG_FATAL = "Fatal Error"
LOG_RECOVERABLE = "Recoverable Error"
LOG_USER = "User Error"


class StarChainError(Exception):
    """Base class for all StarChain errors."""
    pass


class RecoverableError(StarChainError):
    """A failure that is logged, after which the chain continues."""
    pass


class ParameterError(RecoverableError):
    """A required parameter is missing or a filter rejected its value."""

    def __init__(self, message: str, parameter: Optional[str] = None, command: Optional[str] = None):
        super().__init__(message)
        self.parameter = parameter
        self.command = command


class FatalError(StarChainError):
    """Stops the request and is logged as fatal."""
    pass


class ConfigurationError(StarChainError):
    """Raised while building requests, commands or facilities."""
    pass


class RequestNotFoundError(StarChainError):
    """The request name is unknown or illegal."""
    pass


class Interrupt(Exception):
    """
    Stops the command chain without signalling an error.

    Used by commands that already produced the full response,
    a redirect for example.
    """
    pass


class ForwardRequest(Interrupt):
    """
    Stops the current request and starts another one.

    Args:
        destination: Name of the request to run next
        context: Context to carry into the next request, or None for a fresh one
        allow_internal: Whether the destination may be an @-prefixed internal request
    """

    def __init__(self, destination: str, context: Optional['ExecutionContext'] = None, allow_internal: bool = True):
        super().__init__(f"Request forward to {destination}.")
        self.destination = destination
        self.context = context
        self.allow_internal = allow_internal


__all__ = [
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
]
