"""
Command Outcome - Closed Control-Flow Result

Every command execution is reduced to one CommandOutcome. The dispatcher
matches on its Flow and never has to know about concrete exception types.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, TYPE_CHECKING

from .errors import (
    FatalError, ForwardRequest, Interrupt, RecoverableError,
)

if TYPE_CHECKING:
    from .context import ExecutionContext


class Flow(Enum):
    """What the command loop does after a command."""
    CONTINUE = "continue"
    RECOVER = "recover"
    STOP_SILENT = "stop_silent"
    STOP_FATAL = "stop_fatal"
    FORWARD = "forward"

    @property
    def stops(self) -> bool:
        return self in (Flow.STOP_SILENT, Flow.STOP_FATAL, Flow.FORWARD)

    @property
    def disqualifies_cache(self) -> bool:
        return self is not Flow.CONTINUE


@dataclass(frozen=True)
class CommandOutcome:
    """
    Result of running a single command.

    Only FORWARD carries a destination; only RECOVER and STOP_FATAL carry an error.
    """
    flow: Flow
    command: Optional[str] = None
    error: Optional[BaseException] = None
    destination: Optional[str] = None
    context: Optional['ExecutionContext'] = None
    allow_internal: bool = False

    @classmethod
    def proceed(cls, command: Optional[str] = None) -> 'CommandOutcome':
        return cls(Flow.CONTINUE, command=command)

    @classmethod
    def recover(cls, error: BaseException, command: Optional[str] = None) -> 'CommandOutcome':
        return cls(Flow.RECOVER, command=command, error=error)

    @classmethod
    def stop_silent(cls, command: Optional[str] = None) -> 'CommandOutcome':
        return cls(Flow.STOP_SILENT, command=command)

    @classmethod
    def stop_fatal(cls, error: BaseException, command: Optional[str] = None) -> 'CommandOutcome':
        return cls(Flow.STOP_FATAL, command=command, error=error)

    @classmethod
    def forward(cls, signal: ForwardRequest, command: Optional[str] = None) -> 'CommandOutcome':
        return cls(
            Flow.FORWARD,
            command=command,
            destination=signal.destination,
            context=signal.context,
            allow_internal=signal.allow_internal,
        )

    @classmethod
    def from_exception(cls, exc: BaseException, command: Optional[str] = None) -> 'CommandOutcome':
        """Classify a raised signal. Anything unrecognised is fatal."""
        # ForwardRequest is an Interrupt, so it must be checked first.
        if isinstance(exc, ForwardRequest):
            return cls.forward(exc, command)
        if isinstance(exc, Interrupt):
            return cls.stop_silent(command)
        if isinstance(exc, FatalError):
            return cls.stop_fatal(exc, command)
        if isinstance(exc, RecoverableError):
            return cls.recover(exc, command)
        return cls.stop_fatal(exc, command)


__all__ = ["Flow", "CommandOutcome"]
