"""
StarChain Logs Module

Application-level loggers that receive Fatal, Recoverable and User errors
from the dispatcher and from commands.
"""

from .base import LoggerBackend
from .memory import ArrayLogger
from .output import OutputLogger
from .stdlib import StdlibLogger
from .manager import LoggerManager

__all__ = [
    "LoggerBackend",
    "ArrayLogger",
    "OutputLogger",
    "StdlibLogger",
    "LoggerManager",
]
