"""
StarChain Application Layer

The dispatcher, the registry that configures it, request-name mapping and
the output channel commands write to.
"""

from .output import OutputChannel, CapturedOutput
from .mapper import RequestMapper
from .registry import Registry, RegistryReader, load_configuration
from .dispatcher import Dispatcher, NOT_FOUND_BODY

__all__ = [
    "OutputChannel",
    "CapturedOutput",
    "RequestMapper",
    "Registry",
    "RegistryReader",
    "load_configuration",
    "Dispatcher",
    "NOT_FOUND_BODY",
]
