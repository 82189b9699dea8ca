"""
Request

A request is an immutable, ordered chain of command descriptors built by
the RegistryReader for a single dispatch.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from .command import Command
from .definitions import ParamSpec


@dataclass(frozen=True)
class CommandDescriptor:
    """A ready-to-run command: its instance plus its configured parameters and listeners."""
    name: str
    implementation: type
    instance: Command
    params: Dict[str, ParamSpec] = field(default_factory=dict)
    listeners: Dict[str, List[Callable]] = field(default_factory=dict)
    caching: bool = False


@dataclass(frozen=True)
class Request:
    """
    An ordered list of commands to run, plus the caching and explaining flags.

    Iterating a request yields its CommandDescriptors in execution order.
    """
    name: str
    commands: Tuple[CommandDescriptor, ...] = ()
    caching: bool = False
    explaining: bool = False
    description: str = ""

    def __iter__(self) -> Iterator[CommandDescriptor]:
        return iter(self.commands)

    def __len__(self) -> int:
        return len(self.commands)

    def command(self, name: str) -> Optional[CommandDescriptor]:
        for descriptor in self.commands:
            if descriptor.name == name:
                return descriptor
        return None


__all__ = ["CommandDescriptor", "Request"]
