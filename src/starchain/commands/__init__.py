"""
Built-in commands.
"""

from .basic import EchoText, Increment
from .context import AddToContext, DumpContext
from .flow import Forward
from .http import Redirect

__all__ = [
    "AddToContext",
    "DumpContext",
    "EchoText",
    "Increment",
    "Forward",
    "Redirect",
]
