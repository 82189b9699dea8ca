"""
StarChain Cache Module

Named cache backends and the manager that prioritises them.
"""

from .base import CacheBackend
from .memory import MemoryCache
from .manager import CacheManager

__all__ = [
    "CacheBackend",
    "MemoryCache",
    "CacheManager",
]
