"""
Shared fixtures for the StarChain test suite.
"""

import pytest

from starchain.app.mapper import RequestMapper
from starchain.app.output import OutputChannel
from starchain.cache.manager import CacheManager
from starchain.cache.memory import MemoryCache
from starchain.core.context import ExecutionContext
from starchain.logs.manager import LoggerManager
from starchain.logs.memory import ArrayLogger

from helpers import Counting


@pytest.fixture(autouse=True)
def reset_counters():
    Counting.calls = 0
    yield
    Counting.calls = 0


@pytest.fixture
def memory_cache():
    return MemoryCache({"is_default": True}, "memory")


@pytest.fixture
def cache_manager(memory_cache):
    return CacheManager({"memory": memory_cache})


@pytest.fixture
def array_logger():
    return ArrayLogger({}, "array")


@pytest.fixture
def output():
    return OutputChannel()


@pytest.fixture
def context(cache_manager, array_logger, output):
    """A context wired to an in-memory cache, an array logger and an output channel."""
    return ExecutionContext(
        logger=LoggerManager({"array": array_logger}),
        cache_manager=cache_manager,
        request_mapper=RequestMapper(),
        output=output,
    )
