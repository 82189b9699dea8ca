"""
Cache, logger and datasource facilities.
"""

import logging
from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy import text
from sqlalchemy.engine import Engine

from starchain.app.output import OutputChannel
from starchain.cache import memory as memory_module
from starchain.cache.manager import CacheManager
from starchain.cache.memory import MemoryCache
from starchain.core.errors import LOG_FATAL, LOG_RECOVERABLE, LOG_USER
from starchain.datasource.manager import DatasourceManager
from starchain.datasource.sql import SQLModelDatasource
from starchain.logs.base import LoggerBackend
from starchain.logs.manager import LoggerManager
from starchain.logs.memory import ArrayLogger
from starchain.logs.output import OutputLogger
from starchain.logs.stdlib import StdlibLogger

from helpers import CountingDatasource


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def time(self):
        return self.now


class TestMemoryCache:

    def test_set_get_has_delete(self):
        cache = MemoryCache()
        cache.set("a", 1)
        assert cache.get("a") == 1 and cache.has("a")
        assert cache.delete("a")
        assert not cache.delete("a")
        assert cache.get("a") is None

    def test_ttl_expiry(self, monkeypatch):
        clock = FakeClock()
        monkeypatch.setattr(memory_module, "time", clock)
        cache = MemoryCache()
        cache.set("short", "v", ttl=10)
        cache.set("forever", "v")
        clock.now += 11
        assert cache.get("short") is None
        assert not cache.has("short")
        assert cache.get("forever") == "v"

    def test_default_ttl_param(self, monkeypatch):
        clock = FakeClock()
        monkeypatch.setattr(memory_module, "time", clock)
        cache = MemoryCache({"ttl": 5})
        cache.set("a", 1)
        clock.now += 6
        assert cache.get("a") is None

    def test_cleanup_expired(self, monkeypatch):
        clock = FakeClock()
        monkeypatch.setattr(memory_module, "time", clock)
        cache = MemoryCache()
        cache.set("a", 1, ttl=1)
        cache.set("b", 2, ttl=100)
        clock.now += 2
        assert cache.cleanup_expired() == 1
        assert len(cache) == 1

    def test_clear(self):
        cache = MemoryCache()
        cache.set("a", 1)
        cache.clear()
        assert len(cache) == 0

    def test_is_default_param(self):
        assert MemoryCache({"is_default": "true"}).is_default()
        assert MemoryCache({"isDefault": True}).is_default()
        assert not MemoryCache().is_default()


class TestCacheManager:

    @pytest.fixture
    def caches(self):
        first = MemoryCache({}, "first")
        second = MemoryCache({"is_default": True}, "second")
        return first, second, CacheManager({"first": first, "second": second})

    def test_get_scans_in_order(self, caches):
        first, second, manager = caches
        second.set("k", "from-second")
        assert manager.get("k") == "from-second"
        first.set("k", "from-first")
        assert manager.get("k") == "from-first"

    def test_set_writes_to_default(self, caches):
        first, second, manager = caches
        manager.set("k", "v")
        assert second.get("k") == "v"
        assert not first.has("k")

    def test_set_writes_to_named_cache(self, caches):
        first, second, manager = caches
        manager.set("k", "v", cache="first")
        assert first.get("k") == "v"
        assert not second.has("k")

    def test_set_without_default_stores_nothing(self):
        only = MemoryCache({}, "only")
        CacheManager({"only": only}).set("k", "v")
        assert not only.has("k")

    def test_lookup_helpers(self, caches):
        first, second, manager = caches
        second.set("k", "v")
        assert manager.has("k")
        assert manager.which_cache_has("k") == "second"
        assert manager.which_cache_has("nope") is None
        assert manager.get_cache_names() == ["first", "second"]
        assert manager.get_cache_by_name("first") is first
        assert manager.get_default_cache() is second
        manager.delete("k")
        assert not manager.has("k")


class Exploding(LoggerBackend):
    def log(self, message, category, details):
        raise RuntimeError("logger down")


class TestLoggers:

    def test_array_logger_formats_messages(self):
        backend = ArrayLogger()
        backend.raw_log("boom", LOG_FATAL)
        assert backend.get_messages() == ["Fatal-Error: boom"]

    def test_array_logger_html(self):
        backend = ArrayLogger({"html": True})
        backend.raw_log("boom", LOG_USER, "details")
        assert backend.messages == ['<div class="log-item User-Error">boom<pre class="log-details">details</pre></div>']

    def test_category_filter(self):
        backend = ArrayLogger({"categories": "Fatal Error, User Error"})
        backend.raw_log("skip", LOG_RECOVERABLE)
        backend.raw_log("keep", LOG_USER)
        assert [entry[1] for entry in backend.entries] == ["keep"]

    def test_exception_details_include_traceback(self):
        backend = ArrayLogger()
        try:
            raise ValueError("bad value")
        except ValueError as e:
            backend.raw_log(e, LOG_FATAL)
        category, message, details = backend.entries[0]
        assert message == "bad value"
        assert "ValueError: bad value" in details
        assert "Traceback" in details

    def test_output_logger_writes_to_channel(self):
        output = OutputChannel()
        backend = OutputLogger()
        backend.output = output
        backend.raw_log("shown", LOG_USER, "more")
        assert output.getvalue() == "User Error: shown -- more\n"

    def test_stdlib_logger_levels(self, caplog):
        backend = StdlibLogger({"logger": "starchain.tests"})
        with caplog.at_level(logging.INFO, logger="starchain.tests"):
            backend.raw_log("fatal one", LOG_FATAL)
            backend.raw_log("user one", LOG_USER)
        levels = {record.getMessage(): record.levelno for record in caplog.records}
        assert levels["[Fatal Error] fatal one"] == logging.ERROR
        assert levels["[User Error] user one"] == logging.INFO

    def test_manager_never_raises(self):
        good = ArrayLogger()
        manager = LoggerManager({"bad": Exploding(), "good": good})
        manager.log("still logged", LOG_FATAL)
        assert good.get_messages() == ["Fatal-Error: still logged"]
        assert manager.get_messages() == ["Fatal-Error: still logged"]
        assert manager.get_logger_by_name("good") is good


class TestDatasources:

    def test_lazy_single_init(self):
        ds = CountingDatasource({}, "a")
        manager = DatasourceManager({"a": ds})
        assert ds.inits == 0
        manager.datasource("a")
        manager.datasource("a")
        assert ds.inits == 1
        assert manager.is_initialized("a")

    def test_concurrent_first_use_initialises_once(self):
        ds = CountingDatasource({"delay": 0.05}, "slow")
        manager = DatasourceManager({"slow": ds})
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda _: manager.datasource("slow"), range(8)))
        assert all(result is ds for result in results)
        assert ds.inits == 1

    def test_sqlmodel_engine_created_once_under_concurrency(self):
        ds = SQLModelDatasource({"url": "sqlite://"}, "db")
        with ThreadPoolExecutor(max_workers=8) as pool:
            engines = list(pool.map(lambda _: ds.get(), range(8)))
        assert all(engine is engines[0] for engine in engines)

    def test_default_datasource(self):
        other = CountingDatasource({}, "other")
        main = CountingDatasource({"is_default": True}, "main")
        manager = DatasourceManager({"other": other, "main": main})
        assert manager.datasource() is main
        assert manager.datasource("missing") is None

    def test_initialize_all(self):
        a, b = CountingDatasource({}, "a"), CountingDatasource({}, "b")
        manager = DatasourceManager({"a": a, "b": b})
        manager.initialize_all()
        assert (a.inits, b.inits) == (1, 1)

    def test_sqlmodel_datasource(self):
        ds = SQLModelDatasource({"url": "sqlite://"}, "db")
        engine = DatasourceManager({"db": ds}).datasource("db").get()
        assert isinstance(engine, Engine)
        with engine.connect() as conn:
            assert conn.execute(text("SELECT 1")).scalar() == 1
        with ds.session() as session:
            assert session.connection().execute(text("SELECT 2")).scalar() == 2
