"""
Runtime configuration and logging setup.
"""

import json
import logging

import pytest

from starchain.config import (
    Environment, LoggingConfig, StarChainConfig, configure_logging,
)


class TestStarChainConfig:

    def test_defaults(self):
        config = StarChainConfig()
        assert config.environment is Environment.DEVELOPMENT
        assert config.dispatcher.default_request == "default"
        assert config.dispatcher.not_found_request == "not-found"
        assert config.dispatcher.max_forward_depth == 10
        assert config.web.request_param == "ff"
        assert config.web.base_url == "/"

    def test_for_environment(self):
        dev = StarChainConfig.for_environment(Environment.DEVELOPMENT)
        assert dev.debug is True
        assert dev.logging.level == "DEBUG"

        testing = StarChainConfig.for_environment(Environment.TESTING)
        assert testing.logging.level == "WARNING"

        prod = StarChainConfig.for_environment(Environment.PRODUCTION)
        assert prod.debug is False
        assert prod.logging.file_path is not None

    def test_dict_round_trip(self):
        config = StarChainConfig.from_dict({
            "environment": "staging",
            "debug": True,
            "dispatcher": {"max_forward_depth": 4, "unknown": "ignored"},
            "web": {"base_url": "/app/"},
            "custom": {"theme": "dark"},
        })
        assert config.environment is Environment.STAGING
        assert config.dispatcher.max_forward_depth == 4
        assert not hasattr(config.dispatcher, "unknown")

        data = config.to_dict()
        assert data["environment"] == "staging"
        assert data["web"]["base_url"] == "/app/"
        assert data["custom"] == {"theme": "dark"}
        assert StarChainConfig.from_dict(data).to_dict() == data

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("STARCHAIN_ENV", "testing")
        monkeypatch.setenv("STARCHAIN_DEBUG", "true")
        monkeypatch.setenv("STARCHAIN_NOT_FOUND_REQUEST", "missing")
        monkeypatch.setenv("STARCHAIN_MAX_FORWARD_DEPTH", "2")
        monkeypatch.setenv("STARCHAIN_LOG_LEVEL", "ERROR")

        config = StarChainConfig.from_environment()
        assert config.environment is Environment.TESTING
        assert config.debug is True
        assert config.dispatcher.not_found_request == "missing"
        assert config.dispatcher.max_forward_depth == 2
        assert config.logging.level == "ERROR"

    def test_from_file(self, tmp_path):
        path = tmp_path / "starchain.json"
        path.write_text(json.dumps({"dispatcher": {"default_request": "home"}}))
        config = StarChainConfig.from_file(path)
        assert config.dispatcher.default_request == "home"

    def test_from_file_errors(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            StarChainConfig.from_file(tmp_path / "missing.json")

        path = tmp_path / "starchain.yaml"
        path.write_text("dispatcher: {}")
        with pytest.raises(ValueError):
            StarChainConfig.from_file(path)


class TestConfigureLogging:

    def test_file_handler(self, tmp_path):
        log_file = tmp_path / "logs" / "app.log"
        logger = configure_logging(
            LoggingConfig(level="DEBUG", file_path=str(log_file)), logger_name="starchain.test_config",
        )
        try:
            assert logger.level == logging.DEBUG
            assert len(logger.handlers) == 2

            logger.debug("written to file")
            for handler in logger.handlers:
                handler.flush()
            assert "written to file" in log_file.read_text()
        finally:
            for handler in list(logger.handlers):
                logger.removeHandler(handler)
                handler.close()

    def test_reconfigure_replaces_handlers(self):
        name = "starchain.test_reconfigure"
        configure_logging(LoggingConfig(), logger_name=name)
        logger = configure_logging(LoggingConfig(level="warning"), logger_name=name)
        try:
            assert len(logger.handlers) == 1
            assert logger.level == logging.WARNING
        finally:
            for handler in list(logger.handlers):
                logger.removeHandler(handler)
                handler.close()
