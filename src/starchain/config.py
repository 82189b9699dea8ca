"""
Configuration Management for StarChain Applications

Runtime settings for the dispatcher, the web adapter and logging, with
presets per environment. Requests and facilities are configured through
the Registry; this module covers everything around them.
"""

import json
import logging
import os
from dataclasses import asdict, dataclass, field, fields
from enum import Enum
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional, Union


class Environment(Enum):
    """Application environments"""
    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"


@dataclass
class DispatcherConfig:
    """Dispatcher behaviour"""
    default_request: str = "default"
    not_found_request: str = "not-found"
    max_forward_depth: int = 10


@dataclass
class WebConfig:
    """Web adapter configuration"""
    request_param: str = "ff"
    debug: bool = False
    base_url: str = "/"


@dataclass
class LoggingConfig:
    """Logging configuration"""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file_path: Optional[str] = None
    max_file_size: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5


def _update(target: Any, values: Dict[str, Any]) -> None:
    names = {f.name for f in fields(target)}
    for key, value in values.items():
        if key in names:
            setattr(target, key, value)


@dataclass
class StarChainConfig:
    """Complete application configuration"""
    environment: Environment = Environment.DEVELOPMENT
    debug: bool = False

    dispatcher: DispatcherConfig = field(default_factory=DispatcherConfig)
    web: WebConfig = field(default_factory=WebConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    custom: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def for_environment(cls, environment: Environment) -> 'StarChainConfig':
        """Create configuration for specific environment"""
        config = cls(environment=environment)

        if environment == Environment.DEVELOPMENT:
            config.debug = True
            config.web.debug = True
            config.logging.level = "DEBUG"

        elif environment == Environment.TESTING:
            config.logging.level = "WARNING"

        elif environment == Environment.PRODUCTION:
            config.debug = False
            config.web.debug = False
            config.logging.level = "INFO"
            config.logging.file_path = "/var/log/starchain/app.log"

        return config

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'StarChainConfig':
        """Create configuration from dictionary. Unknown keys are ignored."""
        environment = Environment(config_dict.get("environment", Environment.DEVELOPMENT.value))
        config = cls(environment=environment)

        if "debug" in config_dict:
            config.debug = config_dict["debug"]
        if "dispatcher" in config_dict:
            _update(config.dispatcher, config_dict["dispatcher"])
        if "web" in config_dict:
            _update(config.web, config_dict["web"])
        if "logging" in config_dict:
            _update(config.logging, config_dict["logging"])
        if "custom" in config_dict:
            config.custom = dict(config_dict["custom"])

        return config

    @classmethod
    def from_file(cls, config_path: Union[str, Path]) -> 'StarChainConfig':
        """Load configuration from a JSON file"""
        config_path = Path(config_path)

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
        if config_path.suffix != ".json":
            raise ValueError(f"Unsupported configuration file format: {config_path.suffix}")

        with open(config_path) as f:
            return cls.from_dict(json.load(f))

    @classmethod
    def from_environment(cls) -> 'StarChainConfig':
        """Create configuration from environment variables"""
        environment = Environment(os.getenv("STARCHAIN_ENV", "development"))
        config = cls.for_environment(environment)

        if os.getenv("STARCHAIN_DEBUG"):
            config.debug = os.getenv("STARCHAIN_DEBUG").lower() == "true"

        if os.getenv("STARCHAIN_NOT_FOUND_REQUEST"):
            config.dispatcher.not_found_request = os.getenv("STARCHAIN_NOT_FOUND_REQUEST")

        if os.getenv("STARCHAIN_MAX_FORWARD_DEPTH"):
            config.dispatcher.max_forward_depth = int(os.getenv("STARCHAIN_MAX_FORWARD_DEPTH"))

        if os.getenv("STARCHAIN_LOG_LEVEL"):
            config.logging.level = os.getenv("STARCHAIN_LOG_LEVEL")

        return config

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary"""
        return {
            "environment": self.environment.value,
            "debug": self.debug,
            "dispatcher": asdict(self.dispatcher),
            "web": asdict(self.web),
            "logging": asdict(self.logging),
            "custom": dict(self.custom),
        }


def configure_logging(config: LoggingConfig, logger_name: str = "starchain") -> logging.Logger:
    """
    Apply `config` to the `starchain` logger hierarchy.

    Safe to call more than once; handlers installed by an earlier call are replaced.
    """
    logger = logging.getLogger(logger_name)
    logger.setLevel(getattr(logging, config.level.upper(), logging.INFO))

    for handler in list(logger.handlers):
        if getattr(handler, "_starchain", False):
            logger.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(config.format)
    handlers = [logging.StreamHandler()]
    if config.file_path:
        Path(config.file_path).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(RotatingFileHandler(
            config.file_path, maxBytes=config.max_file_size, backupCount=config.backup_count,
        ))

    for handler in handlers:
        handler.setFormatter(formatter)
        handler._starchain = True
        logger.addHandler(handler)

    return logger


__all__ = [
    "Environment",
    "DispatcherConfig",
    "WebConfig",
    "LoggingConfig",
    "StarChainConfig",
    "configure_logging",
]
