"""
SQLModel datasource: an SQLAlchemy engine built from a database URL.
"""

import logging
import threading
from typing import Any, Dict, Optional

from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from ..core.errors import ConfigurationError
from ..core.filters import apply_filter
from .base import Datasource

logger = logging.getLogger(__name__)


class SQLModelDatasource(Datasource):
    """
    Params:
        url: Database URL, for example `sqlite:///app.db` (defaults to in-memory SQLite)
        echo: Echo SQL statements
        create_tables: Create tables for every SQLModel table model on init
    """

    def __init__(self, params: Optional[Dict[str, Any]] = None, name: str = "db"):
        super().__init__(params, name)
        self.engine: Optional[Engine] = None
        self._lock = threading.RLock()

    def init(self) -> None:
        url = self.params.get("url", "sqlite://")
        echo = apply_filter("boolean", self.params.get("echo", False))
        try:
            self.engine = create_engine(url, echo=echo)
        except Exception as e:
            raise ConfigurationError(f"Could not create engine for datasource {self.name}: {e}") from e

        if apply_filter("boolean", self.params.get("create_tables", False)):
            SQLModel.metadata.create_all(self.engine)
        logger.debug(f"Datasource {self.name} initialised: {self.engine.url}")

    def get(self) -> Engine:
        if self.engine is None:
            with self._lock:
                if self.engine is None:
                    self.init()
        return self.engine

    def session(self) -> Session:
        """Open a new SQLModel session bound to this datasource's engine."""
        return Session(self.get())
