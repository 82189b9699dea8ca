"""
StarChain Datasource Module
"""

from .base import Datasource
from .manager import DatasourceManager
from .sql import SQLModelDatasource

__all__ = [
    "Datasource",
    "DatasourceManager",
    "SQLModelDatasource",
]
