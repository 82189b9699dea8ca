"""
Execution Context

The shared, mutable key/value store handed to every command of a request,
plus the gateway to the logger, cache, datasource and mapper facilities.
"""

from typing import Any, Dict, Iterator, Mapping, Optional, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from ..app.mapper import RequestMapper
    from ..app.output import OutputChannel
    from ..cache.manager import CacheManager
    from ..datasource.manager import DatasourceManager
    from ..logs.manager import LoggerManager


class ExecutionContext:
    """
    Ordered name/value store for one request lifetime.

    Writing an existing name overwrites it. Reads never return aliases:
    to change a value, read it, then add() it back.
    """

    def __init__(
        self,
        initial: Optional[Mapping[str, Any]] = None,
        logger: Optional['LoggerManager'] = None,
        datasources: Optional['DatasourceManager'] = None,
        cache_manager: Optional['CacheManager'] = None,
        request_mapper: Optional['RequestMapper'] = None,
        output: Optional['OutputChannel'] = None,
    ):
        if isinstance(initial, ExecutionContext):
            initial = initial.to_dict()
        self._data: Dict[str, Any] = dict(initial or {})
        self.logger = logger
        self.datasources = datasources
        self.cache_manager = cache_manager
        self.request_mapper = request_mapper
        self.output = output

    # Store

    def add(self, name: str, value: Any) -> None:
        self._data[name] = value

    def add_all(self, values: Mapping[str, Any]) -> None:
        """Merge `values` in. Names that already exist are overwritten."""
        self._data.update(values)

    def get(self, name: str, default: Any = None) -> Any:
        value = self._data.get(name)
        return default if value is None else value

    def lookup(self, name: str) -> Tuple[Any, bool]:
        """Return `(value, found)`. A stored None counts as not found."""
        value = self._data.get(name)
        return value, value is not None

    def has(self, name: str) -> bool:
        return self._data.get(name) is not None

    def remove(self, name: str) -> None:
        self._data.pop(name, None)

    def size(self) -> int:
        return len(self._data)

    def to_dict(self) -> Dict[str, Any]:
        return dict(self._data)

    def from_dict(self, values: Mapping[str, Any]) -> None:
        self._data = dict(values)

    def __len__(self) -> int:
        return len(self._data)

    def items(self):
        return list(self._data.items())

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._data))

    def __contains__(self, name: str) -> bool:
        return self.has(name)

    def __repr__(self) -> str:
        return f"ExecutionContext({self._data})"

    # Facilities

    def log(self, message: Any, category: str) -> None:
        if self.logger is not None:
            self.logger.log(message, category)

    def datasource(self, name: Optional[str] = None) -> Any:
        """Get a datasource by name, or the default one."""
        if self.datasources is None:
            return None
        return self.datasources.datasource(name)

    ds = datasource

    def url(self, request: str = "default", params: Optional[Dict[str, Any]] = None, fragment: Optional[str] = None) -> str:
        return self.request_mapper.request_name_to_url(request, params, fragment)

    def write(self, text: str) -> None:
        """Write response output through the current output channel."""
        if self.output is not None:
            self.output.write(text)


__all__ = ["ExecutionContext"]
