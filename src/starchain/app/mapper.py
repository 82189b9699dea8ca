"""
Request Mapper

Translates between external identifiers (a path segment, a query value)
and request names. Replace it with `Registry.use_request_mapper()` to
implement a routing scheme.
"""

from typing import Any, Dict, Optional, TYPE_CHECKING
from urllib.parse import urlencode

if TYPE_CHECKING:
    from ..cache.manager import CacheManager
    from ..datasource.manager import DatasourceManager
    from ..logs.manager import LoggerManager


class RequestMapper:
    """
    Identity mapping: the identifier is the request name.

    URLs point at `base_url` with the request name in the `ff` query
    parameter; the `default` request needs no parameter.
    """

    def __init__(
        self,
        logger_manager: Optional['LoggerManager'] = None,
        cache_manager: Optional['CacheManager'] = None,
        datasource_manager: Optional['DatasourceManager'] = None,
        base_url: str = "/",
    ):
        self.logger_manager = logger_manager
        self.cache_manager = cache_manager
        self.datasource_manager = datasource_manager
        self.base_url = base_url

    def identifier_to_request_name(self, identifier: str) -> str:
        return identifier

    def request_name_to_url(
        self,
        request: str = "default",
        params: Optional[Dict[str, Any]] = None,
        fragment: Optional[str] = None,
    ) -> str:
        query = dict(params or {})
        if request != "default":
            query["ff"] = request

        url = self.base_url
        if query:
            url += "?" + urlencode(query)
        if fragment:
            url += "#" + fragment
        return url


__all__ = ["RequestMapper"]
