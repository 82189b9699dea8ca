"""
Starlette Web Adapter

Serves a Registry over HTTP. Each incoming request gets its own
Dispatcher, run in Starlette's threadpool, while caches and datasources
are shared for the lifetime of the app.

```python
from starchain.adapters.starlette import create_app
app = create_app(registry)
```

The request to run is taken from the `ff` query parameter, or else from
the first path segment: `/hello?name=World` runs request `hello`.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from starlette.applications import Starlette
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import FormData, UploadFile
from starlette.endpoints import HTTPEndpoint
from starlette.exceptions import HTTPException
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import Route

from ..app.dispatcher import Dispatcher
from ..app.output import OutputChannel
from ..app.registry import RegistryReader
from ..cache.manager import CacheManager
from ..config import StarChainConfig
from ..core.params import RequestSources
from ..datasource.manager import DatasourceManager

logger = logging.getLogger(__name__)

BODY_METHODS = ("POST", "PUT", "PATCH", "DELETE")


async def parse_form(req: Request) -> Any:
    "Starlette errors on empty multipart forms, so this checks for that situation"
    ctype = req.headers.get("Content-Type", "")
    if ctype == "application/json":
        try: return await req.json()
        except ValueError: raise HTTPException(400, "Invalid JSON body")
    if not ctype.startswith("multipart/form-data"): return await req.form()
    try: boundary = ctype.split("boundary=")[1].strip()
    except IndexError: raise HTTPException(400, "Invalid form-data: no boundary")
    min_len = len(boundary) + 6
    clen = int(req.headers.get("Content-Length", "0"))
    if clen <= min_len: return FormData()
    return await req.form()


def _formitem(form, k):
    "Return single item `k` from `form` if len 1, otherwise return list"
    if isinstance(form, dict): return form.get(k)
    o = form.getlist(k)
    return o[0] if len(o) == 1 else o if o else None


def _server_vars(request: Request) -> Dict[str, Any]:
    url = request.url
    server: Dict[str, Any] = {
        "REQUEST_METHOD": request.method,
        "REQUEST_URI": url.path + (f"?{url.query}" if url.query else ""),
        "PATH_INFO": url.path,
        "QUERY_STRING": url.query,
        "SERVER_NAME": url.hostname,
        "SERVER_PORT": url.port,
        "SCRIPT_NAME": request.scope.get("root_path", ""),
        "REMOTE_ADDR": request.client.host if request.client else None,
    }
    if url.scheme == "https":
        server["HTTPS"] = "on"
    for name, value in request.headers.items():
        server["HTTP_" + name.upper().replace("-", "_")] = value
    return server


async def sources_from_request(request: Request, argv: Optional[Sequence[Any]] = None) -> RequestSources:
    """Collect query, form, cookie, session, server and upload values from `request`."""
    query = request.query_params
    get = {k: _formitem(query, k) for k in query.keys()}

    post: Dict[str, Any] = {}
    files: Dict[str, Any] = {}
    if request.method in BODY_METHODS:
        form = await parse_form(request)
        if not isinstance(form, (dict, FormData)):
            logger.debug(f"Ignoring non-object body for {request.url.path}")
            form = {}
        for k in form.keys():
            value = _formitem(form, k)
            if isinstance(value, UploadFile):
                files[k] = value
            else:
                post[k] = value

    session = request.session if "session" in request.scope else {}

    return RequestSources(
        get=get,
        post=post,
        cookie=dict(request.cookies),
        session=session,
        server=_server_vars(request),
        argv=list(argv or []),
        files=files,
    )


def request_identifier(request: Request, config: StarChainConfig) -> str:
    """The `ff` query value, else the first path segment, else the default request."""
    ff = request.query_params.get(config.web.request_param)
    if ff:
        return ff
    segment = request.path_params.get("path", "").strip("/").split("/")[0]
    return segment or config.dispatcher.default_request


class StarChainEndpoint(HTTPEndpoint):
    """Runs the request named by the URL through a fresh Dispatcher."""

    async def get(self, request: Request) -> Response:
        return await self.handle(request)

    async def post(self, request: Request) -> Response:
        return await self.handle(request)

    async def handle(self, request: Request) -> Response:
        state = request.app.state
        config: StarChainConfig = state.starchain_config
        identifier = request_identifier(request, config)
        sources = await sources_from_request(request)

        def run() -> OutputChannel:
            dispatcher = Dispatcher(
                state.starchain_reader,
                config=config,
                sources=sources,
                cache_manager=state.starchain_cache_manager,
                datasource_manager=state.starchain_datasource_manager,
            )
            dispatcher.handle_request(identifier)
            return dispatcher.output

        output = await run_in_threadpool(run)
        headers = dict(output.headers)
        media_type = headers.pop("Content-Type", "text/html")
        logger.debug(f"{request.method} {request.url.path} -> {identifier} ({output.status})")
        return Response(output.getvalue(), status_code=output.status, headers=headers, media_type=media_type)


def create_app(
    registry: Any,
    config: Optional[StarChainConfig] = None,
    middleware: Optional[Iterable[Any]] = None,
    routes: Optional[List[Any]] = None,
) -> Starlette:
    """
    Build a Starlette app serving `registry`.

    Args:
        registry: Registry, RegistryReader, Configuration or plain dict
        config: Runtime settings; defaults to StarChainConfig()
        middleware: Starlette middleware, e.g. SessionMiddleware for the `session` source
        routes: Extra routes, matched before the catch-all StarChain routes
    """
    config = config or StarChainConfig()
    reader = registry if isinstance(registry, RegistryReader) else RegistryReader(registry)

    caches = reader.get_caches()
    app_routes = list(routes or []) + [
        Route("/", StarChainEndpoint, methods=["GET", "POST"]),
        Route("/{path:path}", StarChainEndpoint, methods=["GET", "POST"]),
    ]
    app = Starlette(debug=config.web.debug, routes=app_routes, middleware=list(middleware or []))
    app.state.starchain_config = config
    app.state.starchain_reader = reader
    app.state.starchain_cache_manager = CacheManager(caches) if caches else None
    app.state.starchain_datasource_manager = DatasourceManager(reader.get_datasources())
    return app


__all__ = [
    "parse_form",
    "sources_from_request",
    "request_identifier",
    "StarChainEndpoint",
    "create_app",
]
