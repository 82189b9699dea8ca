"""
Serving a registry over HTTP with the Starlette adapter.
"""

import pytest
from starlette.requests import Request
from starlette.routing import Route
from starlette.responses import PlainTextResponse
from starlette.testclient import TestClient

from starchain.adapters.starlette import create_app, request_identifier, sources_from_request
from starchain.app.dispatcher import NOT_FOUND_BODY
from starchain.app.registry import Registry
from starchain.cache.memory import MemoryCache
from starchain.commands import AddToContext, EchoText, Redirect
from starchain.config import StarChainConfig

from helpers import Counting


@pytest.fixture
def registry():
    registry = Registry("web")
    registry.cache("memory").which_invokes(MemoryCache).using("is_default", True)

    (registry.request("hello")
        .does(AddToContext, "defaults").using("name", "World")
        .does(EchoText, "echo").with_param("text").from_("get:name post:name cxt:name"))
    registry.request("default").does(EchoText, "echo").using("text", "home")
    registry.request("json").does(EchoText, "echo").using("text", '{"ok": true}').using("content_type", "application/json")
    registry.request("away").does(Redirect, "go").using("url", "https://example.com/").using("redirect_type", "302")
    (registry.request("counted").is_caching()
        .does(Counting, "count")
        .does(EchoText, "echo").with_param("text").from_("cxt:count"))
    return registry


@pytest.fixture
def client(registry):
    return TestClient(create_app(registry))


def make_request(query=b"", path="/", path_params=None, method="GET"):
    scope = {
        "type": "http",
        "method": method,
        "path": path,
        "root_path": "",
        "scheme": "http",
        "query_string": query,
        "headers": [(b"host", b"testserver"), (b"cookie", b"sid=abc")],
        "server": ("testserver", 80),
        "client": ("127.0.0.1", 1234),
        "path_params": path_params or {},
    }
    return Request(scope)


class TestEndpoint:

    def test_path_selects_request(self, client):
        response = client.get("/hello", params={"name": "Ada"})
        assert response.status_code == 200
        assert response.text == "Ada"
        assert response.headers["content-type"].startswith("text/html")

    def test_context_fallback(self, client):
        assert client.get("/hello").text == "World"

    def test_query_param_selects_request(self, client):
        assert client.get("/", params={"ff": "hello", "name": "Bob"}).text == "Bob"

    def test_root_runs_default_request(self, client):
        assert client.get("/").text == "home"

    def test_post_form(self, client):
        response = client.post("/hello", data={"name": "Cy"})
        assert response.text == "Cy"

    def test_post_json_object(self, client):
        response = client.post("/hello", json={"name": "Jo"})
        assert response.status_code == 200
        assert response.text == "Jo"

    def test_post_json_array_is_ignored(self, client):
        response = client.post("/hello", json=[1, 2])
        assert response.status_code == 200
        assert response.text == "World"

    def test_post_malformed_json(self, client):
        response = client.post("/hello", content=b"{oops", headers={"Content-Type": "application/json"})
        assert response.status_code == 400

    def test_unknown_request(self, client):
        response = client.get("/nope")
        assert response.status_code == 404
        assert response.text == NOT_FOUND_BODY

    def test_content_type(self, client):
        response = client.get("/json")
        assert response.headers["content-type"].startswith("application/json")
        assert response.json() == {"ok": True}

    def test_redirect(self, client):
        response = client.get("/away", follow_redirects=False)
        assert response.status_code == 302
        assert response.headers["location"] == "https://example.com/"

    def test_request_cache_shared_between_requests(self, client):
        assert client.get("/counted").text == "computed-k"
        assert client.get("/counted").text == "computed-k"
        assert Counting.calls == 1

    def test_extra_routes_take_precedence(self, registry):
        def health(request):
            return PlainTextResponse("ok")

        client = TestClient(create_app(registry, routes=[Route("/health", health)]))
        assert client.get("/health").text == "ok"
        assert client.get("/hello").text == "World"


class TestRequestHelpers:

    async def test_sources_from_request(self):
        request = make_request(query=b"a=1&tag=x&tag=y", path="/hello")
        sources = await sources_from_request(request, argv=["cli"])

        assert sources.get == {"a": "1", "tag": ["x", "y"]}
        assert sources.post == {}
        assert sources.cookie == {"sid": "abc"}
        assert sources.argv == ["cli"]
        assert sources.server["REQUEST_METHOD"] == "GET"
        assert sources.server["QUERY_STRING"] == "a=1&tag=x&tag=y"
        assert sources.server["HTTP_HOST"] == "testserver"
        assert sources.fetch("server", "PATH_INFO") == "/hello"

    def test_request_identifier(self):
        config = StarChainConfig()
        assert request_identifier(make_request(query=b"ff=from-query"), config) == "from-query"
        assert request_identifier(make_request(path_params={"path": "hello/extra"}), config) == "hello"
        assert request_identifier(make_request(), config) == "default"
