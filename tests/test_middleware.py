import pytest
from bevy.registries import Registry

from pathway.middleware import (
    ROUTE_MATCH_KEY,
    ROUTE_PATH_KEY,
    ROUTE_TABLE_KEY,
    ContainerContext,
    ContextStore,
    RouteContextData,
    RoutingASGIMiddleware,
    RoutingMiddleware,
    ScopeContext,
    resolve_in,
    reverse_in,
    scope_path_info,
)
from pathway.routing import NO_MATCH, Matched, RouteNotFound, RouteTable


def http_scope(path: str, root_path: str = "") -> dict:
    return {"type": "http", "method": "GET", "path": path, "root_path": root_path}


@pytest.mark.parametrize(
    ("scope", "expected"),
    [
        ({"path": "/users/1"}, "/users/1"),
        ({"path": "/api/users/1", "root_path": "/api"}, "/users/1"),
        ({"path": "/api", "root_path": "/api"}, "/"),
        ({"path": "/other", "root_path": "/api"}, "/other"),
        ({}, "/"),
    ],
)
def test_scope_path_info(scope, expected):
    assert scope_path_info(scope) == expected


def test_contexts_satisfy_protocol():
    container = Registry().create_container()
    assert isinstance(ScopeContext({}), ContextStore)
    assert isinstance(ContainerContext(container), ContextStore)


def test_middleware_stores_table_and_match(table):
    scope = http_scope("/url/test/100/")
    RoutingMiddleware(table)(ScopeContext(scope))

    assert scope[ROUTE_TABLE_KEY] is table
    assert scope[ROUTE_MATCH_KEY] == Matched("foo", (("1", "url"), ("bar", "test"), ("baz", "100")))


def test_middleware_prefers_explicit_path(table):
    scope = http_scope("/hello")
    scope[ROUTE_PATH_KEY] = "/"
    RoutingMiddleware(table)(ScopeContext(scope))
    assert scope[ROUTE_MATCH_KEY] == Matched("root", ())


def test_middleware_records_no_match(table):
    context = RoutingMiddleware(table)(ScopeContext(http_scope("/hello")))
    assert context.get(ROUTE_MATCH_KEY) is NO_MATCH


def test_middleware_strips_root_path(table):
    context = RoutingMiddleware(table)(ScopeContext(http_scope("/app/static/", root_path="/app")))
    assert context.get(ROUTE_MATCH_KEY) == Matched("baz", ())


def test_container_context(table):
    container = Registry().create_container()
    context = RoutingMiddleware(table)(ContainerContext(container, http_scope("/")))

    data = container.get(RouteContextData)
    assert data[ROUTE_MATCH_KEY] == Matched("root", ())
    assert container.get(RouteTable) is table
    assert context.get(ROUTE_TABLE_KEY) is table


def test_resolve_and_reverse_in_context(table):
    context = ScopeContext(http_scope("/"))
    context.set(ROUTE_TABLE_KEY, table)

    assert resolve_in(context, "/static/") == Matched("baz", ())
    assert reverse_in(context, "foo", {1: "url"}) == "/url/bar/0/"


def test_context_without_table_behaves_as_empty():
    context = ScopeContext({})
    assert resolve_in(context, "/") is NO_MATCH
    assert reverse_in(context, "root") == RouteNotFound("root")


@pytest.mark.asyncio
async def test_asgi_middleware_routes_http(table):
    seen = []

    async def app(scope, receive, send):
        seen.append(scope.get(ROUTE_MATCH_KEY))

    middleware = RoutingASGIMiddleware(app, table)
    await middleware(http_scope("/static/"), None, None)
    await middleware({"type": "lifespan"}, None, None)

    assert seen == [Matched("baz", ()), None]
