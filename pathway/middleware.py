"""Request context adapter for the router.

The router itself never touches requests. This module connects it to the
per-request context of a hosting application:

- ``ScopeContext`` keeps routing values in an ASGI ``scope`` dict
- ``ContainerContext`` keeps them in a bevy container, so injectables can
  ask for the route context of the current request
- ``RoutingMiddleware`` stores the table, resolves the request path and
  writes the ``MatchResult`` under ``ROUTE_MATCH_KEY``
- ``RoutingASGIMiddleware`` runs ``RoutingMiddleware`` in front of an ASGI app

Examples:
    Routing an ASGI application:

    ```python
    table = RouteTable.build(definitions)
    app = RoutingASGIMiddleware(inner_app, table)

    # Inside inner_app
    match = scope[ROUTE_MATCH_KEY]
    if not match:
        ...  # respond 404
    ```

    Routing inside a bevy container:

    ```python
    container = Registry().create_container()
    context = RoutingMiddleware(table)(ContainerContext(container, scope))
    container.get(RouteContextData)[ROUTE_MATCH_KEY]
    ```
"""

import logging
from collections.abc import Awaitable, Callable, Hashable, MutableMapping
from typing import Any, Protocol, runtime_checkable

from bevy.containers import Container

from pathway.routing.generation import Bindings, ReverseFailure, reverse
from pathway.routing.resolvers import MatchResult, resolve
from pathway.routing.table import RouteTable

logger = logging.getLogger(__name__)

ROUTE_TABLE_KEY = "pathway.route_table"
ROUTE_PATH_KEY = "pathway.route_path"
ROUTE_MATCH_KEY = "pathway.route_match"


@runtime_checkable
class ContextStore(Protocol):
    """Per-request key-value store the router reads from and writes to."""

    def get(self, key: str, default: Any = None) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...

    def path_info(self) -> str: ...


def scope_path_info(scope: MutableMapping[str, Any]) -> str:
    """Return the request path relative to the application's mount point.

    ``root_path`` is stripped from ``path``; an empty result becomes ``"/"``.
    """
    path = scope.get("path") or "/"
    root_path = scope.get("root_path") or ""
    if root_path and path.startswith(root_path):
        path = path[len(root_path) :] or "/"
    return path


class ScopeContext:
    """Routing context stored directly in an ASGI scope."""

    def __init__(self, scope: MutableMapping[str, Any]):
        self.scope = scope

    def get(self, key: str, default: Any = None) -> Any:
        return self.scope.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self.scope[key] = value

    def path_info(self) -> str:
        return scope_path_info(self.scope)


class RouteContextData(dict):
    """Routing values of one request, registered in its bevy container."""


class ContainerContext:
    """Routing context held by a bevy container.

    The values live in a ``RouteContextData`` instance added to the
    container, and the route table is also added under ``RouteTable`` so
    injectables can depend on either directly.

    Args:
        container: The request's container.
        scope: The ASGI scope the request path is read from when no path
            has been set explicitly.
    """

    def __init__(
        self, container: Container, scope: MutableMapping[str, Any] | None = None
    ):
        self.container = container
        self.scope = scope if scope is not None else {}
        self.data = RouteContextData()
        container.add(RouteContextData, self.data)

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self.data[key] = value
        if key == ROUTE_TABLE_KEY:
            self.container.add(RouteTable, value)

    def path_info(self) -> str:
        return scope_path_info(self.scope)


def table_from(context: ContextStore) -> RouteTable:
    """Return the table stored in ``context``, or an empty table."""
    table = context.get(ROUTE_TABLE_KEY)
    if table is None:
        return RouteTable.empty()
    return table


def resolve_in(context: ContextStore, path: str) -> MatchResult:
    """Resolve ``path`` with the table stored in ``context``."""
    return resolve(table_from(context), path)


def reverse_in(
    context: ContextStore, name: Hashable, bindings: Bindings | None = None
) -> str | ReverseFailure:
    """Build a path with the table stored in ``context``."""
    return reverse(table_from(context), name, bindings)


class RoutingMiddleware:
    """Resolve the current request and record the result in its context.

    The path is taken from ``ROUTE_PATH_KEY`` when an earlier layer has set
    it (e.g. after rewriting the URL), otherwise from ``path_info()``.
    """

    def __init__(self, table: RouteTable):
        self.table = table

    def __call__(self, context: ContextStore) -> ContextStore:
        context.set(ROUTE_TABLE_KEY, self.table)
        path = context.get(ROUTE_PATH_KEY)
        if path is None:
            path = context.path_info()

        result = resolve(self.table, path)
        if result:
            logger.debug(f"Path {path!r} resolved to route {result.route_name!r}")
        else:
            logger.debug(f"No route found for path {path!r}")

        context.set(ROUTE_MATCH_KEY, result)
        return context


ASGIApp = Callable[[MutableMapping[str, Any], Callable, Callable], Awaitable[None]]


class RoutingASGIMiddleware:
    """ASGI middleware that resolves HTTP and WebSocket requests.

    Other scope types (e.g. ``lifespan``) pass through untouched.
    """

    def __init__(self, app: ASGIApp, table: RouteTable):
        self.app = app
        self.routing = RoutingMiddleware(table)

    async def __call__(self, scope, receive, send) -> None:
        if scope["type"] in ("http", "websocket"):
            self.routing(ScopeContext(scope))
        await self.app(scope, receive, send)
