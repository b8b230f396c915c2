"""The immutable route table.

A ``RouteTable`` is built once from a sequence of route definitions and
then shared read-only by the resolver, the reverse generator and the
middleware adapter. Nothing mutates a table after ``build`` returns, so
concurrent readers need no locking.
"""

import logging
from collections.abc import Hashable, Iterable, Iterator, Mapping
from types import MappingProxyType

from pathway.exceptions import DuplicateRouteError
from pathway.routing.routes import CompiledRoute, RouteDefinition, compile_route

logger = logging.getLogger(__name__)


def route_order_key(name: Hashable) -> str:
    """Sort key giving the deterministic resolution order of routes."""
    return str(name)


class RouteTable:
    """Ordered, immutable mapping from route names to compiled routes.

    Routes are kept in ascending ``str(name)`` order, which is the order the
    resolver tries them in. When two routes match the same path the one
    whose name sorts first wins.

    Examples:
        ```python
        from pathway.routing import RouteTable, route

        table = RouteTable.build([
            route("root", ["/"]),
            route("user", ["/users/", ("name", r"\\w+")], groups=["name"]),
        ])

        table.names()  # ("root", "user")
        ```
    """

    __slots__ = ("_routes", "_ordered")

    def __init__(self, routes: Mapping[Hashable, CompiledRoute]):
        ordered = sorted(routes.items(), key=lambda item: route_order_key(item[0]))
        self._ordered: tuple[CompiledRoute, ...] = tuple(
            compiled for _, compiled in ordered
        )
        self._routes: Mapping[Hashable, CompiledRoute] = MappingProxyType(
            dict(ordered)
        )

    @classmethod
    def build(
        cls,
        definitions: Iterable[RouteDefinition | CompiledRoute],
        strict: bool = False,
    ) -> "RouteTable":
        """Compile route definitions and build a table from them.

        When a name repeats the later definition replaces the earlier one,
        unless ``strict`` is set.

        Args:
            definitions: Route definitions, or routes already compiled with
                ``route()``.
            strict: Raise instead of letting the last registration win.

        Raises:
            CompileError: If any definition fails to compile.
            DuplicateRouteError: If ``strict`` is set and names repeat.
        """
        routes: dict[Hashable, CompiledRoute] = {}
        duplicates: list[Hashable] = []
        for definition in definitions:
            if isinstance(definition, CompiledRoute):
                compiled = definition
            else:
                compiled = compile_route(definition)

            if compiled.name in routes:
                if compiled.name not in duplicates:
                    duplicates.append(compiled.name)
                if not strict:
                    logger.warning(
                        f"Route {compiled.name!r} registered more than once; "
                        "the last registration replaces the earlier ones"
                    )
            routes[compiled.name] = compiled

        if strict and duplicates:
            raise DuplicateRouteError(duplicates)

        table = cls(routes)
        logger.debug(f"Built route table with {len(table)} routes")
        return table

    @classmethod
    def empty(cls) -> "RouteTable":
        return cls({})

    def get(self, name: Hashable) -> CompiledRoute | None:
        return self._routes.get(name)

    def names(self) -> tuple[Hashable, ...]:
        return tuple(compiled.name for compiled in self._ordered)

    def describe(self) -> list[tuple[Hashable, str, str]]:
        """Return ``(name, doc, expression)`` for every route, in order."""
        return [
            (compiled.name, compiled.doc, compiled.expression)
            for compiled in self._ordered
        ]

    def __contains__(self, name: object) -> bool:
        return name in self._routes

    def __iter__(self) -> Iterator[CompiledRoute]:
        return iter(self._ordered)

    def __len__(self) -> int:
        return len(self._ordered)

    def __repr__(self) -> str:
        return f"<RouteTable {list(self.names())!r}>"
