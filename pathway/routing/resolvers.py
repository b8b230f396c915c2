"""Path resolution against a route table.

``resolve`` answers which route a path belongs to and with which
bindings. Not finding a route is a routine outcome, so it is returned as
the ``NO_MATCH`` value instead of being raised.
"""

from collections.abc import Hashable
from dataclasses import dataclass
from typing import Any

from pathway.routing.table import RouteTable


@dataclass(frozen=True, slots=True)
class NoMatch:
    """No route matched the path. Falsy, so ``if match:`` reads naturally."""

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NO_MATCH"


NO_MATCH = NoMatch()


@dataclass(frozen=True, slots=True)
class Matched:
    """A route matched the path.

    ``bindings`` holds ``(group_name, value)`` pairs in the order of the
    route's capture groups. The same pairs can be passed back to
    ``reverse`` to rebuild the path.
    """

    route_name: Hashable
    bindings: tuple[tuple[str, Any], ...] = ()

    @property
    def params(self) -> dict[str, Any]:
        return dict(self.bindings)


MatchResult = NoMatch | Matched


def resolve(table: RouteTable, path: str) -> MatchResult:
    """Resolve ``path`` to the first matching route in ``table``.

    Routes are tried in ascending name order and each route must match the
    whole path. Values that are not strings never match.

    Args:
        table: The route table to search.
        path: The request path, e.g. ``"/users/alice/"``.

    Returns:
        ``Matched`` with the route name and bindings, or ``NO_MATCH``.

    Examples:
        >>> resolve(table, "/url/test/100/")
        Matched(route_name='foo', bindings=(('1', 'url'), ('bar', 'test'), ('baz', '100')))

        >>> resolve(table, "/hello")
        NO_MATCH
    """
    if not isinstance(path, str):
        return NO_MATCH

    for compiled in table:
        bindings = compiled.match(path)
        if bindings is not None:
            return Matched(route_name=compiled.name, bindings=bindings)
    return NO_MATCH
