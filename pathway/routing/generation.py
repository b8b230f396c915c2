"""Reverse routing: building a path from a route name and bindings.

Reverse generation walks the route's authored pattern rather than its
compiled expression. Literal elements are copied as written and groups are
replaced by their bound value or default. Bound values are not checked
against the group's expression, so a caller can produce a path the
resolver would not match; validating values is the caller's job.
"""

from collections.abc import Hashable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from pathway.exceptions import MissingBindingError, RouteNotFoundError
from pathway.routing.patterns import Group, canonical_name
from pathway.routing.table import RouteTable


@dataclass(frozen=True, slots=True)
class RouteNotFound:
    """The table has no route with the requested name."""

    route_name: Hashable


@dataclass(frozen=True, slots=True)
class KeyNotFound:
    """A group without a default had no binding."""

    route_name: Hashable
    group: str


ReverseFailure = RouteNotFound | KeyNotFound

Bindings = Mapping[Any, Any] | Iterable[tuple[Any, Any]]


def normalize_bindings(bindings: Bindings | None) -> dict[str, Any]:
    """Canonicalize binding keys so ``1`` and ``"1"`` name the same group."""
    if bindings is None:
        return {}
    items = bindings.items() if isinstance(bindings, Mapping) else bindings
    return {canonical_name(name): value for name, value in items}


def reverse(
    table: RouteTable, name: Hashable, bindings: Bindings | None = None
) -> str | ReverseFailure:
    """Build the path for route ``name`` from ``bindings``.

    Args:
        table: The route table holding the route.
        name: The route name.
        bindings: Group values, as a mapping or as the ``(name, value)``
            pairs found in ``Matched.bindings``.

    Returns:
        The path string, or a ``RouteNotFound`` / ``KeyNotFound``
        value describing why no path could be built.

    Examples:
        >>> reverse(table, "foo", {1: "url", "bar": "test", "baz": 100})
        '/url/test/100/'

        >>> reverse(table, "foo", {"bar": "test"})
        KeyNotFound(route_name='foo', group='1')
    """
    compiled = table.get(name)
    if compiled is None:
        return RouteNotFound(name)

    values = normalize_bindings(bindings)
    pieces = []
    for element in compiled.pattern:
        if not isinstance(element, Group):
            pieces.append(element.text)
        elif element.name in values:
            pieces.append(str(values[element.name]))
        elif element.has_default:
            pieces.append(str(element.default))
        else:
            return KeyNotFound(name, element.name)
    return "".join(pieces)


def url_for(table: RouteTable, name: Hashable, /, **bindings: Any) -> str:
    """Build the path for route ``name``, raising when it cannot be built.

    Raises:
        RouteNotFoundError: If the table has no route called ``name``.
        MissingBindingError: If a group without a default has no binding.

    Examples:
        >>> url_for(table, "user", name="alice")
        '/users/alice/'
    """
    result = reverse(table, name, bindings)
    if isinstance(result, RouteNotFound):
        raise RouteNotFoundError(name)
    if isinstance(result, KeyNotFound):
        raise MissingBindingError(name, result.group)
    return result
