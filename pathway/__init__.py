"""pathway - named regular expression routes with resolution and reverse generation."""

from pathway.exceptions import (
    CompileError,
    DuplicateRouteError,
    MissingBindingError,
    PathwayConfigError,
    PathwayException,
    ReverseError,
    RouteNotFoundError,
)
from pathway.routing import (
    NO_MATCH,
    CompiledRoute,
    Group,
    KeyNotFound,
    Literal,
    Matched,
    NoMatch,
    RouteDefinition,
    RouteNotFound,
    RouteTable,
    resolve,
    reverse,
    route,
    url_for,
)

__all__ = [
    "NO_MATCH",
    "CompileError",
    "CompiledRoute",
    "DuplicateRouteError",
    "Group",
    "KeyNotFound",
    "Literal",
    "Matched",
    "MissingBindingError",
    "NoMatch",
    "PathwayConfigError",
    "PathwayException",
    "ReverseError",
    "RouteDefinition",
    "RouteNotFound",
    "RouteNotFoundError",
    "RouteTable",
    "resolve",
    "reverse",
    "route",
    "url_for",
]
