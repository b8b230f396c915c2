"""Routing layer for pathway - route patterns, the route table, resolution and reverse generation."""

from pathway.routing.generation import (
    KeyNotFound,
    ReverseFailure,
    RouteNotFound,
    reverse,
    url_for,
)
from pathway.routing.patterns import MISSING, Group, Literal, compose_expression
from pathway.routing.resolvers import NO_MATCH, Matched, MatchResult, NoMatch, resolve
from pathway.routing.routes import CompiledRoute, RouteDefinition, compile_route, route
from pathway.routing.table import RouteTable

__all__ = [
    "MISSING",
    "NO_MATCH",
    "CompiledRoute",
    "Group",
    "KeyNotFound",
    "Literal",
    "MatchResult",
    "Matched",
    "NoMatch",
    "ReverseFailure",
    "RouteDefinition",
    "RouteNotFound",
    "RouteTable",
    "compile_route",
    "compose_expression",
    "resolve",
    "reverse",
    "route",
    "url_for",
]
