"""Route definitions and their compiled form.

A ``RouteDefinition`` is the authored description of a route. Compiling it
produces a ``CompiledRoute`` holding an anchored matcher and the table of
group defaults. Compilation errors surface at registration time as
``CompileError``; they never happen while resolving.
"""

import re
from collections.abc import Hashable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from pathway.exceptions import CompileError
from pathway.routing.patterns import (
    PatternElement,
    canonical_name,
    coerce_pattern,
    compile_pattern,
)


@dataclass(frozen=True, slots=True)
class RouteDefinition:
    """A named route pattern as authored by the application.

    Args:
        name: Unique route key. Any hashable token; routes are resolved in
            the order of ``str(name)``.
        pattern: Ordered pattern elements. Shorthand forms accepted by
            ``coerce_element`` are converted on construction.
        doc: Informational documentation string, kept for introspection.
        capture_groups: Group names reported by ``resolve``, in order.

    Examples:
        ```python
        RouteDefinition(
            "user",
            ["/users/", ("name", r"\\w+", "me"), "/"],
            doc="User page",
            capture_groups=["name"],
        )
        ```
    """

    name: Hashable
    pattern: tuple[PatternElement, ...]
    doc: str = ""
    capture_groups: tuple[str, ...] = field(default=())

    def __post_init__(self) -> None:
        object.__setattr__(self, "pattern", coerce_pattern(self.pattern))
        object.__setattr__(
            self,
            "capture_groups",
            tuple(canonical_name(group) for group in self.capture_groups),
        )


@dataclass(frozen=True, slots=True)
class CompiledRoute:
    """A route ready for matching.

    ``captures`` pairs each requested group name with the capture name it
    has inside ``matcher``.
    """

    definition: RouteDefinition
    expression: str
    matcher: re.Pattern[str]
    defaults: Mapping[str, Any]
    captures: tuple[tuple[str, str], ...]

    @property
    def name(self) -> Hashable:
        return self.definition.name

    @property
    def doc(self) -> str:
        return self.definition.doc

    @property
    def pattern(self) -> tuple[PatternElement, ...]:
        return self.definition.pattern

    @property
    def capture_groups(self) -> tuple[str, ...]:
        return self.definition.capture_groups

    def match(self, path: str) -> tuple[tuple[str, Any], ...] | None:
        """Match the whole of ``path`` and return the requested bindings.

        A group that captured nothing (or did not participate in the match)
        reports its default when it declares one, otherwise ``""``.
        """
        found = self.matcher.fullmatch(path)
        if found is None:
            return None

        bindings = []
        for name, capture in self.captures:
            value = found.group(capture) or ""
            if value == "" and name in self.defaults:
                value = self.defaults[name]
            bindings.append((name, value))
        return tuple(bindings)


def compile_route(definition: RouteDefinition) -> CompiledRoute:
    """Compile a route definition.

    Raises:
        CompileError: If the composed expression is invalid or a capture
            group name does not appear in the pattern.
    """
    try:
        compiled = compile_pattern(definition.pattern)
    except re.error as e:
        raise CompileError(
            definition.name, CompileError.INVALID_EXPRESSION, str(e)
        ) from e

    generated = {
        alias for group, alias in compiled.aliases.items() if alias != group
    }
    captures = []
    for name in definition.capture_groups:
        if name in compiled.aliases:
            captures.append((name, compiled.aliases[name]))
        elif name in compiled.matcher.groupindex and name not in generated:
            # Named group written inside a literal fragment
            captures.append((name, name))
        else:
            raise CompileError(
                definition.name,
                CompileError.UNKNOWN_CAPTURE,
                f"group {name!r} is not defined by the pattern",
            )

    return CompiledRoute(
        definition=definition,
        expression=compiled.expression,
        matcher=compiled.matcher,
        defaults=compiled.defaults,
        captures=tuple(captures),
    )


def route(
    name: Hashable,
    pattern: Iterable[Any],
    doc: str = "",
    groups: Iterable[Any] = (),
) -> CompiledRoute:
    """Define and compile a route in one step.

    Only group names listed in ``groups`` are reported by ``resolve``.

    Examples:
        >>> r = route("user", ["/users/", ("name", r"\\w+")], groups=["name"])
        >>> r.expression
        '^/users/(?P<name>\\\\w+)$'
    """
    definition = RouteDefinition(
        name=name, pattern=pattern, doc=doc, capture_groups=tuple(groups)
    )
    return compile_route(definition)
