r"""Route pattern elements and regular expression composition.

A route pattern is an ordered list of elements matched left to right:
- ``Literal`` text is a regular expression fragment copied verbatim
- ``Group`` wraps a sub-expression in a named capture, optionally with a
  default value used when the group captures nothing

The composed expression for a pattern is the concatenation of its
elements wrapped in ``^...$``.

Examples:
    >>> compose_expression(["users/", Group("name", r"\w+", "foo"), "/"])
    '^users/(?P<name>\w+)/$'

    >>> compose_expression(["users/", ("name", r"\w+"), "/images"])
    '^users/(?P<name>\w+)/images$'
"""

import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

logger = logging.getLogger(__name__)


class _Missing:
    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()
"""Marker for a group that declares no default value."""


def canonical_name(name: Any) -> str:
    """Normalize a group name token to its string key.

    Group names may be written as strings or integers (``1`` and ``"1"``
    refer to the same group). Byte strings are decoded as UTF-8.
    """
    if isinstance(name, bytes):
        return name.decode("utf-8")
    return str(name)


@dataclass(frozen=True, slots=True)
class Literal:
    """A raw expression fragment matched verbatim as part of the route."""

    text: str


@dataclass(frozen=True, slots=True)
class Group:
    """A named capture group.

    ``name`` is canonicalized to a string on construction. ``default`` is
    substituted when the group matches the empty string during resolution,
    and used in place of a missing binding during reverse generation.
    """

    name: str
    expression: str
    default: Any = field(default=MISSING)

    def __post_init__(self) -> None:
        object.__setattr__(self, "name", canonical_name(self.name))

    @property
    def has_default(self) -> bool:
        return self.default is not MISSING


PatternElement = Literal | Group


def coerce_element(element: Any) -> PatternElement:
    """Convert a shorthand pattern element into a ``Literal`` or ``Group``.

    Accepted forms:
    - ``Literal`` / ``Group`` instances, returned unchanged
    - ``str``: a literal
    - ``(name, expression)`` or ``(name, expression, default)`` tuples
    - mappings with ``group``, ``expr`` and an optional ``default`` key,
      the shape used by YAML route files; a ``null`` default means the
      group has no default

    Raises:
        TypeError: If the element has none of the accepted shapes.
    """
    if isinstance(element, (Literal, Group)):
        return element
    if isinstance(element, str):
        return Literal(element)
    if isinstance(element, tuple) and len(element) in (2, 3):
        return Group(*element)
    if isinstance(element, Mapping) and "group" in element and "expr" in element:
        default = element.get("default")
        return Group(
            element["group"], element["expr"], MISSING if default is None else default
        )
    raise TypeError(f"Invalid pattern element: {element!r}")


def coerce_pattern(pattern: Iterable[Any]) -> tuple[PatternElement, ...]:
    if isinstance(pattern, str):
        return (Literal(pattern),)
    return tuple(coerce_element(element) for element in pattern)


_LITERAL_GROUP_NAME = re.compile(r"\(\?P<([^>]+)>")
ALIAS_PREFIX = "_g"


def literal_group_names(elements: Iterable[PatternElement]) -> set[str]:
    """Return the capture names written inside literal fragments."""
    names: set[str] = set()
    for element in elements:
        if isinstance(element, Literal):
            names.update(_LITERAL_GROUP_NAME.findall(element.text))
    return names


def assign_aliases(elements: tuple[PatternElement, ...]) -> dict[int, str]:
    """Choose the capture name of every group, keyed by element index.

    ``re`` only accepts identifiers as capture names, so a group whose name
    is not one, such as ``"1"``, gets a generated ``_g<n>`` name. Generated
    names skip every name already used by the pattern's groups or literals.
    """
    taken = literal_group_names(elements)
    taken.update(
        element.name
        for element in elements
        if isinstance(element, Group) and element.name.isidentifier()
    )

    aliases: dict[int, str] = {}
    counter = 0
    for index, element in enumerate(elements):
        if not isinstance(element, Group):
            continue
        if element.name.isidentifier():
            aliases[index] = element.name
            continue
        while f"{ALIAS_PREFIX}{counter}" in taken:
            counter += 1
        aliases[index] = f"{ALIAS_PREFIX}{counter}"
        taken.add(aliases[index])
    return aliases


def render_element(element: PatternElement, alias: str | None = None) -> str:
    if isinstance(element, Literal):
        return element.text
    return f"(?P<{alias}>{element.expression})"


def compose_expression(pattern: Iterable[Any]) -> str:
    """Build the anchored expression text for a pattern."""
    elements = coerce_pattern(pattern)
    aliases = assign_aliases(elements)
    body = "".join(
        render_element(element, aliases.get(i)) for i, element in enumerate(elements)
    )
    return f"^{body}$"


@dataclass(frozen=True, slots=True)
class CompiledPattern:
    """The compiled form of a pattern.

    ``aliases`` maps each canonical group name to its capture name in
    ``matcher``; ``defaults`` maps group names to declared default values.
    """

    expression: str
    matcher: re.Pattern[str]
    aliases: Mapping[str, str]
    defaults: Mapping[str, Any]


def compile_pattern(pattern: Iterable[Any]) -> CompiledPattern:
    """Compile a pattern into an anchored matcher and a defaults table.

    Raises:
        re.error: If the composed expression is not a valid regular expression
            or a group name is used twice.
    """
    elements = coerce_pattern(pattern)
    capture_names = assign_aliases(elements)
    aliases: dict[str, str] = {}
    defaults: dict[str, Any] = {}
    for index, element in enumerate(elements):
        if isinstance(element, Group):
            if element.name in aliases:
                raise re.error(f"redefinition of group name {element.name!r}")
            aliases[element.name] = capture_names[index]
            if element.has_default:
                defaults[element.name] = element.default

    expression = compose_expression(elements)
    matcher = re.compile(expression)
    logger.debug(f"Compiled route expression {expression!r}")
    return CompiledPattern(
        expression=expression,
        matcher=matcher,
        aliases=MappingProxyType(aliases),
        defaults=MappingProxyType(defaults),
    )
