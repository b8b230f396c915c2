import importlib
import logging
import os
import re
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TypedDict

import yaml

from pathway.exceptions import PathwayConfigError
from pathway.routing.patterns import coerce_pattern
from pathway.routing.routes import CompiledRoute, RouteDefinition
from pathway.routing.table import RouteTable

logger = logging.getLogger(__name__)

# Default route file name
DEFAULT_CONFIG_FILE = "pathway.routes.yaml"


class GroupConfig(TypedDict, total=False):
    group: str | int
    expr: str
    default: Any


class RouteConfig(TypedDict, total=False):
    name: Any
    doc: str
    pattern: list[str | GroupConfig] | str
    capture: list[str | int]


class PathwayConfig(TypedDict, total=False):
    strict: bool
    routes: list[RouteConfig]
    entries: list[str]


CONFIG_KEYS = frozenset(PathwayConfig.__annotations__)
ROUTE_KEYS = frozenset(RouteConfig.__annotations__)


@dataclass(frozen=True, slots=True)
class RouterSettings:
    """Validated routing configuration.

    Attributes:
        strict: Reject repeated route names instead of keeping the last one.
        routes: Route definitions declared in the configuration file.
        entries: ``"module.path:attribute"`` strings naming route sources
            in application code.
    """

    strict: bool = False
    routes: tuple[RouteDefinition, ...] = ()
    entries: tuple[str, ...] = ()


def import_from_string(import_str: str) -> Any:
    """Import a class, function, or variable from a module by string.

    Args:
        import_str: String in the format "module.path:symbol". Dotted
            symbols reach nested attributes.

    Returns:
        The imported object.

    Raises:
        PathwayConfigError: If the string is malformed or the module or
            symbol cannot be imported.

    Examples:
        ```python
        routes = import_from_string("myapp.routes:ROUTES")
        ```
    """
    if ":" not in import_str:
        raise PathwayConfigError(
            f"Invalid import string format '{import_str}'. Expected 'module.path:symbol'."
        )

    module_path, object_path = import_str.split(":", 1)

    try:
        module = importlib.import_module(module_path)

        # Handle nested attributes
        target = module
        for part in object_path.split("."):
            target = getattr(target, part)

        return target
    except (ImportError, AttributeError) as e:
        raise PathwayConfigError(f"Failed to import '{import_str}': {str(e)}") from e


def load_entry(import_str: str) -> list[RouteDefinition | CompiledRoute]:
    """Load the route definitions named by a registration entry.

    The entry may point at a sequence of definitions or at a callable
    taking no arguments that returns one.

    Raises:
        PathwayConfigError: If the entry cannot be imported or does not
            produce route definitions.
    """
    target = import_from_string(import_str)
    if callable(target):
        target = target()

    if isinstance(target, (str, bytes)) or not isinstance(target, Iterable):
        raise PathwayConfigError(
            f"Route entry '{import_str}' must provide a sequence of routes"
        )

    definitions = list(target)
    invalid = [
        repr(item)
        for item in definitions
        if not isinstance(item, (RouteDefinition, CompiledRoute))
    ]
    if invalid:
        raise PathwayConfigError(
            f"Route entry '{import_str}' provided values that are not routes",
            invalid,
        )

    logger.debug(f"Loaded {len(definitions)} routes from '{import_str}'")
    return definitions


def collect_routes(entries: Iterable[str]) -> list[RouteDefinition | CompiledRoute]:
    """Load and concatenate the routes of several registration entries."""
    definitions: list[RouteDefinition | CompiledRoute] = []
    for entry in entries:
        definitions.extend(load_entry(entry))
    return definitions


def load_raw_config(config_path: str | Path) -> dict[str, Any]:
    """Read a route file. A missing or empty file gives an empty config.

    Raises:
        PathwayConfigError: If the file cannot be read, is not valid YAML,
            or does not hold a mapping.
    """
    path = Path(config_path)
    if not path.exists():
        logger.debug(f"No route file at {path}")
        return {}

    try:
        with path.open() as f:
            config = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise PathwayConfigError(f"Cannot read route file {path}: {e}") from e

    if not isinstance(config, dict):
        raise PathwayConfigError(f"Route file {path} must hold a mapping")
    return config


_ENV_VAR = re.compile(r"\$\{([^}]+)\}")


def _expand_env(value: str) -> str:
    def lookup(match: re.Match[str]) -> str:
        name = match.group(1)
        if name not in os.environ:
            raise PathwayConfigError(f"Required environment variable '{name}' is not set")
        return os.environ[name]

    return _ENV_VAR.sub(lookup, value)


def _substitute_env_vars(value: Any) -> Any:
    """Expand ``${VAR}`` references in every string of a loaded route file."""
    if isinstance(value, str):
        return _expand_env(value)
    if isinstance(value, dict):
        return {key: _substitute_env_vars(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_substitute_env_vars(item) for item in value]
    return value


def _validate_route(index: int, raw: Any, problems: list[str]) -> RouteDefinition | None:
    where = f"routes[{index}]"
    if not isinstance(raw, dict):
        problems.append(f"{where}: must be a mapping")
        return None

    found = len(problems)
    for key in sorted(set(raw) - ROUTE_KEYS, key=str):
        problems.append(f"{where}: unknown option '{key}'")

    if "name" not in raw:
        problems.append(f"{where}: missing required 'name'")
    elif isinstance(raw["name"], bool) or not isinstance(raw["name"], (str, int)):
        problems.append(f"{where}.name: must be a string or an integer")

    doc = raw.get("doc", "")
    if not isinstance(doc, str):
        problems.append(f"{where}.doc: must be a string")

    pattern = raw.get("pattern")
    if pattern is None:
        problems.append(f"{where}: missing required 'pattern'")
    elif not isinstance(pattern, (str, list)):
        problems.append(f"{where}.pattern: must be a string or a list")
    else:
        try:
            pattern = coerce_pattern(pattern)
        except TypeError as e:
            problems.append(f"{where}.pattern: {e}")

    capture = raw.get("capture", [])
    if not isinstance(capture, list):
        problems.append(f"{where}.capture: must be a list")

    if len(problems) > found:
        return None
    return RouteDefinition(
        name=raw["name"], pattern=pattern, doc=doc, capture_groups=tuple(capture)
    )


def validate_config(config: dict[str, Any]) -> RouterSettings:
    """Validate a raw configuration dictionary.

    Every problem found is collected before raising, so a single error
    reports all offending options.

    Raises:
        PathwayConfigError: If any option is unknown or has the wrong shape.
    """
    problems: list[str] = []

    for key in sorted(set(config) - CONFIG_KEYS, key=str):
        problems.append(f"unknown option '{key}'")

    strict = config.get("strict", False)
    if not isinstance(strict, bool):
        problems.append("strict: must be true or false")

    routes: list[RouteDefinition] = []
    raw_routes = config.get("routes", [])
    if not isinstance(raw_routes, list):
        problems.append("routes: must be a list")
    else:
        for index, raw in enumerate(raw_routes):
            definition = _validate_route(index, raw, problems)
            if definition is not None:
                routes.append(definition)

    entries = config.get("entries", [])
    if not isinstance(entries, list):
        problems.append("entries: must be a list")
    else:
        for index, entry in enumerate(entries):
            if not isinstance(entry, str) or ":" not in entry:
                problems.append(
                    f"entries[{index}]: expected 'module.path:attribute', got {entry!r}"
                )

    if problems:
        raise PathwayConfigError("Invalid routing configuration", problems)

    return RouterSettings(strict=strict, routes=tuple(routes), entries=tuple(entries))


def load_config(config_path: str | Path = DEFAULT_CONFIG_FILE) -> RouterSettings:
    """
    Load, substitute environment variables in, and validate a route file.

    Raises:
        PathwayConfigError: If the configuration is invalid
    """
    config = load_raw_config(config_path)
    config = _substitute_env_vars(config)
    return validate_config(config)


def build_table(settings: RouterSettings) -> RouteTable:
    """Build a route table from declared routes followed by entry routes.

    Entry routes come last, so with ``strict`` off they replace declared
    routes of the same name.
    """
    definitions = [*settings.routes, *collect_routes(settings.entries)]
    return RouteTable.build(definitions, strict=settings.strict)


def build_table_from_config(config_path: str | Path = DEFAULT_CONFIG_FILE) -> RouteTable:
    """Load a route file and build its route table."""
    return build_table(load_config(config_path))
