class PathwayException(Exception):
    """Base exception for pathway routing."""
    message: str # Type hint for the message attribute

    def __init__(self, message: str | None = None, *args):
        super().__init__(message, *args)
        # Use the provided message, else the first extra arg, else the class name
        if message is not None:
            self.message = message
        elif args and args[0]:
            self.message = str(args[0])
        else:
            self.message = self.__class__.__name__


class CompileError(PathwayException):
    """Raised at registration time when a route cannot be compiled.

    ``reason`` is ``"invalid-expression"`` when the composed regular
    expression is rejected by ``re``, or ``"unknown-capture"`` when a
    capture group name does not appear in the pattern.
    """

    INVALID_EXPRESSION = "invalid-expression"
    UNKNOWN_CAPTURE = "unknown-capture"

    def __init__(self, route_name, reason: str, detail: str = ""):
        message = f"Cannot compile route {route_name!r} ({reason})"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.route_name = route_name
        self.reason = reason
        self.detail = detail


class DuplicateRouteError(PathwayException):
    """Raised by strict table construction when route names repeat."""

    def __init__(self, names: list):
        super().__init__(
            "Duplicate route names: " + ", ".join(repr(name) for name in names)
        )
        self.names = names


class ReverseError(PathwayException):
    """Raised by ``url_for`` when a path cannot be generated."""


class RouteNotFoundError(ReverseError):
    def __init__(self, route_name):
        super().__init__(f"No route named {route_name!r}")
        self.route_name = route_name


class MissingBindingError(ReverseError):
    def __init__(self, route_name, group: str):
        super().__init__(
            f"Missing required binding {group!r} for route {route_name!r}"
        )
        self.route_name = route_name
        self.group = group


class PathwayConfigError(PathwayException):
    """Raised when routing configuration is invalid.

    ``problems`` lists every offending option found during validation so
    they can all be fixed in one pass.
    """

    def __init__(self, message: str, problems: list[str] | None = None):
        self.problems = list(problems or [])
        if self.problems:
            message = message + "\n" + "\n".join(f"  - {p}" for p in self.problems)
        super().__init__(message)
