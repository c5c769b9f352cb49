"""
httproute exceptions.
Configuration problems are raised while routes are built; HTTP errors are
only turned into responses by the server.
"""


class HttprouteException(Exception):
    """Base exception for all httproute errors."""

    def __init__(self, message: str = "An error occurred") -> None:
        self.message = message
        super().__init__(self.message)


class RoutingError(HttprouteException):
    """Routing-related errors."""
    pass


class ConfigurationError(RoutingError):
    """
    Invalid condition or handler given to a route.

    Raised when the route is constructed, never while handling a request.
    """
    pass


class ContinuationError(RoutingError):
    """A handler signalled completion more than once."""
    pass


class HTTPException(HttprouteException):
    """HTTP-related exceptions with status codes."""

    def __init__(
        self,
        status_code: int = 500,
        detail: str = "Internal Server Error",
        headers: dict[str, str] | None = None,
    ) -> None:
        self.status_code = status_code
        self.detail = detail
        self.headers = headers or {}
        super().__init__(detail)


class NotFound(HTTPException):
    """404 Not Found."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(404, detail)



class PayloadTooLarge(HTTPException):
    """413 Payload Too Large."""

    def __init__(self, detail: str = "Payload Too Large") -> None:
        super().__init__(413, detail)
