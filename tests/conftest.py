"""
Helpers for building ASGI scopes, requests and handlers in tests.
"""

from collections.abc import Callable, Awaitable
from typing import Any

from httproute.request import Request
from httproute.response import TextResponse


def make_scope(
    method: str = "GET",
    path: str = "/",
    headers: dict[str, str] | None = None,
    query_string: str = "",
    scope_type: str = "http",
    extras: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Build a minimal ASGI scope dict."""
    raw_headers: list[tuple[bytes, bytes]] = []
    for name, value in (headers or {}).items():
        raw_headers.append((name.lower().encode("latin-1"), value.encode("latin-1")))

    scope: dict[str, Any] = {
        "type": scope_type,
        "method": method,
        "path": path,
        "query_string": query_string.encode("utf-8"),
        "headers": raw_headers,
        "client": ("127.0.0.1", 12345),
        "scheme": "http",
    }
    if extras:
        scope.update(extras)
    return scope


def make_receive(body: bytes = b"") -> Callable[[], Awaitable[dict[str, Any]]]:
    """Create a simple ASGI receive callable that yields one body chunk."""
    called = False

    async def receive() -> dict[str, Any]:
        nonlocal called
        if not called:
            called = True
            return {"type": "http.request", "body": body, "more_body": False}
        return {"type": "http.disconnect"}

    return receive


def make_request(method: str = "GET", path: str = "/", **kwargs: Any) -> Request:
    """Build a :class:`Request` over a fresh scope."""
    return Request(make_scope(method=method, path=path, **kwargs), make_receive())


class ResponseCapture:
    """Captures ASGI send() messages for assertions."""

    def __init__(self) -> None:
        self.messages: list[dict[str, Any]] = []
        self.status: int = 0
        self.headers: dict[str, str] = {}
        self.body: bytes = b""

    async def __call__(self, message: dict[str, Any]) -> None:
        self.messages.append(message)
        if message["type"] == "http.response.start":
            self.status = message.get("status", 0)
            for name, value in message.get("headers", []):
                self.headers[name.decode("latin-1").lower()] = value.decode("latin-1")
        elif message["type"] == "http.response.body":
            self.body += message.get("body", b"")


class NextCapture:
    """A continuation that records how often and with what error it ran."""

    def __init__(self) -> None:
        self.calls: list[BaseException | None] = []

    async def __call__(self, error: BaseException | None = None) -> None:
        self.calls.append(error)

    @property
    def called(self) -> bool:
        return bool(self.calls)


async def ok(request: Request, send: Any, call_next: Any) -> None:
    """Terminal handler answering 200 with the request method."""
    await TextResponse(request.method)(send, head=request.method == "HEAD")
