"""
Response handling for httproute.
Responses are plain objects awaited with the ASGI ``send`` callable.
"""

import json
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from httproute.types import Send

if TYPE_CHECKING:
    from httproute.request import Request


class Response(ABC):
    """
    Abstract base response class.

    Subclasses only decide how the content is rendered to bytes.
    A ``charset`` of None leaves the media type bare.
    """

    media_type: str = "text/plain"
    charset: str | None = "utf-8"

    def __init__(
        self,
        content: Any = None,
        status_code: int = 200,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.status_code = status_code
        self._headers: dict[str, str] = headers or {}
        self._content = content

    @property
    def content_type(self) -> str:
        """Full content type with charset."""
        if self.charset and (self.media_type.startswith("text/") or "json" in self.media_type):
            return f"{self.media_type}; charset={self.charset}"
        return self.media_type

    @abstractmethod
    def render(self) -> bytes:
        """Render the response body. Must be implemented by subclasses."""
        ...

    def set_header(self, name: str, value: str) -> "Response":
        """Set a response header. Returns self for chaining."""
        self._headers[name] = value
        return self

    def _build_headers(self) -> list[tuple[bytes, bytes]]:
        """Build header list for ASGI response."""
        headers: list[tuple[bytes, bytes]] = [
            (b"content-type", self.content_type.encode("latin-1")),
        ]
        for name, value in self._headers.items():
            headers.append((name.lower().encode("latin-1"), value.encode("latin-1")))
        return headers

    async def __call__(self, send: Send, head: bool = False) -> None:
        """Send the response via ASGI. ``head`` drops the body."""
        body = b"" if head else self.render()

        await send({
            "type": "http.response.start",
            "status": self.status_code,
            "headers": self._build_headers(),
        })

        await send({
            "type": "http.response.body",
            "body": body,
        })


class TextResponse(Response):
    """Plain text response."""

    media_type = "text/plain"

    def render(self) -> bytes:
        if self._content is None:
            return b""
        if isinstance(self._content, bytes):
            return self._content
        return str(self._content).encode(self.charset or "utf-8")


class JSONResponse(Response):
    """JSON response with automatic serialization."""

    media_type = "application/json"

    def render(self) -> bytes:
        if self._content is None:
            return b"null"
        return json.dumps(
            self._content,
            ensure_ascii=False,
            allow_nan=False,
            separators=(",", ":"),
        ).encode(self.charset or "utf-8")


class NotFoundResponse(TextResponse):
    """Bare ``text/plain`` 404 sent when no route handles a request."""

    charset = None

    def __init__(self) -> None:
        super().__init__("Not Found", status_code=404)


async def send_not_found(
    request: "Request",
    send: Send,
    error: BaseException | None = None,
) -> None:
    """
    Terminal continuation used when the caller supplies none.

    Falling through sends a 404 (without a body for HEAD requests).
    An error handed to the continuation is re-raised for the server to
    report.
    """
    if error is not None:
        raise error
    await NotFoundResponse()(send, head=request.method == "HEAD")
