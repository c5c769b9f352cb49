"""
Request handling for httproute.
Wraps the ASGI scope, which doubles as the mutable per-request state that
routes rewrite while a handler runs.
"""

import json
from collections.abc import Mapping
from functools import cached_property
from typing import Any
from urllib.parse import parse_qs

from httproute.types import Receive, Scope

# Default maximum request body size: 1 MB
DEFAULT_MAX_BODY_SIZE: int = 1_048_576


class Request:
    """
    HTTP Request wrapper.

    Path-related properties always read the scope, so they reflect
    whatever the enclosing routes have rewritten. Other fields written
    by condition patches are available as ``request[key]``.
    """

    def __init__(
        self,
        scope: Scope,
        receive: Receive | None = None,
        max_body_size: int = DEFAULT_MAX_BODY_SIZE,
    ) -> None:
        self._scope = scope
        self._receive = receive
        self._body: bytes | None = None
        self._max_body_size = max_body_size

    def __getitem__(self, key: str) -> Any:
        return self._scope[key]

    def __contains__(self, key: object) -> bool:
        return key in self._scope

    def get(self, key: str, default: Any = None) -> Any:
        """Get a scope field, e.g. one set by a predicate condition."""
        return self._scope.get(key, default)

    @property
    def scope(self) -> Scope:
        """The underlying ASGI scope."""
        return self._scope

    @property
    def method(self) -> str:
        """HTTP method (GET, POST, etc.)."""
        return self._scope.get("method", "GET")

    @property
    def path(self) -> str:
        """Current path, relative to the routes mounted above."""
        return self._scope.get("path", "/")

    @property
    def original_path(self) -> str:
        """Path as received, before any route rewrote it."""
        return self._scope.get("original_path", self.path)

    @property
    def base_path(self) -> str:
        """Prefix consumed by the enclosing routes."""
        return self._scope.get("root_path", "")

    @property
    def params(self) -> dict[str, str] | None:
        """Path parameters collected by enclosing routes, None outside any."""
        return self._scope.get("path_params")

    @property
    def query_string(self) -> str:
        """Raw query string."""
        return self._scope.get("query_string", b"").decode("utf-8")

    @cached_property
    def query_params(self) -> Mapping[str, str | list[str]]:
        """Parsed query parameters."""
        params: dict[str, str | list[str]] = {}
        for key, values in parse_qs(self.query_string, keep_blank_values=True).items():
            params[key] = values[0] if len(values) == 1 else values
        return params

    @cached_property
    def headers(self) -> Mapping[str, str]:
        """Request headers as a dictionary."""
        headers: dict[str, str] = {}
        for name, value in self._scope.get("headers", []):
            headers[name.decode("latin-1").lower()] = value.decode("latin-1")
        return headers

    async def body(self) -> bytes:
        """
        Read and return the request body.

        Raises:
            PayloadTooLarge: If body exceeds max_body_size.
        """
        if self._body is not None:
            return self._body

        if self._receive is None:
            self._body = b""
            return self._body

        from httproute.exceptions import PayloadTooLarge

        chunks: list[bytes] = []
        total_size = 0

        while True:
            message = await self._receive()
            chunk = message.get("body", b"")
            if chunk:
                total_size += len(chunk)
                if self._max_body_size > 0 and total_size > self._max_body_size:
                    raise PayloadTooLarge(
                        f"Request body too large. "
                        f"Maximum allowed: {self._max_body_size} bytes"
                    )
                chunks.append(chunk)

            if not message.get("more_body", False):
                break

        self._body = b"".join(chunks)
        return self._body

    async def text(self) -> str:
        """Read body as text."""
        body = await self.body()
        return body.decode("utf-8")

    async def json(self) -> Any:
        """Parse body as JSON."""
        text = await self.text()
        return json.loads(text) if text else None

    def get_header(self, name: str, default: str | None = None) -> str | None:
        """Get a specific header value."""
        return self.headers.get(name.lower(), default)

    def get_query(self, name: str, default: str | None = None) -> str | None:
        """Get a specific query parameter."""
        value = self.query_params.get(name, default)
        if isinstance(value, list):
            return value[0] if value else default
        return value
