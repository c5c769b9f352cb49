"""
Type definitions for httproute.
Following Python 3.14 typing conventions.
"""

from collections.abc import Awaitable, Callable, MutableMapping
from typing import TYPE_CHECKING, Any, TypeAlias

if TYPE_CHECKING:
    from httproute.request import Request

# ASGI Types
Scope: TypeAlias = MutableMapping[str, Any]
Message: TypeAlias = MutableMapping[str, Any]
Receive: TypeAlias = Callable[[], Awaitable[Message]]
Send: TypeAlias = Callable[[Message], Awaitable[None]]

# Pipeline Types
Next: TypeAlias = Callable[..., Awaitable[None]]
Handler: TypeAlias = Callable[["Request", Send, Next], Awaitable[None]]

# State Types
State: TypeAlias = MutableMapping[str, Any]
Patch: TypeAlias = dict[str, Any]
