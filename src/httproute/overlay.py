"""
Scoped request-state overlays.

A route rewrites a few request fields (the current path, the path
parameters, the base path) for the duration of its handler. The previous
values are saved before the patch is applied and written back exactly
once when the handler completes.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Final

from httproute.exceptions import ContinuationError
from httproute.types import State


class _Missing:
    """Marker for a field that did not exist when it was snapshotted."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Final = _Missing()


def snapshot(state: State, keys: Iterable[str]) -> dict[str, Any]:
    """
    Save the current value of each key in ``keys``.
    Keys that are not present are recorded as :data:`MISSING`.
    """
    return {key: state.get(key, MISSING) for key in keys}


def apply(state: State, patch: Mapping[str, Any]) -> None:
    """Write every value in ``patch`` onto ``state``."""
    state.update(patch)


def restore(state: State, saved: Mapping[str, Any]) -> None:
    """
    Write snapshotted values back onto ``state``.
    A field that was missing when snapshotted is removed again.
    """
    for key, value in saved.items():
        if value is MISSING:
            state.pop(key, None)
        else:
            state[key] = value


@dataclass(slots=True)
class Overlay:
    """
    Undo token for one applied patch.

    Usage:
        overlay = Overlay.apply(request.scope, {"path": "/bar"})
        ...
        overlay.undo()
    """

    state: State = field(repr=False)
    saved: dict[str, Any]
    released: bool = False

    @classmethod
    def apply(cls, state: State, patch: Mapping[str, Any]) -> "Overlay":
        """Snapshot the fields named in ``patch``, then apply it."""
        overlay = cls(state, snapshot(state, patch.keys()))
        apply(state, patch)
        return overlay

    def undo(self) -> None:
        """
        Restore the snapshotted fields.

        Raises:
            ContinuationError: If the overlay was already undone.
        """
        if self.released:
            raise ContinuationError("Request state was already restored")
        self.released = True
        restore(self.state, self.saved)
