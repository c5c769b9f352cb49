"""
Path templates for httproute.

A template is a path made of literal segments and ``:name`` parameters,
e.g. ``/users/:id/:key``. Each parameter matches one or more characters
up to the next ``/``. Templates compile to anchored regular expressions
and the compiled patterns are cached, since the same template is matched
against every request that reaches its route.
"""

import re
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Pattern


# Pattern for extracting parameters: :name (name runs up to the next "/")
PATH_PARAM_PATTERN: Pattern[str] = re.compile(r":([^/]+)")

# A parameter value is one or more characters other than "/"
PARAM_REGEX: str = r"([^/]+)"

# Mounts must stop on a segment boundary so "/foo" never matches "/foobar"
SEGMENT_BOUNDARY: str = r"(?=/|$)"


def normalize_path(path: str) -> str:
    """Prefix ``path`` with ``/`` if it does not start with one."""
    if not path.startswith("/"):
        path = "/" + path
    return path


@dataclass(frozen=True, slots=True)
class PathMatch:
    """Result of matching a path against a :class:`PathPattern`."""

    prefix: str
    remaining: str
    values: tuple[str, ...]
    names: tuple[str, ...] = field(repr=False)

    @property
    def length(self) -> int:
        """Length of the matched prefix."""
        return len(self.prefix)

    @property
    def params(self) -> dict[str, str]:
        """Captured values keyed by name; a repeated name keeps its last value."""
        return dict(zip(self.names, self.values))


@dataclass(frozen=True, slots=True)
class PathPattern:
    """
    A compiled path template.

    With ``exact`` the whole path must match and the remaining path is
    always ``/``. Without it the template only has to match a prefix
    that ends on a segment boundary (a mount).
    """

    template: str
    exact: bool = False
    param_names: tuple[str, ...] = field(default=(), init=False)
    _regex: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        template = normalize_path(self.template)
        if not self.exact:
            # A trailing slash is part of the boundary, not the prefix
            template = template.rstrip("/")

        names: list[str] = []
        parts: list[str] = []
        position = 0

        for param in PATH_PARAM_PATTERN.finditer(template):
            parts.append(re.escape(template[position:param.start()]))
            parts.append(PARAM_REGEX)
            names.append(param.group(1))
            position = param.end()
        parts.append(re.escape(template[position:]))

        pattern = "^" + "".join(parts)
        pattern += "$" if self.exact else SEGMENT_BOUNDARY

        object.__setattr__(self, "param_names", tuple(names))
        object.__setattr__(self, "_regex", re.compile(pattern))

    def match(self, path: str) -> PathMatch | None:
        """
        Match ``path`` against this pattern.
        Returns the match data, or None if the path does not match.
        """
        result = self._regex.match(path)
        if result is None:
            return None

        prefix = result.group(0)
        remaining = path[len(prefix):] or "/"

        return PathMatch(
            prefix=prefix,
            remaining=remaining,
            values=result.groups(),
            names=self.param_names,
        )


@lru_cache(maxsize=512)
def compile_pattern(template: str, exact: bool = False) -> PathPattern:
    """Compile ``template`` into a (cached) :class:`PathPattern`."""
    return PathPattern(template, exact)
