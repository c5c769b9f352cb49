"""
Route conditions.

A condition decides whether a route applies to a request and may return
a patch of request fields to rewrite while the route's handler runs.

Conditions can be given as:

* a predicate ``(request) -> Match | NoMatch | Mapping | bool``
* a string: ``"GET"``, ``"POST /cards/:id"`` or ``"/users/:id"``
* a mapping with ``method``, ``mount`` (prefix) and/or ``path`` (exact)
* a list or tuple of any of the above, all of which must match

Usage:
    evaluators = parse_condition("GET /users/:id")
    result = evaluate(evaluators, request)
    if result:
        print(result.patch["path_params"])
"""

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Final, TypeAlias

from httproute.exceptions import ConfigurationError
from httproute.pattern import compile_pattern
from httproute.types import Patch

if TYPE_CHECKING:
    from httproute.request import Request


HTTP_METHODS: Final[frozenset[str]] = frozenset({
    "HEAD",
    "GET",
    "POST",
    "PUT",
    "DELETE",
    "OPTIONS",
    "TRACE",
    "CONNECT",
})

# Keys of a mapping condition, in the order their evaluators run
CONDITION_KEYS: Final[tuple[str, ...]] = ("method", "mount", "path")


@dataclass(frozen=True, slots=True)
class Match:
    """A matched condition and the request fields it rewrites."""

    patch: Patch = field(default_factory=dict)

    def __bool__(self) -> bool:
        return True


class NoMatch:
    """A condition that did not match."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "NO_MATCH"

    def __bool__(self) -> bool:
        return False


NO_MATCH: Final = NoMatch()

Result: TypeAlias = Match | NoMatch
Evaluator: TypeAlias = Callable[["Request"], Result]
ConditionSpec: TypeAlias = (
    Callable[["Request"], Any] | str | Mapping[str, str] | Sequence[Any]
)


# ---------------------------------------------------------------------------
# Primitive conditions
# ---------------------------------------------------------------------------


def method_condition(method: str) -> Evaluator:
    """Match requests whose method is exactly ``method``."""
    def condition(request: "Request") -> Result:
        return Match() if request.method == method else NO_MATCH
    return condition


def path_condition(template: str, exact: bool = False) -> Evaluator:
    """
    Match the request path against ``template``.

    On a match the patch moves the consumed prefix from ``path`` onto
    ``root_path`` and merges the captured values over the parameters the
    enclosing routes already collected. The first path match also tags
    ``original_path``, which is never restored.
    """
    pattern = compile_pattern(template, exact)

    def condition(request: "Request") -> Result:
        found = pattern.match(request.path)
        if found is None:
            return NO_MATCH

        scope = request.scope
        if "original_path" not in scope:
            scope["original_path"] = request.path

        return Match({
            "path": found.remaining,
            "path_params": {**(request.params or {}), **found.params},
            "root_path": request.base_path + found.prefix.rstrip("/"),
        })

    return condition


def predicate_condition(predicate: Callable[["Request"], Any]) -> Evaluator:
    """
    Wrap a user predicate.

    Tagged results pass through. A mapping (even an empty one) is a match
    with that patch, any other truthy value a match with no patch, and a
    falsy value no match.
    """
    def condition(request: "Request") -> Result:
        result = predicate(request)
        if isinstance(result, (Match, NoMatch)):
            return result
        if isinstance(result, Mapping):
            return Match(dict(result))
        return Match() if result else NO_MATCH
    return condition


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def parse_condition(spec: ConditionSpec) -> list[Evaluator]:
    """
    Turn a condition spec into a list of evaluators.

    Raises:
        ConfigurationError: If the spec is empty or not a recognized shape.
    """
    if isinstance(spec, str):
        return parse_mapping(parse_string(spec))
    if isinstance(spec, Mapping):
        return parse_mapping(spec)
    if callable(spec):
        return [predicate_condition(spec)]
    if isinstance(spec, (list, tuple)):
        if not spec:
            raise ConfigurationError("Condition list must not be empty")
        evaluators: list[Evaluator] = []
        for item in spec:
            evaluators.extend(parse_condition(item))
        return evaluators
    raise ConfigurationError(f"Invalid condition: {spec!r}")


def parse_string(spec: str) -> dict[str, str]:
    """
    Parse ``"METHOD"``, ``"METHOD /path"`` or ``"/path"`` into a mapping.
    A path after a method must match exactly; a lone path is a mount.
    """
    parts = spec.split()[:2]

    if not parts:
        raise ConfigurationError("Condition string must not be empty")

    # "GET /path/to/something"
    if len(parts) == 2:
        return {"method": parts[0], "path": parts[1]}

    # "GET"
    if parts[0] in HTTP_METHODS:
        return {"method": parts[0]}

    # "/path/to/something"
    return {"mount": parts[0]}


def parse_mapping(spec: Mapping[str, str]) -> list[Evaluator]:
    """
    Build evaluators for ``method``, ``mount`` and ``path``, in that order.
    Other keys are ignored.
    """
    evaluators: list[Evaluator] = []

    if spec.get("method"):
        evaluators.append(method_condition(spec["method"]))

    if spec.get("mount"):
        evaluators.append(path_condition(spec["mount"]))

    if spec.get("path"):
        evaluators.append(path_condition(spec["path"], exact=True))

    if not evaluators:
        raise ConfigurationError(
            f"Condition needs at least one of: {', '.join(CONDITION_KEYS)}"
        )

    return evaluators


# ---------------------------------------------------------------------------
# Combining
# ---------------------------------------------------------------------------


def evaluate(evaluators: Sequence[Evaluator], request: "Request") -> Result:
    """
    Run every evaluator against ``request`` and merge their patches.

    All evaluators run even after one fails, so side effects such as
    tagging ``original_path`` happen regardless of the overall outcome.
    Later patches overwrite earlier ones on key collision.
    """
    results = [evaluator(request) for evaluator in evaluators]

    if not all(results):
        return NO_MATCH

    patch: Patch = {}
    for result in results:
        # pyrefly: ignore [missing-attribute]
        patch.update(result.patch)
    return Match(patch)


def combine(evaluators: Sequence[Evaluator]) -> Evaluator:
    """Combine evaluators into one that matches only if all of them do."""
    evaluators = list(evaluators)

    def condition(request: "Request") -> Result:
        return evaluate(evaluators, request)

    return condition
