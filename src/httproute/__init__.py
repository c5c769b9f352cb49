"""
httproute - conditional routing for async middleware pipelines

Wraps handlers so they only run for requests matching a condition
(method, mount prefix, exact path with ``:name`` parameters, or any
predicate), rewriting the request path for nested routers and restoring
it once the handler completes.
"""

from httproute.adapter import HandlerKind, adapt
from httproute.conditions import HTTP_METHODS, Match, NO_MATCH, NoMatch, parse_condition
from httproute.exceptions import ConfigurationError, ContinuationError, HTTPException, NotFound
from httproute.pattern import PathPattern, compile_pattern
from httproute.request import Request
from httproute.response import JSONResponse, Response, TextResponse, send_not_found
from httproute.route import Route, route
from httproute.router import Router
from httproute.server import Server

__version__ = "0.1.0"
__all__ = [
    "route",
    "Route",
    "Router",
    "Server",
    "Request",
    "Response",
    "TextResponse",
    "JSONResponse",
    "send_not_found",
    "Match",
    "NoMatch",
    "NO_MATCH",
    "HTTP_METHODS",
    "parse_condition",
    "PathPattern",
    "compile_pattern",
    "HandlerKind",
    "adapt",
    "ConfigurationError",
    "ContinuationError",
    "HTTPException",
    "NotFound",
]
