"""Registration errors raised by the routing core.

Only registration can fail: an unmatched request is resolved through the
404 path and never raises. Handler exceptions are not wrapped.
"""

from __future__ import annotations

from typing import Any

__all__ = ["RoutingError", "InvalidMethod", "EmptyMethodSet"]


class RoutingError(ValueError):
    """Base class for route registration failures."""


class InvalidMethod(RoutingError):
    """An HTTP method token is malformed or not supported."""

    def __init__(self, method: Any, message: str = ""):
        self.method = method
        super().__init__(message or f"Method {method!r} is not a supported HTTP method type")


class EmptyMethodSet(RoutingError):
    """A registration call received no HTTP methods at all."""

    def __init__(self, message: str = "At least one HTTP method is required"):
        super().__init__(message)
