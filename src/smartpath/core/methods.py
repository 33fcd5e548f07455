"""HTTP method enumeration and normalisation.

``SUPPORTED_METHODS`` is the extended set (GET, POST, PUT, DELETE, PATCH,
OPTIONS, HEAD). ``normalize_methods`` turns whatever the caller passed to a
registration call into an upper-cased list, validating every token before
returning so that callers can append atomically.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, List, Tuple

from .errors import EmptyMethodSet, InvalidMethod

__all__ = ["SUPPORTED_METHODS", "normalize_method", "normalize_methods"]

SUPPORTED_METHODS: Tuple[str, ...] = (
    "GET",
    "POST",
    "PUT",
    "DELETE",
    "PATCH",
    "OPTIONS",
    "HEAD",
)


def normalize_method(method: Any) -> str:
    """Return ``method`` upper-cased or raise :class:`InvalidMethod`."""
    if not isinstance(method, str):
        raise InvalidMethod(method, f"Method must be a string, got {type(method).__name__}")
    normalized = method.upper()
    if normalized not in SUPPORTED_METHODS:
        raise InvalidMethod(method)
    return normalized


def normalize_methods(methods: Any) -> List[str]:
    """Validate and upper-case a method collection.

    Any iterable of strings is accepted (lists, sets, dict views,
    generators); tokens are taken verbatim, so ``" get "`` is invalid. A
    plain string is split on commas with whitespace around each chunk
    ignored (``"get, post"``); empty chunks are kept so that ``""`` is
    reported as an invalid method rather than an empty set. Order and
    duplicates are preserved.
    """
    if isinstance(methods, str):
        tokens: Iterable[Any] = [chunk.strip() for chunk in methods.split(",")]
    elif isinstance(methods, Iterable):
        tokens = list(methods)
    else:
        raise InvalidMethod(methods, f"Unsupported methods value: {methods!r}")
    normalized = [normalize_method(token) for token in tokens]
    if not normalized:
        raise EmptyMethodSet()
    return normalized
