"""Decorator helpers for marking handler-container methods.

``route(methods, pattern, *, table="routes", name=None, **kwargs)``

- Returns a decorator storing a marker dict on the function under
  ``TARGET_ATTR_NAME``. Markers accumulate, so one function may be routed
  several times (for instance as a route and as after-middleware).
- Method tokens are validated when the decorator is applied; the pattern
  is compiled then too, so broken markers fail at class definition time.
- ``table`` is ``"routes"``, ``"before"`` or ``"after"``.
- Extra ``**kwargs`` are copied verbatim into the marker (entry metadata or
  ``<plugin>_<key>`` plugin options).
- No router is touched until ``router.include(instance)`` is called.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

from .base_router import TABLES, TARGET_ATTR_NAME
from .methods import normalize_methods
from .patterns import compile_pattern

__all__ = ["route"]


def route(
    methods: Any,
    pattern: str,
    *,
    table: str = "routes",
    name: Optional[str] = None,
    **kwargs: Any,
) -> Callable:
    """Mark a method for registration by :meth:`BaseRouter.include`.

    Args:
        methods: HTTP methods, e.g. ``["GET"]`` or ``"get,head"``.
        pattern: Route pattern.
        table: Target table name.
        name: Optional explicit entry name.
    """
    if table not in TABLES:
        raise ValueError(f"Unknown route table {table!r}; expected one of {TABLES}")
    normalized = normalize_methods(methods)
    compile_pattern(pattern)

    def decorator(func: Callable) -> Callable:
        markers = list(getattr(func, TARGET_ATTR_NAME, []))
        payload = {"methods": normalized, "pattern": pattern, "table": table}
        if name is not None:
            payload["name"] = name
        payload.update(kwargs)
        markers.append(payload)
        setattr(func, TARGET_ATTR_NAME, markers)
        return func

    return decorator
