"""Core runtime aggregator.

Expose the runtime building blocks from a single module. No extra logic
beyond imports/exports:

* ``patterns`` -> ``compile_pattern``/``extract_params``/``PathMatcher``
* ``base_router`` -> ``BaseRouter`` (plugin-free engine)
* ``router`` -> ``Router`` (plugin-enabled)
* ``decorators`` -> ``route`` marker
* ``entries`` -> ``RouteEntry`` record
* ``errors``/``methods`` -> registration errors and the method set
"""

from .base_router import BaseRouter
from .decorators import route
from .entries import RouteEntry
from .errors import EmptyMethodSet, InvalidMethod, RoutingError
from .methods import SUPPORTED_METHODS
from .patterns import PathMatcher, compile_pattern, extract_params
from .router import Router

__all__ = [
    "BaseRouter",
    "Router",
    "route",
    "RouteEntry",
    "RoutingError",
    "InvalidMethod",
    "EmptyMethodSet",
    "SUPPORTED_METHODS",
    "PathMatcher",
    "compile_pattern",
    "extract_params",
]
