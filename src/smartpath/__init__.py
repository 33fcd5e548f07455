"""SmartPath public API surface.

- Public exports: ``Router``, the ``route`` marker, the pattern helpers and
  the registration errors.
- Built-in plugins (``logging``, ``pydantic``) are imported for their side
  effect of calling ``Router.register_plugin``; imports go through
  ``import_module`` to avoid cycles.
- Importing the package never instantiates a router.
"""

from importlib import import_module

__version__ = "0.3.0"

from .core import (
    SUPPORTED_METHODS,
    EmptyMethodSet,
    InvalidMethod,
    Router,
    RoutingError,
    compile_pattern,
    extract_params,
    route,
)

# Import plugins to trigger auto-registration (lazy to avoid cycles)
for _plugin in ("logging", "pydantic"):
    import_module(f"{__name__}.plugins.{_plugin}")
del _plugin

__all__ = [
    "Router",
    "route",
    "compile_pattern",
    "extract_params",
    "SUPPORTED_METHODS",
    "RoutingError",
    "InvalidMethod",
    "EmptyMethodSet",
]
