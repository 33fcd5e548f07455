"""Router with plugin support.

``Router`` adds three things to :class:`BaseRouter`:

- a process-wide plugin registry (``Router.register_plugin``), filled by
  importing :mod:`smartpath` for the built-in ``logging`` and ``pydantic``
  plugins;
- ``plug(code, **options)`` attaching one instance per code to this
  router, reachable afterwards as ``router.<code>``;
- handler wrapping: each table entry's handler is wrapped by every
  attached plugin, the first attached plugin being the outermost layer.

Registration options named ``<code>_<option>`` for a registered plugin
code are validated against that plugin's options model before the entries
are appended, so a bad option leaves the tables untouched.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, FrozenSet, List, Sequence, Type

from smartpath.plugins._base_plugin import RoutePlugin

from .base_router import BaseRouter
from .entries import RouteEntry

__all__ = ["Router"]

_PLUGIN_REGISTRY: Dict[str, Type[RoutePlugin]] = {}


class Router(BaseRouter):
    """HTTP router with a plugin pipeline.

    Usage::

        router = Router().plug("logging", sink="print")

        @router.get("/articles/{slug}", logging_after=False)
        def show_article(params):
            print(params["slug"])

        status = router.dispatch("GET", "/articles/hello-world?ref=home")
    """

    __slots__ = BaseRouter.__slots__ + ("_plugins",)

    def __init__(self, *args: Any, **kwargs: Any):
        self._plugins: Dict[str, RoutePlugin] = {}
        super().__init__(*args, **kwargs)

    @classmethod
    def register_plugin(cls, plugin_class: Type[RoutePlugin]) -> None:
        """Make ``plugin_class`` available to ``plug()`` under its ``code``.

        Registering the same class twice is a no-op; another class under a
        taken code raises ``ValueError``.
        """
        if not isinstance(plugin_class, type) or not issubclass(plugin_class, RoutePlugin):
            raise TypeError(f"Plugins must subclass RoutePlugin, got {plugin_class!r}")
        code = plugin_class.code
        if not code:
            raise ValueError(f"Plugin {plugin_class.__name__} has no code")
        existing = _PLUGIN_REGISTRY.get(code)
        if existing is not None and existing is not plugin_class:
            raise ValueError(
                f"Plugin code {code!r} already taken by {existing.__name__}"
            )
        _PLUGIN_REGISTRY[code] = plugin_class

    @classmethod
    def available_plugins(cls) -> Dict[str, Type[RoutePlugin]]:
        return dict(_PLUGIN_REGISTRY)

    def plug(self, code: str, **options: Any) -> "Router":
        """Attach the plugin registered under ``code`` and return the router."""
        if not isinstance(code, str):
            raise TypeError(f"Plugins are attached by code, got {type(code).__name__}")
        plugin_class = _PLUGIN_REGISTRY.get(code)
        if plugin_class is None:
            known = ", ".join(sorted(_PLUGIN_REGISTRY)) or "none"
            raise ValueError(f"Unknown plugin {code!r}; registered plugins: {known}")
        if code in self._plugins:
            raise ValueError(f"Plugin {code!r} is already attached")
        plugin = plugin_class(self, **options)
        for entry in self._iter_entries():
            plugin.on_register(entry)
        self._plugins[code] = plugin
        self._rebuild_handlers()
        return self

    def plugin(self, code: str) -> RoutePlugin:
        try:
            return self._plugins[code]
        except KeyError:
            raise AttributeError(f"No plugin {code!r} attached to this router") from None

    def __getattr__(self, name: str) -> Any:
        # Only reached for names that are not real attributes
        if name.startswith("_"):
            raise AttributeError(name)
        return self.plugin(name)

    def iter_plugins(self) -> List[RoutePlugin]:
        """Attached plugins, outermost first."""
        return list(self._plugins.values())

    def _plugin_codes(self) -> FrozenSet[str]:
        return frozenset(_PLUGIN_REGISTRY)

    def _prepare_entries(self, entries: Sequence[RouteEntry]) -> None:
        for entry in entries:
            for code, overrides in entry.plugin_options.items():
                entry.plugin_options[code] = _PLUGIN_REGISTRY[code].check_options(overrides)
            for plugin in self._plugins.values():
                plugin.on_register(entry)

    def _wrap_handler(self, entry: RouteEntry, call_next: Callable) -> Callable:
        for plugin in reversed(self._plugins.values()):
            call_next = plugin.wrap(entry, call_next)
        return call_next
