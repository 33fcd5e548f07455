"""Plugin contract for :class:`smartpath.core.router.Router`.

A plugin wraps the handler of every table entry (routes and middleware,
never the router hooks or the not-found fallback). Its options are a
pydantic model declared on the class::

    class TimingPlugin(RoutePlugin):
        code = "timing"

        class Options(RoutePlugin.Options):
            threshold_ms: float = 50.0

        def around(self, entry, params, call_next, options):
            ...

Options live at two levels:

- router level, set by ``router.plug("timing", threshold_ms=10)`` and
  ``plugin.configure(...)``;
- entry level, set by ``router.get("/x", handler, timing_threshold_ms=5)``
  or ``plugin.configure_entry(entry, ...)``, stored on the entry itself.

Every option is validated when written; unknown keys are rejected.
``enabled`` exists on every plugin and bypasses the layer when false.
"""

from __future__ import annotations

from typing import Any, Callable, ClassVar, Dict

from pydantic import BaseModel, ConfigDict

from smartpath.core.entries import RouteEntry

__all__ = ["RoutePlugin"]


class RoutePlugin:
    """Base class for router plugins."""

    __slots__ = ("router", "options")

    code: ClassVar[str] = ""
    description: ClassVar[str] = ""

    class Options(BaseModel):
        model_config = ConfigDict(extra="forbid", frozen=True)

        enabled: bool = True

    def __init__(self, router: Any, **options: Any):
        self.router = router
        self.options = self.Options(**options)

    @classmethod
    def check_options(cls, overrides: Dict[str, Any]) -> Dict[str, Any]:
        """Validate a partial set of options and return the coerced values."""
        model = cls.Options(**overrides)
        return {key: getattr(model, key) for key in overrides}

    def configure(self, **changes: Any) -> None:
        """Update router-level options."""
        self.options = self.Options(**{**self.options.model_dump(), **changes})

    def configure_entry(self, entry: RouteEntry, **changes: Any) -> None:
        """Override options for ``entry`` only."""
        checked = self.check_options(changes)
        entry.plugin_options.setdefault(self.code, {}).update(checked)

    def options_for(self, entry: RouteEntry) -> "RoutePlugin.Options":
        """Router-level options with the entry overrides applied."""
        overrides = entry.plugin_options.get(self.code)
        if not overrides:
            return self.options
        return self.options.model_copy(update=overrides)

    def on_register(self, entry: RouteEntry) -> None:
        """Called once per entry, when either the entry or the plugin is added."""

    def around(
        self,
        entry: RouteEntry,
        params: Any,
        call_next: Callable[[Any], Any],
        options: "RoutePlugin.Options",
    ) -> Any:
        return call_next(params)

    def wrap(self, entry: RouteEntry, call_next: Callable[[Any], Any]) -> Callable[[Any], Any]:
        def call(params: Any) -> Any:
            options = self.options_for(entry)
            if not options.enabled:
                return call_next(params)
            return self.around(entry, params, call_next, options)

        return call
