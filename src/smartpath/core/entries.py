"""Route entry record shared by the router tables and plugins."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict

from .patterns import PathMatcher

__all__ = ["RouteEntry"]


@dataclass(frozen=True, eq=False)
class RouteEntry:
    """One handler bound to one HTTP method and one pattern in one table.

    Entries compare by identity. Registering the same handler twice yields
    two entries that fire, and are configured, independently of each other
    and of any other entry sharing the handler's name.

    ``plugin_options`` maps a plugin code to the validated overrides given
    at registration (``logging_after=False``) or later through
    ``plugin.configure_entry(entry, ...)``.
    """

    method: str
    pattern: str
    handler: Callable
    name: str
    table: str
    matcher: PathMatcher = field(repr=False)
    metadata: Dict[str, Any] = field(default_factory=dict)
    plugin_options: Dict[str, Dict[str, Any]] = field(default_factory=dict, repr=False)

    @property
    def label(self) -> str:
        """``"<METHOD> <pattern>"``, used in log lines and error titles."""
        return f"{self.method} {self.pattern}"
