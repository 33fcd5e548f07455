"""Request logging plugin.

Every fired entry produces up to two lines naming its method and pattern::

    GET /articles/{slug} start
    GET /articles/{slug} end (0.42 ms)

Options (router level or per entry, see :class:`RoutePlugin`):

- ``before`` / ``after``: emit the start / end line (default both);
- ``sink``: ``"logger"`` sends lines to ``logger.info`` (default logger
  ``logging.getLogger("smartpath")``, replaceable through
  ``plug("logging", logger=...)``); ``"print"`` writes them to stdout,
  where HEAD requests drop them along with the handler output.

A handler that raises produces no end line.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Literal, Optional

from smartpath.core.router import Router
from smartpath.plugins._base_plugin import RoutePlugin


class LoggingPlugin(RoutePlugin):
    """Logs each fired entry with its duration."""

    __slots__ = ("logger",)

    code = "logging"
    description = "Logs fired route entries with timing"

    class Options(RoutePlugin.Options):
        before: bool = True
        after: bool = True
        sink: Literal["logger", "print"] = "logger"

    def __init__(self, router: Any, *, logger: Optional[logging.Logger] = None, **options: Any):
        self.logger = logger or logging.getLogger("smartpath")
        super().__init__(router, **options)

    def around(self, entry, params, call_next, options):
        emit = print if options.sink == "print" else self.logger.info
        if options.before:
            emit(f"{entry.label} start")
        started = time.perf_counter()
        result = call_next(params)
        if options.after:
            elapsed = (time.perf_counter() - started) * 1000
            emit(f"{entry.label} end ({elapsed:.2f} ms)")
        return result


Router.register_plugin(LoggingPlugin)
