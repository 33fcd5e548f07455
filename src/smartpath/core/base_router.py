"""Plugin-free routing engine: route tables and dispatcher.

The module exposes :class:`BaseRouter`. Subclasses add handler wrapping
(see :mod:`smartpath.core.router`) but must preserve these semantics.

Constructor
-----------
::

    BaseRouter(name=None, *, escape_params=False, capture_head=True,
               not_found=<default>, dispatch_kwargs=None)

- ``escape_params`` and ``capture_head`` become dispatch defaults, merged
  with per-call options through ``SmartOptions``; extra ``dispatch_kwargs``
  are copied into the same defaults.
- ``not_found`` is the fallback invoked (without arguments) when no entry
  of the main table fired. The default prints ``<h1>404</h1>`` and
  ``<span>Page not found.</span>``. ``None`` disables it.

Tables
------
``before``, ``routes`` and ``after`` hold :class:`RouteEntry` objects in
registration order; the router-wide hooks are two plain lists of
callables. Nothing is ever reordered or de-duplicated: registering the same
handler twice makes it fire twice.

Registration
------------
``add_route(methods, pattern, handler=None, *, name=None, **options)``

- ``methods`` is an iterable of strings or one comma-separated string.
  Every token is validated before anything is appended, so a failing call
  leaves the table untouched (``InvalidMethod``); an empty collection
  raises ``EmptyMethodSet``.
- One entry per method is appended. ``name`` defaults to the handler's
  ``__name__``; it is informative only and need not be unique. ``options``
  prefixed with a registered plugin code (``logging_before=False``) become
  that entry's plugin options (``Router`` only); the rest is kept as entry
  metadata.
- With ``handler=None`` the call returns a decorator that registers the
  decorated function and returns it unchanged; otherwise ``self``.

``get``/``post``/``put``/``delete``/``patch``/``options``/``head`` and
``all`` are shorthands. ``add_before_middleware`` and
``add_after_middleware`` share the signature of ``add_route`` and target
the middleware tables. ``add_before_router_hook``/``add_after_router_hook``
take a bare callable.

Dispatch
--------
``dispatch(method=None, target=None, **options)``:

1. run before-router hooks;
2. ``target`` is cut at the first ``?``; an empty path becomes ``/``;
   ``method`` is upper-cased, ``None`` means ``GET``;
3. fire every matching ``before`` entry, then every matching ``routes``
   entry (remembering whether any fired), then every matching ``after``
   entry; a matching entry has the request method and a matcher accepting
   the path, and is called with its parameter map;
4. resolve ``HTTPStatus.OK`` when a route fired, else
   ``HTTPStatus.NOT_FOUND`` and call the fallback;
5. run after-router hooks and return the status.

For ``HEAD`` requests everything the entries print during step 3 is
captured and dropped (``capture_head`` option). Handler exceptions
propagate untouched. Tables must not be mutated while a dispatch runs.
"""

from __future__ import annotations

import contextlib
import inspect
import io
import logging
from http import HTTPStatus
from typing import Any, Callable, Dict, FrozenSet, Iterator, List, Optional, Tuple

from smartseeds import SmartOptions

from .entries import RouteEntry
from .methods import SUPPORTED_METHODS, normalize_methods
from .patterns import compile_pattern

__all__ = ["BaseRouter", "Handler", "TARGET_ATTR_NAME", "TABLES"]

logger = logging.getLogger(__name__)

Handler = Callable[..., Any]
"""Route handlers and middleware receive the parameter map; hooks and the
fallback are called without arguments. Return values are ignored."""

TABLES: Tuple[str, ...] = ("before", "routes", "after")
TARGET_ATTR_NAME = "__smartpath_routes__"


def _default_not_found() -> None:
    print("<h1>404</h1>")
    print("<span>Page not found.</span>")


def normalize_target(target: Optional[str]) -> str:
    """Return the path part of a raw request target."""
    path, _, _ = (target or "").partition("?")
    return path or "/"


class BaseRouter:
    """Plugin-free router holding route tables and running dispatches."""

    __slots__ = (
        "name",
        "_tables",
        "_before_router_hooks",
        "_after_router_hooks",
        "_handlers",
        "_not_found",
        "_dispatch_defaults",
    )

    def __init__(
        self,
        name: Optional[str] = None,
        *,
        escape_params: bool = False,
        capture_head: bool = True,
        not_found: Optional[Handler] = _default_not_found,
        dispatch_kwargs: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.name = name
        self._tables: Dict[str, List[RouteEntry]] = {table: [] for table in TABLES}
        self._before_router_hooks: List[Handler] = []
        self._after_router_hooks: List[Handler] = []
        self._handlers: Dict[RouteEntry, Handler] = {}
        self._not_found: Optional[Handler] = None
        defaults: Dict[str, Any] = dict(dispatch_kwargs or {})
        defaults.setdefault("escape_params", escape_params)
        defaults.setdefault("capture_head", capture_head)
        self._dispatch_defaults = defaults
        self.set_not_found_handler(not_found)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------
    def add_route(
        self,
        methods: Any,
        pattern: str,
        handler: Optional[Handler] = None,
        *,
        name: Optional[str] = None,
        **options: Any,
    ) -> Any:
        """Register ``handler`` on the main table for every method in ``methods``.

        Args:
            methods: HTTP methods, e.g. ``["GET", "POST"]`` or ``"get,post"``.
            pattern: Route pattern, e.g. ``"/articles/{slug}"``.
            handler: Callable receiving the parameter map. When omitted a
                decorator is returned.
            name: Logical entry name (defaults to ``handler.__name__``).
            options: Entry metadata and ``<plugin>_<key>`` plugin config.

        Returns:
            self, or a decorator when ``handler`` is None.

        Raises:
            InvalidMethod: a method token is not a supported HTTP method.
            EmptyMethodSet: ``methods`` is empty.
            TypeError: ``pattern`` is not a string or ``handler`` is not callable.
        """
        return self._register("routes", methods, pattern, handler, name=name, options=options)

    def add_before_middleware(
        self,
        methods: Any,
        pattern: str,
        handler: Optional[Handler] = None,
        *,
        name: Optional[str] = None,
        **options: Any,
    ) -> Any:
        """Register middleware fired before the main table on matching requests."""
        return self._register("before", methods, pattern, handler, name=name, options=options)

    def add_after_middleware(
        self,
        methods: Any,
        pattern: str,
        handler: Optional[Handler] = None,
        *,
        name: Optional[str] = None,
        **options: Any,
    ) -> Any:
        """Register middleware fired after the main table on matching requests."""
        return self._register("after", methods, pattern, handler, name=name, options=options)

    def get(self, pattern: str, handler: Optional[Handler] = None, **kwargs: Any) -> Any:
        return self.add_route(["GET"], pattern, handler, **kwargs)

    def post(self, pattern: str, handler: Optional[Handler] = None, **kwargs: Any) -> Any:
        return self.add_route(["POST"], pattern, handler, **kwargs)

    def put(self, pattern: str, handler: Optional[Handler] = None, **kwargs: Any) -> Any:
        return self.add_route(["PUT"], pattern, handler, **kwargs)

    def delete(self, pattern: str, handler: Optional[Handler] = None, **kwargs: Any) -> Any:
        return self.add_route(["DELETE"], pattern, handler, **kwargs)

    def patch(self, pattern: str, handler: Optional[Handler] = None, **kwargs: Any) -> Any:
        return self.add_route(["PATCH"], pattern, handler, **kwargs)

    def options(self, pattern: str, handler: Optional[Handler] = None, **kwargs: Any) -> Any:
        return self.add_route(["OPTIONS"], pattern, handler, **kwargs)

    def head(self, pattern: str, handler: Optional[Handler] = None, **kwargs: Any) -> Any:
        """Add a HEAD route; whatever it prints is dropped at dispatch."""
        return self.add_route(["HEAD"], pattern, handler, **kwargs)

    def all(self, pattern: str, handler: Optional[Handler] = None, **kwargs: Any) -> Any:
        """Map ``pattern`` to every supported HTTP method."""
        return self.add_route(list(SUPPORTED_METHODS), pattern, handler, **kwargs)

    def add_before_router_hook(self, handler: Optional[Handler] = None) -> Any:
        """Run ``handler`` at the start of every dispatch."""
        return self._add_hook(self._before_router_hooks, handler)

    def add_after_router_hook(self, handler: Optional[Handler] = None) -> Any:
        """Run ``handler`` at the end of every dispatch."""
        return self._add_hook(self._after_router_hooks, handler)

    def set_not_found_handler(self, handler: Optional[Handler]) -> "BaseRouter":
        """Replace the fallback called when no route matched (None disables it)."""
        if handler is not None and not callable(handler):
            raise TypeError(f"Not-found handler must be callable, got {handler!r}")
        self._not_found = handler
        return self

    def include(self, owner: Any) -> "BaseRouter":
        """Register every method of ``owner`` marked with :func:`~smartpath.core.decorators.route`."""
        for func, marker in self._iter_marked_methods(owner):
            payload = dict(marker)
            table = payload.pop("table")
            bound = func.__get__(owner, type(owner))
            self._register(
                table,
                payload.pop("methods"),
                payload.pop("pattern"),
                bound,
                name=payload.pop("name", None),
                options=payload,
            )
        return self

    def _add_hook(self, hooks: List[Handler], handler: Optional[Handler]) -> Any:
        if handler is None:

            def decorator(func: Handler) -> Handler:
                self._add_hook(hooks, func)
                return func

            return decorator
        if not callable(handler):
            raise TypeError(f"Router hook must be callable, got {handler!r}")
        hooks.append(handler)
        return self

    def _register(
        self,
        table: str,
        methods: Any,
        pattern: str,
        handler: Optional[Handler],
        *,
        name: Optional[str],
        options: Dict[str, Any],
    ) -> Any:
        if table not in self._tables:
            raise ValueError(f"Unknown route table {table!r}; expected one of {TABLES}")
        normalized = normalize_methods(methods)
        compile_pattern(pattern)
        if handler is None:

            def decorator(func: Handler) -> Handler:
                self._append_entries(table, normalized, pattern, func, name=name, options=options)
                return func

            return decorator
        self._append_entries(table, normalized, pattern, handler, name=name, options=options)
        return self

    def _append_entries(
        self,
        table: str,
        methods: List[str],
        pattern: str,
        handler: Handler,
        *,
        name: Optional[str],
        options: Dict[str, Any],
    ) -> None:
        if not callable(handler):
            raise TypeError(f"Route handler must be callable, got {handler!r}")
        plugin_options, metadata = self._split_options(options)
        entry_name = name or getattr(handler, "__name__", None) or repr(handler)
        matcher = compile_pattern(pattern)
        entries = [
            RouteEntry(
                method=method,
                pattern=pattern,
                handler=handler,
                name=entry_name,
                table=table,
                matcher=matcher,
                metadata=dict(metadata),
                plugin_options={code: dict(values) for code, values in plugin_options.items()},
            )
            for method in methods
        ]
        self._prepare_entries(entries)
        for entry in entries:
            self._tables[table].append(entry)
            logger.debug("Registered %s -> %s (%s)", entry.label, entry_name, table)
        self._rebuild_handlers()

    def _split_options(
        self, options: Dict[str, Any]
    ) -> Tuple[Dict[str, Dict[str, Any]], Dict[str, Any]]:
        """Separate ``<plugin code>_<option>`` keys from plain entry metadata."""
        codes = sorted(self._plugin_codes(), key=len, reverse=True)
        plugin_options: Dict[str, Dict[str, Any]] = {}
        metadata: Dict[str, Any] = {}
        for key, value in options.items():
            for code in codes:
                prefix = f"{code}_"
                if key.startswith(prefix) and len(key) > len(prefix):
                    plugin_options.setdefault(code, {})[key[len(prefix):]] = value
                    break
            else:
                metadata[key] = value
        return plugin_options, metadata

    def _iter_marked_methods(self, owner: Any) -> Iterator[Tuple[Callable, Dict[str, Any]]]:
        cls = type(owner)
        seen: set[int] = set()
        for base in reversed(cls.__mro__):
            for attr_name, value in vars(base).items():
                if not inspect.isfunction(value) or id(value) in seen:
                    continue
                seen.add(id(value))
                # Overridden methods only count in their most derived form
                if inspect.getattr_static(cls, attr_name, None) is not value:
                    continue
                for marker in getattr(value, TARGET_ATTR_NAME, ()):
                    yield value, marker

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------
    def dispatch(
        self, method: Optional[str] = None, target: Optional[str] = None, **options: Any
    ) -> HTTPStatus:
        """Run every matching entry for the request and resolve the status.

        Args:
            method: Request method (case-insensitive, ``GET`` when None).
            target: Raw request target, query string allowed.
            options: Per-call overrides of ``escape_params``/``capture_head``.

        Returns:
            ``HTTPStatus.OK`` when a route fired, else ``HTTPStatus.NOT_FOUND``.
        """
        opts = SmartOptions(options, defaults=self._dispatch_defaults)
        escape = bool(getattr(opts, "escape_params", False))
        capture_head = bool(getattr(opts, "capture_head", True))

        for hook in self._before_router_hooks:
            hook()

        request_method = "GET" if method is None else str(method).strip().upper()
        path = normalize_target(target)

        with self._output_scope(request_method, capture_head):
            self._run_table("before", request_method, path, escape)
            matched = self._run_table("routes", request_method, path, escape)
            self._run_table("after", request_method, path, escape)

        if matched:
            status = HTTPStatus.OK
        else:
            status = HTTPStatus.NOT_FOUND
            logger.debug("No route matched %s %s", request_method, path)
            if self._not_found is not None:
                self._not_found()

        for hook in self._after_router_hooks:
            hook()
        return status

    def _run_table(self, table: str, method: str, path: str, escape: bool) -> bool:
        fired = False
        for entry in self._tables[table]:
            if entry.method != method or not entry.matcher.matches(path):
                continue
            self._handlers[entry](entry.matcher.extract(path, escape=escape))
            fired = True
        return fired

    @staticmethod
    def _output_scope(method: str, capture_head: bool) -> Any:
        if method == "HEAD" and capture_head:
            return contextlib.redirect_stdout(io.StringIO())
        return contextlib.nullcontext()

    # ------------------------------------------------------------------
    # Handler table
    # ------------------------------------------------------------------
    def _iter_entries(self) -> Iterator[RouteEntry]:
        for table in TABLES:
            yield from self._tables[table]

    def _rebuild_handlers(self) -> None:
        self._handlers = {
            entry: self._wrap_handler(entry, entry.handler) for entry in self._iter_entries()
        }

    def _wrap_handler(
        self, entry: RouteEntry, call_next: Handler
    ) -> Handler:
        return call_next

    def _plugin_codes(self) -> FrozenSet[str]:
        """Plugin codes recognised as ``<code>_<option>`` registration prefixes."""
        return frozenset()

    def _prepare_entries(self, entries: List[RouteEntry]) -> None:
        """Hook run on new entries before any of them is appended."""

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    def entries(self, table: str = "routes") -> Tuple[RouteEntry, ...]:
        """Return the entries of ``table`` in registration order."""
        if table not in self._tables:
            raise ValueError(f"Unknown route table {table!r}; expected one of {TABLES}")
        return tuple(self._tables[table])
