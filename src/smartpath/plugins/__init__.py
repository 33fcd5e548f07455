"""Router plugins.

``RoutePlugin`` is the base class for custom plugins. The built-in
``logging`` and ``pydantic`` plugins register themselves when imported
(see ``smartpath.__init__`` for the eager imports).
"""

from ._base_plugin import RoutePlugin

__all__ = ["RoutePlugin"]
