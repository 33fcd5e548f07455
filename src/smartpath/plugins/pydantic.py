"""Pydantic validation plugin.

When the first parameter of a handler is annotated with a
``pydantic.BaseModel`` subclass, the parameter map extracted from the path
is validated into that model and the handler receives the model instance::

    class ArchiveParams(BaseModel):
        year: int
        slug: str

    router = Router().plug("pydantic")

    @router.get("/archive/{year}/{slug}")
    def archive(params: ArchiveParams):
        print(params.year + 1)

The model is looked up once per entry and kept in
``entry.metadata["pydantic_model"]``. Other handlers get the raw dict.
Failures raise ``ValidationError`` titled ``"Validation error in GET
/archive/{year}/{slug}"``. ``enabled=False`` (router level or per entry)
hands the raw dict to annotated handlers as well.
"""

from __future__ import annotations

import inspect
from typing import Any, Optional, Type, get_type_hints

from pydantic import BaseModel, ValidationError

from smartpath.core.router import Router
from smartpath.plugins._base_plugin import RoutePlugin


def params_model(handler: Any) -> Optional[Type[BaseModel]]:
    """Return the model annotated on ``handler``'s first parameter, if any."""
    try:
        parameters = list(inspect.signature(handler).parameters)
        hints = get_type_hints(handler)
    except (TypeError, ValueError, NameError):
        return None
    if not parameters:
        return None
    hint = hints.get(parameters[0])
    if isinstance(hint, type) and issubclass(hint, BaseModel):
        return hint
    return None


class PydanticPlugin(RoutePlugin):
    """Validate parameter maps with the handler's Pydantic model."""

    code = "pydantic"
    description = "Validates route parameters using Pydantic models"

    def on_register(self, entry):
        model = params_model(entry.handler)
        if model is not None:
            entry.metadata["pydantic_model"] = model

    def around(self, entry, params, call_next, options):
        model = entry.metadata.get("pydantic_model")
        if model is None:
            return call_next(params)
        try:
            validated = model.model_validate(params)
        except ValidationError as exc:
            raise ValidationError.from_exception_data(
                title=f"Validation error in {entry.label}",
                line_errors=exc.errors(),
            ) from exc
        return call_next(validated)


Router.register_plugin(PydanticPlugin)
