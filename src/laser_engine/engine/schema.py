"""Input descriptors extracted from request models.

The rendering layer (a form builder, the HTTP adapter) reads these to lay
out inputs: name, type, unit, bounds, options, default.
"""

from __future__ import annotations

import types
from enum import Enum
from typing import Any, Union, get_args, get_origin

from pydantic import BaseModel, Field
from pydantic_core import PydanticUndefined


class InputDescriptor(BaseModel):
    """One calculator input, machine-readable."""

    name: str
    type: str
    """'number', 'integer' or 'select'."""
    required: bool
    default: Any = None
    unit: str = ""
    description: str = ""
    options: list[str] = Field(default_factory=list)
    """Allowed values for 'select' inputs."""
    constraints: dict[str, Any] = Field(default_factory=dict)


def _unwrap_optional(annotation: Any) -> Any:
    if get_origin(annotation) in (Union, types.UnionType):
        args = [a for a in get_args(annotation) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


def _type_name(annotation: Any) -> str:
    inner = _unwrap_optional(annotation)
    if isinstance(inner, type) and issubclass(inner, Enum):
        return "select"
    if inner is int:
        return "integer"
    return "number"


def _get_field_metadata(field_info: Any, attr: str) -> Any:
    """Extract constraint metadata from Pydantic field info."""
    for m in field_info.metadata:
        if hasattr(m, attr):
            return getattr(m, attr)
    return None


def describe_inputs(model_cls: type[BaseModel]) -> list[InputDescriptor]:
    """Extract input descriptors from a request model, in field order."""
    params: list[InputDescriptor] = []
    for name, field_info in model_cls.model_fields.items():
        constraints: dict[str, Any] = {}
        for attr in ("ge", "gt", "le", "lt"):
            meta_val = _get_field_metadata(field_info, attr)
            if meta_val is not None:
                constraints[attr] = meta_val

        default = field_info.default
        if default is PydanticUndefined:
            default = None
        elif isinstance(default, Enum):
            default = default.value

        inner = _unwrap_optional(field_info.annotation)
        options = [m.value for m in inner] if isinstance(inner, type) and issubclass(inner, Enum) else []
        extra = field_info.json_schema_extra if isinstance(field_info.json_schema_extra, dict) else {}

        params.append(InputDescriptor(
            name=name,
            type=_type_name(field_info.annotation),
            required=field_info.is_required(),
            default=default,
            unit=str(extra.get("unit", "")),
            description=field_info.description or "",
            options=options,
            constraints=constraints,
        ))
    return params
