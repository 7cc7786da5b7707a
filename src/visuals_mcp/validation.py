"""Declarative argument shapes and the generic routine that validates them.

Each tool declares its input as a :class:`Shape`: a mapping of field name to
:class:`Field` (kind, required flag, default, enum, nested shape). One routine,
:func:`validate`, interprets any shape, so adding a tool never means writing a
new validator. Shapes also render themselves as JSON Schema for the tool
listing.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any

from .errors import ValidationError

KINDS = ("string", "number", "integer", "boolean", "object", "array", "any")


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


@dataclass
class Field:
    """A single declared argument.

    ``object`` fields take at most one of ``shape`` (declared sub-fields),
    ``values`` (open mapping with typed values) or ``variants`` (union picked
    by the ``discriminator`` key). An ``object`` field with none of them is an
    open mapping kept verbatim.
    """

    kind: str
    required: bool = False
    default: Any = MISSING
    description: str | None = None
    enum: tuple[str, ...] | None = None
    minimum: float | None = None
    items: Field | None = None
    shape: Shape | None = None
    values: Field | None = None
    variants: dict[str, Shape] | None = None
    discriminator: str = "type"

    def __post_init__(self) -> None:
        if self.kind not in KINDS:
            raise ValueError(f"Unknown field kind: {self.kind}")
        if self.kind == "array" and self.items is None:
            raise ValueError("Array fields need an item field")

    def to_json_schema(self, stack: tuple[int, ...] = ()) -> dict[str, Any]:
        schema: dict[str, Any] = {}
        if self.kind != "any":
            schema["type"] = self.kind
        if self.description:
            schema["description"] = self.description
        if self.enum is not None:
            schema["enum"] = list(self.enum)
        if self.minimum is not None:
            schema["minimum"] = self.minimum
        if self.default is not MISSING:
            schema["default"] = self.default
        if self.items is not None:
            schema["items"] = self.items.to_json_schema(stack)
        if self.shape is not None:
            if id(self.shape) in stack:
                # Recursive shape, advertised as a plain object.
                schema.setdefault("description", f"Nested {self.shape.name or 'object'}")
            else:
                schema.update(self.shape.to_json_schema(stack))
        if self.values is not None:
            schema["additionalProperties"] = self.values.to_json_schema(stack)
        if self.variants is not None:
            schema["oneOf"] = [
                variant.to_json_schema(stack) for variant in self.variants.values()
            ]
        return schema


@dataclass
class Shape:
    """An object with declared fields; undeclared keys are dropped."""

    fields: dict[str, Field] = field(default_factory=dict)
    name: str | None = None

    def to_json_schema(self, stack: tuple[int, ...] = ()) -> dict[str, Any]:
        stack = stack + (id(self),)
        return {
            "type": "object",
            "properties": {
                key: spec.to_json_schema(stack) for key, spec in self.fields.items()
            },
            "required": [key for key, spec in self.fields.items() if spec.required],
        }


def kind_name(value: Any) -> str:
    """Name a value's JSON kind for error messages."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def _join(path: str, name: str) -> str:
    return f"{path}.{name}" if path else name


def validate(shape: Shape, raw: Any, path: str = "") -> dict[str, Any]:
    """Validate ``raw`` against ``shape`` and return the normalized mapping.

    Args:
        shape: The declared input shape.
        raw: Untyped arguments as received from the client. ``None`` is
            treated as an empty object.
        path: Location prefix used in error messages.

    Raises:
        ValidationError: On the first structural violation found.
    """
    if raw is None and not path:
        raw = {}
    if not isinstance(raw, dict):
        raise ValidationError(path, f"expected object, got {kind_name(raw)}")

    result: dict[str, Any] = {}
    for name, spec in shape.fields.items():
        child = _join(path, name)
        if name not in raw:
            if spec.required:
                raise ValidationError(child, "required field missing")
            if spec.default is not MISSING:
                result[name] = copy.deepcopy(spec.default)
            continue
        result[name] = _validate_field(spec, raw[name], child)
    return result


def _validate_field(spec: Field, value: Any, path: str) -> Any:
    kind = spec.kind
    if kind == "any":
        return value

    if kind == "string":
        if not isinstance(value, str):
            raise _wrong_kind(path, kind, value)
    elif kind == "boolean":
        if not isinstance(value, bool):
            raise _wrong_kind(path, kind, value)
    elif kind == "number":
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise _wrong_kind(path, kind, value)
    elif kind == "integer":
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise _wrong_kind(path, kind, value)
        if isinstance(value, float):
            if not value.is_integer():
                raise ValidationError(path, f"expected integer, got {value!r}")
            value = int(value)
    elif kind == "array":
        if not isinstance(value, list):
            raise _wrong_kind(path, kind, value)
        assert spec.items is not None
        value = [
            _validate_field(spec.items, item, f"{path}[{index}]")
            for index, item in enumerate(value)
        ]
    elif kind == "object":
        if not isinstance(value, dict):
            raise _wrong_kind(path, kind, value)
        value = _validate_object(spec, value, path)

    if spec.enum is not None and value not in spec.enum:
        allowed = ", ".join(spec.enum)
        raise ValidationError(path, f"expected one of [{allowed}], got {value!r}")
    if spec.minimum is not None and value < spec.minimum:
        raise ValidationError(path, f"must be >= {spec.minimum:g}, got {value!r}")
    return value


def _validate_object(spec: Field, value: dict[str, Any], path: str) -> dict[str, Any]:
    if spec.variants is not None:
        tag = value.get(spec.discriminator)
        variant = spec.variants.get(tag) if isinstance(tag, str) else None
        if variant is None:
            allowed = ", ".join(spec.variants)
            raise ValidationError(
                _join(path, spec.discriminator),
                f"expected one of [{allowed}], got {tag!r}",
            )
        return validate(variant, value, path)
    if spec.shape is not None:
        return validate(spec.shape, value, path)
    if spec.values is not None:
        return {
            key: _validate_field(spec.values, item, _join(path, key))
            for key, item in value.items()
        }
    return dict(value)


def _wrong_kind(path: str, expected: str, value: Any) -> ValidationError:
    return ValidationError(path, f"expected {expected}, got {kind_name(value)}")
