"""Declarative structural validation for JSON recovered from model output.

A schema is an ``ObjectSchema`` made of ``FieldSpec`` entries. ``validate``
walks a value against it and returns either ``Accepted`` or ``Rejected``;
it never raises for bad input and never coerces or fills in values.
Absent optional fields and fields explicitly set to null are treated the same.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

from pydantic import ValidationError


class FieldKind(str, Enum):
    """JSON value kinds a field may be constrained to."""

    TEXT = "text"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"


class RejectionKind(str, Enum):
    """Why a value was rejected."""

    NOT_AN_OBJECT = "not_an_object"
    MISSING_FIELD = "missing_field"
    WRONG_TYPE = "wrong_type"
    EMPTY_VALUE = "empty_value"
    TOO_FEW_ITEMS = "too_few_items"
    OUT_OF_RANGE = "out_of_range"


@dataclass(frozen=True)
class FieldSpec:
    """Constraints on a single object member."""

    name: str
    kind: FieldKind
    required: bool = False
    non_empty: bool = False
    aliases: tuple[str, ...] = ()
    min_items: Optional[int] = None
    item_label: str = "items"
    items: Optional[Union[FieldKind, "ObjectSchema"]] = None
    schema: Optional["ObjectSchema"] = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    exclusive_minimum: bool = False

    @property
    def keys(self) -> tuple[str, ...]:
        return (self.name, *self.aliases)


@dataclass(frozen=True)
class ObjectSchema:
    """An ordered set of field constraints for one JSON object."""

    name: str
    fields: tuple[FieldSpec, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Accepted:
    """Validation passed; ``value`` is the input, untouched."""

    value: Any
    ok: bool = True


@dataclass(frozen=True)
class Rejected:
    """Validation failed at ``path`` for ``reason``."""

    kind: RejectionKind
    path: str
    reason: str
    ok: bool = False


ValidationResult = Union[Accepted, Rejected]


def _kind_of(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "text"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def _matches(value: Any, kind: FieldKind) -> bool:
    return _kind_of(value) == kind.value


def _join(path: str, name: str) -> str:
    return f"{path}.{name}" if path else name


def _lookup(obj: dict, spec: FieldSpec) -> Any:
    # null members are dropped before model construction, so a null key
    # must not hide a populated alias
    for key in spec.keys:
        if obj.get(key) is not None:
            return obj[key]
    return None


def _as_float(value: Union[int, float]) -> Optional[float]:
    """``value`` as a finite float, or None when it has no such representation."""
    try:
        number = float(value)
    except OverflowError:
        return None
    return number if math.isfinite(number) else None


def _check_range(value: float, spec: FieldSpec, path: str) -> Optional[Rejected]:
    if spec.minimum is not None:
        too_small = value <= spec.minimum if spec.exclusive_minimum else value < spec.minimum
        if too_small:
            bound = "greater than" if spec.exclusive_minimum else "at least"
            return Rejected(
                RejectionKind.OUT_OF_RANGE, path, f"{path} must be {bound} {spec.minimum:g}, got {value:g}"
            )
    if spec.maximum is not None and value > spec.maximum:
        return Rejected(
            RejectionKind.OUT_OF_RANGE, path, f"{path} must be at most {spec.maximum:g}, got {value:g}"
        )
    return None


def _check_field(value: Any, spec: FieldSpec, path: str) -> Optional[Rejected]:
    if value is None:
        if spec.required:
            return Rejected(RejectionKind.MISSING_FIELD, path, f"{path} is required")
        return None

    if not _matches(value, spec.kind):
        return Rejected(
            RejectionKind.WRONG_TYPE,
            path,
            f"{path} must be {spec.kind.value}, got {_kind_of(value)}",
        )

    if spec.kind is FieldKind.TEXT:
        if spec.non_empty and len(value) == 0:
            return Rejected(RejectionKind.EMPTY_VALUE, path, f"{path} must be non-empty text")

    elif spec.kind is FieldKind.NUMBER:
        number = _as_float(value)
        if number is None:
            return Rejected(RejectionKind.OUT_OF_RANGE, path, f"{path} must be a finite number")
        return _check_range(number, spec, path)

    elif spec.kind is FieldKind.OBJECT and spec.schema is not None:
        return _check_object(value, spec.schema, path)

    elif spec.kind is FieldKind.ARRAY:
        if spec.min_items is not None and len(value) < spec.min_items:
            return Rejected(
                RejectionKind.TOO_FEW_ITEMS,
                path,
                f"{path} must contain at least {spec.min_items} {spec.item_label} (got {len(value)})",
            )
        if spec.non_empty and not value:
            return Rejected(RejectionKind.EMPTY_VALUE, path, f"{path} must not be empty")
        for index, item in enumerate(value):
            item_path = f"{path}[{index}]"
            if isinstance(spec.items, ObjectSchema):
                rejection = _check_object(item, spec.items, item_path)
                if rejection:
                    return rejection
            elif spec.items is not None and not _matches(item, spec.items):
                return Rejected(
                    RejectionKind.WRONG_TYPE,
                    item_path,
                    f"{item_path} must be {spec.items.value}, got {_kind_of(item)}",
                )

    return None


def _check_object(value: Any, schema: ObjectSchema, path: str) -> Optional[Rejected]:
    if not isinstance(value, dict):
        where = path or schema.name
        return Rejected(
            RejectionKind.NOT_AN_OBJECT,
            path,
            f"{where} must be an object, got {_kind_of(value)}",
        )

    for spec in schema.fields:
        rejection = _check_field(_lookup(value, spec), spec, _join(path, spec.name))
        if rejection:
            return rejection
    return None


def validate(value: Any, schema: ObjectSchema) -> ValidationResult:
    """
    Check ``value`` against ``schema``.

    Fields are checked in declaration order and the first failure wins, so
    the returned reason always names a single path.

    Args:
        value: Parsed JSON value
        schema: Declarative description of the expected object

    Returns:
        Accepted wrapping the original value, or Rejected with kind, path and reason
    """
    rejection = _check_object(value, schema, "")
    if rejection:
        return rejection
    return Accepted(value)


def strip_nulls(value: Any) -> Any:
    """Drop null object members recursively so they fall back to model defaults."""
    if isinstance(value, dict):
        return {k: strip_nulls(v) for k, v in value.items() if v is not None}
    if isinstance(value, list):
        return [strip_nulls(item) for item in value]
    return value


def rejection_from_model_error(exc: ValidationError) -> Rejected:
    """First error of a typed-model failure, as a rejection with a dotted path."""
    error = exc.errors()[0]
    path = ""
    for part in error.get("loc", ()):
        path = f"{path}[{part}]" if isinstance(part, int) else _join(path, str(part))
    message = error.get("msg", "invalid value")
    return Rejected(RejectionKind.WRONG_TYPE, path, f"{path}: {message}" if path else message)
