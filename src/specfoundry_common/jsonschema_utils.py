"""Typed facades for jsonschema usage.

The upstream stubs expose several untyped entry points (``Draft202012Validator``,
:func:`jsonschema.validate`), so they are wrapped with Protocol-based casts and
re-exported here.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, cast

from jsonschema import validate as _jsonschema_validate
from jsonschema.exceptions import SchemaError as _SchemaError
from jsonschema.exceptions import ValidationError as _ValidationError
from jsonschema.validators import Draft202012Validator as _Draft202012Validator

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

__all__ = [
    "Draft202012Validator",
    "Draft202012ValidatorProtocol",
    "SchemaError",
    "ValidationError",
    "ValidationErrorProtocol",
    "validate",
]


class ValidationErrorProtocol(Protocol):
    """Typed view over ``jsonschema.exceptions.ValidationError`` instances."""

    message: str
    absolute_path: Sequence[object]
    path: Sequence[object]


class Draft202012ValidatorProtocol(Protocol):
    """Typed facade for :class:`jsonschema.validators.Draft202012Validator`."""

    def __init__(self, schema: Mapping[str, object], *args: object, **kwargs: object) -> None: ...

    @classmethod
    def check_schema(cls, schema: Mapping[str, object]) -> None:
        """Validate that ``schema`` conforms to the Draft 2020-12 meta-schema."""
        ...

    def iter_errors(self, instance: object) -> Iterable[ValidationErrorProtocol]:
        """Yield validation errors for ``instance`` without raising."""
        ...


Draft202012Validator = cast("type[Draft202012ValidatorProtocol]", _Draft202012Validator)
SchemaError = cast("type[Exception]", _SchemaError)
ValidationError = cast("type[Exception]", _ValidationError)


def validate(instance: object, schema: Mapping[str, object]) -> None:
    """Validate ``instance`` against ``schema`` using jsonschema."""
    _jsonschema_validate(instance=instance, schema=schema)
