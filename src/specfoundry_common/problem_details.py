"""RFC 9457 Problem Details helpers with schema validation.

Every payload built here validates against the bundled schema at
``specfoundry_common/schemas/problem_details.json`` (JSON Schema 2020-12).

Examples
--------
>>> from specfoundry_common.problem_details import build_problem_details, render_problem
>>> problem = build_problem_details(
...     problem_type="https://specfoundry.dev/problems/serialization-error",
...     title="Serialization failed",
...     status=500,
...     detail="Unsupported output format 'toml'",
...     instance="urn:specfoundry:document:dump",
... )
>>> assert "serialization-error" in render_problem(problem)
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING, TypedDict, cast

from specfoundry_common.jsonschema_utils import (
    Draft202012Validator,
    SchemaError,
    ValidationError,
)
from specfoundry_common.jsonschema_utils import (
    validate as jsonschema_validate,
)
from specfoundry_common.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Mapping

    from specfoundry_common.jsonschema_utils import ValidationErrorProtocol
    from specfoundry_common.types import JsonValue

__all__ = [
    "ProblemDetails",
    "ProblemDetailsValidationError",
    "build_problem_details",
    "problem_from_exception",
    "render_problem",
    "validate_problem_details",
]

logger = get_logger(__name__)

type JsonSchema = dict[str, object]

_SCHEMA_PATH = Path(__file__).parent / "schemas" / "problem_details.json"
_SCHEMA_CACHE: dict[str, JsonSchema] = {}


class ProblemDetails(TypedDict, total=False):
    """RFC 9457 Problem Details payload.

    ``code`` and ``extensions`` are optional; the remaining keys are always
    present on payloads returned by :func:`build_problem_details`.
    """

    type: str
    title: str
    status: int
    detail: str
    instance: str
    code: str
    extensions: dict[str, JsonValue]


class ProblemDetailsValidationError(Exception):
    """Raised when a Problem Details payload fails schema validation.

    Parameters
    ----------
    message : str
        Human-readable error message describing the validation failure.
    validation_errors : list[str] | None, optional
        Individual validator messages. Defaults to None.
    """

    def __init__(self, message: str, validation_errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.validation_errors = validation_errors or []


def _load_schema() -> JsonSchema:
    cached = _SCHEMA_CACHE.get("problem_details")
    if cached is not None:
        return cached

    try:
        schema_obj: JsonSchema = json.loads(_SCHEMA_PATH.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        msg = f"Failed to load Problem Details schema: {exc}"
        raise ProblemDetailsValidationError(msg) from exc

    try:
        Draft202012Validator.check_schema(schema_obj)
    except SchemaError as exc:
        msg = f"Invalid Problem Details schema: {exc}"
        raise ProblemDetailsValidationError(msg) from exc

    _SCHEMA_CACHE["problem_details"] = schema_obj
    return schema_obj


def validate_problem_details(payload: Mapping[str, object]) -> None:
    """Validate ``payload`` against the bundled Problem Details schema.

    Parameters
    ----------
    payload : Mapping[str, object]
        Candidate Problem Details payload.

    Raises
    ------
    ProblemDetailsValidationError
        If the payload does not conform. ``validation_errors`` carries the
        validator message and the JSON path of the failure.
    """
    schema = _load_schema()
    try:
        jsonschema_validate(instance=payload, schema=schema)
    except ValidationError as exc:
        error_details = cast("ValidationErrorProtocol", exc)
        errors = [error_details.message]
        if error_details.absolute_path:
            path_str = ".".join(str(p) for p in error_details.absolute_path)
            errors.append(f"at path: {path_str}")
        msg = f"Problem Details validation failed: {'; '.join(errors)}"
        raise ProblemDetailsValidationError(msg, validation_errors=errors) from exc


def build_problem_details(
    *,
    problem_type: str,
    title: str,
    status: int,
    detail: str,
    instance: str,
    code: str | None = None,
    extensions: Mapping[str, JsonValue] | None = None,
) -> ProblemDetails:
    """Build and validate an RFC 9457 Problem Details payload.

    Parameters
    ----------
    problem_type : str
        Type URI identifying the problem class.
    title : str
        Short human-readable summary.
    status : int
        HTTP status associated with the problem.
    detail : str
        Occurrence-specific explanation.
    instance : str
        URI identifying this occurrence.
    code : str | None, optional
        Stable kebab-case error code. Defaults to None.
    extensions : Mapping[str, JsonValue] | None, optional
        Extra structured context. Defaults to None.

    Returns
    -------
    ProblemDetails
        Validated payload.
    """
    payload: dict[str, object] = {
        "type": problem_type,
        "title": title,
        "status": status,
        "detail": detail,
        "instance": instance,
    }
    if code is not None:
        payload["code"] = code
    if extensions:
        payload["extensions"] = dict(extensions)

    validate_problem_details(payload)
    return cast("ProblemDetails", payload)


def problem_from_exception(
    exc: Exception,
    *,
    problem_type: str,
    title: str,
    status: int,
    instance: str,
    code: str | None = None,
    extensions: Mapping[str, JsonValue] | None = None,
) -> ProblemDetails:
    """Build Problem Details for an arbitrary exception.

    The exception text becomes ``detail``; the exception type name (and the
    type of its ``__cause__`` when chained) are added to ``extensions``.
    """
    merged: dict[str, JsonValue] = {"exception_type": type(exc).__name__}
    if extensions:
        merged.update(dict(extensions))
    if exc.__cause__ is not None:
        merged["caused_by"] = type(exc.__cause__).__name__

    return build_problem_details(
        problem_type=problem_type,
        title=title,
        status=status,
        detail=str(exc),
        instance=instance,
        code=code,
        extensions=merged,
    )


def render_problem(problem: ProblemDetails | Mapping[str, object]) -> str:
    """Render Problem Details as a minified JSON string."""
    return json.dumps(problem, default=str, ensure_ascii=False)
