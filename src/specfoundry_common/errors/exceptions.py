"""Typed exception hierarchy with Problem Details support.

All specfoundry exceptions inherit from :class:`SpecFoundryError`, which carries
structured fields and maps onto RFC 9457 Problem Details.

Examples
--------
>>> from specfoundry_common.errors import ConfigurationError, ErrorCode
>>> try:
...     raise ConfigurationError("custom_mappings must be a mapping")
... except ConfigurationError as e:
...     assert e.code == ErrorCode.CONFIGURATION_ERROR
...     details = e.to_problem_details(instance="urn:specfoundry:generator")
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, cast

from specfoundry_common.errors.codes import ErrorCode, get_type_uri
from specfoundry_common.problem_details import build_problem_details

if TYPE_CHECKING:
    from collections.abc import Mapping

    from specfoundry_common.problem_details import ProblemDetails
    from specfoundry_common.types import JsonValue

__all__ = [
    "ConfigurationError",
    "DocumentationLoadError",
    "EndpointDiscoveryError",
    "SerializationError",
    "SettingsError",
    "SpecFoundryError",
    "TypeIntrospectionError",
]


class SpecFoundryError(Exception):
    """Base exception for all specfoundry errors.

    Parameters
    ----------
    message : str
        Human-readable error message.
    code : ErrorCode, optional
        Stable error code. Defaults to ``ErrorCode.RUNTIME_ERROR``.
    http_status : int, optional
        HTTP status used for Problem Details. Defaults to 500.
    log_level : int, optional
        Level at which boundaries should log the error. Defaults to ERROR.
    cause : Exception | None, optional
        Underlying exception, exposed as ``__cause__``. Defaults to None.
    context : Mapping[str, object] | None, optional
        Additional structured context. Defaults to None.

    Attributes
    ----------
    message : str
        Human-readable error message.
    code : ErrorCode
        Error code enum value.
    http_status : int
        HTTP status code for Problem Details responses.
    log_level : int
        Logging level for error logging.
    context : dict[str, object]
        Additional context for error details.
    """

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode = ErrorCode.RUNTIME_ERROR,
        http_status: int = 500,
        log_level: int = logging.ERROR,
        cause: Exception | None = None,
        context: Mapping[str, object] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.http_status = http_status
        self.log_level = log_level
        self.context = dict(context) if context else {}
        if cause is not None:
            self.__cause__ = cause

    def to_problem_details(
        self,
        instance: str | None = None,
        title: str | None = None,
    ) -> ProblemDetails:
        """Convert the error to an RFC 9457 Problem Details payload.

        Parameters
        ----------
        instance : str | None, optional
            URI identifying the occurrence. Defaults to ``urn:specfoundry:error``.
        title : str | None, optional
            Short summary. Defaults to the exception class name.

        Returns
        -------
        ProblemDetails
            Validated Problem Details payload.
        """
        return build_problem_details(
            problem_type=get_type_uri(self.code),
            title=title or type(self).__name__,
            status=self.http_status,
            detail=self.message,
            instance=instance or "urn:specfoundry:error",
            code=self.code.value,
            extensions=cast("Mapping[str, JsonValue] | None", self.context or None),
        )

    def __str__(self) -> str:
        """Return ``ClassName[code]: message`` plus the cause type when chained."""
        base = f"{type(self).__name__}[{self.code.value}]: {self.message}"
        if self.__cause__:
            base += f" (caused by: {type(self.__cause__).__name__})"
        return base


class ConfigurationError(SpecFoundryError):
    """Raised when a component is constructed with invalid collaborators.

    Misconfiguration is a programmer error and is raised at construction time
    rather than deferred until generation. Logged at CRITICAL.
    """

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
        context: Mapping[str, object] | None = None,
    ) -> None:
        super().__init__(
            message,
            code=ErrorCode.CONFIGURATION_ERROR,
            http_status=500,
            log_level=logging.CRITICAL,
            cause=cause,
            context=context,
        )


class SettingsError(SpecFoundryError):
    """Raised when runtime settings fail validation.

    Parameters
    ----------
    message : str
        Human-readable error message.
    errors : list[dict[str, object]] | None, optional
        Structured validation errors, merged into ``context["errors"]``.
    cause : Exception | None, optional
        Underlying validation exception.
    context : Mapping[str, object] | None, optional
        Additional context.
    """

    def __init__(
        self,
        message: str,
        *,
        errors: list[dict[str, object]] | None = None,
        cause: Exception | None = None,
        context: Mapping[str, object] | None = None,
    ) -> None:
        merged: dict[str, object] = dict(context) if context else {}
        if errors:
            merged["errors"] = errors
        super().__init__(
            message,
            code=ErrorCode.CONFIGURATION_ERROR,
            http_status=500,
            cause=cause,
            context=merged,
        )


class TypeIntrospectionError(SpecFoundryError):
    """Raised when a runtime type cannot be inspected (e.g. unresolvable annotations)."""

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
        context: Mapping[str, object] | None = None,
    ) -> None:
        super().__init__(
            message,
            code=ErrorCode.TYPE_INTROSPECTION_FAILED,
            http_status=422,
            cause=cause,
            context=context,
        )


class EndpointDiscoveryError(SpecFoundryError):
    """Raised when endpoint descriptions cannot be obtained from a host application."""

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
        context: Mapping[str, object] | None = None,
    ) -> None:
        super().__init__(
            message,
            code=ErrorCode.ENDPOINT_DISCOVERY_FAILED,
            http_status=500,
            cause=cause,
            context=context,
        )


class DocumentationLoadError(SpecFoundryError):
    """Raised when a documentation provider cannot load its source package."""

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
        context: Mapping[str, object] | None = None,
    ) -> None:
        super().__init__(
            message,
            code=ErrorCode.DOCUMENTATION_LOAD_FAILED,
            http_status=500,
            cause=cause,
            context=context,
        )


class SerializationError(SpecFoundryError):
    """Raised when a generated document cannot be encoded."""

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
        context: Mapping[str, object] | None = None,
    ) -> None:
        super().__init__(
            message,
            code=ErrorCode.SERIALIZATION_ERROR,
            http_status=500,
            cause=cause,
            context=context,
        )
