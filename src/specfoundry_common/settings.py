"""Runtime settings with typed configuration and fail-fast validation.

:class:`RuntimeSettings` (``pydantic_settings.BaseSettings``) aggregates nested
configuration models loaded from ``SPECFOUNDRY_*`` environment variables.

Examples
--------
>>> from specfoundry_common.settings import load_settings
>>> settings = load_settings()
>>> settings.generation.swagger_version
'1.2'
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from specfoundry_common.errors import SettingsError
from specfoundry_common.logging import get_logger

__all__ = [
    "DocumentationConfig",
    "GenerationConfig",
    "ObservabilityConfig",
    "OutputConfig",
    "RuntimeSettings",
    "load_settings",
]

logger = get_logger(__name__)


class GenerationConfig(BaseSettings):
    """Document-level metadata (``SPECFOUNDRY_GENERATION_*``)."""

    model_config = SettingsConfigDict(env_prefix="SPECFOUNDRY_GENERATION_", extra="forbid")

    swagger_version: str = Field(default="1.2", description="Swagger version emitted")
    api_version: str = Field(default="1.0", description="Version of the described API")
    base_path: str = Field(default="/", description="Base path prepended to every API path")


class OutputConfig(BaseSettings):
    """Rendering options (``SPECFOUNDRY_OUTPUT_*``)."""

    model_config = SettingsConfigDict(env_prefix="SPECFOUNDRY_OUTPUT_", extra="forbid")

    format: Literal["json", "yaml"] = Field(default="json", description="Output format")
    indent: int = Field(default=2, ge=0, description="JSON indentation (0 for compact)")


class DocumentationConfig(BaseSettings):
    """Docstring harvesting (``SPECFOUNDRY_DOCUMENTATION_*``)."""

    model_config = SettingsConfigDict(env_prefix="SPECFOUNDRY_DOCUMENTATION_", extra="forbid")

    packages: list[str] = Field(
        default_factory=list,
        description="Top-level packages whose docstrings describe models and endpoints",
    )
    search_paths: list[str] = Field(
        default_factory=lambda: ["src", "."],
        description="Filesystem paths searched when loading documented packages",
    )


class ObservabilityConfig(BaseSettings):
    """Logging toggles (``SPECFOUNDRY_*`` namespace)."""

    model_config = SettingsConfigDict(env_prefix="SPECFOUNDRY_", extra="forbid")

    log_level: str = Field(default="INFO", description="Logging level (DEBUG, INFO, ...)")


class RuntimeSettings(BaseSettings):
    """Aggregate runtime configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="SPECFOUNDRY_",
        env_nested_delimiter="__",
        extra="forbid",
        case_sensitive=False,
    )

    generation: GenerationConfig = Field(default_factory=GenerationConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    documentation: DocumentationConfig = Field(default_factory=DocumentationConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)


def load_settings(**overrides: object) -> RuntimeSettings:
    """Load :class:`RuntimeSettings`, converting validation failures.

    Parameters
    ----------
    **overrides : object
        Field overrides applied on top of environment values.

    Returns
    -------
    RuntimeSettings
        Validated settings.

    Raises
    ------
    SettingsError
        If the environment or overrides fail validation. ``context["errors"]``
        lists each failing location and message.
    """
    try:
        return RuntimeSettings(**overrides)  # type: ignore[arg-type]  # BaseSettings accepts arbitrary kwargs
    except ValidationError as exc:
        errors: list[dict[str, object]] = [
            {"loc": ".".join(str(part) for part in error["loc"]), "msg": error["msg"]}
            for error in exc.errors()
        ]
        logger.exception(
            "Settings validation failed",
            extra={"operation": "load_settings", "error_count": len(errors)},
        )
        msg = f"Configuration validation failed: {exc.error_count()} error(s)"
        raise SettingsError(msg, errors=errors, cause=exc) from exc
