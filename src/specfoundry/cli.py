"""Command-line entry point for Swagger document generation."""

from __future__ import annotations

import importlib
from pathlib import Path
from typing import TYPE_CHECKING, Annotated
from uuid import uuid4

import typer

from specfoundry.docs import DocumentationProviders
from specfoundry.document import SwaggerGenerator, dump_document
from specfoundry.fastapi_endpoints import describe_app
from specfoundry.operations import OperationSpecGenerator
from specfoundry_common.errors import (
    ConfigurationError,
    EndpointDiscoveryError,
    ErrorCode,
    SerializationError,
    SettingsError,
    SpecFoundryError,
    get_type_uri,
)
from specfoundry_common.logging import get_logger, setup_logging, with_fields
from specfoundry_common.problem_details import problem_from_exception, render_problem
from specfoundry_common.settings import load_settings

if TYPE_CHECKING:
    from specfoundry_common.logging import LoggerAdapter
    from specfoundry_common.settings import RuntimeSettings

__all__ = ["app", "generate", "import_target"]

LOGGER = get_logger(__name__)

EXIT_FAILURE = 1
EXIT_CONFIGURATION = 2

app = typer.Typer(
    help="Generate Swagger documents from FastAPI applications.",
    no_args_is_help=True,
    add_completion=False,
)


@app.callback()
def main() -> None:
    """Generate Swagger documents from FastAPI applications."""


def import_target(target: str) -> object:
    """Import ``module:attribute`` and return the attribute.

    Raises
    ------
    ConfigurationError
        If ``target`` is not in ``module:attribute`` form.
    EndpointDiscoveryError
        If the module or attribute cannot be imported.
    """
    module_name, sep, attribute = target.partition(":")
    if not sep or not module_name or not attribute:
        msg = f"Target '{target}' must have the form 'module:attribute'"
        raise ConfigurationError(msg, context={"target": target})
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        msg = f"Unable to import module '{module_name}'"
        raise EndpointDiscoveryError(msg, cause=exc, context={"target": target}) from exc
    try:
        return getattr(module, attribute)
    except AttributeError as exc:
        msg = f"Module '{module_name}' has no attribute '{attribute}'"
        raise EndpointDiscoveryError(msg, cause=exc, context={"target": target}) from exc


def _settings_overrides(
    *,
    output_format: str | None,
    api_version: str | None,
    base_path: str | None,
    docs_packages: list[str] | None,
    log_level: str | None,
) -> dict[str, object]:
    sections: dict[str, dict[str, object]] = {
        "generation": {"api_version": api_version, "base_path": base_path},
        "output": {"format": output_format},
        "documentation": {"packages": docs_packages or None},
        "observability": {"log_level": log_level},
    }
    overrides: dict[str, object] = {}
    for section, values in sections.items():
        provided = {key: value for key, value in values.items() if value is not None}
        if provided:
            overrides[section] = provided
    return overrides


def _fail(exc: SpecFoundryError, logger: LoggerAdapter, correlation_id: str) -> None:
    logger.log(exc.log_level, "Command failed: %s", exc.message, exc_info=exc)
    problem = exc.to_problem_details(
        instance=f"urn:specfoundry:cli:generate:{correlation_id}",
    )
    typer.echo(render_problem(problem), err=True)


def _fail_unexpected(exc: Exception, logger: LoggerAdapter, correlation_id: str) -> None:
    logger.error("Command failed unexpectedly: %s", exc, exc_info=exc)
    problem = problem_from_exception(
        exc,
        problem_type=get_type_uri(ErrorCode.RUNTIME_ERROR),
        title="Unexpected generation failure",
        status=500,
        instance=f"urn:specfoundry:cli:generate:{correlation_id}",
        code=ErrorCode.RUNTIME_ERROR.value,
    )
    typer.echo(render_problem(problem), err=True)


def _render(target: str, settings: RuntimeSettings, logger: LoggerAdapter) -> str:
    documentation = None
    if settings.documentation.packages:
        documentation = DocumentationProviders.build(
            settings.documentation.packages, settings.documentation.search_paths
        )
    descriptions = describe_app(import_target(target), documentation)
    generator = SwaggerGenerator(
        OperationSpecGenerator(documentation=documentation), settings.generation
    )
    document = generator.generate(descriptions)
    logger.info(
        "Rendering document",
        extra={"status": "success", "format": settings.output.format},
    )
    return dump_document(document, settings.output.format, indent=settings.output.indent)


_TargetArg = Annotated[
    str, typer.Argument(help="FastAPI application to describe, as 'module:attribute'")
]
_OutputOption = Annotated[
    Path | None, typer.Option("--output", "-o", help="Write to this file instead of stdout")
]
_FormatOption = Annotated[str | None, typer.Option("--format", help="json|yaml")]
_ApiVersionOption = Annotated[
    str | None, typer.Option("--api-version", help="Version of the described API")
]
_BasePathOption = Annotated[str | None, typer.Option("--base-path", help="Document base path")]
_DocsPackageOption = Annotated[
    list[str] | None,
    typer.Option("--docs-package", help="Package whose docstrings describe models (repeatable)"),
]
_LogLevelOption = Annotated[str | None, typer.Option("--log-level", help="Logging level")]


@app.command(name="generate")
def generate(
    target: _TargetArg,
    output: _OutputOption = None,
    output_format: _FormatOption = None,
    api_version: _ApiVersionOption = None,
    base_path: _BasePathOption = None,
    docs_package: _DocsPackageOption = None,
    log_level: _LogLevelOption = None,
) -> None:
    """Describe a FastAPI application as a Swagger document.

    Options override ``SPECFOUNDRY_*`` environment settings.

    Raises
    ------
    typer.Exit
        With code 2 for configuration errors and 1 for any other failure. A
        Problem Details payload is written to stderr first.
    """
    correlation_id = uuid4().hex
    with with_fields(
        LOGGER, correlation_id=correlation_id, operation="cli_generate", target=target
    ) as logger:
        try:
            settings = load_settings(
                **_settings_overrides(
                    output_format=output_format,
                    api_version=api_version,
                    base_path=base_path,
                    docs_packages=docs_package,
                    log_level=log_level,
                )
            )
        except SettingsError as exc:
            _fail(exc, logger, correlation_id)
            raise typer.Exit(code=EXIT_CONFIGURATION) from exc

        setup_logging(settings.observability.log_level)

        try:
            text = _render(target, settings, logger)
            if output is None:
                typer.echo(text, nl=False)
                return
            try:
                output.parent.mkdir(parents=True, exist_ok=True)
                output.write_text(text, encoding="utf-8")
            except OSError as exc:
                msg = f"Unable to write document to {output}"
                raise SerializationError(msg, cause=exc, context={"path": str(output)}) from exc
        except ConfigurationError as exc:
            _fail(exc, logger, correlation_id)
            raise typer.Exit(code=EXIT_CONFIGURATION) from exc
        except SpecFoundryError as exc:
            _fail(exc, logger, correlation_id)
            raise typer.Exit(code=EXIT_FAILURE) from exc
        except (TypeError, ValueError, RuntimeError) as exc:
            _fail_unexpected(exc, logger, correlation_id)
            raise typer.Exit(code=EXIT_FAILURE) from exc

        logger.info("Wrote document", extra={"status": "success", "path": str(output)})
        typer.echo(f"Wrote {output}")


if __name__ == "__main__":  # pragma: no cover - manual execution entrypoint
    app()
