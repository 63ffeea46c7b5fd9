"""Endpoint descriptions harvested from a FastAPI application.

Only :class:`fastapi.routing.APIRoute` entries with ``include_in_schema``
set are described; mounted apps and plain Starlette routes are skipped.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from fastapi import APIRouter, FastAPI
from fastapi.dependencies.utils import get_flat_dependant
from fastapi.routing import APIRoute

from specfoundry.docs import OperationDocumentation, split_docstring
from specfoundry.operations import ApiDescription, ApiParameterDescription, ParameterSource
from specfoundry_common.errors import EndpointDiscoveryError
from specfoundry_common.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable

    from specfoundry.docs import DocumentationProviders

__all__ = ["describe_app"]

logger = get_logger(__name__)

_NO_CONTENT = 204


def _controller_name(route: APIRoute) -> str:
    if route.tags:
        tag = route.tags[0]
        return str(tag.value) if isinstance(tag, Enum) else str(tag)
    module = getattr(route.endpoint, "__module__", None) or "default"
    return module.rpartition(".")[2]


def _parameters(route: APIRoute) -> tuple[ApiParameterDescription, ...]:
    dependant = get_flat_dependant(route.dependant, skip_repeats=True)
    groups = (
        (dependant.path_params, ParameterSource.URI),
        (dependant.query_params, ParameterSource.URI),
        (dependant.header_params, ParameterSource.UNKNOWN),
        (dependant.cookie_params, ParameterSource.UNKNOWN),
        (dependant.body_params, ParameterSource.BODY),
    )
    return tuple(
        ApiParameterDescription(
            name=field.alias,
            source=source,
            type=field.field_info.annotation,
            is_optional=not field.required,
            documentation=field.field_info.description,
        )
        for fields, source in groups
        for field in fields
    )


def _documentation(
    route: APIRoute, documentation: DocumentationProviders | None
) -> OperationDocumentation | None:
    if route.summary:
        return OperationDocumentation(summary=route.summary, remarks=route.description or None)
    if documentation is not None:
        provider = documentation.for_object(route.endpoint)
        if provider is not None:
            found = provider.operation_documentation(route.endpoint)
            if found is not None:
                return found
    return split_docstring(route.description)


def _routes(app: object) -> Iterable[object]:
    if isinstance(app, (FastAPI, APIRouter)):
        return app.routes
    msg = f"Expected a FastAPI application or APIRouter, got {type(app).__name__}"
    raise EndpointDiscoveryError(msg, context={"app_type": type(app).__name__})


def describe_app(
    app: object, documentation: DocumentationProviders | None = None
) -> list[ApiDescription]:
    """Return one :class:`ApiDescription` per route and HTTP method.

    Parameters
    ----------
    app : object
        A :class:`fastapi.FastAPI` application or :class:`fastapi.APIRouter`.
    documentation : DocumentationProviders | None, optional
        Consulted for endpoints without an explicit ``summary``.

    Returns
    -------
    list[ApiDescription]
        Descriptions in route registration order, methods sorted.

    Raises
    ------
    EndpointDiscoveryError
        If ``app`` is not a FastAPI application or router.
    """
    descriptions: list[ApiDescription] = []
    for route in _routes(app):
        if not isinstance(route, APIRoute) or not route.include_in_schema:
            continue
        parameters = _parameters(route)
        return_type = None if route.status_code == _NO_CONTENT else route.response_model
        operation_docs = _documentation(route, documentation)
        descriptions.extend(
            ApiDescription(
                http_method=method,
                relative_path=route.path.lstrip("/"),
                controller_name=_controller_name(route),
                action_name=route.name,
                parameters=parameters,
                return_type=return_type,
                documentation=operation_docs,
                handler=route.endpoint,
            )
            for method in sorted(route.methods or ())
        )

    logger.info(
        "Described FastAPI endpoints",
        extra={"operation": "describe_app", "endpoint_count": len(descriptions)},
    )
    return descriptions
