"""Operation descriptors built from endpoint descriptions.

:class:`OperationSpecGenerator` is a thin consumer of the model-spec engine:
parameter and return types are generated against the shared registry, and
the resulting :class:`OperationSpec` is handed to an ordered chain of
filters that may mutate it in place. Later filters win.

Two filter generations are supported. :class:`OperationFilter` receives the
registry and the engine; the older :class:`OperationSpecFilter` receives a
:class:`ModelSpecMap`. Older filters are wrapped in
:class:`LegacyOperationFilter` when the generator is built, so the chain is a
single list that runs modern filters first, then legacy ones, each in the
order supplied.
"""

from __future__ import annotations

import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from specfoundry.engine import ModelSpecGenerator
from specfoundry.ids import unique_id_for
from specfoundry.nodes import ObjectNode, ReferenceNode, SchemaNode, VoidNode
from specfoundry_common.errors import ConfigurationError
from specfoundry_common.logging import get_logger

if TYPE_CHECKING:
    from specfoundry.docs import DocumentationProviders, OperationDocumentation
    from specfoundry.registry import ModelSpecRegistry

__all__ = [
    "ApiDescription",
    "ApiParameterDescription",
    "LegacyOperationFilter",
    "ModelSpecMap",
    "OperationFilter",
    "OperationSpec",
    "OperationSpecFilter",
    "OperationSpecGenerator",
    "ParameterSource",
    "ParameterSpec",
    "ResponseMessageSpec",
    "api_path",
]

logger = get_logger(__name__)


class ParameterSource(StrEnum):
    """Where an endpoint reads a parameter from."""

    BODY = "body"
    URI = "uri"
    UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class ApiParameterDescription:
    """One parameter of an endpoint, as reported by the host."""

    name: str
    source: ParameterSource
    type: object
    is_optional: bool = False
    documentation: str | None = None


@dataclass(frozen=True, slots=True)
class ApiDescription:
    """One endpoint, as reported by the host.

    Attributes
    ----------
    http_method : str
        Upper-case HTTP verb.
    relative_path : str
        Route template, possibly followed by a ``?query`` suffix.
    controller_name : str
        Grouping name of the endpoint.
    action_name : str
        Name of the endpoint within its controller.
    parameters : tuple[ApiParameterDescription, ...]
        Parameters in declaration order.
    return_type : object | None
        Response body annotation; ``None`` when there is no body.
    documentation : OperationDocumentation | None
        Summary and remarks supplied by the host.
    handler : object | None
        Callable serving the endpoint, used to look up documentation.
    """

    http_method: str
    relative_path: str
    controller_name: str
    action_name: str
    parameters: tuple[ApiParameterDescription, ...] = ()
    return_type: object | None = None
    documentation: OperationDocumentation | None = None
    handler: object | None = None


@dataclass(slots=True)
class ParameterSpec:
    """Parameter entry of an operation descriptor."""

    param_type: str
    name: str
    description: str | None = None
    required: bool = True
    type: str | None = None
    format: str | None = None
    items: SchemaNode | None = None
    enum: tuple[str, ...] | None = None


@dataclass(slots=True)
class ResponseMessageSpec:
    """Documented non-default response of an operation."""

    code: int
    message: str
    response_model: str | None = None


@dataclass(slots=True)
class OperationSpec:
    """Operation descriptor; filters mutate it in place."""

    method: str
    nickname: str
    summary: str | None = None
    notes: str | None = None
    type: str | None = None
    format: str | None = None
    items: SchemaNode | None = None
    enum: tuple[str, ...] | None = None
    parameters: list[ParameterSpec] = field(default_factory=list)
    response_messages: list[ResponseMessageSpec] = field(default_factory=list)


class ModelSpecMap:
    """Registry lookup that generates missing entries on demand."""

    def __init__(self, registry: ModelSpecRegistry, generator: ModelSpecGenerator) -> None:
        self._registry = registry
        self._generator = generator

    def find_or_map(self, annotation: object) -> SchemaNode:
        """Return the registered node for ``annotation`` or generate it."""
        existing = self._registry.get(unique_id_for(annotation))
        if existing is not None:
            return existing
        return self._generator.generate(annotation, self._registry)


@runtime_checkable
class OperationFilter(Protocol):
    """Post-processing step over an assembled operation."""

    def apply(
        self,
        api_description: ApiDescription,
        operation: OperationSpec,
        registry: ModelSpecRegistry,
        generator: ModelSpecGenerator,
    ) -> None:
        """Mutate ``operation`` in place."""
        ...


@runtime_checkable
class OperationSpecFilter(Protocol):
    """Older post-processing step that only sees a :class:`ModelSpecMap`."""

    def apply(
        self,
        api_description: ApiDescription,
        operation: OperationSpec,
        model_spec_map: ModelSpecMap,
    ) -> None:
        """Mutate ``operation`` in place."""
        ...


class LegacyOperationFilter:
    """Present an :class:`OperationSpecFilter` as an :class:`OperationFilter`."""

    def __init__(self, wrapped: OperationSpecFilter) -> None:
        self.wrapped = wrapped

    def apply(
        self,
        api_description: ApiDescription,
        operation: OperationSpec,
        registry: ModelSpecRegistry,
        generator: ModelSpecGenerator,
    ) -> None:
        self.wrapped.apply(api_description, operation, ModelSpecMap(registry, generator))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.wrapped!r})"


def api_path(relative_path: str) -> str:
    """Strip the query-string suffix from a route template.

    Examples
    --------
    >>> api_path("orders/{id}?expand={expand}")
    'orders/{id}'
    """
    return relative_path.split("?", 1)[0]


def _param_type(parameter: ApiParameterDescription, path: str) -> str:
    match parameter.source:
        case ParameterSource.BODY:
            return "body"
        case ParameterSource.URI:
            # Substring match: a query name contained in a path token reads as "path".
            return "path" if parameter.name in path else "query"
        case _:
            return ""


def _validated_filters(filters: Sequence[object] | None, kind: str) -> list[object]:
    if filters is None:
        return []
    if isinstance(filters, (str, bytes, Mapping)) or not isinstance(filters, Sequence):
        msg = f"{kind} must be a sequence, got {type(filters).__name__}"
        raise ConfigurationError(msg)
    for index, candidate in enumerate(filters):
        if not callable(getattr(candidate, "apply", None)):
            msg = f"{kind}[{index}] does not define an apply() method"
            raise ConfigurationError(msg, context={"filter_type": type(candidate).__name__})
    return list(filters)


class OperationSpecGenerator:
    """Build :class:`OperationSpec` instances for endpoint descriptions.

    Parameters
    ----------
    custom_mappings : Mapping[object, SchemaNode] | None, optional
        Host-authored nodes, forwarded to the model-spec engine.
    operation_filters : Sequence[OperationFilter] | None, optional
        Filters run first, in order.
    operation_spec_filters : Sequence[OperationSpecFilter] | None, optional
        Older filters, adapted and run after ``operation_filters``.
    documentation : DocumentationProviders | None, optional
        Property and endpoint documentation.

    Raises
    ------
    ConfigurationError
        If the override table or a filter list is malformed.
    """

    def __init__(
        self,
        custom_mappings: Mapping[object, SchemaNode] | None = None,
        operation_filters: Sequence[OperationFilter] | None = None,
        operation_spec_filters: Sequence[OperationSpecFilter] | None = None,
        documentation: DocumentationProviders | None = None,
    ) -> None:
        modern = _validated_filters(operation_filters, "operation_filters")
        legacy = _validated_filters(operation_spec_filters, "operation_spec_filters")
        self._filters: tuple[OperationFilter, ...] = tuple(
            [*modern, *(LegacyOperationFilter(item) for item in legacy)]  # type: ignore[list-item]
        )
        self._documentation = documentation
        self._model_spec_generator = ModelSpecGenerator(custom_mappings, documentation)

    @property
    def model_spec_generator(self) -> ModelSpecGenerator:
        return self._model_spec_generator

    @property
    def filters(self) -> tuple[OperationFilter, ...]:
        return self._filters

    def generate(
        self, api_description: ApiDescription, registry: ModelSpecRegistry
    ) -> OperationSpec:
        """Return the operation descriptor for ``api_description``.

        Every complex type reached through a parameter or the return type is
        registered in ``registry`` before the filters run.
        """
        start = time.monotonic()
        path = api_path(api_description.relative_path)
        documentation = self._operation_documentation(api_description)

        operation = OperationSpec(
            method=api_description.http_method.upper(),
            nickname=f"{api_description.controller_name}_{api_description.action_name}",
            summary=documentation.summary if documentation else None,
            notes=documentation.remarks if documentation else None,
            parameters=[
                self._create_parameter_spec(parameter, path, registry)
                for parameter in api_description.parameters
            ],
        )

        if api_description.return_type is None or api_description.return_type is type(None):
            operation.type = "void"
        else:
            node = self._model_spec_generator.generate(api_description.return_type, registry)
            _copy_schema(node, operation)

        for operation_filter in self._filters:
            operation_filter.apply(api_description, operation, registry, self._model_spec_generator)

        logger.debug(
            "Built operation spec",
            extra={
                "operation": "build_operation",
                "nickname": operation.nickname,
                "parameter_count": len(operation.parameters),
                "filter_count": len(self._filters),
                "duration_ms": round((time.monotonic() - start) * 1000, 3),
            },
        )
        return operation

    def _operation_documentation(
        self, api_description: ApiDescription
    ) -> OperationDocumentation | None:
        if api_description.documentation is not None:
            return api_description.documentation
        if self._documentation is None or api_description.handler is None:
            return None
        provider = self._documentation.for_object(api_description.handler)
        if provider is None:
            return None
        return provider.operation_documentation(api_description.handler)

    def _create_parameter_spec(
        self, parameter: ApiParameterDescription, path: str, registry: ModelSpecRegistry
    ) -> ParameterSpec:
        spec = ParameterSpec(
            param_type=_param_type(parameter, path),
            name=parameter.name,
            description=parameter.documentation,
            required=not parameter.is_optional,
        )
        node = self._model_spec_generator.generate(parameter.type, registry)
        _copy_schema(node, spec)
        return spec


def _copy_schema(node: SchemaNode, target: OperationSpec | ParameterSpec) -> None:
    if isinstance(node, ObjectNode):
        target.type = node.id
        return
    if isinstance(node, ReferenceNode):
        target.type = node.ref
        return
    if isinstance(node, VoidNode):
        target.type = "void"
        return
    target.type = getattr(node, "type", None)
    target.format = getattr(node, "format", None)
    target.items = getattr(node, "items", None)
    target.enum = getattr(node, "enum", None)
