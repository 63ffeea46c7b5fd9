"""Swagger document assembly and rendering.

:class:`SwaggerGenerator` runs the operation builder over every endpoint
against one shared registry, groups operations by path, and snapshots the
registry as the document's ``definitions``. Rendering produces plain
builtins in Swagger 1.2 key spelling; :func:`dump_document` serialises them
with msgspec (JSON) or PyYAML.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import msgspec
import yaml
from msgspec import json as msgspec_json

from specfoundry.nodes import (
    ArrayNode,
    EnumNode,
    ObjectNode,
    PrimitiveNode,
    ReferenceNode,
    SchemaNode,
    VoidNode,
)
from specfoundry.operations import api_path
from specfoundry.registry import ModelSpecRegistry
from specfoundry_common.errors import ConfigurationError, SerializationError
from specfoundry_common.logging import get_logger
from specfoundry_common.settings import GenerationConfig

if TYPE_CHECKING:
    from collections.abc import Iterable

    from specfoundry.operations import (
        ApiDescription,
        OperationSpec,
        OperationSpecGenerator,
        ParameterSpec,
    )

__all__ = [
    "ApiEntry",
    "SwaggerDocument",
    "SwaggerGenerator",
    "dump_document",
    "render_node",
    "render_operation",
]

logger = get_logger(__name__)


@dataclass(slots=True)
class ApiEntry:
    """Operations sharing one path."""

    path: str
    operations: list[OperationSpec] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class SwaggerDocument:
    """Assembled API description.

    Attributes
    ----------
    swagger_version : str
        Version of the document format.
    api_version : str
        Version of the described API.
    base_path : str
        Prefix of every path in ``apis``.
    apis : tuple[ApiEntry, ...]
        Path groups in first-seen order.
    definitions : dict[str, ObjectNode]
        Every complex type referenced by an operation, keyed by id.
    """

    swagger_version: str
    api_version: str
    base_path: str
    apis: tuple[ApiEntry, ...]
    definitions: dict[str, ObjectNode]

    def to_dict(self) -> dict[str, object]:
        """Return the document as nested builtins, ready for encoding."""
        return {
            "swaggerVersion": self.swagger_version,
            "apiVersion": self.api_version,
            "basePath": self.base_path,
            "apis": [
                {
                    "path": entry.path,
                    "operations": [render_operation(operation) for operation in entry.operations],
                }
                for entry in self.apis
            ],
            "definitions": {
                spec_id: render_node(node) for spec_id, node in self.definitions.items()
            },
        }


def _compact(payload: dict[str, object]) -> dict[str, object]:
    return {key: value for key, value in payload.items() if value is not None}


def render_node(node: SchemaNode) -> dict[str, object]:
    """Render one schema node.

    Examples
    --------
    >>> render_node(ReferenceNode(ref="Customer"))
    {'$ref': 'Customer'}
    """
    match node:
        case ReferenceNode():
            payload: dict[str, object] = {"$ref": node.ref}
        case ObjectNode():
            payload = {
                "id": node.id,
                "type": node.type,
                "properties": {
                    name: render_node(child) for name, child in node.properties.items()
                },
            }
        case ArrayNode():
            payload = {"type": node.type, "items": render_node(node.items)}
        case EnumNode():
            payload = {"type": node.type, "enum": list(node.enum), "example": node.example}
        case PrimitiveNode():
            payload = {"type": node.type, "format": node.format, "example": node.example}
        case VoidNode():
            payload = {"type": node.type}
        case _:
            msg = f"Cannot render schema node of type {type(node).__name__}"
            raise SerializationError(msg)
    payload["description"] = node.description
    return _compact(payload)


def _render_schema_fields(target: OperationSpec | ParameterSpec) -> dict[str, object]:
    return {
        "type": target.type,
        "format": target.format,
        "items": render_node(target.items) if target.items is not None else None,
        "enum": list(target.enum) if target.enum is not None else None,
    }


def render_operation(operation: OperationSpec) -> dict[str, object]:
    """Render one operation with its parameters and response messages."""
    parameters = [
        _compact(
            {
                "paramType": parameter.param_type,
                "name": parameter.name,
                "description": parameter.description,
                "required": parameter.required,
                **_render_schema_fields(parameter),
            }
        )
        for parameter in operation.parameters
    ]
    response_messages = [
        _compact(
            {
                "code": message.code,
                "message": message.message,
                "responseModel": message.response_model,
            }
        )
        for message in operation.response_messages
    ]
    return _compact(
        {
            "method": operation.method,
            "nickname": operation.nickname,
            "summary": operation.summary,
            "notes": operation.notes,
            **_render_schema_fields(operation),
            "parameters": parameters,
            "responseMessages": response_messages,
        }
    )


class SwaggerGenerator:
    """Assemble a :class:`SwaggerDocument` from endpoint descriptions.

    Parameters
    ----------
    operation_generator : OperationSpecGenerator
        Builder used for every endpoint.
    config : GenerationConfig | None, optional
        Document metadata. Defaults to ``GenerationConfig()``.
    """

    def __init__(
        self,
        operation_generator: OperationSpecGenerator,
        config: GenerationConfig | None = None,
    ) -> None:
        self._operation_generator = operation_generator
        self._config = config if config is not None else GenerationConfig()

    def generate(
        self,
        api_descriptions: Iterable[ApiDescription],
        registry: ModelSpecRegistry | None = None,
    ) -> SwaggerDocument:
        """Build the document; a fresh registry is used unless one is given."""
        start = time.monotonic()
        registry = registry if registry is not None else ModelSpecRegistry()
        apis: dict[str, ApiEntry] = {}
        operation_count = 0

        for description in api_descriptions:
            path = "/" + api_path(description.relative_path).lstrip("/")
            entry = apis.setdefault(path, ApiEntry(path=path))
            entry.operations.append(self._operation_generator.generate(description, registry))
            operation_count += 1

        document = SwaggerDocument(
            swagger_version=self._config.swagger_version,
            api_version=self._config.api_version,
            base_path=self._config.base_path,
            apis=tuple(apis.values()),
            definitions=registry.snapshot(),
        )
        logger.info(
            "Generated Swagger document",
            extra={
                "operation": "generate_document",
                "status": "success",
                "path_count": len(document.apis),
                "operation_count": operation_count,
                "definition_count": len(document.definitions),
                "duration_ms": round((time.monotonic() - start) * 1000, 3),
            },
        )
        return document


def dump_document(document: SwaggerDocument, fmt: str = "json", *, indent: int = 2) -> str:
    """Serialise ``document`` as JSON or YAML text.

    Raises
    ------
    ConfigurationError
        If ``fmt`` is not ``json`` or ``yaml``.
    SerializationError
        If the document holds values that cannot be encoded.
    """
    if fmt not in ("json", "yaml"):
        msg = f"Unsupported output format '{fmt}'; expected 'json' or 'yaml'"
        raise ConfigurationError(msg, context={"format": fmt})

    try:
        builtins = msgspec.to_builtins(document.to_dict())
        if fmt == "yaml":
            return yaml.safe_dump(builtins, sort_keys=False, allow_unicode=True)
        encoded = msgspec_json.encode(builtins)
        if indent > 0:
            encoded = msgspec_json.format(encoded, indent=indent)
        return encoded.decode("utf-8") + "\n"
    except (msgspec.EncodeError, TypeError, yaml.YAMLError) as exc:
        msg = f"Unable to encode document as {fmt}"
        raise SerializationError(msg, cause=exc, context={"format": fmt}) from exc
