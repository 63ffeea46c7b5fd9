"""Swagger model and operation specs derived from Python type annotations.

The public surface re-exports the engine, its registry and schema nodes, the
operation builder and the document assembler.

Examples
--------
>>> from specfoundry import ModelSpecGenerator, ModelSpecRegistry
>>> registry = ModelSpecRegistry()
>>> ModelSpecGenerator().generate(int, registry).type
'integer'
"""

from __future__ import annotations

from specfoundry.docs import DocumentationProviders, OperationDocumentation
from specfoundry.document import SwaggerDocument, SwaggerGenerator, dump_document
from specfoundry.engine import ModelSpecGenerator
from specfoundry.introspection import ExtensionData
from specfoundry.nodes import (
    VOID,
    ArrayNode,
    EnumNode,
    ObjectNode,
    PrimitiveNode,
    ReferenceNode,
    SchemaNode,
    VoidNode,
)
from specfoundry.operations import (
    ApiDescription,
    ApiParameterDescription,
    OperationFilter,
    OperationSpec,
    OperationSpecFilter,
    OperationSpecGenerator,
    ParameterSource,
)
from specfoundry.registry import ModelSpecRegistry

__all__ = [
    "VOID",
    "ApiDescription",
    "ApiParameterDescription",
    "ArrayNode",
    "DocumentationProviders",
    "EnumNode",
    "ExtensionData",
    "ModelSpecGenerator",
    "ModelSpecRegistry",
    "ObjectNode",
    "OperationDocumentation",
    "OperationFilter",
    "OperationSpec",
    "OperationSpecFilter",
    "OperationSpecGenerator",
    "ParameterSource",
    "PrimitiveNode",
    "ReferenceNode",
    "SchemaNode",
    "SwaggerDocument",
    "SwaggerGenerator",
    "VoidNode",
    "dump_document",
]
