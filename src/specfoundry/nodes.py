"""Schema nodes produced by the model-spec engine.

Nodes are frozen :class:`msgspec.Struct` values tagged by ``kind``. Only
:class:`ObjectNode` instances are stored in a registry; every other node is
built inline wherever a type occurs.

Examples
--------
>>> from specfoundry.nodes import ArrayNode, PrimitiveNode
>>> node = ArrayNode(items=PrimitiveNode(type="integer", format="int64"))
>>> node.kind
'array'
"""

from __future__ import annotations

from typing import Any, ClassVar, Literal

import msgspec
from msgspec import structs

__all__ = [
    "VOID",
    "ArrayNode",
    "EnumNode",
    "ObjectNode",
    "PrimitiveNode",
    "ReferenceNode",
    "SchemaNode",
    "VoidNode",
    "with_description",
]

type ScalarType = Literal["integer", "number", "string", "boolean"]


class SchemaNode(msgspec.Struct, frozen=True, kw_only=True, tag_field="kind"):
    """Base class for every generated schema node."""

    kind: ClassVar[str]

    description: str | None = None


class PrimitiveNode(SchemaNode, frozen=True, kw_only=True, tag="primitive"):
    """Scalar value with an optional format and example."""

    kind: ClassVar[str] = "primitive"

    type: ScalarType
    format: str | None = None
    example: Any = None


class EnumNode(SchemaNode, frozen=True, kw_only=True, tag="enumeration"):
    """String enumeration; the example is the first member."""

    kind: ClassVar[str] = "enumeration"

    enum: tuple[str, ...]
    type: Literal["string"] = "string"

    @property
    def example(self) -> str | None:
        return self.enum[0] if self.enum else None


class ArrayNode(SchemaNode, frozen=True, kw_only=True, tag="array"):
    """Homogeneous collection of ``items``."""

    kind: ClassVar[str] = "array"

    items: SchemaNode
    type: Literal["array"] = "array"


class ObjectNode(SchemaNode, frozen=True, kw_only=True, tag="object"):
    """Complex type expanded one level deep.

    ``properties`` preserves declaration order. Property values are never
    inline ``ObjectNode`` instances produced by the engine; nested complex
    types appear as :class:`ReferenceNode`.
    """

    kind: ClassVar[str] = "object"

    id: str
    properties: dict[str, SchemaNode] = msgspec.field(default_factory=dict)
    type: Literal["object"] = "object"


class ReferenceNode(SchemaNode, frozen=True, kw_only=True, tag="reference"):
    """Pointer to an :class:`ObjectNode` held in a registry."""

    kind: ClassVar[str] = "reference"

    ref: str


class VoidNode(SchemaNode, frozen=True, kw_only=True, tag="void"):
    """Absent result type; only used for operation return types."""

    kind: ClassVar[str] = "void"

    type: Literal["void"] = "void"


VOID = VoidNode()


def with_description[NodeT: SchemaNode](node: NodeT, description: str | None) -> NodeT:
    """Return a copy of ``node`` carrying ``description``.

    Prebuilt nodes (primitive table entries, custom overrides) are shared, so
    descriptions are attached to copies rather than by mutation.
    """
    if description is None or node.description == description:
        return node
    return structs.replace(node, description=description)
