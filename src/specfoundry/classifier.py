"""Production-rule selection for runtime types.

:func:`classify_type` decides which rule applies to a descriptor. The order
is fixed and the first match wins:

1. custom override supplied by the host
2. primitive table entry
3. enumeration (``enum.Enum`` subclass or ``Literal``)
4. nullable wrapper (``X | None``), reclassified as ``X``
5. collection (never ``str``/``bytes``), items classified with deferral
6. anything else is a complex object
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

from specfoundry.primitives import lookup_primitive

if TYPE_CHECKING:
    from collections.abc import Mapping

    from specfoundry.introspection import TypeDescriptor
    from specfoundry.nodes import SchemaNode

__all__ = ["TypeCategory", "classify_type", "lookup_override"]


class TypeCategory(StrEnum):
    """Production rule applied to a type."""

    CUSTOM = "custom"
    PRIMITIVE = "primitive"
    ENUMERATION = "enumeration"
    NULLABLE = "nullable"
    COLLECTION = "collection"
    COMPLEX = "complex"


def lookup_override(
    descriptor: TypeDescriptor, custom_mappings: Mapping[object, SchemaNode]
) -> SchemaNode | None:
    """Return the host-supplied node for an exact annotation match."""
    try:
        return custom_mappings.get(descriptor.annotation)
    except TypeError:  # unhashable annotation
        return None


def classify_type(
    descriptor: TypeDescriptor, custom_mappings: Mapping[object, SchemaNode]
) -> TypeCategory:
    """Return the first production rule matching ``descriptor``."""
    if lookup_override(descriptor, custom_mappings) is not None:
        return TypeCategory.CUSTOM
    if lookup_primitive(descriptor.annotation, descriptor.origin) is not None:
        return TypeCategory.PRIMITIVE
    if descriptor.enum_members is not None:
        return TypeCategory.ENUMERATION
    if descriptor.nullable_inner is not None:
        return TypeCategory.NULLABLE
    if descriptor.item_type is not None:
        return TypeCategory.COLLECTION
    return TypeCategory.COMPLEX
