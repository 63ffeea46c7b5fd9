"""Canonical schema fragments for well-known scalar types.

The table is read-only. Opaque entries (``Any``, ``object``, untyped mappings)
map to a property-less :class:`~specfoundry.nodes.ObjectNode` with the id
``Object``; the engine defers those like any other complex type.
"""

from __future__ import annotations

import collections.abc
import datetime as dt
import uuid
from decimal import Decimal
from types import MappingProxyType
from typing import Any, Final

from specfoundry.nodes import ObjectNode, PrimitiveNode, SchemaNode

__all__ = [
    "OPAQUE_OBJECT",
    "PRIMITIVE_MAPPINGS",
    "lookup_primitive",
]

OPAQUE_OBJECT: Final = ObjectNode(id="Object")

_SAMPLE_DATETIME = dt.datetime(1982, 2, 24, tzinfo=dt.UTC)

PRIMITIVE_MAPPINGS: Final[MappingProxyType[object, SchemaNode]] = MappingProxyType(
    {
        int: PrimitiveNode(type="integer", format="int64", example=1),
        float: PrimitiveNode(type="number", format="double", example=2.5),
        Decimal: PrimitiveNode(type="number", format="double", example=Decimal("3.2")),
        str: PrimitiveNode(type="string", example="sample"),
        bool: PrimitiveNode(type="boolean", example=True),
        bytes: PrimitiveNode(type="string", format="byte", example=""),
        bytearray: PrimitiveNode(type="string", format="byte", example=""),
        dt.datetime: PrimitiveNode(type="string", format="date-time", example=_SAMPLE_DATETIME),
        dt.date: PrimitiveNode(type="string", format="date", example=_SAMPLE_DATETIME.date()),
        dt.time: PrimitiveNode(type="string", format="time", example=dt.time(0, 0)),
        uuid.UUID: PrimitiveNode(
            type="string",
            format="uuid",
            example=uuid.UUID("9b2b4c1e-5f0e-4b8a-9c56-2d7f3c1a0e42"),
        ),
        Any: OPAQUE_OBJECT,
        object: OPAQUE_OBJECT,
        dict: OPAQUE_OBJECT,
        collections.abc.Mapping: OPAQUE_OBJECT,
        collections.abc.MutableMapping: OPAQUE_OBJECT,
    }
)


def lookup_primitive(annotation: object, origin: object | None = None) -> SchemaNode | None:
    """Return the table entry for ``annotation``.

    An exact match wins. Otherwise a parameterised mapping such as
    ``dict[str, int]`` resolves to the opaque entry registered for its
    ``origin``; other parameterised origins never match.
    """
    try:
        exact = PRIMITIVE_MAPPINGS.get(annotation)
    except TypeError:  # unhashable annotation objects
        return None
    if exact is not None:
        return exact
    if origin is not None and origin is not annotation:
        fallback = PRIMITIVE_MAPPINGS.get(origin)
        if isinstance(fallback, ObjectNode):
            return fallback
    return None
