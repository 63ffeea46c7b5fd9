"""Model-spec generation engine.

:class:`ModelSpecGenerator` turns one root annotation into a schema tree and
records every complex type it meets in a shared
:class:`~specfoundry.registry.ModelSpecRegistry`.

Recursion is bounded by deferral. A complex type reached as a property or
collection item is never expanded in place: it is queued as unresolved and a
:class:`~specfoundry.nodes.ReferenceNode` is returned instead. After the root
is built, the queue is drained until every deferred type has been expanded
exactly once. A type is queued at most once, so self-referential and mutually
recursive graphs terminate, and inline object expansion is always exactly one
level deep.

Examples
--------
>>> from specfoundry.registry import ModelSpecRegistry
>>> generator = ModelSpecGenerator()
>>> registry = ModelSpecRegistry()
>>> generator.generate(list[int], registry).kind
'array'
>>> len(registry)
0
"""

from __future__ import annotations

import time
from collections.abc import Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING, Final, cast

from specfoundry.classifier import TypeCategory, classify_type, lookup_override
from specfoundry.ids import unique_id_for
from specfoundry.introspection import describe
from specfoundry.nodes import (
    ArrayNode,
    EnumNode,
    ObjectNode,
    ReferenceNode,
    SchemaNode,
    with_description,
)
from specfoundry.primitives import lookup_primitive
from specfoundry_common.errors import ConfigurationError
from specfoundry_common.logging import get_logger

if TYPE_CHECKING:
    from specfoundry.docs import DocumentationProviders
    from specfoundry.introspection import TypeDescriptor
    from specfoundry.registry import ModelSpecRegistry

__all__ = ["ModelSpecGenerator"]

logger = get_logger(__name__)

# Pending-resolution queue: annotation -> expanded node, or None while unresolved.
type PendingQueue = dict[object, ObjectNode | None]

_NOTHING_PENDING: Final = object()


class ModelSpecGenerator:
    """Generate schema nodes for runtime types.

    Parameters
    ----------
    custom_mappings : Mapping[object, SchemaNode] | None, optional
        Host-authored nodes keyed by annotation. Consulted before every
        built-in rule and returned as-is, whether or not the type was reached
        as a nested occurrence.
    documentation : DocumentationProviders | None, optional
        Property descriptions, resolved per defining package.

    Raises
    ------
    ConfigurationError
        If ``custom_mappings`` is not a mapping or holds values that are not
        schema nodes.
    """

    def __init__(
        self,
        custom_mappings: Mapping[object, SchemaNode] | None = None,
        documentation: DocumentationProviders | None = None,
    ) -> None:
        if custom_mappings is None:
            custom_mappings = {}
        if not isinstance(custom_mappings, Mapping):
            msg = f"custom_mappings must be a mapping, got {type(custom_mappings).__name__}"
            raise ConfigurationError(msg)
        for annotation, node in custom_mappings.items():
            if not isinstance(node, SchemaNode):
                msg = f"Custom mapping for {annotation!r} is not a schema node"
                raise ConfigurationError(msg, context={"value_type": type(node).__name__})
        self._custom_mappings: Mapping[object, SchemaNode] = MappingProxyType(dict(custom_mappings))
        self._documentation = documentation

    @property
    def custom_mappings(self) -> Mapping[object, SchemaNode]:
        return self._custom_mappings

    def generate(self, annotation: object, registry: ModelSpecRegistry) -> SchemaNode:
        """Return the fully expanded schema for ``annotation``.

        The root is always expanded inline, never returned as a reference.
        Every complex type discovered while expanding it (including the root
        itself) is registered; every reference in the result resolves in
        ``registry`` when this method returns.
        """
        start = time.monotonic()
        pending: PendingQueue = {}

        root = self._create_spec_for(annotation, defer_if_complex=False, pending=pending)
        if isinstance(root, ObjectNode):
            registry.register(root)

        while (deferred := self._next_unresolved(pending)) is not _NOTHING_PENDING:
            # Deferred types are complex or opaque, so they always expand to objects.
            spec = cast(
                "ObjectNode",
                self._create_spec_for(deferred, defer_if_complex=False, pending=pending),
            )
            pending[deferred] = spec
            registry.register(spec)

        logger.debug(
            "Generated model spec",
            extra={
                "operation": "generate_model_spec",
                "root_kind": root.kind,
                "deferred_count": len(pending),
                "duration_ms": round((time.monotonic() - start) * 1000, 3),
            },
        )
        return root

    @staticmethod
    def _next_unresolved(pending: PendingQueue) -> object:
        # Insertion order makes the drain breadth-first by discovery.
        for annotation, spec in pending.items():
            if spec is None:
                return annotation
        return _NOTHING_PENDING

    def _create_spec_for(
        self, annotation: object, *, defer_if_complex: bool, pending: PendingQueue
    ) -> SchemaNode:
        descriptor = describe(annotation)
        category = classify_type(descriptor, self._custom_mappings)

        match category:
            case TypeCategory.CUSTOM:
                return cast("SchemaNode", lookup_override(descriptor, self._custom_mappings))
            case TypeCategory.PRIMITIVE:
                primitive = cast(
                    "SchemaNode", lookup_primitive(descriptor.annotation, descriptor.origin)
                )
                if isinstance(primitive, ObjectNode) and defer_if_complex:
                    return self._defer(descriptor.annotation, primitive.id, pending)
                return primitive
            case TypeCategory.ENUMERATION:
                members = descriptor.enum_members or ()
                return EnumNode(enum=members)
            case TypeCategory.NULLABLE:
                return self._create_spec_for(
                    descriptor.nullable_inner, defer_if_complex=defer_if_complex, pending=pending
                )
            case TypeCategory.COLLECTION:
                items = self._create_spec_for(
                    descriptor.item_type, defer_if_complex=True, pending=pending
                )
                return ArrayNode(items=items)
            case TypeCategory.COMPLEX:
                if defer_if_complex:
                    spec_id = unique_id_for(descriptor.annotation)
                    return self._defer(descriptor.annotation, spec_id, pending)
                return self._create_complex_spec_for(descriptor, pending)

    @staticmethod
    def _defer(annotation: object, spec_id: str, pending: PendingQueue) -> ReferenceNode:
        if annotation not in pending:
            pending[annotation] = None
        return ReferenceNode(ref=spec_id)

    def _create_complex_spec_for(
        self, descriptor: TypeDescriptor, pending: PendingQueue
    ) -> ObjectNode:
        owner = descriptor.generic_origin or descriptor.origin
        provider = (
            self._documentation.for_object(owner) if self._documentation is not None else None
        )

        properties: dict[str, SchemaNode] = {}
        for name, property_type in descriptor.properties().items():
            spec = self._create_spec_for(property_type, defer_if_complex=True, pending=pending)
            if provider is not None and isinstance(owner, type):
                spec = with_description(spec, provider.property_documentation(owner, name))
            properties[name] = spec

        return ObjectNode(id=unique_id_for(descriptor.annotation), properties=properties)
