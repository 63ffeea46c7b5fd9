"""Stable identifiers for complex types.

A plain type is identified by its short name. A parameterised type embeds
the ids of its arguments: ``Page[Order]`` becomes ``Page{Order}`` and
``Page[dict[str, Order]]`` becomes ``Page{dict{str,Order}}``, so different
instantiations of one generic shape never collide.

Examples
--------
>>> unique_id_for(list[int])
'list{int}'
"""

from __future__ import annotations

from specfoundry.introspection import describe

__all__ = ["unique_id_for"]


def unique_id_for(annotation: object) -> str:
    """Return the unique id of ``annotation``.

    Nullable wrappers are transparent (``Order | None`` is ``Order``) because
    nullability is not part of the generated schema.
    """
    descriptor = describe(annotation)
    inner = descriptor.nullable_inner
    if inner is not None:
        return unique_id_for(inner)

    name = descriptor.short_name
    if not descriptor.is_generic:
        return name
    arguments = ",".join(unique_id_for(argument) for argument in descriptor.generic_args)
    return f"{name}{{{arguments}}}"
