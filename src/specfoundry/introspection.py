"""Runtime type descriptors built from Python annotations.

:func:`describe` normalises an annotation (``Annotated``, ``NewType`` and
unbound ``TypeVar`` are unwrapped) and exposes the facts the classifier
needs: enumeration members, nullable inner type, collection item type,
generic arguments and the accessible instance properties.

Examples
--------
>>> from specfoundry.introspection import describe
>>> describe(list[int]).item_type
<class 'int'>
>>> describe(int | None).nullable_inner
<class 'int'>
"""

from __future__ import annotations

import collections
import collections.abc as abc
import dataclasses
import enum
import types
import typing
from dataclasses import dataclass
from typing import Any, ClassVar, Literal, TypeVar, get_args, get_origin, get_type_hints

from specfoundry_common.errors import TypeIntrospectionError

__all__ = [
    "ExtensionData",
    "TypeDescriptor",
    "describe",
    "short_name",
]

_NONE_TYPE = type(None)

_UNION_ORIGINS: frozenset[object] = frozenset({typing.Union, types.UnionType})

_COLLECTION_ORIGINS: frozenset[object] = frozenset(
    {
        list,
        set,
        frozenset,
        tuple,
        collections.deque,
        abc.Iterable,
        abc.Iterator,
        abc.Collection,
        abc.Sequence,
        abc.MutableSequence,
        abc.Set,
        abc.MutableSet,
        typing.List,  # noqa: UP006
        typing.Set,  # noqa: UP006
        typing.FrozenSet,  # noqa: UP006
        typing.Tuple,  # noqa: UP006
        typing.Deque,  # noqa: UP006
    }
)

_COLLECTION_BASES = (list, set, frozenset, collections.deque)

_NEVER_COLLECTIONS = (str, bytes, bytearray, abc.Mapping)


class ExtensionData:
    """Marker type for overflow/extension payloads.

    Properties annotated with this type (or ``ExtensionData | None``) carry
    round-tripped unknown data and are never described as properties.
    """


def short_name(annotation: object) -> str:
    """Return the unqualified name of ``annotation``.

    Parameterised pydantic models carry their argument list in ``__name__``
    (``Page[Order]``); that suffix is stripped so callers can append their
    own argument rendering. Both union spellings (``int | str`` and
    ``Union[int, str]``) are named ``Union``.
    """
    origin = get_origin(annotation)
    target = origin if origin is not None else annotation
    if target in _UNION_ORIGINS:
        return "Union"
    name = getattr(target, "__name__", None) or getattr(target, "_name", None)
    if not isinstance(name, str):
        name = type(target).__name__
    return name.split("[", 1)[0]


def _normalize(annotation: object) -> object:
    current = annotation
    while True:
        origin = get_origin(current)
        if origin is typing.Annotated:
            current = get_args(current)[0]
        elif isinstance(current, typing.NewType):
            current = current.__supertype__
        elif isinstance(current, TypeVar):
            current = current.__bound__ if current.__bound__ is not None else Any
        else:
            return current


def _original_bases(cls: type) -> tuple[object, ...]:
    return tuple(getattr(cls, "__orig_bases__", ()))


@dataclass(frozen=True, slots=True)
class TypeDescriptor:
    """Facts about one (normalised) annotation.

    Attributes
    ----------
    annotation : object
        The normalised annotation; used as identity for override lookup and
        the pending-resolution queue.
    origin : object
        Unsubscripted class (``list`` for ``list[int]``) or the annotation
        itself when it is not parameterised.
    generic_origin : type | None
        Declaring generic class for parameterised user types.
    generic_args : tuple[object, ...]
        Type arguments of a parameterised type, in declaration order.
    """

    annotation: object
    origin: object
    generic_origin: type | None
    generic_args: tuple[object, ...]

    @property
    def short_name(self) -> str:
        return short_name(self.generic_origin or self.annotation)

    @property
    def is_generic(self) -> bool:
        return bool(self.generic_args)

    @property
    def enum_members(self) -> tuple[str, ...] | None:
        """Member names for ``enum.Enum`` subclasses and ``Literal`` values."""
        if self.origin is Literal:
            return tuple(
                value.name if isinstance(value, enum.Enum) else str(value)
                for value in get_args(self.annotation)
            )
        if isinstance(self.origin, type) and issubclass(self.origin, enum.Enum):
            return tuple(member.name for member in self.origin)
        return None

    @property
    def nullable_inner(self) -> object | None:
        """Inner type of ``X | None``; ``None`` when this is not a nullable wrapper."""
        if self.origin not in _UNION_ORIGINS:
            return None
        args = get_args(self.annotation)
        if _NONE_TYPE not in args:
            return None
        remaining = [arg for arg in args if arg is not _NONE_TYPE]
        if len(remaining) != 1:
            return None
        return remaining[0]

    @property
    def item_type(self) -> object | None:
        """Element type for collection annotations; ``None`` otherwise."""
        origin = self.origin
        if not self._is_collection(origin):
            return None
        args = get_args(self.annotation)
        if args:
            # Heterogeneous tuples (``tuple[int, Order]``) keep only their first element type.
            return args[0]
        if isinstance(origin, type):
            for base in _original_bases(origin):
                base_args = get_args(base)
                if self._is_collection(get_origin(base)) and base_args:
                    return base_args[0]
        return Any

    @staticmethod
    def _is_collection(origin: object) -> bool:
        if origin in _COLLECTION_ORIGINS:
            return True
        if not isinstance(origin, type) or issubclass(origin, _NEVER_COLLECTIONS):
            return False
        return issubclass(origin, _COLLECTION_BASES)

    def properties(self) -> dict[str, object]:
        """Return accessible instance properties as ``name -> annotation``.

        Declaration order is preserved. Private names, ``ClassVar``/``InitVar``
        entries and :class:`ExtensionData` properties are excluded; type
        variables are substituted, both for parameterised generics and for
        subclasses that bind a generic base (``class ItemBox(Box[Item])``).

        Raises
        ------
        TypeIntrospectionError
            If the annotations of the type cannot be resolved.
        """
        cls = self.origin
        if not isinstance(cls, type):
            return {}

        model_fields = getattr(cls, "model_fields", None)
        if isinstance(model_fields, abc.Mapping) and hasattr(cls, "model_validate"):
            hints = {name: field.annotation for name, field in model_fields.items()}
        else:
            hints = self._declared_hints(cls)
            for name, annotation in self._annotated_properties(cls).items():
                hints.setdefault(name, annotation)

        substitutions = self._substitutions()
        properties: dict[str, object] = {}
        for name, annotation in hints.items():
            if name.startswith("_") or self._is_excluded(annotation):
                continue
            properties[name] = _substitute(annotation, substitutions) if substitutions else annotation
        return properties

    @staticmethod
    def _declared_hints(cls: type) -> dict[str, object]:
        try:
            return dict(get_type_hints(cls))
        except (NameError, TypeError) as exc:
            msg = f"Unable to resolve annotations of {cls.__qualname__}"
            raise TypeIntrospectionError(
                msg, cause=exc, context={"type": f"{cls.__module__}.{cls.__qualname__}"}
            ) from exc

    @staticmethod
    def _annotated_properties(cls: type) -> dict[str, object]:
        found: dict[str, object] = {}
        for klass in reversed(cls.__mro__):
            for name, member in vars(klass).items():
                if not isinstance(member, property) or member.fget is None:
                    continue
                try:
                    returns = get_type_hints(member.fget).get("return")
                except (NameError, TypeError) as exc:
                    msg = f"Unable to resolve return annotation of {cls.__qualname__}.{name}"
                    raise TypeIntrospectionError(msg, cause=exc) from exc
                if returns is not None:
                    found[name] = returns
        return found

    @staticmethod
    def _is_excluded(annotation: object) -> bool:
        if annotation is ClassVar or get_origin(annotation) is ClassVar:
            return True
        if isinstance(annotation, dataclasses.InitVar):
            return True
        candidate = _normalize(annotation)
        inner = describe(candidate).nullable_inner
        for target in (candidate, inner):
            if isinstance(target, type) and issubclass(target, ExtensionData):
                return True
        return False

    def _substitutions(self) -> dict[object, object]:
        substitutions = (
            _inherited_substitutions(self.origin) if isinstance(self.origin, type) else {}
        )
        # Parameterised pydantic models already carry substituted annotations.
        if self.generic_origin is None or self.origin is not self.generic_origin:
            return substitutions
        parameters = getattr(self.generic_origin, "__parameters__", ())
        substitutions.update(zip(parameters, self.generic_args, strict=False))
        return substitutions


def _inherited_substitutions(cls: type) -> dict[object, object]:
    """Map type variables of generic bases to the arguments ``cls`` binds them to.

    ``class ItemBox(Box[Item])`` binds ``Box``'s ``T`` to ``Item``. Bases are
    visited most-derived first so chained bindings resolve to concrete types.
    """
    substitutions: dict[object, object] = {}
    for klass in cls.__mro__:
        for base in vars(klass).get("__orig_bases__", ()):
            base_origin = get_origin(base)
            if base_origin is None or base_origin in (typing.Generic, typing.Protocol):
                continue
            parameters = getattr(base_origin, "__parameters__", ())
            for parameter, argument in zip(parameters, get_args(base), strict=False):
                substitutions.setdefault(parameter, _substitute(argument, substitutions))
    return substitutions


def _substitute(annotation: object, substitutions: dict[object, object]) -> object:
    if isinstance(annotation, TypeVar):
        return substitutions.get(annotation, annotation)
    parameters = getattr(annotation, "__parameters__", ())
    if parameters and get_origin(annotation) is not None:
        return annotation[tuple(substitutions.get(p, p) for p in parameters)]  # type: ignore[index]
    return annotation


def describe(annotation: object) -> TypeDescriptor:
    """Build a :class:`TypeDescriptor` for ``annotation``.

    Raises
    ------
    TypeIntrospectionError
        If ``annotation`` is a bare string forward reference, which cannot be
        resolved without its defining namespace.
    """
    if isinstance(annotation, (str, typing.ForwardRef)):
        msg = f"Unresolved forward reference: {annotation!r}"
        raise TypeIntrospectionError(msg, context={"annotation": str(annotation)})

    normalized = _normalize(annotation)
    origin = get_origin(normalized)

    pydantic_meta = getattr(normalized, "__pydantic_generic_metadata__", None)
    if isinstance(pydantic_meta, abc.Mapping) and pydantic_meta.get("origin") is not None:
        return TypeDescriptor(
            annotation=normalized,
            origin=normalized,
            generic_origin=pydantic_meta["origin"],
            generic_args=tuple(pydantic_meta.get("args", ())),
        )

    if origin is None:
        return TypeDescriptor(
            annotation=normalized, origin=normalized, generic_origin=None, generic_args=()
        )

    if origin is Literal or origin in _UNION_ORIGINS:
        generic_args: tuple[object, ...] = () if origin is Literal else get_args(normalized)
        return TypeDescriptor(
            annotation=normalized, origin=origin, generic_origin=None, generic_args=generic_args
        )

    args = tuple(arg for arg in get_args(normalized) if arg is not Ellipsis)
    return TypeDescriptor(
        annotation=normalized,
        origin=origin,
        generic_origin=origin if isinstance(origin, type) else None,
        generic_args=args,
    )
