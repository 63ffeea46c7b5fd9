"""Documentation providers for model properties and endpoints.

Providers are keyed by top-level package name, the unit in which a host ships
its documented models. :class:`DocumentationProviders` is built once at
startup and is read-only afterwards, so a single instance can be shared by
every generator.

Examples
--------
>>> providers = DocumentationProviders({"shop": FieldDescriptionProvider()})
>>> "shop" in providers
True
"""

from __future__ import annotations

import dataclasses
import inspect
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Literal, Protocol, Self, runtime_checkable

import griffe

from specfoundry_common.errors import ConfigurationError, DocumentationLoadError
from specfoundry_common.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Sequence
    from pathlib import Path

__all__ = [
    "ChainedDocumentationProvider",
    "DocumentationProvider",
    "DocumentationProviders",
    "FieldDescriptionProvider",
    "GriffeDocumentationProvider",
    "OperationDocumentation",
    "split_docstring",
]

logger = get_logger(__name__)

type DocstringStyle = Literal["google", "numpy", "sphinx"]


@dataclass(frozen=True, slots=True)
class OperationDocumentation:
    """Summary line and free-text remarks of an endpoint."""

    summary: str | None = None
    remarks: str | None = None


@runtime_checkable
class DocumentationProvider(Protocol):
    """Source of human-readable descriptions."""

    def property_documentation(self, owner: type, name: str) -> str | None:
        """Return the description of property ``name`` declared on ``owner``."""
        ...

    def operation_documentation(self, handler: object) -> OperationDocumentation | None:
        """Return the summary and remarks of an endpoint ``handler``."""
        ...


def split_docstring(text: str | None) -> OperationDocumentation | None:
    """Split ``text`` into its first paragraph and the remainder.

    The summary paragraph is joined onto one line; the remarks keep their
    original line breaks.

    Examples
    --------
    >>> split_docstring("List orders.\\n\\nResults are paged.")
    OperationDocumentation(summary='List orders.', remarks='Results are paged.')
    """
    if not text or not text.strip():
        return None
    cleaned = inspect.cleandoc(text)
    head, _, tail = cleaned.partition("\n\n")
    summary = " ".join(line.strip() for line in head.splitlines() if line.strip())
    remarks = tail.strip() or None
    return OperationDocumentation(summary=summary or None, remarks=remarks)


def _qualified_path(obj: object) -> str | None:
    module = getattr(obj, "__module__", None)
    qualname = getattr(obj, "__qualname__", None)
    if not isinstance(module, str) or not isinstance(qualname, str) or "<locals>" in qualname:
        return None
    return f"{module}.{qualname}"


class GriffeDocumentationProvider:
    """Harvest docstrings statically with griffe.

    Attribute docstrings (the string literal following an annotated
    attribute) take precedence; otherwise the class docstring's
    ``Attributes`` and ``Parameters`` sections are consulted.

    Parameters
    ----------
    package : str
        Top-level package to load.
    search_paths : Sequence[str | Path], optional
        Filesystem paths griffe searches for ``package``.
    docstring_style : DocstringStyle, optional
        Parser used for class and function docstrings. Defaults to ``numpy``.
    """

    def __init__(
        self,
        package: str,
        search_paths: Sequence[str | Path] = (),
        *,
        docstring_style: DocstringStyle = "numpy",
    ) -> None:
        self.package = package
        self._search_paths = [str(path) for path in search_paths]
        self._docstring_style: DocstringStyle = docstring_style
        self._module: griffe.Module | None = None

    def load(self) -> Self:
        """Load ``package``; later lookups never touch the filesystem.

        Raises
        ------
        DocumentationLoadError
            If griffe cannot find or parse the package.
        """
        loader = griffe.GriffeLoader(search_paths=self._search_paths or None)
        try:
            module = loader.load(self.package)
        except (ImportError, OSError, griffe.GriffeError) as exc:
            msg = f"Unable to load documentation for package '{self.package}'"
            raise DocumentationLoadError(
                msg, cause=exc, context={"package": self.package, "search_paths": self._search_paths}
            ) from exc
        if not isinstance(module, griffe.Module):
            msg = f"Package '{self.package}' did not load as a module"
            raise DocumentationLoadError(msg, context={"package": self.package})
        self._module = module
        logger.debug(
            "Loaded documentation package",
            extra={"operation": "docs_load", "package": self.package},
        )
        return self

    def _lookup(self, obj: object) -> griffe.Object | griffe.Alias | None:
        if self._module is None:
            msg = f"Documentation for '{self.package}' has not been loaded; call load() first"
            raise ConfigurationError(msg, context={"package": self.package})
        path = _qualified_path(obj)
        if path is None or not path.startswith(f"{self.package}."):
            return None
        try:
            return self._module[path.removeprefix(f"{self.package}.")]
        except (KeyError, griffe.GriffeError):
            return None

    def property_documentation(self, owner: type, name: str) -> str | None:
        """Return the attribute docstring or documented section entry for ``name``."""
        class_obj = self._lookup(owner)
        if class_obj is None:
            return None

        member = class_obj.members.get(name)
        if member is not None and member.docstring is not None:
            return member.docstring.value.strip() or None

        if class_obj.docstring is None:
            return None
        sections = class_obj.docstring.parse(self._docstring_style)
        for section in sections:
            if section.kind not in (
                griffe.DocstringSectionKind.attributes,
                griffe.DocstringSectionKind.parameters,
            ):
                continue
            for item in section.value:
                if item.name == name and item.description:
                    return item.description.strip()
        return None

    def operation_documentation(self, handler: object) -> OperationDocumentation | None:
        """Split the handler docstring into summary and remarks."""
        function_obj = self._lookup(handler)
        if function_obj is None or function_obj.docstring is None:
            return None
        return split_docstring(function_obj.docstring.value)


class FieldDescriptionProvider:
    """Read descriptions declared on the runtime models themselves.

    Supports pydantic ``Field(description=...)`` and dataclass fields with a
    ``"description"`` metadata entry; handler docs come from ``__doc__``.
    """

    def property_documentation(self, owner: type, name: str) -> str | None:
        model_fields = getattr(owner, "model_fields", None)
        if isinstance(model_fields, Mapping):
            description = getattr(model_fields.get(name), "description", None)
            return description if isinstance(description, str) else None
        if dataclasses.is_dataclass(owner):
            for field in dataclasses.fields(owner):
                if field.name == name:
                    description = field.metadata.get("description")
                    return description if isinstance(description, str) else None
        return None

    def operation_documentation(self, handler: object) -> OperationDocumentation | None:
        return split_docstring(inspect.getdoc(handler))


class ChainedDocumentationProvider:
    """Consult several providers in order; the first answer wins."""

    def __init__(self, *providers: DocumentationProvider) -> None:
        self._providers = providers

    def property_documentation(self, owner: type, name: str) -> str | None:
        for provider in self._providers:
            description = provider.property_documentation(owner, name)
            if description is not None:
                return description
        return None

    def operation_documentation(self, handler: object) -> OperationDocumentation | None:
        for provider in self._providers:
            documentation = provider.operation_documentation(handler)
            if documentation is not None:
                return documentation
        return None


class DocumentationProviders:
    """Read-only mapping of top-level package name to provider.

    Raises
    ------
    ConfigurationError
        If a value does not implement :class:`DocumentationProvider`.
    """

    def __init__(self, providers: Mapping[str, DocumentationProvider] | None = None) -> None:
        resolved = dict(providers or {})
        for package, provider in resolved.items():
            if not isinstance(provider, DocumentationProvider):
                msg = f"Documentation provider for '{package}' does not implement the provider protocol"
                raise ConfigurationError(msg, context={"package": package})
        self._providers: Mapping[str, DocumentationProvider] = MappingProxyType(resolved)

    @classmethod
    def build(
        cls,
        packages: Iterable[str],
        search_paths: Sequence[str | Path] = (),
        *,
        docstring_style: DocstringStyle = "numpy",
    ) -> Self:
        """Load griffe providers for ``packages``, backed by field descriptions."""
        providers: dict[str, DocumentationProvider] = {}
        for package in packages:
            griffe_provider = GriffeDocumentationProvider(
                package, search_paths, docstring_style=docstring_style
            ).load()
            providers[package] = ChainedDocumentationProvider(
                griffe_provider, FieldDescriptionProvider()
            )
        return cls(providers)

    def for_object(self, obj: object) -> DocumentationProvider | None:
        """Return the provider registered for the package that defines ``obj``."""
        module = getattr(obj, "__module__", None)
        if not isinstance(module, str):
            return None
        return self._providers.get(module.partition(".")[0])

    @property
    def packages(self) -> tuple[str, ...]:
        return tuple(self._providers)

    def __contains__(self, package: object) -> bool:
        return package in self._providers

    def __len__(self) -> int:
        return len(self._providers)

    def __iter__(self) -> Iterator[str]:
        return iter(self._providers)
