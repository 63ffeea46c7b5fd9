"""Error code registry and type URIs for Problem Details.

Codes and URIs are stable once released so that consumers of the generated
problem payloads can branch on them.

Examples
--------
>>> from specfoundry_common.errors.codes import ErrorCode, get_type_uri
>>> get_type_uri(ErrorCode.TYPE_INTROSPECTION_FAILED)
'https://specfoundry.dev/problems/type-introspection-failed'
"""

from __future__ import annotations

from enum import StrEnum
from typing import Final

__all__ = [
    "BASE_TYPE_URI",
    "ErrorCode",
    "get_type_uri",
]

BASE_TYPE_URI: Final[str] = "https://specfoundry.dev/problems"


class ErrorCode(StrEnum):
    """Stable error codes for specfoundry exceptions.

    Codes are grouped by the layer that raises them:

    - configuration and runtime settings
    - type introspection and schema generation
    - endpoint discovery and documentation harvesting
    - serialization of generated documents
    """

    # Configuration & Runtime
    CONFIGURATION_ERROR = "configuration-error"
    RUNTIME_ERROR = "runtime-error"

    # Schema generation
    TYPE_INTROSPECTION_FAILED = "type-introspection-failed"

    # Discovery & documentation
    ENDPOINT_DISCOVERY_FAILED = "endpoint-discovery-failed"
    DOCUMENTATION_LOAD_FAILED = "documentation-load-failed"

    # Serialization
    SERIALIZATION_ERROR = "serialization-error"

    def __str__(self) -> str:
        """Return the code value as a string."""
        return self.value


def get_type_uri(code: ErrorCode) -> str:
    """Return the RFC 9457 type URI for ``code``.

    Parameters
    ----------
    code : ErrorCode
        Error code enum value.

    Returns
    -------
    str
        Complete type URI, e.g. ``https://specfoundry.dev/problems/serialization-error``.
    """
    return f"{BASE_TYPE_URI}/{code.value}"
