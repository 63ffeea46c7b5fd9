"""Exception hierarchy and Problem Details support.

Examples
--------
>>> from specfoundry_common.errors import SpecFoundryError, ErrorCode
>>> try:
...     raise SpecFoundryError("Generation failed", code=ErrorCode.RUNTIME_ERROR)
... except SpecFoundryError as e:
...     details = e.to_problem_details(instance="urn:specfoundry:generate")
...     assert details["type"] == "https://specfoundry.dev/problems/runtime-error"
"""

from __future__ import annotations

from specfoundry_common.errors.codes import BASE_TYPE_URI, ErrorCode, get_type_uri
from specfoundry_common.errors.exceptions import (
    ConfigurationError,
    DocumentationLoadError,
    EndpointDiscoveryError,
    SerializationError,
    SettingsError,
    SpecFoundryError,
    TypeIntrospectionError,
)

__all__ = [
    "BASE_TYPE_URI",
    "ConfigurationError",
    "DocumentationLoadError",
    "EndpointDiscoveryError",
    "ErrorCode",
    "SerializationError",
    "SettingsError",
    "SpecFoundryError",
    "TypeIntrospectionError",
    "get_type_uri",
]
