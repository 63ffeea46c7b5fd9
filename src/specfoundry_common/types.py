"""Type aliases shared across specfoundry packages.

This module has no dependencies so it can be imported from anywhere without
creating import cycles.
"""

from __future__ import annotations

__all__ = [
    "JsonPrimitive",
    "JsonValue",
]

# Primitive JSON types (leaf values)
type JsonPrimitive = str | int | float | bool | None

# JSON value can be primitive or nested (dict/list)
type JsonValue = JsonPrimitive | dict[str, JsonValue] | list[JsonValue]
