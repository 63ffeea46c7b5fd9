"""Shared infrastructure for the specfoundry stack.

Errors with Problem Details mapping, structured logging and typed runtime
settings live here so the generator packages can import a single cohesive
namespace.
"""

from __future__ import annotations

from specfoundry_common import errors, logging, problem_details, settings

__all__ = [
    "errors",
    "logging",
    "problem_details",
    "settings",
]
