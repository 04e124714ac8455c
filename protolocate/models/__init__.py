"""Shared typed data models for protolocate.

This package contains dataclasses used across resolver modules to avoid
cross-module coupling and circular imports.
"""

from .datatypes import (
    Coordinate,
    CoordinateKey,
    ExecutableSpecification,
    ExplicitPath,
    PathSearch,
    ResolutionDepth,
    ResolutionStrategy,
    ResolvedExecutable,
)

__all__ = [
    "Coordinate",
    "CoordinateKey",
    "ExecutableSpecification",
    "ExplicitPath",
    "PathSearch",
    "ResolutionDepth",
    "ResolutionStrategy",
    "ResolvedExecutable",
]
