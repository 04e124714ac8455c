"""Top-level package for protolocate.

This package resolves the `protoc` compiler and its plugins to concrete
executable files, whether given as explicit paths, bare names searched on the
host execution path, or repository coordinates fetched on demand. The main
entry point is `ResolutionEngine`.
"""

from .errors import ExecutableResolutionError
from .models.datatypes import Coordinate, ExplicitPath, PathSearch, ResolvedExecutable
from .platform import PlatformEnvironment
from .resolve.engine import ResolutionEngine
from .toolchain import resolve_toolchain

__all__ = [
    "Coordinate",
    "ExecutableResolutionError",
    "ExplicitPath",
    "PathSearch",
    "PlatformEnvironment",
    "ResolutionEngine",
    "ResolvedExecutable",
    "__version__",
    "resolve_toolchain",
]

__version__ = "0.1.0"
