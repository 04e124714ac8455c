"""Executable resolution strategies and the engine that dispatches them."""

from .cache import ResolutionCache
from .coordinate import CoordinateResolver
from .engine import ResolutionEngine, ResolutionOutcome, describe_specification
from .path_search import PathSearchResolver

__all__ = [
    "CoordinateResolver",
    "PathSearchResolver",
    "ResolutionCache",
    "ResolutionEngine",
    "ResolutionOutcome",
    "describe_specification",
]
