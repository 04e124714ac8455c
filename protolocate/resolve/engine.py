"""Executable resolution engine.

Responsibilities:
- Dispatch each `ExecutableSpecification` variant to its resolver.
- Return one `ResolvedExecutable` shape and one error taxonomy for all strategies.
- Resolve independent specifications concurrently under a caller-chosen bound.
"""

from __future__ import annotations

from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path

from ..errors import (
    ExecutableNotFoundError,
    ExecutableResolutionError,
    NotExecutableError,
    ResolutionFileSystemError,
)
from ..fetch.base import ArtifactFetchService
from ..fetch.maven import MavenRepositoryFetchService
from ..models.datatypes import (
    Coordinate,
    ExecutableSpecification,
    ExplicitPath,
    PathSearch,
    ResolutionStrategy,
    ResolvedExecutable,
)
from ..platform import PlatformEnvironment
from ..telemetry.logger import RunLogger
from .cache import ResolutionCache
from .coordinate import CoordinateResolver
from .path_search import PathSearchResolver


@dataclass(frozen=True, slots=True)
class ResolutionOutcome:
    """Result of resolving one specification inside a batch.

    Exactly one of `resolved` and `error` is set.
    """

    specification: ExecutableSpecification
    resolved: ResolvedExecutable | None = None
    error: ExecutableResolutionError | None = None

    @property
    def succeeded(self) -> bool:
        """Return whether the specification resolved successfully."""

        return self.error is None


def describe_specification(specification: ExecutableSpecification) -> str:
    """Return a short human-readable label for a specification."""

    if isinstance(specification, ExplicitPath):
        return str(specification.path)
    if isinstance(specification, PathSearch):
        return specification.name
    return str(specification)


def _strategy_for(specification: ExecutableSpecification) -> ResolutionStrategy:
    """Return the strategy that handles a specification variant."""

    if isinstance(specification, ExplicitPath):
        return ResolutionStrategy.EXPLICIT
    if isinstance(specification, PathSearch):
        return ResolutionStrategy.PATH_SEARCH
    if isinstance(specification, Coordinate):
        return ResolutionStrategy.COORDINATE
    raise TypeError(f"Unsupported executable specification: {specification!r}")


class ResolutionEngine:
    """Resolve executable specifications for one build invocation.

    The engine owns the run-scoped `ResolutionCache`; reuse one engine for
    every resolution in a run so repeated coordinates are fetched once.
    """

    def __init__(
        self,
        environment: PlatformEnvironment,
        *,
        fetch_service: ArtifactFetchService | None = None,
        cache: ResolutionCache | None = None,
        run_logger: RunLogger | None = None,
    ) -> None:
        """Initialize resolvers around an explicit platform environment."""

        self._environment = environment
        self._run_logger = run_logger
        self._path_search = PathSearchResolver()
        self._coordinate = CoordinateResolver(
            fetch_service=fetch_service or MavenRepositoryFetchService(run_logger=run_logger),
            cache=cache if cache is not None else ResolutionCache(),
            run_logger=run_logger,
        )

    @property
    def environment(self) -> PlatformEnvironment:
        """Return the platform facts used by every resolution."""

        return self._environment

    @property
    def cache(self) -> ResolutionCache:
        """Return the run-scoped coordinate cache."""

        return self._coordinate.cache

    def resolve(self, specification: ExecutableSpecification) -> ResolvedExecutable:
        """Resolve one specification, failing fast with a typed error."""

        strategy = _strategy_for(specification)
        target = describe_specification(specification)

        if self._run_logger is not None:
            self._run_logger.log_resolution_start(target, strategy.value)
        try:
            resolved = self._dispatch(specification)
        except Exception as exc:
            if self._run_logger is not None:
                self._run_logger.log_resolution_failure(
                    target, strategy.value, type(exc).__name__
                )
            raise
        if self._run_logger is not None:
            self._run_logger.log_resolution_complete(
                target, strategy.value, str(resolved.path), resolved.cache_hit
            )
        return resolved

    def resolve_many(
        self,
        specifications: Sequence[ExecutableSpecification],
        *,
        max_workers: int = 4,
    ) -> list[ResolutionOutcome]:
        """Resolve independent specifications concurrently.

        Returns one outcome per input, in input order. Resolution errors are
        captured per outcome; callers decide whether one failure aborts the rest.
        """

        if max_workers <= 0:
            raise ValueError("`max_workers` must be a positive integer.")
        if not specifications:
            return []

        with ThreadPoolExecutor(
            max_workers=min(max_workers, len(specifications)),
            thread_name_prefix="protolocate",
        ) as executor:
            return list(executor.map(self._resolve_outcome, specifications))

    def _resolve_outcome(self, specification: ExecutableSpecification) -> ResolutionOutcome:
        """Resolve one specification and capture taxonomy errors in an outcome."""

        try:
            resolved = self.resolve(specification)
        except ExecutableResolutionError as exc:
            return ResolutionOutcome(specification=specification, error=exc)
        return ResolutionOutcome(specification=specification, resolved=resolved)

    def _dispatch(self, specification: ExecutableSpecification) -> ResolvedExecutable:
        """Route a specification to the resolver for its variant."""

        if isinstance(specification, ExplicitPath):
            return self._resolve_explicit(specification)
        if isinstance(specification, PathSearch):
            return self._path_search.resolve(specification.name, self._environment)
        return self._coordinate.resolve(specification, self._environment)

    def _resolve_explicit(self, specification: ExplicitPath) -> ResolvedExecutable:
        """Verify an explicit path exists and is executable, returning it unchanged."""

        path = Path(specification.path)
        try:
            exists = path.exists()
        except OSError as exc:
            raise ResolutionFileSystemError(
                detail=f"File system error while checking `{path}`.",
                cause=exc,
            ) from exc
        if not exists:
            raise ExecutableNotFoundError(
                detail=f"Executable `{path}` does not exist.",
                hint="Fix the configured path or use a search-path or repository lookup.",
            )
        if not self._environment.is_executable_file(path):
            raise NotExecutableError(
                detail=f"`{path}` exists but is not an executable file.",
                hint=(
                    "Use a file with a recognized executable extension."
                    if self._environment.is_windows
                    else f"Mark it executable, for example `chmod +x {path}`."
                ),
            )
        return ResolvedExecutable(path=path, source_strategy=ResolutionStrategy.EXPLICIT)
