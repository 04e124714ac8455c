"""Repository-coordinate executable resolution.

Responsibilities:
- Normalize coordinates into cache keys, deriving the classifier from the host.
- Fetch each coordinate at most once per run through the `ResolutionCache`.
- Verify the fetched artifact is a single file and restore its execute bits.
"""

from __future__ import annotations

from pathlib import Path
import stat

from ..errors import (
    FetchFailureError,
    ResolutionFileSystemError,
    UnexpectedArtifactLayoutError,
)
from ..fetch.base import ArtifactFetchService
from ..models.datatypes import (
    Coordinate,
    CoordinateKey,
    ResolutionStrategy,
    ResolvedExecutable,
)
from ..parsing import normalize_optional_string
from ..platform import PlatformEnvironment
from ..telemetry.logger import RunLogger
from .cache import ResolutionCache


_EXECUTE_BITS = stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH
_ARCHIVE_SUFFIXES = (".zip", ".jar", ".tar", ".tar.gz", ".tgz")


class CoordinateResolver:
    """Resolve `Coordinate` specifications through an artifact fetch service."""

    def __init__(
        self,
        fetch_service: ArtifactFetchService,
        cache: ResolutionCache,
        run_logger: RunLogger | None = None,
    ) -> None:
        """Initialize the resolver with its fetch service and shared run cache."""

        self._fetch_service = fetch_service
        self._cache = cache
        self._run_logger = run_logger

    @property
    def cache(self) -> ResolutionCache:
        """Return the run-scoped cache shared by all coordinate resolutions."""

        return self._cache

    def resolve(
        self, coordinate: Coordinate, environment: PlatformEnvironment
    ) -> ResolvedExecutable:
        """Return the local executable for `coordinate`, fetching it on first use.

        Raises:
            UnsupportedPlatformError: If no classifier is given or derivable.
            FetchFailureError: If the fetch service cannot materialize the artifact.
            UnexpectedArtifactLayoutError: If the artifact is not a single file.
            ResolutionFileSystemError: If permission inspection or repair fails.
        """

        key = self.coordinate_key(coordinate, environment)
        return self._cache.get_or_resolve(
            key,
            lambda: self._materialize(coordinate, key, environment),
        )

    @staticmethod
    def coordinate_key(
        coordinate: Coordinate, environment: PlatformEnvironment
    ) -> CoordinateKey:
        """Build the normalized cache key, deriving a missing classifier."""

        group_id = normalize_optional_string(coordinate.group_id)
        artifact_id = normalize_optional_string(coordinate.artifact_id)
        version = normalize_optional_string(coordinate.version)
        if group_id is None or artifact_id is None or version is None:
            raise ValueError(
                "Coordinate requires non-empty `group_id`, `artifact_id`, and `version`."
            )

        classifier = normalize_optional_string(coordinate.classifier)
        if classifier is None:
            classifier = environment.host_classifier()
        extension = (normalize_optional_string(coordinate.extension) or "exe").lstrip(".")

        return CoordinateKey(
            group_id=group_id,
            artifact_id=artifact_id,
            version=version,
            classifier=classifier,
            extension=extension,
        )

    def _materialize(
        self,
        coordinate: Coordinate,
        key: CoordinateKey,
        environment: PlatformEnvironment,
    ) -> ResolvedExecutable:
        """Fetch, verify, and normalize permissions for one cache miss."""

        try:
            fetched = self._fetch_service.fetch(
                group_id=key.group_id,
                artifact_id=key.artifact_id,
                version=key.version,
                classifier=key.classifier,
                extension=key.extension,
                resolution_depth=coordinate.resolution_depth,
            )
        except OSError as exc:
            raise FetchFailureError(
                detail=f"Failed to fetch `{key}`: {exc}",
                coordinate=str(key),
                cause=exc,
            ) from exc

        path = Path(fetched)
        mode = self._verify_single_file(path, key)
        if not environment.is_windows and not mode & _EXECUTE_BITS:
            self._add_execute_bits(path, mode, key)

        return ResolvedExecutable(path=path, source_strategy=ResolutionStrategy.COORDINATE)

    @staticmethod
    def _verify_single_file(path: Path, key: CoordinateKey) -> int:
        """Return the file mode after checking the artifact is one regular file."""

        try:
            status = path.stat()
        except FileNotFoundError as exc:
            raise UnexpectedArtifactLayoutError(
                detail=f"Artifact `{key}` was reported at `{path}` but does not exist.",
            ) from exc
        except OSError as exc:
            raise ResolutionFileSystemError(
                detail=f"File system error while inspecting artifact `{key}` at `{path}`.",
                cause=exc,
            ) from exc

        if stat.S_ISDIR(status.st_mode):
            raise UnexpectedArtifactLayoutError(
                detail=f"Artifact `{key}` resolved to directory `{path}`, expected one executable.",
            )
        if not stat.S_ISREG(status.st_mode):
            raise UnexpectedArtifactLayoutError(
                detail=f"Artifact `{key}` resolved to `{path}`, which is not a regular file.",
            )
        if path.name.lower().endswith(_ARCHIVE_SUFFIXES):
            raise UnexpectedArtifactLayoutError(
                detail=f"Artifact `{key}` resolved to archive `{path}`, expected one executable.",
                hint="Archive-packaged plugins must be unpacked outside of executable resolution.",
            )
        return status.st_mode

    def _add_execute_bits(self, path: Path, mode: int, key: CoordinateKey) -> None:
        """Set execute permission bits on an artifact published without them."""

        try:
            path.chmod(stat.S_IMODE(mode) | _EXECUTE_BITS)
        except OSError as exc:
            raise ResolutionFileSystemError(
                detail=f"Failed to mark artifact `{key}` at `{path}` as executable.",
                cause=exc,
            ) from exc
        if self._run_logger is not None:
            self._run_logger.log_permission_fix(str(key), str(path))
