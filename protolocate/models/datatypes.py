"""Core datatypes shared across protolocate modules.

Responsibilities:
- Represent the caller's executable request as a tagged variant.
- Represent resolved executables as immutable records.

Key types:
- `ExplicitPath`, `PathSearch`, `Coordinate` and their union
  `ExecutableSpecification`.
- `ResolutionDepth`, `ResolutionStrategy`, `CoordinateKey`,
  and `ResolvedExecutable`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Union


class ResolutionDepth(str, Enum):
    """How many levels of an artifact's own dependency graph a fetch pulls."""

    DIRECT = "direct"
    TRANSITIVE = "transitive"


class ResolutionStrategy(str, Enum):
    """Which resolver produced a `ResolvedExecutable`."""

    EXPLICIT = "explicit"
    PATH_SEARCH = "path_search"
    COORDINATE = "coordinate"


@dataclass(frozen=True, slots=True)
class ExplicitPath:
    """A literal filesystem path, verified but never searched for.

    Attributes:
        path: Path to the executable, returned unchanged on success.
    """

    path: Path


@dataclass(frozen=True, slots=True)
class PathSearch:
    """A logical executable name looked up on the host search path.

    Attributes:
        name: Bare executable name without extension (for example `protoc`).
    """

    name: str

    def __post_init__(self) -> None:
        """Reject blank names so an unsearchable request cannot be built."""

        if self.name is None or not str(self.name).strip():
            raise ValueError("Executable name must be a non-empty string.")


@dataclass(frozen=True, slots=True)
class Coordinate:
    """A repository-resolvable artifact.

    Attributes:
        group_id: Repository group (for example `com.google.protobuf`).
        artifact_id: Artifact name within the group.
        version: Artifact version.
        classifier: Platform qualifier; derived from the host when `None`.
        extension: Artifact file extension/type in the repository layout.
        resolution_depth: Dependency depth passed through to the fetch service.
    """

    group_id: str
    artifact_id: str
    version: str
    classifier: str | None = None
    extension: str = "exe"
    resolution_depth: ResolutionDepth | None = None

    def __post_init__(self) -> None:
        """Reject blank identity fields so every coordinate can be keyed."""

        for field_name in ("group_id", "artifact_id", "version"):
            value = getattr(self, field_name)
            if value is None or not str(value).strip():
                raise ValueError(
                    "Coordinate requires non-empty `group_id`, `artifact_id`, and `version`."
                )

    def __str__(self) -> str:
        parts = [self.group_id, self.artifact_id, self.version]
        if self.classifier is not None:
            parts.append(self.classifier)
        return ":".join(parts) + f"@{self.extension}"


ExecutableSpecification = Union[ExplicitPath, PathSearch, Coordinate]


@dataclass(frozen=True, slots=True)
class CoordinateKey:
    """Normalized coordinate identity used as the resolution cache key."""

    group_id: str
    artifact_id: str
    version: str
    classifier: str
    extension: str

    def __str__(self) -> str:
        return (
            f"{self.group_id}:{self.artifact_id}:{self.version}:"
            f"{self.classifier}@{self.extension}"
        )


@dataclass(frozen=True, slots=True)
class ResolvedExecutable:
    """A concrete, verified executable path.

    Attributes:
        path: Filesystem path of the executable.
        source_strategy: Resolver that produced the path.
        cache_hit: For coordinate resolutions, whether the cache answered.
    """

    path: Path
    source_strategy: ResolutionStrategy
    cache_hit: bool | None = None
