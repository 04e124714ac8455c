"""Compiler and plugin descriptors consumed from build configuration.

Responsibilities:
- Describe where the `protoc` compiler and each plugin come from.
- Convert every descriptor into an `ExecutableSpecification`.
- Keep the dependency resolution depth fixed to `None` for single-binary
  descriptors while letting library-carrying plugins choose it.

Key types:
- `CompilerDescriptor`: the compiler source (coordinate, path, or path search).
- `BinaryMavenPlugin`, `MavenPlugin`, `PathPlugin`, `SearchPathPlugin`:
  plugin sources, all satisfying the `PluginDescriptor` protocol.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, Union

from .models.datatypes import (
    Coordinate,
    ExecutableSpecification,
    ExplicitPath,
    PathSearch,
    ResolutionDepth,
)
from .parsing import normalize_optional_string


PROTOC_GROUP_ID = "com.google.protobuf"
PROTOC_ARTIFACT_ID = "protoc"
PROTOC_EXECUTABLE_NAME = "protoc"
PATH_VERSION_TOKEN = "PATH"


@dataclass(frozen=True, slots=True)
class CompilerDescriptor:
    """Where to obtain the `protoc` compiler.

    The compiler is always a standalone binary, so no resolution depth can be
    configured for it.
    """

    specification: ExecutableSpecification

    @property
    def resolution_depth(self) -> None:
        """Return the fixed dependency depth of a standalone compiler binary."""

        return None

    @classmethod
    def from_version(
        cls,
        version: str,
        *,
        group_id: str = PROTOC_GROUP_ID,
        artifact_id: str = PROTOC_ARTIFACT_ID,
        classifier: str | None = None,
    ) -> CompilerDescriptor:
        """Fetch the given version from a repository, or search when it is `PATH`."""

        normalized = normalize_optional_string(version)
        if normalized is None:
            raise ValueError("`protoc_version` must be a non-empty string.")
        if normalized.upper() == PATH_VERSION_TOKEN:
            return cls.from_search()
        return cls(
            Coordinate(
                group_id=group_id,
                artifact_id=artifact_id,
                version=normalized,
                classifier=classifier,
            )
        )

    @classmethod
    def from_path(cls, path: Path | str) -> CompilerDescriptor:
        """Use an explicit compiler path."""

        return cls(ExplicitPath(Path(path)))

    @classmethod
    def from_search(cls, name: str = PROTOC_EXECUTABLE_NAME) -> CompilerDescriptor:
        """Search the host execution path for the compiler."""

        return cls(PathSearch(name))

    def to_specification(self) -> ExecutableSpecification:
        """Return the specification this descriptor resolves through."""

        return self.specification


class PluginDescriptor(Protocol):
    """Common shape of all plugin descriptors."""

    @property
    def name(self) -> str:
        """Logical plugin name, used as the `--<name>_out` prefix by protoc."""

    @property
    def resolution_depth(self) -> ResolutionDepth | None:
        """Dependency depth passed to the fetch service."""

    def to_specification(self) -> ExecutableSpecification:
        """Return the specification this descriptor resolves through."""


@dataclass(frozen=True, slots=True)
class BinaryMavenPlugin:
    """A single native plugin binary published to a repository.

    `resolution_depth` is derived, not settable: a standalone binary has no
    meaningful transitive dependencies.
    """

    name: str
    group_id: str
    artifact_id: str
    version: str
    classifier: str | None = None
    extension: str = "exe"

    @property
    def resolution_depth(self) -> None:
        """Return the fixed dependency depth of a single binary."""

        return None

    def to_specification(self) -> ExecutableSpecification:
        """Return the repository coordinate for this plugin."""

        return Coordinate(
            group_id=self.group_id,
            artifact_id=self.artifact_id,
            version=self.version,
            classifier=self.classifier,
            extension=self.extension,
            resolution_depth=None,
        )


@dataclass(frozen=True, slots=True)
class MavenPlugin:
    """A repository plugin that also carries library dependencies."""

    name: str
    group_id: str
    artifact_id: str
    version: str
    classifier: str | None = None
    extension: str = "exe"
    resolution_depth: ResolutionDepth | None = None

    def to_specification(self) -> ExecutableSpecification:
        """Return the repository coordinate, including the chosen depth."""

        return Coordinate(
            group_id=self.group_id,
            artifact_id=self.artifact_id,
            version=self.version,
            classifier=self.classifier,
            extension=self.extension,
            resolution_depth=self.resolution_depth,
        )


@dataclass(frozen=True, slots=True)
class PathPlugin:
    """A plugin at an explicit filesystem path."""

    name: str
    path: Path

    @property
    def resolution_depth(self) -> None:
        return None

    def to_specification(self) -> ExecutableSpecification:
        return ExplicitPath(Path(self.path))


@dataclass(frozen=True, slots=True)
class SearchPathPlugin:
    """A plugin found by name on the host execution path."""

    name: str
    executable_name: str

    @property
    def resolution_depth(self) -> None:
        return None

    def to_specification(self) -> ExecutableSpecification:
        return PathSearch(self.executable_name)


AnyPluginDescriptor = Union[BinaryMavenPlugin, MavenPlugin, PathPlugin, SearchPathPlugin]
