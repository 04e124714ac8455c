"""Artifact fetch services used by coordinate resolution."""

from .base import ArtifactFetchService
from .maven import MAVEN_CENTRAL_URL, MavenRepositoryFetchService, artifact_relative_path

__all__ = [
    "ArtifactFetchService",
    "MAVEN_CENTRAL_URL",
    "MavenRepositoryFetchService",
    "artifact_relative_path",
]
