"""Artifact fetch service interface consumed by coordinate resolution."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from ..models.datatypes import ResolutionDepth


class ArtifactFetchService(Protocol):
    """Materialize a repository artifact on local disk.

    Implementations own repository selection, transport, and checksum
    validation, and raise `FetchFailureError` when the artifact cannot be
    produced. Callers never retry a failed fetch.
    """

    def fetch(
        self,
        *,
        group_id: str,
        artifact_id: str,
        version: str,
        classifier: str,
        extension: str,
        resolution_depth: ResolutionDepth | None,
    ) -> Path:
        """Return the local path of the materialized artifact."""
