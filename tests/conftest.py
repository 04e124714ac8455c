"""Shared pytest fixtures for the full protolocate test suite."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from pathlib import Path
import threading
import time

import pytest

from protolocate.models.datatypes import ResolutionDepth
from protolocate.platform import PlatformEnvironment


class RecordingFetchService:
    """Fetch service double that writes artifacts under a scratch repository."""

    def __init__(self, root: Path) -> None:
        """Initialize call recording and default artifact behavior."""

        self.root = root
        self.calls: list[dict[str, object]] = []
        self.delay_seconds = 0.0
        self.failure: Exception | None = None
        self.artifact_mode = 0o755
        self.artifact_factory: Callable[[Path], Path] | None = None
        self._lock = threading.Lock()

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
        """Record the call and materialize a small binary file."""

        with self._lock:
            self.calls.append(
                {
                    "group_id": group_id,
                    "artifact_id": artifact_id,
                    "version": version,
                    "classifier": classifier,
                    "extension": extension,
                    "resolution_depth": resolution_depth,
                }
            )
        if self.delay_seconds:
            time.sleep(self.delay_seconds)
        if self.failure is not None:
            raise self.failure

        target = self.root / group_id / f"{artifact_id}-{version}-{classifier}.{extension}"
        if self.artifact_factory is not None:
            return self.artifact_factory(target)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(b"\x7fELF-stub")
        target.chmod(self.artifact_mode)
        return target


@pytest.fixture
def make_executable() -> Callable[..., Path]:
    """Provide a factory creating files with explicit permission bits."""

    def _make(directory: Path, name: str, *, mode: int = 0o755) -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / name
        path.write_text("#!/bin/sh\nexit 0\n", encoding="utf-8")
        path.chmod(mode)
        return path

    return _make


@pytest.fixture
def make_environment() -> Callable[..., PlatformEnvironment]:
    """Provide a factory for explicit platform environments."""

    def _make(
        directories: Iterable[Path] = (),
        *,
        extensions: Iterable[str] = (),
        windows: bool = False,
        operating_system: str | None = "Linux",
        architecture: str | None = "x86_64",
    ) -> PlatformEnvironment:
        return PlatformEnvironment(
            search_directories=tuple(directories),
            name_extensions=frozenset(extensions),
            is_windows=windows,
            operating_system=operating_system,
            architecture=architecture,
        )

    return _make


@pytest.fixture
def fetch_service(tmp_path: Path) -> RecordingFetchService:
    """Provide a recording fetch service rooted in a scratch directory."""

    return RecordingFetchService(tmp_path / "fetched")
