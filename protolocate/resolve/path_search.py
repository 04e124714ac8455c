"""Search-path executable lookup.

Responsibilities:
- Scan the ordered search directories for the first matching executable.
- Skip missing directories but fail loudly on directories that cannot be listed.
"""

from __future__ import annotations

import os
from pathlib import Path

from ..errors import ExecutableNotFoundError, ResolutionFileSystemError
from ..models.datatypes import ResolutionStrategy, ResolvedExecutable
from ..platform import PlatformEnvironment


class PathSearchResolver:
    """Resolve bare executable names against a `PlatformEnvironment` search path."""

    def resolve(self, name: str, environment: PlatformEnvironment) -> ResolvedExecutable:
        """Return the first matching executable in search-directory order.

        The first directory holding any match wins. Within one directory,
        entries are examined in sorted name order.

        Raises:
            ExecutableNotFoundError: If no directory holds a match.
            ResolutionFileSystemError: If an existing directory cannot be listed
                or a candidate cannot be inspected.
        """

        normalized_name = name.strip()
        if not normalized_name:
            raise ValueError("Executable name must be a non-empty string.")

        for directory in environment.search_directories:
            match = self._search_directory(Path(directory), normalized_name, environment)
            if match is not None:
                return ResolvedExecutable(
                    path=match,
                    source_strategy=ResolutionStrategy.PATH_SEARCH,
                )

        raise ExecutableNotFoundError(
            detail=f"No {normalized_name} binary was found in the $PATH",
            hint=(
                f"Install `{normalized_name}` on the search path, or configure an "
                "explicit path or repository version instead."
            ),
        )

    def _search_directory(
        self, directory: Path, name: str, environment: PlatformEnvironment
    ) -> Path | None:
        """Return the matching entry in one directory, or `None` when absent."""

        try:
            with os.scandir(directory) as iterator:
                entries = sorted(iterator, key=lambda entry: entry.name)
        except (FileNotFoundError, NotADirectoryError):
            return None
        except OSError as exc:
            raise ResolutionFileSystemError(
                detail=f"File system error while searching for {name}",
                cause=exc,
                hint=f"Check that `{directory}` is readable or remove it from the search path.",
            ) from exc

        for entry in entries:
            candidate = Path(entry.path)
            if self._is_match(candidate, name, environment):
                return candidate
        return None

    @staticmethod
    def _is_match(candidate: Path, name: str, environment: PlatformEnvironment) -> bool:
        """Apply name, extension, and executability rules to one entry."""

        split = environment.split_candidate(candidate.name)
        if split is None:
            return False
        base_name, _extension = split
        if not environment.names_match(base_name, name):
            return False
        return environment.is_executable_file(candidate)
