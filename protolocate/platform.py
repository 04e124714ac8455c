"""Host platform facts used by every resolver.

Responsibilities:
- Hold the ordered search path, recognized executable extensions, and the
  platform flag as one explicit, read-only value.
- Apply the platform-specific name comparison and executability rules.
- Map the host OS/architecture pair onto repository artifact classifiers.

`PlatformEnvironment.from_host` is the only place that reads process
environment variables or interpreter platform details.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from pathlib import Path
import platform
import stat
from typing import Mapping

from .errors import ResolutionFileSystemError, UnsupportedPlatformError
from .parsing import normalize_optional_string


_EXECUTE_BITS = stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH
_DEFAULT_WINDOWS_EXTENSIONS = (".COM", ".EXE", ".BAT", ".CMD")

_OPERATING_SYSTEM_ALIASES = {
    "linux": "linux",
    "darwin": "osx",
    "macos": "osx",
    "osx": "osx",
    "mac os x": "osx",
    "windows": "windows",
    "win32": "windows",
}
_ARCHITECTURE_ALIASES = {
    "x86_64": "x86_64",
    "amd64": "x86_64",
    "x64": "x86_64",
    "aarch64": "aarch_64",
    "arm64": "aarch_64",
    "aarch_64": "aarch_64",
    "ppc64le": "ppcle_64",
    "s390x": "s390_64",
    "i386": "x86_32",
    "i686": "x86_32",
    "x86": "x86_32",
    "x86_32": "x86_32",
}
# Classifiers under which protoc and the common native plugins are published.
_SUPPORTED_CLASSIFIERS = frozenset(
    {
        "linux-aarch_64",
        "linux-ppcle_64",
        "linux-s390_64",
        "linux-x86_32",
        "linux-x86_64",
        "osx-aarch_64",
        "osx-x86_64",
        "windows-x86_32",
        "windows-x86_64",
    }
)


@dataclass(frozen=True, slots=True)
class PlatformEnvironment:
    """Read-only host facts supplied once per resolution run.

    Attributes:
        search_directories: Ordered directories searched for bare executable names.
        name_extensions: Filename suffixes marking executables. Compared
            case-insensitively on Windows. The empty string means "no suffix".
        is_windows: Whether Windows naming and executability rules apply.
        operating_system: Raw OS name used for classifier derivation.
        architecture: Raw machine architecture used for classifier derivation.
    """

    search_directories: tuple[Path, ...] = field(default_factory=tuple)
    name_extensions: frozenset[str] = field(default_factory=frozenset)
    is_windows: bool = False
    operating_system: str | None = None
    architecture: str | None = None

    def __post_init__(self) -> None:
        """Validate the Windows extension invariant."""

        if self.is_windows and not self.name_extensions:
            raise ValueError(
                "`name_extensions` must not be empty on Windows; "
                "include the empty string to accept suffix-less names."
            )

    @classmethod
    def from_host(
        cls,
        environ: Mapping[str, str] | None = None,
        *,
        system: str | None = None,
        machine: str | None = None,
    ) -> PlatformEnvironment:
        """Capture search path, extensions, and platform facts from the host."""

        env_map: Mapping[str, str] = os.environ if environ is None else environ
        system_name = platform.system() if system is None else system
        machine_name = platform.machine() if machine is None else machine
        is_windows = _OPERATING_SYSTEM_ALIASES.get(system_name.strip().lower()) == "windows"

        raw_path = _lookup_environment(env_map, "PATH", case_insensitive=is_windows) or ""
        separator = ";" if is_windows else ":"
        directories: list[Path] = []
        for raw_entry in raw_path.split(separator):
            entry = raw_entry.strip()
            if is_windows:
                entry = entry.strip('"')
            if entry:
                directories.append(Path(entry))

        extensions: frozenset[str] = frozenset()
        if is_windows:
            raw_extensions = _lookup_environment(env_map, "PATHEXT", case_insensitive=True)
            tokens = [
                token.strip()
                for token in (raw_extensions or "").split(";")
                if token.strip()
            ]
            extensions = frozenset(tokens or _DEFAULT_WINDOWS_EXTENSIONS)

        return cls(
            search_directories=tuple(directories),
            name_extensions=extensions,
            is_windows=is_windows,
            operating_system=system_name,
            architecture=machine_name,
        )

    def fold(self, text: str) -> str:
        """Return `text` normalized for comparison under the platform case rule."""

        if self.is_windows:
            return text.lower()
        return text

    def accepted_extensions(self) -> frozenset[str]:
        """Return folded extensions a candidate may carry.

        POSIX always accepts the bare name in addition to any listed suffixes.
        """

        folded = frozenset(self.fold(extension) for extension in self.name_extensions)
        if self.is_windows:
            return folded
        return folded | {""}

    def split_candidate(self, entry_name: str) -> tuple[str, str] | None:
        """Split a directory entry into base name and recognized extension.

        The longest matching suffix is stripped. Returns `None` when the entry
        carries no recognized extension.
        """

        accepted = self.accepted_extensions()
        folded_name = self.fold(entry_name)
        for extension in sorted(accepted, key=len, reverse=True):
            if not extension:
                continue
            if len(folded_name) > len(extension) and folded_name.endswith(extension):
                return entry_name[: -len(extension)], entry_name[-len(extension) :]
        if "" in accepted:
            return entry_name, ""
        return None

    def names_match(self, candidate: str, expected: str) -> bool:
        """Compare two names under the platform case rule."""

        return self.fold(candidate) == self.fold(expected)

    def is_executable_file(self, path: Path) -> bool:
        """Return whether `path` is a regular file the platform treats as executable.

        POSIX requires any execute permission bit; Windows accepts any file with
        a recognized extension. Missing paths are not executable. Other stat
        failures raise `ResolutionFileSystemError`.
        """

        try:
            status = path.stat()
        except (FileNotFoundError, NotADirectoryError):
            return False
        except OSError as exc:
            raise ResolutionFileSystemError(
                detail=f"File system error while inspecting `{path}`.",
                cause=exc,
            ) from exc

        if not stat.S_ISREG(status.st_mode):
            return False
        if self.is_windows:
            return self.split_candidate(path.name) is not None
        return bool(status.st_mode & _EXECUTE_BITS)

    def host_classifier(self) -> str:
        """Derive the repository classifier for this OS/architecture pair."""

        raw_os = normalize_optional_string(self.operating_system) or ""
        raw_arch = normalize_optional_string(self.architecture) or ""
        os_token = _OPERATING_SYSTEM_ALIASES.get(raw_os.lower())
        arch_token = _ARCHITECTURE_ALIASES.get(raw_arch.lower())
        classifier = f"{os_token}-{arch_token}"
        if os_token is None or arch_token is None or classifier not in _SUPPORTED_CLASSIFIERS:
            raise UnsupportedPlatformError(
                detail=(
                    f"No artifact classifier is known for operating system "
                    f"`{raw_os or 'unknown'}` and architecture `{raw_arch or 'unknown'}`."
                ),
                hint="Set an explicit classifier or point to a locally installed binary.",
            )
        return classifier


def _lookup_environment(
    env_map: Mapping[str, str], key: str, *, case_insensitive: bool
) -> str | None:
    """Read one environment value, ignoring key case where the host does."""

    if key in env_map:
        return env_map[key]
    if not case_insensitive:
        return None
    for candidate_key, value in env_map.items():
        if candidate_key.upper() == key:
            return value
    return None
