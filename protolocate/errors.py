"""Domain exceptions for executable resolution diagnostics.

Every resolution failure is terminal for the specification that raised it.
Errors carry a user-facing `detail`, an optional actionable `hint`, and a
stable snake-case `kind` used by the CLI and structured logs.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models.datatypes import Coordinate


class ExecutableResolutionError(RuntimeError):
    """Raised when an executable specification cannot be resolved."""

    kind = "resolution_error"

    def __init__(
        self,
        *,
        detail: str,
        hint: str | None = None,
    ) -> None:
        """Initialize a resolution error with optional remediation hint."""

        super().__init__(detail)
        self.detail = detail
        self.hint = hint


class ExecutableNotFoundError(ExecutableResolutionError):
    """Raised when no matching or existing executable was found."""

    kind = "not_found"


class NotExecutableError(ExecutableResolutionError):
    """Raised when an explicit path exists but fails the executability check."""

    kind = "not_executable"


class ResolutionFileSystemError(ExecutableResolutionError):
    """Raised when listing, stat, or permission operations fail mid-resolution."""

    kind = "file_system_error"

    def __init__(
        self,
        *,
        detail: str,
        cause: OSError,
        hint: str | None = None,
    ) -> None:
        """Initialize a filesystem error that keeps the underlying I/O cause."""

        super().__init__(detail=detail, hint=hint)
        self.cause = cause


class UnsupportedPlatformError(ExecutableResolutionError):
    """Raised when no classifier mapping exists for the host OS/architecture."""

    kind = "unsupported_platform"


class FetchFailureError(ExecutableResolutionError):
    """Raised when the artifact fetch service cannot materialize an artifact."""

    kind = "fetch_failure"

    def __init__(
        self,
        *,
        detail: str,
        coordinate: Coordinate | str | None = None,
        cause: BaseException | None = None,
        hint: str | None = None,
    ) -> None:
        """Initialize a fetch failure with coordinate and cause metadata."""

        super().__init__(detail=detail, hint=hint)
        self.coordinate = coordinate
        self.cause = cause


class UnexpectedArtifactLayoutError(ExecutableResolutionError):
    """Raised when a fetched artifact is not a single executable file."""

    kind = "unexpected_artifact_layout"


class ConfigurationError(ExecutableResolutionError):
    """Raised when locator settings cannot be loaded or are invalid."""

    kind = "config"
