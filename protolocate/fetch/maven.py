"""Maven repository artifact fetcher.

Responsibilities:
- Map coordinates onto the standard Maven repository layout.
- Prefer the local repository, then download from remote repositories in order.
- Validate `.sha1` checksums and commit downloads atomically.
- Raise `FetchFailureError` with transport/HTTP diagnostics on failure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from hashlib import sha1
import os
from pathlib import Path
import socket
import tempfile
import threading
import time

import requests

from ..errors import FetchFailureError
from ..models.datatypes import ResolutionDepth
from ..telemetry.logger import RunLogger


MAVEN_CENTRAL_URL = "https://repo.maven.apache.org/maven2"
_CHUNK_SIZE_BYTES = 64 * 1024
_MAX_MESSAGE_CHARS = 180
_RETRYABLE_STATUS_CODES = frozenset({408, 429, 500, 502, 503, 504})


def default_local_repository() -> Path:
    """Return the conventional local Maven repository path."""

    return Path.home() / ".m2" / "repository"


def artifact_relative_path(
    *,
    group_id: str,
    artifact_id: str,
    version: str,
    classifier: str | None,
    extension: str,
) -> str:
    """Return the repository-relative path for one artifact file."""

    file_name = f"{artifact_id}-{version}"
    if classifier:
        file_name += f"-{classifier}"
    file_name += f".{extension}"
    return "/".join([*group_id.split("."), artifact_id, version, file_name])


class _MissingArtifact(Exception):
    """Signal that one repository does not host the requested artifact."""


@dataclass(slots=True)
class MavenRepositoryFetchService:
    """Requests-based fetch service over Maven-layout repositories.

    Attributes:
        local_repository: Directory caching downloaded artifacts across runs.
        remote_repositories: Base URLs tried in order on a local miss.
        offline: Whether remote repositories may be contacted.
        timeout_seconds: Per-request timeout.
        max_retries: Retries for transient transport or server failures.
        retry_backoff_base_seconds: First retry delay, doubled per attempt.
        retry_backoff_max_seconds: Upper bound for one retry delay.
        run_logger: Optional structured event logger.
    """

    local_repository: Path = field(default_factory=default_local_repository)
    remote_repositories: tuple[str, ...] = (MAVEN_CENTRAL_URL,)
    offline: bool = False
    timeout_seconds: float = 60.0
    max_retries: int = 2
    retry_backoff_base_seconds: float = 0.5
    retry_backoff_max_seconds: float = 8.0
    run_logger: RunLogger | None = None
    retry_attempt_count: int = 0
    _counter_lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

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
        """Return the local artifact path, downloading it when not yet cached.

        Only the primary artifact is materialized; `resolution_depth` is
        recorded in diagnostics but dependencies are not traversed.
        """

        relative_path = artifact_relative_path(
            group_id=group_id,
            artifact_id=artifact_id,
            version=version,
            classifier=classifier,
            extension=extension,
        )
        coordinate_label = f"{group_id}:{artifact_id}:{version}:{classifier}@{extension}"
        if resolution_depth is not None:
            coordinate_label += f" depth={resolution_depth.value}"

        local_path = Path(self.local_repository) / relative_path
        if local_path.is_file():
            return local_path

        if self.offline:
            raise FetchFailureError(
                detail=(
                    f"Artifact `{coordinate_label}` is not in the local repository "
                    f"`{self.local_repository}` and offline mode is enabled."
                ),
                coordinate=coordinate_label,
                hint="Disable offline mode or install the artifact locally first.",
            )

        if not self.remote_repositories:
            raise FetchFailureError(
                detail=f"No remote repositories are configured to fetch `{coordinate_label}`.",
                coordinate=coordinate_label,
            )

        for repository_url in self.remote_repositories:
            base_url = repository_url.rstrip("/")
            artifact_url = f"{base_url}/{relative_path}"
            if self.run_logger is not None:
                self.run_logger.log_fetch_attempt(coordinate_label, base_url)
            try:
                self._download(artifact_url, local_path, coordinate_label)
            except _MissingArtifact:
                continue
            return local_path

        searched = ", ".join(repository.rstrip("/") for repository in self.remote_repositories)
        raise FetchFailureError(
            detail=f"Artifact `{coordinate_label}` was not found in any repository ({searched}).",
            coordinate=coordinate_label,
            hint="Check the version and classifier, or add the repository hosting it.",
        )

    def _download(self, artifact_url: str, target: Path, coordinate_label: str) -> None:
        """Download one artifact with checksum validation and atomic commit."""

        response = self._get_with_retries(artifact_url, coordinate_label, stream=True)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            digest = sha1()
            descriptor, temporary_name = tempfile.mkstemp(
                prefix=f".{target.name}.", suffix=".part", dir=target.parent
            )
            temporary_path = Path(temporary_name)
            try:
                with os.fdopen(descriptor, "wb") as handle:
                    for chunk in response.iter_content(chunk_size=_CHUNK_SIZE_BYTES):
                        if chunk:
                            digest.update(chunk)
                            handle.write(chunk)
                expected = self._expected_checksum(f"{artifact_url}.sha1", coordinate_label)
                actual = digest.hexdigest()
                if expected is not None and expected != actual:
                    raise FetchFailureError(
                        detail=(
                            f"Checksum mismatch for `{coordinate_label}` from `{artifact_url}`: "
                            f"expected sha1 {expected}, got {actual}."
                        ),
                        coordinate=coordinate_label,
                    )
                os.replace(temporary_path, target)
            except BaseException:
                temporary_path.unlink(missing_ok=True)
                raise
        # RequestException subclasses OSError, so it has to be matched first.
        except requests.RequestException as exc:
            raise FetchFailureError(
                detail=(
                    f"Download of `{coordinate_label}` was interrupted: "
                    f"{_short_message(str(exc))}"
                ),
                coordinate=coordinate_label,
                cause=exc,
            ) from exc
        except OSError as exc:
            raise FetchFailureError(
                detail=f"Failed to store `{coordinate_label}` at `{target}`: {exc}",
                coordinate=coordinate_label,
                cause=exc,
            ) from exc
        finally:
            response.close()

    def _expected_checksum(self, checksum_url: str, coordinate_label: str) -> str | None:
        """Return the published sha1 digest, or `None` when none is published."""

        try:
            response = self._get_with_retries(checksum_url, coordinate_label, stream=False)
        except _MissingArtifact:
            return None
        tokens = response.text.split()
        if not tokens:
            return None
        return tokens[0].strip().lower()

    def _get_with_retries(
        self, url: str, coordinate_label: str, *, stream: bool
    ) -> requests.Response:
        """GET `url`, retrying transient failures within the retry budget."""

        attempt = 0
        while True:
            try:
                response = requests.get(url, timeout=self.timeout_seconds, stream=stream)
                if response.status_code == 404:
                    response.close()
                    raise _MissingArtifact(url)
                response.raise_for_status()
                return response
            except requests.HTTPError as exc:
                status_code = exc.response.status_code if exc.response is not None else 0
                failure_kind = f"http_{status_code}"
                retryable = status_code in _RETRYABLE_STATUS_CODES
                error: Exception = exc
            except requests.RequestException as exc:
                failure_kind = _classify_transport_failure(exc)
                retryable = True
                error = exc

            if not retryable or attempt >= self.max_retries:
                raise FetchFailureError(
                    detail=(
                        f"Failed to fetch `{coordinate_label}` from `{url}` "
                        f"({failure_kind}): {_short_message(str(error))}"
                    ),
                    coordinate=coordinate_label,
                    cause=error,
                ) from error

            attempt += 1
            with self._counter_lock:
                self.retry_attempt_count += 1
            if self.run_logger is not None:
                self.run_logger.log_fetch_retry(coordinate_label, attempt, failure_kind)
            time.sleep(self._backoff_seconds(attempt))

    def _backoff_seconds(self, attempt: int) -> float:
        """Return the bounded exponential backoff delay for one retry attempt."""

        delay = self.retry_backoff_base_seconds * (2 ** (attempt - 1))
        return min(delay, self.retry_backoff_max_seconds)


def _classify_transport_failure(reason: object) -> str:
    """Classify network-layer failures into deterministic diagnostic kinds."""

    if isinstance(reason, TimeoutError | socket.timeout | requests.Timeout):
        return "timeout"
    return "transport"


def _short_message(text: str) -> str:
    """Normalize and cap user-facing transport message length."""

    compact = " ".join(text.split())
    if len(compact) <= _MAX_MESSAGE_CHARS:
        return compact
    return f"{compact[: _MAX_MESSAGE_CHARS - 1]}..."
