"""Structured resolution logging utilities.

Responsibilities:
- Emit concise, deterministic resolution and fetch events.
- Route all lines through `loguru` with a plain single-line format.
"""

from __future__ import annotations

import sys
from typing import TextIO

from loguru import logger as _loguru_logger


def _sanitize_context_value(value: object) -> str:
    """Convert context values into stable, shell-safe tokens."""

    raw = str(value).strip()
    if not raw:
        return "none"
    return "".join(
        character if character.isalnum() or character in {"-", "_", ".", ":", "/", "@"} else "_"
        for character in raw
    )


def _format_context(context: dict[str, object]) -> str:
    """Serialize context key/value pairs in deterministic key order."""

    if not context:
        return ""
    tokens = [
        f"{key}={_sanitize_context_value(context[key])}"
        for key in sorted(context.keys())
    ]
    return " " + " ".join(tokens)


class RunLogger:
    """Emit deterministic events for executable resolution activity."""

    def __init__(self, sink: TextIO | None = None, level: str = "INFO") -> None:
        """Initialize logger sink and configure deterministic formatting."""

        self._sink = sink or sys.stderr
        _loguru_logger.remove()
        _loguru_logger.add(self._sink, format="{message}", level=level, colorize=False)

    def _emit(self, level: str, event: str, target: str, **context: object) -> None:
        """Emit one structured resolution log line."""

        line = (
            f"[resolve] level={level} target={_sanitize_context_value(target)} "
            f"event={event}{_format_context(context)}"
        )
        _loguru_logger.log(level, line)

    def log_resolution_start(self, target: str, strategy: str) -> None:
        """Emit a resolution-start event."""

        self._emit("INFO", "start", target, strategy=strategy)

    def log_resolution_complete(
        self, target: str, strategy: str, path: str, cache_hit: bool | None
    ) -> None:
        """Emit a resolution-complete event with the resolved path."""

        context: dict[str, object] = {"strategy": strategy, "path": path}
        if cache_hit is not None:
            context["cache_hit"] = "true" if cache_hit else "false"
        self._emit("INFO", "complete", target, **context)

    def log_resolution_failure(self, target: str, strategy: str, error_type: str) -> None:
        """Emit a resolution-failure event without exception payload details."""

        self._emit("ERROR", "failure", target, strategy=strategy, error_type=error_type)

    def log_fetch_attempt(self, target: str, repository: str) -> None:
        """Emit a repository download attempt."""

        self._emit("DEBUG", "fetch", target, repository=repository)

    def log_fetch_retry(self, target: str, attempt: int, failure_kind: str) -> None:
        """Emit a transient fetch failure that will be retried."""

        self._emit("WARNING", "retry", target, attempt=attempt, failure_kind=failure_kind)

    def log_permission_fix(self, target: str, path: str) -> None:
        """Emit an execute-bit fix-up for a fetched artifact."""

        self._emit("INFO", "chmod", target, path=path)
