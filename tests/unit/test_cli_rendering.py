"""Unit tests for CLI output and error rendering helpers."""

from __future__ import annotations

from pathlib import Path

import pytest
import typer

from protolocate.cli_rendering import echo_resolved, exit_with_command_error
from protolocate.errors import ExecutableNotFoundError
from protolocate.models.datatypes import ResolutionStrategy, ResolvedExecutable


def test_exit_with_command_error_renders_kind_and_hint(
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Renderer should print error kind, detail, and hint before exiting with code 1."""

    error = ExecutableNotFoundError(
        detail="No protoc binary was found in the $PATH",
        hint="Install `protoc` on the search path.",
    )

    with pytest.raises(typer.Exit) as exc_info:
        exit_with_command_error("which", error)

    captured = capsys.readouterr()
    assert exc_info.value.exit_code == 1
    assert "which failed (not_found): No protoc binary was found in the $PATH" in captured.err
    assert "Hint: Install `protoc` on the search path." in captured.err


def test_exit_with_command_error_renders_generic_fallback(
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Renderer should print fallback exception text for non-resolution failures."""

    with pytest.raises(typer.Exit) as exc_info:
        exit_with_command_error("resolve", RuntimeError("unexpected failure"))

    captured = capsys.readouterr()
    assert exc_info.value.exit_code == 1
    assert "resolve failed: unexpected failure" in captured.err


def test_echo_resolved_marks_cache_hits(capsys: pytest.CaptureFixture[str]) -> None:
    echo_resolved(
        "protoc",
        ResolvedExecutable(
            path=Path("/m2/protoc.exe"),
            source_strategy=ResolutionStrategy.COORDINATE,
            cache_hit=True,
        ),
    )

    assert capsys.readouterr().out == "protoc: /m2/protoc.exe [coordinate, cached]\n"
