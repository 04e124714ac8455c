"""CLI output and error rendering helpers.

This module centralizes user-facing CLI presentation for command diagnostics
and resolved executable rows.
"""

from __future__ import annotations

from typing import NoReturn

import typer

from .errors import ExecutableResolutionError
from .models.datatypes import ResolvedExecutable
from .toolchain import ResolvedToolchain


def exit_with_command_error(command_name: str, exc: Exception) -> NoReturn:
    """Print concise diagnostics for command failures and exit with code 1."""

    if isinstance(exc, ExecutableResolutionError):
        typer.secho(
            f"{command_name} failed ({exc.kind}): {exc.detail}",
            fg=typer.colors.RED,
            err=True,
        )
        if exc.hint:
            typer.secho(f"Hint: {exc.hint}", fg=typer.colors.YELLOW, err=True)
    else:
        typer.secho(f"{command_name} failed: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1) from exc


def echo_resolved(label: str, resolved: ResolvedExecutable) -> None:
    """Print one `label: path` row with its strategy and cache marker."""

    suffix = f" [{resolved.source_strategy.value}"
    if resolved.cache_hit:
        suffix += ", cached"
    suffix += "]"
    typer.echo(f"{label}: {resolved.path}{suffix}")


def echo_toolchain(toolchain: ResolvedToolchain) -> None:
    """Print the compiler followed by plugins in declaration order."""

    if toolchain.compiler is not None:
        echo_resolved("protoc", toolchain.compiler)
    for plugin in toolchain.plugins:
        echo_resolved(plugin.name, plugin.executable)


def echo_toolchain_failures(command_name: str, toolchain: ResolvedToolchain) -> None:
    """Print one diagnostic row per failed descriptor."""

    for failure in toolchain.failures:
        typer.secho(
            f"{command_name} failed for `{failure.label}` "
            f"({failure.error.kind}): {failure.error.detail}",
            fg=typer.colors.RED,
            err=True,
        )
        if failure.error.hint:
            typer.secho(f"Hint: {failure.error.hint}", fg=typer.colors.YELLOW, err=True)
