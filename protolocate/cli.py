"""Command-line interface for protolocate.

Responsibilities:
- Expose user-facing commands for executable resolution.
- Merge YAML/environment settings with explicit CLI overrides.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Annotated

import typer

from .cli_rendering import (
    echo_resolved,
    echo_toolchain,
    echo_toolchain_failures,
    exit_with_command_error,
)
from .config import ConfigLoader, LocatorConfig
from .errors import ConfigurationError
from .platform import PlatformEnvironment
from .resolve.engine import ResolutionEngine
from .resolve.path_search import PathSearchResolver
from .telemetry.logger import RunLogger
from .toolchain import resolve_toolchain

app = typer.Typer(
    name="protolocate",
    no_args_is_help=True,
    help="Locate protoc and protoc plugin executables.",
)


def _load_config(config_file: Path | None) -> LocatorConfig:
    """Load YAML settings when requested, else environment settings."""

    if config_file is None:
        try:
            return ConfigLoader.from_env()
        except ValueError as exc:
            raise ConfigurationError(
                detail=f"Invalid environment configuration: {exc}",
                hint="Fix the `PROTOLOCATE_*` environment variables and rerun.",
            ) from exc

    try:
        return ConfigLoader.from_yaml(config_file)
    except FileNotFoundError as exc:
        raise ConfigurationError(
            detail=f"Config file not found: `{config_file}`.",
            hint="Provide an existing path via `--config <path.yaml>`.",
        ) from exc
    except ValueError as exc:
        raise ConfigurationError(
            detail=f"Invalid config file `{config_file}`: {exc}",
            hint="Fix config schema/values and rerun.",
        ) from exc
    except OSError as exc:
        raise ConfigurationError(
            detail=f"Failed to read config file `{config_file}`: {exc}",
            hint="Verify the file exists and is readable.",
        ) from exc


def _resolve_command_config(
    config_file: Path | None,
    protoc_version: str | None,
    protoc_path: Path | None,
    offline: bool | None,
    max_workers: int | None,
) -> LocatorConfig:
    """Resolve effective settings from loaded defaults and explicit CLI overrides."""

    if protoc_version is not None and protoc_path is not None:
        raise ConfigurationError(
            detail="`--protoc-version` and `--protoc-path` cannot be combined.",
            hint="Pass only one compiler source.",
        )

    config = _load_config(config_file)
    if protoc_version is not None:
        config = replace(config, protoc_version=protoc_version, protoc_path=None)
    if protoc_path is not None:
        config = replace(config, protoc_path=protoc_path, protoc_version=None)
    if offline is not None:
        config = replace(config, offline=offline)
    if max_workers is not None:
        config = replace(config, max_workers=max_workers)

    try:
        config.validate()
    except ValueError as exc:
        raise ConfigurationError(
            detail=f"Invalid settings: {exc}",
            hint="Check CLI overrides against the config file values.",
        ) from exc
    return config


@app.command("resolve")
def resolve_command(
    config_file: Annotated[
        Path | None,
        typer.Option(
            "--config",
            help="Path to YAML config file with compiler and plugin settings.",
        ),
    ] = None,
    protoc_version: Annotated[
        str | None,
        typer.Option(
            "--protoc-version",
            help="Compiler version to fetch, or `PATH` to search the host path.",
        ),
    ] = None,
    protoc_path: Annotated[
        Path | None,
        typer.Option("--protoc-path", help="Explicit compiler executable path."),
    ] = None,
    offline: Annotated[
        bool | None,
        typer.Option(
            "--offline/--online",
            help="Forbid or allow remote repository downloads.",
        ),
    ] = None,
    max_workers: Annotated[
        int | None,
        typer.Option("--max-workers", min=1, help="Concurrent resolution bound."),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Print resolution events to stderr."),
    ] = False,
) -> None:
    """Resolve the compiler and every configured plugin."""

    try:
        config = _resolve_command_config(
            config_file, protoc_version, protoc_path, offline, max_workers
        )
        run_logger = RunLogger(level="INFO" if verbose else "WARNING")
        engine = ResolutionEngine(
            PlatformEnvironment.from_host(),
            fetch_service=config.build_fetch_service(run_logger),
            run_logger=run_logger,
        )
        toolchain = resolve_toolchain(
            engine,
            config.compiler_descriptor(),
            config.plugins,
            max_workers=config.max_workers,
            collect_failures=True,
        )
    except Exception as exc:
        exit_with_command_error("resolve", exc)

    echo_toolchain(toolchain)
    if not toolchain.succeeded:
        echo_toolchain_failures("resolve", toolchain)
        raise typer.Exit(code=1)


@app.command("which")
def which_command(
    name: Annotated[str, typer.Argument(help="Executable name without extension.")],
) -> None:
    """Search the host execution path for one executable."""

    try:
        resolved = PathSearchResolver().resolve(name, PlatformEnvironment.from_host())
    except Exception as exc:
        exit_with_command_error("which", exc)

    echo_resolved(name, resolved)


@app.command("classifier")
def classifier_command() -> None:
    """Print the repository classifier for the host platform."""

    try:
        classifier = PlatformEnvironment.from_host().host_classifier()
    except Exception as exc:
        exit_with_command_error("classifier", exc)

    typer.echo(classifier)


def main() -> None:
    """CLI entrypoint for console scripts."""
    app()


if __name__ == "__main__":
    main()
