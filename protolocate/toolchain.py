"""Resolve the compiler and all plugins needed by one code-generation step.

Responsibilities:
- Resolve the compiler and every plugin descriptor concurrently.
- Either fail on the first error in declaration order or collect all failures.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from .descriptors import CompilerDescriptor, PluginDescriptor
from .errors import ExecutableResolutionError
from .models.datatypes import ResolvedExecutable
from .resolve.engine import ResolutionEngine


@dataclass(frozen=True, slots=True)
class ResolvedPlugin:
    """A plugin descriptor paired with its resolved executable."""

    descriptor: PluginDescriptor
    executable: ResolvedExecutable

    @property
    def name(self) -> str:
        """Return the logical plugin name."""

        return self.descriptor.name


@dataclass(frozen=True, slots=True)
class ToolchainFailure:
    """One descriptor that failed to resolve.

    Attributes:
        label: `protoc` for the compiler, else the plugin name.
        error: The terminal resolution error.
    """

    label: str
    error: ExecutableResolutionError


@dataclass(frozen=True, slots=True)
class ResolvedToolchain:
    """Resolved executables for one code-generation step.

    `compiler` is `None` only when the compiler failed and failures were collected.
    """

    compiler: ResolvedExecutable | None
    plugins: tuple[ResolvedPlugin, ...] = field(default_factory=tuple)
    failures: tuple[ToolchainFailure, ...] = field(default_factory=tuple)

    @property
    def succeeded(self) -> bool:
        """Return whether every descriptor resolved."""

        return not self.failures


def resolve_toolchain(
    engine: ResolutionEngine,
    compiler: CompilerDescriptor,
    plugins: Sequence[PluginDescriptor] = (),
    *,
    max_workers: int = 4,
    collect_failures: bool = False,
) -> ResolvedToolchain:
    """Resolve the compiler and plugins with bounded concurrency.

    Raises:
        ExecutableResolutionError: The first failure in declaration order
            (compiler first), unless `collect_failures` is set.
    """

    labels = ["protoc", *(plugin.name for plugin in plugins)]
    specifications = [
        compiler.to_specification(),
        *(plugin.to_specification() for plugin in plugins),
    ]
    outcomes = engine.resolve_many(specifications, max_workers=max_workers)

    failures = tuple(
        ToolchainFailure(label=label, error=outcome.error)
        for label, outcome in zip(labels, outcomes)
        if outcome.error is not None
    )
    if failures and not collect_failures:
        raise failures[0].error

    compiler_outcome, plugin_outcomes = outcomes[0], outcomes[1:]
    resolved_plugins = tuple(
        ResolvedPlugin(descriptor=plugin, executable=outcome.resolved)
        for plugin, outcome in zip(plugins, plugin_outcomes)
        if outcome.resolved is not None
    )
    return ResolvedToolchain(
        compiler=compiler_outcome.resolved,
        plugins=resolved_plugins,
        failures=failures,
    )
