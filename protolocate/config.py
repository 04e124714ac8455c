"""Configuration model and loaders for protolocate.

Responsibilities:
- Define resolution settings as a typed dataclass.
- Build compiler/plugin descriptors and the fetch service from those settings.
- Provide loader entry points for file- and environment-based configuration.

Key types:
- `LocatorConfig`: normalized settings for one resolution run.
- `ConfigLoader`: static construction helpers for `LocatorConfig`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from .descriptors import (
    AnyPluginDescriptor,
    BinaryMavenPlugin,
    CompilerDescriptor,
    MavenPlugin,
    PathPlugin,
    SearchPathPlugin,
)
from .fetch.maven import MAVEN_CENTRAL_URL, MavenRepositoryFetchService
from .parsing import (
    normalize_optional_string,
    parse_permissive_boolean,
    parse_resolution_depth,
    split_comma_list,
)
from .telemetry.logger import RunLogger


_DEFAULT_MAX_WORKERS = 4
_DEFAULT_FETCH_TIMEOUT_SECONDS = 60.0
_DEFAULT_FETCH_MAX_RETRIES = 2


@dataclass(slots=True)
class LocatorConfig:
    """Settings for resolving one code-generation step's executables.

    Attributes:
        protoc_version: Repository version of `protoc`, or `PATH` to search.
        protoc_path: Explicit compiler path (mutually exclusive with the version).
        protoc_classifier: Classifier override for the compiler coordinate.
        plugins: Plugin descriptors in declaration order.
        local_repository: Local Maven repository; `~/.m2/repository` when `None`.
        remote_repositories: Remote repository base URLs tried in order.
        offline: Whether remote repositories may be contacted.
        max_workers: Upper bound on concurrent resolutions.
        fetch_timeout_seconds: Per-request HTTP timeout.
        fetch_max_retries: Retries for transient fetch failures.
    """

    protoc_version: str | None = None
    protoc_path: Path | None = None
    protoc_classifier: str | None = None
    plugins: tuple[AnyPluginDescriptor, ...] = field(default_factory=tuple)
    local_repository: Path | None = None
    remote_repositories: tuple[str, ...] = (MAVEN_CENTRAL_URL,)
    offline: bool = False
    max_workers: int = _DEFAULT_MAX_WORKERS
    fetch_timeout_seconds: float = _DEFAULT_FETCH_TIMEOUT_SECONDS
    fetch_max_retries: int = _DEFAULT_FETCH_MAX_RETRIES

    def validate(self) -> None:
        """Validate settings before any resolution runs."""

        if self.protoc_version is not None and self.protoc_path is not None:
            raise ValueError("Set only one of `protoc_version` and `protoc_path`.")
        if self.max_workers <= 0:
            raise ValueError("`max_workers` must be a positive integer.")
        if self.fetch_timeout_seconds <= 0:
            raise ValueError("`fetch_timeout_seconds` must be a positive number.")
        if self.fetch_max_retries < 0:
            raise ValueError("`fetch_max_retries` must be zero or a positive integer.")
        for repository in self.remote_repositories:
            if not repository.startswith(("http://", "https://")):
                raise ValueError(
                    f"Remote repository `{repository}` must be an http(s) URL."
                )

        seen: set[str] = set()
        for plugin in self.plugins:
            if not normalize_optional_string(plugin.name):
                raise ValueError("Plugin `name` must be a non-empty string.")
            if plugin.name in seen:
                raise ValueError(f"Plugin name `{plugin.name}` is declared more than once.")
            seen.add(plugin.name)

    def compiler_descriptor(self) -> CompilerDescriptor:
        """Return the compiler descriptor; path search when nothing is configured."""

        if self.protoc_path is not None:
            return CompilerDescriptor.from_path(self.protoc_path)
        if self.protoc_version is not None:
            return CompilerDescriptor.from_version(
                self.protoc_version,
                classifier=self.protoc_classifier,
            )
        return CompilerDescriptor.from_search()

    def build_fetch_service(
        self, run_logger: RunLogger | None = None
    ) -> MavenRepositoryFetchService:
        """Create the repository fetch service described by these settings."""

        service = MavenRepositoryFetchService(
            remote_repositories=self.remote_repositories,
            offline=self.offline,
            timeout_seconds=self.fetch_timeout_seconds,
            max_retries=self.fetch_max_retries,
            run_logger=run_logger,
        )
        if self.local_repository is not None:
            service.local_repository = self.local_repository
        return service


class ConfigLoader:
    """Factory methods for creating `LocatorConfig` from external sources."""

    _SUPPORTED_YAML_KEYS = frozenset(
        {
            "protoc_version",
            "protoc_path",
            "protoc_classifier",
            "plugins",
            "local_repository",
            "remote_repositories",
            "offline",
            "max_workers",
            "fetch_timeout_seconds",
            "fetch_max_retries",
        }
    )
    _SUPPORTED_PLUGIN_KEYS = frozenset(
        {
            "name",
            "group_id",
            "artifact_id",
            "version",
            "classifier",
            "extension",
            "binary",
            "resolution_depth",
            "path",
            "executable_name",
        }
    )
    _COORDINATE_PLUGIN_KEYS = frozenset(
        {
            "group_id",
            "artifact_id",
            "version",
            "classifier",
            "extension",
            "binary",
            "resolution_depth",
        }
    )

    @staticmethod
    def from_yaml(path: Path) -> LocatorConfig:
        """Create a validated config from a YAML file."""

        path_text = path.read_text(encoding="utf-8")
        payload = ConfigLoader._parse_yaml_payload(path_text, path)

        return ConfigLoader._build_config_from_mapping(payload, source_label=f"YAML `{path}`")

    @staticmethod
    def from_env(env: Mapping[str, str] | None = None) -> LocatorConfig:
        """Create a validated config from `PROTOLOCATE_*` environment variables."""

        env_map: Mapping[str, str] = os.environ if env is None else env

        protoc_path = ConfigLoader._optional_env_string(env_map, "PROTOLOCATE_PROTOC_PATH")
        local_repository = ConfigLoader._optional_env_string(
            env_map, "PROTOLOCATE_LOCAL_REPOSITORY"
        )
        remote_repositories = split_comma_list(env_map.get("PROTOLOCATE_REMOTE_REPOSITORIES"))
        offline = ConfigLoader._optional_env_boolean(env_map, "PROTOLOCATE_OFFLINE") or False
        max_workers = ConfigLoader._optional_env_positive_int(
            env_map, "PROTOLOCATE_MAX_WORKERS"
        ) or _DEFAULT_MAX_WORKERS

        config = LocatorConfig(
            protoc_version=ConfigLoader._optional_env_string(
                env_map, "PROTOLOCATE_PROTOC_VERSION"
            ),
            protoc_path=Path(protoc_path) if protoc_path is not None else None,
            protoc_classifier=ConfigLoader._optional_env_string(
                env_map, "PROTOLOCATE_CLASSIFIER"
            ),
            local_repository=Path(local_repository) if local_repository is not None else None,
            remote_repositories=remote_repositories or (MAVEN_CENTRAL_URL,),
            offline=offline,
            max_workers=max_workers,
        )
        config.validate()
        return config

    @staticmethod
    def _parse_yaml_payload(raw_text: str, path: Path) -> Mapping[str, Any]:
        """Parse YAML text and enforce a mapping root payload."""

        try:
            payload = yaml.safe_load(raw_text)
        except yaml.YAMLError as exc:
            raise ValueError(f"YAML config `{path}` is not valid YAML: {exc}") from exc

        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ValueError(f"YAML config `{path}` must contain a top-level mapping/object.")
        return payload

    @staticmethod
    def _build_config_from_mapping(
        payload: Mapping[str, Any], source_label: str
    ) -> LocatorConfig:
        """Build a validated config from a normalized mapping payload."""

        unknown = sorted(set(payload).difference(ConfigLoader._SUPPORTED_YAML_KEYS))
        if unknown:
            key_list = ", ".join(str(key) for key in unknown)
            raise ValueError(f"{source_label} includes unsupported key(s): {key_list}.")

        protoc_path = ConfigLoader._optional_non_empty_string(payload, "protoc_path")
        local_repository = ConfigLoader._optional_non_empty_string(payload, "local_repository")
        remote_repositories = ConfigLoader._optional_string_list(
            payload, "remote_repositories", source_label
        )

        config = LocatorConfig(
            protoc_version=ConfigLoader._optional_non_empty_string(payload, "protoc_version"),
            protoc_path=Path(protoc_path) if protoc_path is not None else None,
            protoc_classifier=ConfigLoader._optional_non_empty_string(
                payload, "protoc_classifier"
            ),
            plugins=ConfigLoader._plugins(payload, source_label),
            local_repository=Path(local_repository) if local_repository is not None else None,
            remote_repositories=remote_repositories or (MAVEN_CENTRAL_URL,),
            offline=ConfigLoader._optional_boolean(
                payload, "offline", source_label, default=False
            ),
            max_workers=ConfigLoader._optional_positive_int(
                payload, "max_workers", source_label, default=_DEFAULT_MAX_WORKERS
            ),
            fetch_timeout_seconds=ConfigLoader._optional_positive_float(
                payload,
                "fetch_timeout_seconds",
                source_label,
                default=_DEFAULT_FETCH_TIMEOUT_SECONDS,
            ),
            fetch_max_retries=ConfigLoader._optional_non_negative_int(
                payload, "fetch_max_retries", source_label, default=_DEFAULT_FETCH_MAX_RETRIES
            ),
        )
        config.validate()
        return config

    @staticmethod
    def _plugins(
        payload: Mapping[str, Any], source_label: str
    ) -> tuple[AnyPluginDescriptor, ...]:
        """Read the optional `plugins` list into descriptors."""

        raw = payload.get("plugins")
        if raw is None:
            return ()
        if not isinstance(raw, list):
            raise ValueError(f"{source_label} field `plugins` must be a list.")
        return tuple(
            ConfigLoader._plugin(item, f"{source_label} plugin #{index}")
            for index, item in enumerate(raw, start=1)
        )

    @staticmethod
    def _plugin(raw: object, label: str) -> AnyPluginDescriptor:
        """Build one plugin descriptor from its mapping."""

        if not isinstance(raw, Mapping):
            raise ValueError(f"{label} must be a mapping/object.")

        unknown = sorted(set(raw).difference(ConfigLoader._SUPPORTED_PLUGIN_KEYS))
        if unknown:
            key_list = ", ".join(str(key) for key in unknown)
            raise ValueError(f"{label} includes unsupported key(s): {key_list}.")

        name = ConfigLoader._optional_non_empty_string(raw, "name")
        if name is None:
            raise ValueError(f"{label} requires non-empty `name`.")

        has_coordinate = any(key in raw for key in ("group_id", "artifact_id", "version"))
        has_path = "path" in raw
        has_executable_name = "executable_name" in raw
        if [has_coordinate, has_path, has_executable_name].count(True) != 1:
            raise ValueError(
                f"{label} `{name}` must define exactly one source: "
                "`group_id`/`artifact_id`/`version`, `path`, or `executable_name`."
            )

        if not has_coordinate:
            stray = sorted(ConfigLoader._COORDINATE_PLUGIN_KEYS.intersection(raw))
            if stray:
                raise ValueError(
                    f"{label} `{name}` sets repository-only key(s): {', '.join(stray)}."
                )
            if has_path:
                path_value = ConfigLoader._optional_non_empty_string(raw, "path")
                if path_value is None:
                    raise ValueError(f"{label} `{name}` requires non-empty `path`.")
                return PathPlugin(name=name, path=Path(path_value))
            executable_name = ConfigLoader._optional_non_empty_string(raw, "executable_name")
            if executable_name is None:
                raise ValueError(f"{label} `{name}` requires non-empty `executable_name`.")
            return SearchPathPlugin(name=name, executable_name=executable_name)

        coordinate_values: dict[str, str] = {}
        for key in ("group_id", "artifact_id", "version"):
            value = ConfigLoader._optional_non_empty_string(raw, key)
            if value is None:
                raise ValueError(f"{label} `{name}` requires non-empty `{key}`.")
            coordinate_values[key] = value
        classifier = ConfigLoader._optional_non_empty_string(raw, "classifier")
        extension = ConfigLoader._optional_non_empty_string(raw, "extension") or "exe"
        binary = ConfigLoader._optional_boolean(raw, "binary", label, default=True)

        if binary:
            if normalize_optional_string(raw.get("resolution_depth")) is not None:
                raise ValueError(
                    f"{label} `{name}` is a single binary; `resolution_depth` cannot be set."
                )
            return BinaryMavenPlugin(
                name=name,
                classifier=classifier,
                extension=extension,
                **coordinate_values,
            )

        return MavenPlugin(
            name=name,
            classifier=classifier,
            extension=extension,
            resolution_depth=parse_resolution_depth(
                raw.get("resolution_depth"), "resolution_depth"
            ),
            **coordinate_values,
        )

    @staticmethod
    def _optional_non_empty_string(payload: Mapping[str, Any], key: str) -> str | None:
        """Read an optional string field and normalize blank values to `None`."""

        if key not in payload:
            return None
        return normalize_optional_string(payload[key])

    @staticmethod
    def _optional_string_list(
        payload: Mapping[str, Any], key: str, source_label: str
    ) -> tuple[str, ...]:
        """Read a list of strings, also accepting one comma-separated string."""

        if key not in payload or payload[key] is None:
            return ()
        raw = payload[key]
        if isinstance(raw, str):
            return split_comma_list(raw)
        if not isinstance(raw, list):
            raise ValueError(f"{source_label} field `{key}` must be a list of strings.")
        values: list[str] = []
        for item in raw:
            value = normalize_optional_string(item)
            if value is None:
                raise ValueError(f"{source_label} field `{key}` contains a blank entry.")
            values.append(value)
        return tuple(values)

    @staticmethod
    def _optional_positive_int(
        payload: Mapping[str, Any], key: str, source_label: str, default: int
    ) -> int:
        """Read and validate a positive integer payload field."""

        parsed = ConfigLoader._optional_int(payload, key, source_label, "a positive integer")
        if parsed is None:
            return default
        if parsed <= 0:
            raise ValueError(f"{source_label} field `{key}` must be a positive integer.")
        return parsed

    @staticmethod
    def _optional_non_negative_int(
        payload: Mapping[str, Any], key: str, source_label: str, default: int
    ) -> int:
        """Read and validate a zero-or-positive integer payload field."""

        parsed = ConfigLoader._optional_int(
            payload, key, source_label, "zero or a positive integer"
        )
        if parsed is None:
            return default
        if parsed < 0:
            raise ValueError(
                f"{source_label} field `{key}` must be zero or a positive integer."
            )
        return parsed

    @staticmethod
    def _optional_int(
        payload: Mapping[str, Any], key: str, source_label: str, expectation: str
    ) -> int | None:
        """Read an optional integer field, rejecting booleans and garbage."""

        if key not in payload:
            return None

        raw_value = payload[key]
        if isinstance(raw_value, bool):
            raise ValueError(f"{source_label} field `{key}` must be {expectation}.")
        if isinstance(raw_value, int):
            return raw_value
        normalized = normalize_optional_string(raw_value)
        if normalized is None:
            return None
        try:
            return int(normalized)
        except ValueError as exc:
            raise ValueError(f"{source_label} field `{key}` must be {expectation}.") from exc

    @staticmethod
    def _optional_positive_float(
        payload: Mapping[str, Any], key: str, source_label: str, default: float
    ) -> float:
        """Read and validate a positive number payload field."""

        if key not in payload:
            return default

        raw_value = payload[key]
        if isinstance(raw_value, bool):
            raise ValueError(f"{source_label} field `{key}` must be a positive number.")
        normalized = normalize_optional_string(raw_value)
        if normalized is None:
            return default
        try:
            parsed = float(normalized)
        except ValueError as exc:
            raise ValueError(f"{source_label} field `{key}` must be a positive number.") from exc
        if parsed <= 0:
            raise ValueError(f"{source_label} field `{key}` must be a positive number.")
        return parsed

    @staticmethod
    def _optional_boolean(
        payload: Mapping[str, Any], key: str, source_label: str, default: bool
    ) -> bool:
        """Read and validate a boolean field from a payload."""

        if key not in payload:
            return default

        parsed = parse_permissive_boolean(payload[key])
        if parsed is None:
            raise ValueError(
                f"{source_label} field `{key}` must be a boolean value "
                "(`true`/`false`, `1`/`0`, `yes`/`no`)."
            )
        return parsed

    @staticmethod
    def _optional_env_string(env: Mapping[str, str], key: str) -> str | None:
        """Read and normalize optional string environment variable values."""

        if key not in env:
            return None
        return normalize_optional_string(env.get(key))

    @staticmethod
    def _optional_env_positive_int(env: Mapping[str, str], key: str) -> int | None:
        """Read an optional positive integer from environment mapping."""

        raw_value = ConfigLoader._optional_env_string(env, key)
        if raw_value is None:
            return None
        try:
            parsed = int(raw_value)
        except ValueError as exc:
            raise ValueError(f"Environment variable `{key}` must be a positive integer.") from exc
        if parsed <= 0:
            raise ValueError(f"Environment variable `{key}` must be a positive integer.")
        return parsed

    @staticmethod
    def _optional_env_boolean(env: Mapping[str, str], key: str) -> bool | None:
        """Read an optional boolean from environment mapping."""

        if key not in env:
            return None
        parsed = parse_permissive_boolean(env.get(key))
        if parsed is None:
            raise ValueError(
                f"Environment variable `{key}` must be a boolean value "
                "(`true`/`false`, `1`/`0`, `yes`/`no`)."
            )
        return parsed
