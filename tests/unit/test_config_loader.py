"""Unit tests for YAML/environment configuration loader behavior."""

from __future__ import annotations

from pathlib import Path

import pytest

from protolocate.config import ConfigLoader, LocatorConfig
from protolocate.descriptors import (
    BinaryMavenPlugin,
    MavenPlugin,
    PathPlugin,
    SearchPathPlugin,
)
from protolocate.fetch.maven import MAVEN_CENTRAL_URL
from protolocate.models.datatypes import Coordinate, ExplicitPath, PathSearch, ResolutionDepth


def test_config_loader_from_yaml_loads_valid_config_and_normalizes_values(
    tmp_path: Path,
) -> None:
    """YAML loader should parse valid payloads and normalize typed/blank values."""

    config_path = tmp_path / "protolocate.yml"
    config_path.write_text(
        """
protoc_version: " 3.25.1 "
protoc_classifier: " linux-aarch_64 "
local_repository: " cache/m2 "
remote_repositories:
  - https://mirror.example/maven2
  - " https://repo.maven.apache.org/maven2 "
offline: " yes "
max_workers: " 6 "
fetch_timeout_seconds: 15
fetch_max_retries: 0
plugins:
  - name: grpc-java
    group_id: io.grpc
    artifact_id: protoc-gen-grpc-java
    version: 1.60.0
  - name: reactor
    group_id: com.salesforce.servicelibs
    artifact_id: reactor-grpc
    version: 1.2.4
    extension: jar
    binary: false
    resolution_depth: transitive
  - name: custom
    path: bin/protoc-gen-custom
  - name: doc
    executable_name: protoc-gen-doc
""".strip(),
        encoding="utf-8",
    )

    config = ConfigLoader.from_yaml(config_path)

    assert config.protoc_version == "3.25.1"
    assert config.protoc_path is None
    assert config.protoc_classifier == "linux-aarch_64"
    assert config.local_repository == Path("cache/m2")
    assert config.remote_repositories == (
        "https://mirror.example/maven2",
        "https://repo.maven.apache.org/maven2",
    )
    assert config.offline is True
    assert config.max_workers == 6
    assert config.fetch_timeout_seconds == 15.0
    assert config.fetch_max_retries == 0
    assert config.plugins == (
        BinaryMavenPlugin("grpc-java", "io.grpc", "protoc-gen-grpc-java", "1.60.0"),
        MavenPlugin(
            "reactor",
            "com.salesforce.servicelibs",
            "reactor-grpc",
            "1.2.4",
            extension="jar",
            resolution_depth=ResolutionDepth.TRANSITIVE,
        ),
        PathPlugin("custom", Path("bin/protoc-gen-custom")),
        SearchPathPlugin("doc", "protoc-gen-doc"),
    )
    assert config.compiler_descriptor().to_specification() == Coordinate(
        "com.google.protobuf", "protoc", "3.25.1", classifier="linux-aarch_64"
    )


def test_empty_yaml_defaults_to_compiler_search(tmp_path: Path) -> None:
    config_path = tmp_path / "empty.yml"
    config_path.write_text("", encoding="utf-8")

    config = ConfigLoader.from_yaml(config_path)

    assert config.plugins == ()
    assert config.remote_repositories == (MAVEN_CENTRAL_URL,)
    assert config.compiler_descriptor().to_specification() == PathSearch("protoc")


def test_yaml_protoc_path_maps_to_explicit_path(tmp_path: Path) -> None:
    config_path = tmp_path / "path.yml"
    config_path.write_text("protoc_path: /opt/protoc/bin/protoc\n", encoding="utf-8")

    config = ConfigLoader.from_yaml(config_path)

    assert config.compiler_descriptor().to_specification() == ExplicitPath(
        Path("/opt/protoc/bin/protoc")
    )


@pytest.mark.parametrize(
    ("payload", "message"),
    [
        ("unknown_key: 1\n", "unsupported key"),
        ("- protoc\n", "top-level mapping"),
        ("protoc_version: 3.25.1\nprotoc_path: /opt/protoc\n", "only one of"),
        ("max_workers: 0\n", "positive integer"),
        ("max_workers: true\n", "positive integer"),
        ("offline: maybe\n", "boolean value"),
        ("fetch_max_retries: -1\n", "zero or a positive integer"),
        ("fetch_timeout_seconds: fast\n", "positive number"),
        ("remote_repositories: ftp://old.example/repo\n", r"http\(s\) URL"),
        ("plugins: grpc\n", "must be a list"),
        ("plugins:\n  - grpc\n", "mapping/object"),
        ("plugins:\n  - group_id: io.grpc\n", "requires non-empty `name`"),
        ("plugins:\n  - name: a\n", "exactly one source"),
        (
            "plugins:\n  - name: a\n    path: /x\n    executable_name: x\n",
            "exactly one source",
        ),
        ("plugins:\n  - name: a\n    path: /x\n    binary: false\n", "repository-only"),
        ("plugins:\n  - name: a\n    group_id: g\n    version: 1\n", "`artifact_id`"),
        (
            "plugins:\n  - name: a\n    group_id: g\n    artifact_id: a\n    version: 1\n"
            "    resolution_depth: direct\n",
            "single binary",
        ),
        (
            "plugins:\n  - name: a\n    group_id: g\n    artifact_id: a\n    version: 1\n"
            "    binary: false\n    resolution_depth: deep\n",
            "must be one of",
        ),
        (
            "plugins:\n  - name: a\n    executable_name: x\n  - name: a\n    executable_name: y\n",
            "declared more than once",
        ),
        ("plugins:\n  - name: a\n    executable_name: x\n    colour: red\n", "unsupported key"),
    ],
)
def test_config_loader_from_yaml_rejects_invalid_payloads(
    tmp_path: Path, payload: str, message: str
) -> None:
    """Invalid YAML payloads should fail fast with `ValueError` diagnostics."""

    config_path = tmp_path / "invalid.yml"
    config_path.write_text(payload, encoding="utf-8")

    with pytest.raises(ValueError, match=message):
        ConfigLoader.from_yaml(config_path)


def test_config_loader_rejects_malformed_yaml(tmp_path: Path) -> None:
    config_path = tmp_path / "broken.yml"
    config_path.write_text("plugins: [\n", encoding="utf-8")

    with pytest.raises(ValueError, match="not valid YAML"):
        ConfigLoader.from_yaml(config_path)


def test_config_loader_from_env_reads_prefixed_variables() -> None:
    """Environment loader should map `PROTOLOCATE_*` variables onto settings."""

    config = ConfigLoader.from_env(
        {
            "PROTOLOCATE_PROTOC_VERSION": "3.21.12",
            "PROTOLOCATE_CLASSIFIER": "osx-x86_64",
            "PROTOLOCATE_LOCAL_REPOSITORY": "/var/cache/m2",
            "PROTOLOCATE_REMOTE_REPOSITORIES": "https://a.example, https://b.example,",
            "PROTOLOCATE_OFFLINE": "true",
            "PROTOLOCATE_MAX_WORKERS": "2",
        }
    )

    assert config.protoc_version == "3.21.12"
    assert config.protoc_classifier == "osx-x86_64"
    assert config.local_repository == Path("/var/cache/m2")
    assert config.remote_repositories == ("https://a.example", "https://b.example")
    assert config.offline is True
    assert config.max_workers == 2


def test_config_loader_from_env_defaults_when_unset() -> None:
    config = ConfigLoader.from_env({})

    assert config == LocatorConfig()


@pytest.mark.parametrize(
    ("env", "message"),
    [
        ({"PROTOLOCATE_MAX_WORKERS": "zero"}, "PROTOLOCATE_MAX_WORKERS"),
        ({"PROTOLOCATE_MAX_WORKERS": "-3"}, "PROTOLOCATE_MAX_WORKERS"),
        ({"PROTOLOCATE_OFFLINE": "sometimes"}, "PROTOLOCATE_OFFLINE"),
        (
            {"PROTOLOCATE_PROTOC_VERSION": "3.25.1", "PROTOLOCATE_PROTOC_PATH": "/opt/protoc"},
            "only one of",
        ),
    ],
)
def test_config_loader_from_env_rejects_invalid_values(
    env: dict[str, str], message: str
) -> None:
    with pytest.raises(ValueError, match=message):
        ConfigLoader.from_env(env)


def test_build_fetch_service_applies_repository_settings(tmp_path: Path) -> None:
    config = LocatorConfig(
        local_repository=tmp_path / "m2",
        remote_repositories=("https://mirror.example",),
        offline=True,
        fetch_timeout_seconds=5.0,
        fetch_max_retries=4,
    )

    service = config.build_fetch_service()

    assert service.local_repository == tmp_path / "m2"
    assert service.remote_repositories == ("https://mirror.example",)
    assert service.offline is True
    assert service.timeout_seconds == 5.0
    assert service.max_retries == 4
