"""Unit tests for compiler and plugin descriptors."""

from __future__ import annotations

from dataclasses import FrozenInstanceError
from pathlib import Path

import pytest

from protolocate.descriptors import (
    BinaryMavenPlugin,
    CompilerDescriptor,
    MavenPlugin,
    PathPlugin,
    SearchPathPlugin,
)
from protolocate.models.datatypes import Coordinate, ExplicitPath, PathSearch, ResolutionDepth


def test_compiler_version_maps_to_protoc_coordinate() -> None:
    descriptor = CompilerDescriptor.from_version(" 3.25.1 ")

    assert descriptor.to_specification() == Coordinate(
        group_id="com.google.protobuf",
        artifact_id="protoc",
        version="3.25.1",
    )
    assert descriptor.resolution_depth is None


@pytest.mark.parametrize("token", ["PATH", "path", " Path "])
def test_compiler_path_version_token_means_search(token: str) -> None:
    """The `PATH` version token should switch to a search for `protoc`."""

    assert CompilerDescriptor.from_version(token).to_specification() == PathSearch("protoc")


def test_compiler_blank_version_is_rejected() -> None:
    with pytest.raises(ValueError, match="protoc_version"):
        CompilerDescriptor.from_version("  ")


def test_compiler_explicit_path_and_search() -> None:
    assert CompilerDescriptor.from_path("/opt/protoc").to_specification() == ExplicitPath(
        Path("/opt/protoc")
    )
    assert CompilerDescriptor.from_search().to_specification() == PathSearch("protoc")


def test_binary_plugin_depth_is_fixed_to_none() -> None:
    """Single-binary plugins always resolve with no dependency depth."""

    plugin = BinaryMavenPlugin(
        name="grpc-java",
        group_id="io.grpc",
        artifact_id="protoc-gen-grpc-java",
        version="1.60.0",
    )

    specification = plugin.to_specification()

    assert plugin.resolution_depth is None
    assert isinstance(specification, Coordinate)
    assert specification.resolution_depth is None
    with pytest.raises((FrozenInstanceError, AttributeError, TypeError)):
        plugin.resolution_depth = ResolutionDepth.TRANSITIVE  # type: ignore[misc]


def test_library_plugin_depth_is_caller_settable() -> None:
    plugin = MavenPlugin(
        name="reactor",
        group_id="com.salesforce.servicelibs",
        artifact_id="reactor-grpc",
        version="1.2.4",
        extension="jar",
        resolution_depth=ResolutionDepth.TRANSITIVE,
    )

    specification = plugin.to_specification()

    assert specification.resolution_depth is ResolutionDepth.TRANSITIVE
    assert specification.extension == "jar"


def test_path_and_search_plugins_produce_matching_specifications() -> None:
    assert PathPlugin("custom", Path("bin/protoc-gen-custom")).to_specification() == (
        ExplicitPath(Path("bin/protoc-gen-custom"))
    )
    search = SearchPathPlugin("doc", "protoc-gen-doc")
    assert search.to_specification() == PathSearch("protoc-gen-doc")
    assert search.resolution_depth is None
