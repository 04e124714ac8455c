"""Unit tests for the run-scoped single-flight resolution cache."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
import threading
import time

import pytest

from protolocate.models.datatypes import (
    CoordinateKey,
    ResolutionStrategy,
    ResolvedExecutable,
)
from protolocate.resolve.cache import ResolutionCache


def _key(version: str = "3.25.1") -> CoordinateKey:
    return CoordinateKey(
        group_id="com.google.protobuf",
        artifact_id="protoc",
        version=version,
        classifier="linux-x86_64",
        extension="exe",
    )


def _resolved(path: str = "/repo/protoc.exe") -> ResolvedExecutable:
    return ResolvedExecutable(path=Path(path), source_strategy=ResolutionStrategy.COORDINATE)


def test_first_lookup_resolves_and_second_is_a_hit() -> None:
    """A committed entry should be returned as a hit without calling the resolver."""

    cache = ResolutionCache()
    calls: list[int] = []

    def _resolver() -> ResolvedExecutable:
        calls.append(1)
        return _resolved()

    first = cache.get_or_resolve(_key(), _resolver)
    second = cache.get_or_resolve(_key(), _resolver)

    assert len(calls) == 1
    assert first.cache_hit is False
    assert second.cache_hit is True
    assert second.path == first.path
    assert cache.hits == 1
    assert cache.misses == 1
    assert cache.hit_rate() == pytest.approx(0.5)
    assert len(cache) == 1


def test_failing_resolver_commits_nothing() -> None:
    """A failed resolution should leave no entry so a later call retries."""

    cache = ResolutionCache()

    def _failing() -> ResolvedExecutable:
        raise RuntimeError("network down")

    with pytest.raises(RuntimeError, match="network down"):
        cache.get_or_resolve(_key(), _failing)

    assert cache.get(_key()) is None
    assert len(cache) == 0
    assert cache.get_or_resolve(_key(), _resolved).cache_hit is False


def test_distinct_keys_are_cached_independently() -> None:
    """Different versions should never share entries."""

    cache = ResolutionCache()

    cache.get_or_resolve(_key("3.25.1"), lambda: _resolved("/repo/a"))
    other = cache.get_or_resolve(_key("3.21.0"), lambda: _resolved("/repo/b"))

    assert other.path == Path("/repo/b")
    assert other.cache_hit is False
    assert len(cache) == 2


def test_concurrent_lookups_of_one_key_resolve_once() -> None:
    """Concurrent callers for one key should wait for a single resolution."""

    cache = ResolutionCache()
    calls: list[int] = []
    calls_lock = threading.Lock()

    def _slow_resolver() -> ResolvedExecutable:
        with calls_lock:
            calls.append(1)
        time.sleep(0.05)
        return _resolved()

    with ThreadPoolExecutor(max_workers=8) as executor:
        results = list(
            executor.map(lambda _: cache.get_or_resolve(_key(), _slow_resolver), range(8))
        )

    assert len(calls) == 1
    assert {result.path for result in results} == {Path("/repo/protoc.exe")}
    assert sorted(result.cache_hit for result in results) == [False] + [True] * 7


def test_hit_rate_is_zero_before_any_lookup() -> None:
    assert ResolutionCache().hit_rate() == 0.0
