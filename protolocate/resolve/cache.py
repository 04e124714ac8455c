"""Run-scoped resolution cache for repository-fetched executables.

Responsibilities:
- Memoize coordinate resolutions so each coordinate is fetched at most once per run.
- Serialize concurrent resolutions of the same key without blocking unrelated keys.
- Track basic cache telemetry (hits/misses).
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
import threading
from typing import Callable

from ..models.datatypes import CoordinateKey, ResolvedExecutable


@dataclass(slots=True)
class ResolutionCache:
    """Single-flight coordinate cache bound to one build invocation.

    Entries are committed only after the resolver callback returns, and are
    never evicted or replaced afterwards.
    """

    entries: dict[CoordinateKey, ResolvedExecutable] = field(default_factory=dict)
    hits: int = 0
    misses: int = 0
    _registry_lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    _key_locks: dict[CoordinateKey, threading.Lock] = field(default_factory=dict, repr=False)

    def get(self, key: CoordinateKey) -> ResolvedExecutable | None:
        """Return the committed entry for `key` without touching counters."""

        with self._registry_lock:
            return self.entries.get(key)

    def get_or_resolve(
        self,
        key: CoordinateKey,
        resolver: Callable[[], ResolvedExecutable],
    ) -> ResolvedExecutable:
        """Return the cached entry for `key`, or run `resolver` once and commit it.

        Concurrent callers for the same key wait for the first one; a failing
        resolver commits nothing, so a later caller retries from scratch.
        """

        with self._lock_for(key):
            with self._registry_lock:
                cached = self.entries.get(key)
                if cached is not None:
                    self.hits += 1
                    return replace(cached, cache_hit=True)
                self.misses += 1

            resolved = replace(resolver(), cache_hit=False)
            with self._registry_lock:
                self.entries[key] = resolved
            return resolved

    def hit_rate(self) -> float:
        """Return cache hit rate for the current run."""

        total = self.hits + self.misses
        if total == 0:
            return 0.0
        return self.hits / float(total)

    def __len__(self) -> int:
        with self._registry_lock:
            return len(self.entries)

    def _lock_for(self, key: CoordinateKey) -> threading.Lock:
        """Return the per-key lock, creating it on first use."""

        with self._registry_lock:
            lock = self._key_locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._key_locks[key] = lock
            return lock
