"""
Purpose: Path cache owned by a resolver instance.
What it does:
- Holds one entry per cache key with an explicit ResolutionState
  (UNRESOLVED -> RESOLVING -> RESOLVED | RESOLVE_FAILED)
- Evicts least-recently-used entries beyond `max_entries`, optionally expires
  entries older than `ttl_seconds`
- Never lets a second writer overwrite a RESOLVED entry (insert-if-absent)

Keys:
- ("pair", provider, origin, destination) for two-point resolutions
- ("unit", provider, unit_key) for multi-stop resolutions
"""

from __future__ import annotations

import threading
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Callable, Hashable, Optional

from .models import ResolutionState, ResolvedPath

CacheKey = Hashable


@dataclass(frozen=True)
class CacheEntry:
    state: ResolutionState
    path: Optional[ResolvedPath] = None
    error: Optional[str] = None
    updated_at: float = field(default=0.0, compare=False)


class PathCache:
    """
    Thread-safe, bounded key -> CacheEntry store.

    A lookup only counts as a hit when the entry is RESOLVED; RESOLVING and
    RESOLVE_FAILED entries are state, not cached results.
    """

    def __init__(
        self,
        max_entries: int = 2048,
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_entries <= 0:
            raise ValueError("max_entries must be > 0")
        self.max_entries = max_entries
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: "OrderedDict[CacheKey, CacheEntry]" = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _expired(self, entry: CacheEntry) -> bool:
        if self.ttl_seconds is None:
            return False
        return self._clock() - entry.updated_at > self.ttl_seconds

    def _put(self, key: CacheKey, entry: CacheEntry) -> None:
        # caller holds the lock
        self._entries[key] = entry
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)

    def entry(self, key: CacheKey) -> Optional[CacheEntry]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._expired(entry):
                del self._entries[key]
                return None
            self._entries.move_to_end(key)
            return entry

    def state(self, key: CacheKey) -> ResolutionState:
        entry = self.entry(key)
        return entry.state if entry else ResolutionState.UNRESOLVED

    def get(self, key: CacheKey) -> Optional[ResolvedPath]:
        """The cached path, only for RESOLVED entries."""
        entry = self.entry(key)
        if entry is None or entry.state != ResolutionState.RESOLVED:
            return None
        return entry.path

    def mark_resolving(self, key: CacheKey) -> None:
        with self._lock:
            current = self._entries.get(key)
            if current is not None and current.state == ResolutionState.RESOLVED and not self._expired(current):
                return
            self._put(key, CacheEntry(state=ResolutionState.RESOLVING, updated_at=self._clock()))

    def store(self, key: CacheKey, path: ResolvedPath) -> ResolvedPath:
        """
        Insert-if-absent for resolved paths.
        Returns whichever path ends up cached for the key.
        """
        with self._lock:
            current = self._entries.get(key)
            if current is not None and current.state == ResolutionState.RESOLVED and not self._expired(current):
                self._entries.move_to_end(key)
                return current.path
            self._put(
                key,
                CacheEntry(state=ResolutionState.RESOLVED, path=path, updated_at=self._clock()),
            )
            return path

    def mark_failed(self, key: CacheKey, error: str) -> None:
        with self._lock:
            current = self._entries.get(key)
            if current is not None and current.state == ResolutionState.RESOLVED:
                return
            self._put(
                key,
                CacheEntry(state=ResolutionState.RESOLVE_FAILED, error=error, updated_at=self._clock()),
            )

    def mark_unresolved(self, key: CacheKey) -> None:
        """Drops a RESOLVING marker, e.g. for units a cancelled batch never reached."""
        with self._lock:
            current = self._entries.get(key)
            if current is not None and current.state == ResolutionState.RESOLVING:
                del self._entries[key]

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
