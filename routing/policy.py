"""
Purpose: Central configuration for path resolution (single source of truth).
What it does:

Stores all tunable thresholds/caps:

CHUNK_SIZE = 5

FREE_CHUNK_DELAY_SECONDS = 1.0 (coarse client-side rate limiting)

CACHE_MAX_ENTRIES = 2048

Rule: No logic here, just parameters so you can tune without rewriting code.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ResolverPolicy:
    """
    Central configuration for the route path resolver.

    Notes:
    - A batch runs `chunk_size` resolutions at once and waits for the whole
      chunk before starting the next one.
    - The public OSRM server rate-limits aggressively, so the Free provider
      sleeps between chunks. Precision does not.
    """

    # --- Batching ---
    chunk_size: int = 5

    # --- Rate control (seconds between chunks) ---
    free_chunk_delay_seconds: float = 1.0
    precision_chunk_delay_seconds: float = 0.0

    # --- Cache bounds ---
    cache_max_entries: int = 2048
    # None keeps entries for the whole session
    cache_ttl_seconds: Optional[float] = None

    def validate(self) -> None:
        """
        Basic sanity checks.
        """
        if self.chunk_size <= 0:
            raise ValueError("chunk_size must be > 0")

        if self.free_chunk_delay_seconds < 0 or self.precision_chunk_delay_seconds < 0:
            raise ValueError("chunk delays must be >= 0")

        if self.cache_max_entries <= 0:
            raise ValueError("cache_max_entries must be > 0")

        if self.cache_ttl_seconds is not None and self.cache_ttl_seconds <= 0:
            raise ValueError("cache_ttl_seconds must be > 0 when set")


def default_resolver_policy() -> ResolverPolicy:
    """
    Convenience factory for the default policy.
    """
    p = ResolverPolicy()
    p.validate()
    return p
