"""
Bounded expiring store.

This module provides the in-memory store backing both the design-system
cache and the component cache: entries expire after a TTL, and inserting
into a full store evicts the least recently accessed entry first.
"""

import json
import logging
import math
import time
from collections import OrderedDict
from typing import Any, Callable, Dict, Optional, Type

from generation_core.models import CacheEntry

logger = logging.getLogger(__name__)


def format_bytes(size: int) -> str:
    """
    Render a byte count for humans.

    Examples:
        >>> format_bytes(512)
        '512 B'
        >>> format_bytes(12636)
        '12.34 KB'
    """
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.2f} KB"
    return f"{size / (1024 * 1024):.2f} MB"


def estimate_size(data: Any) -> int:
    """
    Estimate the footprint of a payload as its serialized size in bytes.

    Payloads that cannot be serialized fall back to their repr.
    """
    try:
        serialized = json.dumps(data, default=str)
    except (TypeError, ValueError):
        serialized = repr(data)
    return len(serialized.encode('utf-8'))


class ExpiringStore:
    """
    In-memory key/value store with TTL expiry and LRU eviction.

    Reads sweep expired entries opportunistically and never return an
    expired entry. Hit, miss and eviction counters are monotonic for the
    lifetime of the store.

    Attributes:
        name: Store name used in logs and statistics
        capacity: Maximum number of entries
        default_ttl_seconds: TTL used when a put gives none
        max_ttl_seconds: Upper bound applied to every TTL
    """

    def __init__(
        self,
        name: str,
        capacity: int,
        default_ttl_seconds: float,
        max_ttl_seconds: float,
        clock: Callable[[], float] = time.time,
        entry_type: Type[CacheEntry] = CacheEntry
    ):
        """
        Initialize expiring store.

        Args:
            name: Store name
            capacity: Maximum number of entries
            default_ttl_seconds: Default time-to-live in seconds
            max_ttl_seconds: Maximum time-to-live in seconds
            clock: Time source returning Unix seconds (default: time.time)
            entry_type: CacheEntry subclass created by put()
        """
        self.name = name
        self.capacity = capacity
        self.default_ttl_seconds = default_ttl_seconds
        self.max_ttl_seconds = max_ttl_seconds
        self._clock = clock
        self._entry_type = entry_type

        # Ordered by recency of access; first item is least recently used
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()

        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def get(self, key: str) -> Optional[Any]:
        """
        Get cached data.

        Args:
            key: Cache key

        Returns:
            Cached data, or None if absent or expired
        """
        entry = self.get_entry(key)
        return entry.data if entry is not None else None

    def get_entry(
        self,
        key: str,
        accept: Optional[Callable[[CacheEntry], bool]] = None
    ) -> Optional[CacheEntry]:
        """
        Get a live entry and record the access.

        Args:
            key: Cache key
            accept: Optional check on the stored entry; a rejected entry
                counts as a miss and is left untouched

        Returns:
            The entry, or None on miss
        """
        now = self._clock()
        self._sweep(now, keep=key)

        entry = self._entries.get(key)
        if entry is None:
            self._misses += 1
            return None

        if entry.is_expired(now):
            del self._entries[key]
            self._misses += 1
            logger.debug(f"Removed expired entry from {self.name}: {key}")
            return None

        if accept is not None and not accept(entry):
            self._misses += 1
            return None

        entry.touch(now)
        self._entries.move_to_end(key)
        self._hits += 1
        return entry

    def contains(self, key: str) -> bool:
        """Check for a live entry without recording an access."""
        entry = self._entries.get(key)
        return entry is not None and not entry.is_expired(self._clock())

    def put(
        self,
        key: str,
        data: Any,
        ttl_seconds: Optional[float] = None,
        **entry_fields: Any
    ) -> CacheEntry:
        """
        Store data under a key.

        Expired entries are swept first; if the key is new and the store
        is full, least recently accessed entries are evicted until there
        is room. Overwriting an existing key never evicts.

        Args:
            key: Cache key
            data: Payload to store
            ttl_seconds: Time-to-live (default: default_ttl_seconds)
            **entry_fields: Extra fields for the entry type

        Returns:
            The stored entry
        """
        now = self._clock()
        self._sweep(now)

        if key in self._entries:
            del self._entries[key]
        else:
            while self._entries and len(self._entries) >= self.capacity:
                self._evict_one()

        entry = self._entry_type(
            data=data,
            created_at=now,
            expires_at=now + self.resolve_ttl(ttl_seconds),
            access_count=1,
            last_accessed_at=now,
            **entry_fields
        )
        self._entries[key] = entry

        logger.debug(
            f"Stored entry in {self.name} (size: {len(self._entries)}/{self.capacity})",
            extra={'store': self.name, 'cache_key': key}
        )
        return entry

    def delete(self, key: str) -> bool:
        """Remove an entry; returns True if one was present."""
        return self._entries.pop(key, None) is not None

    def resolve_ttl(self, ttl_seconds: Optional[float]) -> float:
        """
        Resolve the effective TTL for a put.

        None, a non-finite or a non-positive value selects the default TTL;
        values above the maximum are clamped to it.
        """
        if ttl_seconds is None or not math.isfinite(ttl_seconds) or ttl_seconds <= 0:
            ttl_seconds = self.default_ttl_seconds
        return min(ttl_seconds, self.max_ttl_seconds)

    def cleanup_expired(self) -> int:
        """
        Remove expired entries.

        Returns:
            Number of entries removed
        """
        return self._sweep(self._clock())

    def clear(self) -> None:
        """Remove all entries. Counters are kept."""
        self._entries.clear()

    def stats(self) -> Dict[str, Any]:
        """
        Get store statistics.

        occupancy_ratio is stored size over capacity; hit_rate is hits
        over lookups since the store was created.

        Returns:
            Dictionary of entry counts, access counts and counters
        """
        now = self._clock()
        valid = 0
        expired = 0
        total_access_count = 0

        for entry in self._entries.values():
            if entry.is_expired(now):
                expired += 1
            else:
                valid += 1
                total_access_count += entry.access_count

        lookups = self._hits + self._misses

        return {
            'total': len(self._entries),
            'valid': valid,
            'expired': expired,
            'total_access_count': total_access_count,
            'average_access_count': total_access_count / valid if valid else 0.0,
            'occupancy_ratio': min(len(self._entries) / self.capacity, 1.0),
            'hits': self._hits,
            'misses': self._misses,
            'hit_rate': self._hits / lookups if lookups else 0.0,
            'evictions': self._evictions,
        }

    def estimated_bytes(self) -> int:
        """Sum of the serialized sizes of all stored payloads."""
        return sum(estimate_size(entry.data) for entry in self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def _sweep(self, now: float, keep: Optional[str] = None) -> int:
        """Remove expired entries other than keep; returns the count removed."""
        expired_keys = [
            key for key, entry in self._entries.items()
            if key != keep and entry.is_expired(now)
        ]

        for key in expired_keys:
            del self._entries[key]

        if expired_keys:
            logger.debug(f"Cleaned up {len(expired_keys)} expired entries from {self.name}")

        return len(expired_keys)

    def _evict_one(self) -> None:
        # Ties on last_accessed_at resolve to the earliest in access order
        oldest_key = min(
            self._entries,
            key=lambda k: self._entries[k].last_accessed_at
        )
        del self._entries[oldest_key]
        self._evictions += 1

        logger.debug(
            f"Evicted least recently used entry from {self.name}",
            extra={'store': self.name, 'cache_key': oldest_key}
        )
