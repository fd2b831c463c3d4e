"""
Cache entry data models for the generation result cache.

This module defines the dataclasses stored by the design-system and
component stores. Entries are owned by the store that created them and
are only mutated by reads (access bookkeeping).
"""

import time
from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class CacheEntry:
    """
    Entry in an expiring store.

    Attributes:
        data: Cached payload
        created_at: Unix timestamp when entry was stored
        expires_at: Unix timestamp after which the entry is absent
        access_count: Number of reads plus the initial write
        last_accessed_at: Unix timestamp of the most recent read or write
    """

    data: Any
    created_at: float
    expires_at: float
    access_count: int = 1
    last_accessed_at: Optional[float] = None

    def __post_init__(self):
        """Validate field constraints."""
        if self.expires_at < self.created_at:
            raise ValueError(
                f"expires_at ({self.expires_at}) must not precede "
                f"created_at ({self.created_at})"
            )

        if self.access_count < 0:
            raise ValueError(
                f"access_count must be non-negative, got {self.access_count}"
            )

        if self.last_accessed_at is None:
            self.last_accessed_at = self.created_at

    def is_expired(self, now: Optional[float] = None) -> bool:
        """
        Check if entry has expired.

        Args:
            now: Current timestamp (default: time.time())

        Returns:
            True once the current time reaches expires_at
        """
        if now is None:
            now = time.time()
        return now >= self.expires_at

    def touch(self, now: float) -> None:
        """Record a read at the given timestamp."""
        self.access_count += 1
        self.last_accessed_at = now


@dataclass
class DesignSystemCacheEntry(CacheEntry):
    """
    Cached design system.

    Attributes:
        request_hash: Key the entry was stored under
        canonical_form: Canonical serialization of the originating request
    """

    request_hash: str = ''
    canonical_form: str = ''


@dataclass
class ComponentCacheEntry(CacheEntry):
    """
    Cached generated component.

    Attributes:
        component_name: Component name (e.g. 'Button')
        design_system_hash: Hash of the owning design system
        variant: Component variant
        size: Component size
    """

    component_name: str = ''
    design_system_hash: str = ''
    variant: str = 'default'
    size: str = 'md'
