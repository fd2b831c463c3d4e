"""
Design system and component result cache.

This module provides the cache consulted before every generation call.
Generated design systems are keyed by their canonicalized request and
generated components by (name, design system hash, variant, size); each
kind lives in its own bounded expiring store.
"""

import dataclasses
import logging
import time
from typing import Any, Callable, Dict, Iterable, List, Optional

from generation_core.exceptions import ConfigurationError
from generation_core.models import (
    CacheConfig,
    ComponentCacheEntry,
    DesignSystemCacheEntry
)
from generation_core.services.expiring_store import ExpiringStore, format_bytes
from generation_core.utils.key_canonicalizer import (
    canonicalize,
    component_key,
    hash_text
)
from generation_core.utils.metrics_emitter import MetricsEmitter

logger = logging.getLogger(__name__)

DESIGN_SYSTEM_STORE = 'design_systems'
COMPONENT_STORE = 'components'


class DesignSystemCache:
    """
    Two-store cache for generated design systems and components.

    Cache failures never propagate: a request that cannot be keyed is
    logged and treated as a miss (or a skipped write).

    Design-system entries remember the canonical form of the request they
    were stored for. A read whose canonical form differs from the stored
    one is a hash collision and is reported as a miss.
    """

    def __init__(
        self,
        config: Optional[CacheConfig] = None,
        clock: Callable[[], float] = time.time,
        metrics: Optional[MetricsEmitter] = None
    ):
        """
        Initialize design system cache.

        Args:
            config: Cache configuration (default: CacheConfig())
            clock: Time source returning Unix seconds (default: time.time)
            metrics: Optional metrics emitter used by emit_metrics()
        """
        self.config = config or CacheConfig()
        self.metrics = metrics

        self._design_systems = ExpiringStore(
            DESIGN_SYSTEM_STORE,
            capacity=self.config.capacity_design_systems,
            default_ttl_seconds=self.config.default_ttl_seconds,
            max_ttl_seconds=self.config.max_ttl_seconds,
            clock=clock,
            entry_type=DesignSystemCacheEntry
        )
        self._components = ExpiringStore(
            COMPONENT_STORE,
            capacity=self.config.capacity_components,
            default_ttl_seconds=self.config.default_ttl_seconds,
            max_ttl_seconds=self.config.max_ttl_seconds,
            clock=clock,
            entry_type=ComponentCacheEntry
        )

        logger.info(
            f"Initialized DesignSystemCache with capacities "
            f"{self.config.capacity_design_systems}/{self.config.capacity_components}, "
            f"default TTL {self.config.default_ttl_seconds}s"
        )

    def request_hash(self, request: Any) -> str:
        """
        Compute the design system hash for a request.

        Raises:
            TypeError: If the request is neither a DesignSystemRequest nor a mapping
        """
        return hash_text(canonicalize(request), self.config.key_hash)

    def get_design_system(self, request: Any) -> Optional[Any]:
        """
        Look up a generated design system.

        Args:
            request: DesignSystemRequest or mapping

        Returns:
            Cached design system, or None on miss
        """
        canonical = self._canonical_form(request)
        if canonical is None:
            return None

        key = hash_text(canonical, self.config.key_hash)

        def same_request(entry: DesignSystemCacheEntry) -> bool:
            if entry.canonical_form == canonical:
                return True
            logger.warning(
                "Cache key collision detected; treating as miss",
                extra={'cache_key': key, 'store': DESIGN_SYSTEM_STORE}
            )
            return False

        entry = self._design_systems.get_entry(key, accept=same_request)

        if entry is None:
            logger.debug("Design system cache miss", extra={'cache_key': key})
            return None

        logger.info(
            "Design system cache hit",
            extra={'cache_key': key, 'access_count': entry.access_count}
        )
        return entry.data

    def cache_design_system(
        self,
        request: Any,
        design_system: Any,
        ttl_seconds: Optional[float] = None
    ) -> Optional[str]:
        """
        Store a generated design system.

        Args:
            request: DesignSystemRequest or mapping it was generated from
            design_system: Generated design system
            ttl_seconds: Time-to-live (default: configured default TTL)

        Returns:
            Cache key, or None if the request could not be keyed
        """
        canonical = self._canonical_form(request)
        if canonical is None:
            return None

        key = hash_text(canonical, self.config.key_hash)
        self._design_systems.put(
            key,
            design_system,
            ttl_seconds,
            request_hash=key,
            canonical_form=canonical
        )

        logger.info(
            "Cached design system",
            extra={'cache_key': key, 'ttl_seconds': self._design_systems.resolve_ttl(ttl_seconds)}
        )
        return key

    def get_component(
        self,
        component_name: str,
        design_system_hash: str,
        variant: Optional[str] = None,
        size: Optional[str] = None
    ) -> Optional[Any]:
        """
        Look up a generated component.

        Returns:
            Cached component, or None on miss
        """
        key = component_key(component_name, design_system_hash, variant, size)
        component = self._components.get(key)

        if component is None:
            logger.debug("Component cache miss", extra={'cache_key': key})
        else:
            logger.debug("Component cache hit", extra={'cache_key': key})

        return component

    def cache_component(
        self,
        component_name: str,
        design_system_hash: str,
        component: Any,
        variant: Optional[str] = None,
        size: Optional[str] = None,
        ttl_seconds: Optional[float] = None
    ) -> str:
        """
        Store a generated component.

        Args:
            component_name: Component name (e.g. 'Button')
            design_system_hash: Hash of the owning design system
            component: Generated component
            variant: Component variant (default: 'default')
            size: Component size (default: 'md')
            ttl_seconds: Time-to-live (default: configured default TTL)

        Returns:
            Cache key
        """
        key = component_key(component_name, design_system_hash, variant, size)
        self._components.put(
            key,
            component,
            ttl_seconds,
            component_name=component_name,
            design_system_hash=design_system_hash,
            variant=variant or 'default',
            size=size or 'md'
        )

        logger.debug("Cached component", extra={'cache_key': key})
        return key

    def missing_components(
        self,
        component_names: Iterable[str],
        design_system_hash: str,
        variant: Optional[str] = None,
        size: Optional[str] = None
    ) -> List[str]:
        """
        Report which components of a design system are not cached.

        Does not count as an access for hit statistics or recency.

        Returns:
            Names without a live cache entry, in input order
        """
        return [
            name for name in component_names
            if not self._components.contains(
                component_key(name, design_system_hash, variant, size)
            )
        ]

    def clear_expired(self) -> int:
        """
        Remove expired entries from both stores.

        Returns:
            Number of entries removed
        """
        removed = self._design_systems.cleanup_expired() + self._components.cleanup_expired()

        if removed:
            logger.info(f"Cleared {removed} expired cache entries")

        return removed

    def clear(self) -> None:
        """Remove every entry from both stores."""
        self._design_systems.clear()
        self._components.clear()
        logger.info("Cleared design system cache")

    def configure(
        self,
        capacity_design_systems: Optional[int] = None,
        capacity_components: Optional[int] = None,
        default_ttl_seconds: Optional[float] = None,
        max_ttl_seconds: Optional[float] = None
    ) -> None:
        """
        Adjust capacities and TTLs at runtime.

        Lowering a capacity does not evict until the next put into that
        store. TTL changes apply to subsequent puts only. A change that
        would leave the configuration invalid is logged and ignored as a
        whole; the current configuration stays in effect.
        """
        changes = {
            name: value for name, value in (
                ('capacity_design_systems', capacity_design_systems),
                ('capacity_components', capacity_components),
                ('default_ttl_seconds', default_ttl_seconds),
                ('max_ttl_seconds', max_ttl_seconds),
            )
            if value is not None
        }
        try:
            self.config = dataclasses.replace(self.config, **changes)
        except ConfigurationError as e:
            # Log error but don't fail the caller
            logger.warning(
                f"Ignoring invalid cache configuration: {e}",
                extra={'changes': changes}
            )
            return

        for store, capacity in (
            (self._design_systems, self.config.capacity_design_systems),
            (self._components, self.config.capacity_components),
        ):
            store.capacity = capacity
            store.default_ttl_seconds = self.config.default_ttl_seconds
            store.max_ttl_seconds = self.config.max_ttl_seconds

        logger.info("Reconfigured design system cache", extra={'changes': changes})

    def get_stats(self) -> Dict[str, Any]:
        """
        Get cache statistics.

        Returns:
            Per-store statistics and an estimated memory footprint

        Example:
            >>> cache.get_stats()['memory']
            {
                'estimated_size': '12.34 KB',
                'estimated_bytes': 12636,
                'max_design_systems': 50,
                'max_components': 200
            }
        """
        estimated_bytes = (
            self._design_systems.estimated_bytes() + self._components.estimated_bytes()
        )

        return {
            DESIGN_SYSTEM_STORE: self._design_systems.stats(),
            COMPONENT_STORE: self._components.stats(),
            'memory': {
                'estimated_size': format_bytes(estimated_bytes),
                'estimated_bytes': estimated_bytes,
                'max_design_systems': self.config.capacity_design_systems,
                'max_components': self.config.capacity_components,
            }
        }

    def emit_metrics(self) -> None:
        """Publish per-store statistics through the metrics emitter, if any."""
        if self.metrics is None:
            return

        stats = self.get_stats()
        self.metrics.emit_cache_stats(DESIGN_SYSTEM_STORE, stats[DESIGN_SYSTEM_STORE])
        self.metrics.emit_cache_stats(COMPONENT_STORE, stats[COMPONENT_STORE])
        self.metrics.flush()

    def _canonical_form(self, request: Any) -> Optional[str]:
        try:
            return canonicalize(request)
        except (TypeError, ValueError) as e:
            # Log error but don't fail the caller
            logger.warning(f"Cannot derive cache key for request: {e}")
            return None
