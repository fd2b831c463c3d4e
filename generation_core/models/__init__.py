"""
Data models for design system generation caching and retry.

This module provides dataclasses for cache entries, generation requests,
configuration, and the classified generation failure.
"""

from .cache import CacheEntry, DesignSystemCacheEntry, ComponentCacheEntry
from .configuration import CacheConfig, RetryConfig
from .generation_request import DesignSystemRequest, ComponentIdentity
from .generation_error import GenerationError

__all__ = [
    'CacheEntry',
    'DesignSystemCacheEntry',
    'ComponentCacheEntry',
    'CacheConfig',
    'RetryConfig',
    'DesignSystemRequest',
    'ComponentIdentity',
    'GenerationError'
]
