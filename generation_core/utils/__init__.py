"""
Utility functions for generation caching and retry.

This module provides key canonicalization, error kind tables,
structured logging and metrics emission.
"""

from .error_codes import (
    ErrorKind,
    get_error_code,
    get_error_message,
    get_suggested_action,
    is_recoverable,
    is_retryable
)
from .key_canonicalizer import (
    canonicalize,
    component_key,
    fnv1a_hash,
    hash_text,
    request_key,
    rolling_hash
)
from .structured_logger import StructuredFormatter, configure_structured_logging
from .metrics_emitter import MetricsEmitter

__all__ = [
    'ErrorKind',
    'get_error_code',
    'get_error_message',
    'get_suggested_action',
    'is_recoverable',
    'is_retryable',
    'canonicalize',
    'component_key',
    'fnv1a_hash',
    'hash_text',
    'request_key',
    'rolling_hash',
    'StructuredFormatter',
    'configure_structured_logging',
    'MetricsEmitter'
]
