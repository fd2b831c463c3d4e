"""
Key canonicalization for the generation result cache.

This module turns request-shaped values into deterministic cache keys.
Requests that differ only in field order or in the order of list-valued
fields serialize identically and therefore hash to the same key.
"""

import json
from typing import Any, Mapping, Optional


_BASE36_DIGITS = '0123456789abcdefghijklmnopqrstuvwxyz'

_FNV64_OFFSET_BASIS = 0xcbf29ce484222325
_FNV64_PRIME = 0x100000001b3
_MASK_64 = 0xFFFFFFFFFFFFFFFF


def _to_base36(value: int) -> str:
    """Render a non-negative integer in base 36."""
    if value == 0:
        return '0'

    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36_DIGITS[remainder])
    return ''.join(reversed(digits))


def _sort_key(item: Any) -> str:
    return json.dumps(item, sort_keys=True, default=str)


def project_request(request: Any) -> Mapping[str, Any]:
    """
    Project a request into a plain record.

    Objects exposing key_fields() (DesignSystemRequest) are projected
    through it; mappings are used as-is.

    Args:
        request: DesignSystemRequest or mapping

    Returns:
        Mapping of field name to value

    Raises:
        TypeError: If the request is neither
    """
    if hasattr(request, 'key_fields'):
        return request.key_fields()

    if isinstance(request, Mapping):
        return request

    raise TypeError(
        f"Cannot canonicalize request of type {type(request).__name__}"
    )


def canonicalize(request: Any) -> str:
    """
    Serialize a request canonically.

    Canonicalization steps:
    1. Project the request into a plain record
    2. Drop absent (None) fields
    3. Sort every list-valued field
    4. Serialize as compact JSON with object keys sorted

    Args:
        request: DesignSystemRequest or mapping

    Returns:
        Canonical JSON string

    Examples:
        >>> canonicalize({'style': 'bold', 'components': ['Input', 'Button']})
        '{"components":["Button","Input"],"style":"bold"}'

        >>> canonicalize({'components': ['Button', 'Input'], 'style': 'bold'})
        '{"components":["Button","Input"],"style":"bold"}'
    """
    record = {}
    for name, value in project_request(request).items():
        if value is None:
            continue
        if isinstance(value, (list, tuple, set, frozenset)):
            value = sorted(value, key=_sort_key)
        record[name] = value

    return json.dumps(
        record,
        sort_keys=True,
        separators=(',', ':'),
        ensure_ascii=False,
        default=str
    )


def rolling_hash(text: str) -> str:
    """
    Order-sensitive 32-bit rolling hash rendered in base 36.

    Computes h = h * 31 + code for each UTF-16 code unit, wrapping to a
    signed 32-bit integer, and renders the absolute value.

    Args:
        text: Input text

    Returns:
        Non-negative base-36 string
    """
    value = 0
    for unit in _utf16_units(text):
        value = ((value << 5) - value + unit) & 0xFFFFFFFF

    if value & 0x80000000:
        value -= 0x100000000

    return _to_base36(abs(value))


def fnv1a_hash(text: str) -> str:
    """
    64-bit FNV-1a hash of the UTF-8 encoding, rendered in base 36.

    Args:
        text: Input text

    Returns:
        Non-negative base-36 string
    """
    value = _FNV64_OFFSET_BASIS
    for byte in text.encode('utf-8'):
        value ^= byte
        value = (value * _FNV64_PRIME) & _MASK_64
    return _to_base36(value)


def _utf16_units(text: str):
    # Astral characters contribute two UTF-16 code units (a surrogate pair)
    encoded = text.encode('utf-16-le')
    for index in range(0, len(encoded), 2):
        yield encoded[index] | (encoded[index + 1] << 8)


_HASHERS = {
    'fnv1a': fnv1a_hash,
    'rolling': rolling_hash,
}


def hash_text(text: str, algorithm: str = 'fnv1a') -> str:
    """
    Hash canonical text with the named algorithm.

    Args:
        text: Canonical serialization
        algorithm: 'fnv1a' (default) or 'rolling'

    Returns:
        Base-36 hash string

    Raises:
        ValueError: If the algorithm is unknown
    """
    try:
        hasher = _HASHERS[algorithm]
    except KeyError:
        raise ValueError(
            f"Unknown hash algorithm {algorithm!r}, expected one of {tuple(_HASHERS)}"
        ) from None
    return hasher(text)


def request_key(request: Any, algorithm: str = 'fnv1a') -> str:
    """
    Generate the cache key for a design-system request.

    Args:
        request: DesignSystemRequest or mapping
        algorithm: Hash algorithm name

    Returns:
        Short deterministic key
    """
    return hash_text(canonicalize(request), algorithm)


def component_key(
    component_name: str,
    design_system_hash: str,
    variant: Optional[str] = None,
    size: Optional[str] = None
) -> str:
    """
    Generate the cache key for a component.

    Format: {name}-{design_system_hash}-{variant}-{size}, with variant
    defaulting to 'default' and size to 'md'.
    """
    return f"{component_name}-{design_system_hash}-{variant or 'default'}-{size or 'md'}"
