"""
Configuration data models for caching and retry behaviour.

These dataclasses carry the tunable parameters of the result cache and the
retry orchestrator. They validate themselves on construction so that an
invalid value is rejected where it is introduced rather than at first use.
"""

from dataclasses import dataclass

from generation_core.exceptions import ConfigurationError

KEY_HASH_ALGORITHMS = ('fnv1a', 'rolling')


@dataclass
class CacheConfig:
    """
    Configuration for the design-system and component stores.

    Attributes:
        capacity_design_systems: Maximum entries in the design-system store (default: 50)
        capacity_components: Maximum entries in the component store (default: 200)
        default_ttl_seconds: TTL applied when a put does not give one (default: 1800)
        max_ttl_seconds: Upper bound for any TTL (default: 86400)
        key_hash: Hash used for design-system keys, 'fnv1a' or 'rolling'
    """

    capacity_design_systems: int = 50
    capacity_components: int = 200
    default_ttl_seconds: float = 30 * 60
    max_ttl_seconds: float = 24 * 60 * 60
    key_hash: str = 'fnv1a'

    def validate(self) -> None:
        """
        Validate configuration parameters.

        Raises:
            ConfigurationError: If any parameter is outside its valid range
        """
        if self.capacity_design_systems < 1:
            raise ConfigurationError(
                f"capacity_design_systems must be at least 1, "
                f"got {self.capacity_design_systems}"
            )

        if self.capacity_components < 1:
            raise ConfigurationError(
                f"capacity_components must be at least 1, "
                f"got {self.capacity_components}"
            )

        if self.default_ttl_seconds <= 0:
            raise ConfigurationError(
                f"default_ttl_seconds must be positive, "
                f"got {self.default_ttl_seconds}"
            )

        if self.max_ttl_seconds < self.default_ttl_seconds:
            raise ConfigurationError(
                f"max_ttl_seconds ({self.max_ttl_seconds}) must not be below "
                f"default_ttl_seconds ({self.default_ttl_seconds})"
            )

        if self.key_hash not in KEY_HASH_ALGORITHMS:
            raise ConfigurationError(
                f"key_hash must be one of {KEY_HASH_ALGORITHMS}, "
                f"got {self.key_hash!r}"
            )

    def __post_init__(self):
        """Validate configuration on initialization."""
        self.validate()


@dataclass
class RetryConfig:
    """
    Configuration for retry backoff.

    Delays are in milliseconds to match the units callers render in
    progress messages.

    Attributes:
        max_retries: Retries after the first attempt (default: 3)
        base_delay_ms: Base backoff delay (default: 1000)
        max_delay_ms: Backoff cap (default: 60000)
        rate_limit_multiplier: Extra factor for rate-limit errors (default: 2)
    """

    max_retries: int = 3
    base_delay_ms: int = 1000
    max_delay_ms: int = 60000
    rate_limit_multiplier: int = 2

    def validate(self) -> None:
        """
        Validate configuration parameters.

        Raises:
            ConfigurationError: If any parameter is outside its valid range
        """
        if self.max_retries < 0:
            raise ConfigurationError(
                f"max_retries must be non-negative, got {self.max_retries}"
            )

        if self.base_delay_ms <= 0:
            raise ConfigurationError(
                f"base_delay_ms must be positive, got {self.base_delay_ms}"
            )

        if self.max_delay_ms < self.base_delay_ms:
            raise ConfigurationError(
                f"max_delay_ms ({self.max_delay_ms}) must not be below "
                f"base_delay_ms ({self.base_delay_ms})"
            )

        if self.rate_limit_multiplier < 1:
            raise ConfigurationError(
                f"rate_limit_multiplier must be at least 1, "
                f"got {self.rate_limit_multiplier}"
            )

    def __post_init__(self):
        """Validate configuration on initialization."""
        self.validate()
