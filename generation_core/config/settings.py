"""
Configuration settings for generation caching and retry.

Loads configuration from environment variables with sensible defaults.
"""

import os
from typing import Optional

from generation_core.exceptions import ConfigurationError
from generation_core.models import CacheConfig, RetryConfig
from generation_core.models.configuration import KEY_HASH_ALGORITHMS


class Settings:
    """
    Configuration settings for the result cache, retries and observability.

    All settings are loaded from environment variables with defaults.
    """

    def __init__(self):
        """Initialize settings from environment variables."""
        # AWS Configuration
        self.aws_region: str = os.getenv('AWS_REGION', 'us-east-1')

        # Cache Configuration
        self.cache_max_design_systems: int = self._parse_int('CACHE_MAX_DESIGN_SYSTEMS', '50')
        self.cache_max_components: int = self._parse_int('CACHE_MAX_COMPONENTS', '200')
        self.cache_default_ttl_seconds: float = self._parse_float(
            'CACHE_DEFAULT_TTL_SECONDS', '1800'
        )
        self.cache_max_ttl_seconds: float = self._parse_float(
            'CACHE_MAX_TTL_SECONDS', '86400'
        )
        self.cache_key_hash: str = os.getenv('CACHE_KEY_HASH', 'fnv1a').lower()

        # Retry Configuration
        self.retry_max_retries: int = self._parse_int('RETRY_MAX_RETRIES', '3')
        self.retry_base_delay_ms: int = self._parse_int('RETRY_BASE_DELAY_MS', '1000')
        self.retry_max_delay_ms: int = self._parse_int('RETRY_MAX_DELAY_MS', '60000')
        self.retry_rate_limit_multiplier: int = self._parse_int(
            'RETRY_RATE_LIMIT_MULTIPLIER', '2'
        )

        # Circuit Breaker Configuration
        self.circuit_breaker_enabled: bool = self._parse_bool(
            os.getenv('CIRCUIT_BREAKER_ENABLED', 'false')
        )
        self.circuit_breaker_failure_threshold: int = self._parse_int(
            'CIRCUIT_BREAKER_FAILURE_THRESHOLD', '5'
        )
        self.circuit_breaker_timeout_seconds: float = self._parse_float(
            'CIRCUIT_BREAKER_TIMEOUT_SECONDS', '60'
        )

        # Metrics Configuration
        self.metrics_enabled: bool = self._parse_bool(os.getenv('METRICS_ENABLED', 'false'))
        self.metrics_namespace: str = os.getenv(
            'METRICS_NAMESPACE', 'DesignSystemGenerator/Core'
        )

        # Logging Configuration
        self.log_level: str = os.getenv('LOG_LEVEL', 'INFO')
        self.log_format: str = os.getenv('LOG_FORMAT', 'json').lower()

        # Validate configuration
        self._validate()

    def _parse_bool(self, value: str) -> bool:
        """
        Parse boolean value from string.

        Args:
            value: String value to parse

        Returns:
            Boolean value
        """
        return value.lower() in ('true', '1', 'yes', 'on')

    def _parse_int(self, name: str, default: str) -> int:
        value = os.getenv(name, default)
        try:
            return int(value)
        except ValueError:
            raise ConfigurationError(f"{name} must be an integer, got {value!r}") from None

    def _parse_float(self, name: str, default: str) -> float:
        value = os.getenv(name, default)
        try:
            return float(value)
        except ValueError:
            raise ConfigurationError(f"{name} must be a number, got {value!r}") from None

    def _validate(self):
        """Validate configuration values."""
        if self.cache_key_hash not in KEY_HASH_ALGORITHMS:
            raise ConfigurationError(
                f"Invalid CACHE_KEY_HASH: {self.cache_key_hash}. "
                f"Must be one of {KEY_HASH_ALGORITHMS}"
            )

        if self.circuit_breaker_failure_threshold < 1:
            raise ConfigurationError(
                f"CIRCUIT_BREAKER_FAILURE_THRESHOLD must be at least 1, "
                f"got {self.circuit_breaker_failure_threshold}"
            )

        if self.circuit_breaker_timeout_seconds <= 0:
            raise ConfigurationError(
                f"CIRCUIT_BREAKER_TIMEOUT_SECONDS must be positive, "
                f"got {self.circuit_breaker_timeout_seconds}"
            )

        # Validate log level
        valid_log_levels = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}
        if self.log_level.upper() not in valid_log_levels:
            raise ConfigurationError(
                f"Invalid LOG_LEVEL: {self.log_level}. "
                f"Must be one of {valid_log_levels}"
            )

        valid_log_formats = {'json', 'text'}
        if self.log_format not in valid_log_formats:
            raise ConfigurationError(
                f"Invalid LOG_FORMAT: {self.log_format}. "
                f"Must be one of {valid_log_formats}"
            )

        # Range checks on cache and retry values live with the value objects
        self.cache_config()
        self.retry_config()

    def cache_config(self) -> CacheConfig:
        """Build the cache configuration."""
        return CacheConfig(
            capacity_design_systems=self.cache_max_design_systems,
            capacity_components=self.cache_max_components,
            default_ttl_seconds=self.cache_default_ttl_seconds,
            max_ttl_seconds=self.cache_max_ttl_seconds,
            key_hash=self.cache_key_hash
        )

    def retry_config(self) -> RetryConfig:
        """Build the retry configuration."""
        return RetryConfig(
            max_retries=self.retry_max_retries,
            base_delay_ms=self.retry_base_delay_ms,
            max_delay_ms=self.retry_max_delay_ms,
            rate_limit_multiplier=self.retry_rate_limit_multiplier
        )


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get global settings instance (singleton pattern).

    Returns:
        Settings instance
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
