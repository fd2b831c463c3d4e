"""
Unit tests for environment-driven settings.
"""

import pytest

from generation_core.config import Settings, get_settings
from generation_core.config import settings as settings_module
from generation_core.exceptions import ConfigurationError

ENV_VARS = (
    'AWS_REGION',
    'CACHE_MAX_DESIGN_SYSTEMS',
    'CACHE_MAX_COMPONENTS',
    'CACHE_DEFAULT_TTL_SECONDS',
    'CACHE_MAX_TTL_SECONDS',
    'CACHE_KEY_HASH',
    'RETRY_MAX_RETRIES',
    'RETRY_BASE_DELAY_MS',
    'RETRY_MAX_DELAY_MS',
    'RETRY_RATE_LIMIT_MULTIPLIER',
    'CIRCUIT_BREAKER_ENABLED',
    'CIRCUIT_BREAKER_FAILURE_THRESHOLD',
    'CIRCUIT_BREAKER_TIMEOUT_SECONDS',
    'METRICS_ENABLED',
    'METRICS_NAMESPACE',
    'LOG_LEVEL',
    'LOG_FORMAT',
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove configuration variables from the environment."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestSettings:
    """Test suite for Settings class."""

    def test_defaults(self):
        """Test default values."""
        settings = Settings()

        assert settings.aws_region == 'us-east-1'
        assert settings.cache_max_design_systems == 50
        assert settings.cache_max_components == 200
        assert settings.cache_default_ttl_seconds == 1800
        assert settings.cache_max_ttl_seconds == 86400
        assert settings.cache_key_hash == 'fnv1a'
        assert settings.retry_max_retries == 3
        assert settings.retry_base_delay_ms == 1000
        assert settings.retry_max_delay_ms == 60000
        assert settings.retry_rate_limit_multiplier == 2
        assert settings.circuit_breaker_enabled is False
        assert settings.metrics_enabled is False
        assert settings.metrics_namespace == 'DesignSystemGenerator/Core'
        assert settings.log_level == 'INFO'
        assert settings.log_format == 'json'

    def test_environment_overrides(self, monkeypatch):
        """Test values loaded from the environment."""
        monkeypatch.setenv('CACHE_MAX_DESIGN_SYSTEMS', '10')
        monkeypatch.setenv('CACHE_DEFAULT_TTL_SECONDS', '60')
        monkeypatch.setenv('CACHE_KEY_HASH', 'ROLLING')
        monkeypatch.setenv('RETRY_MAX_RETRIES', '5')
        monkeypatch.setenv('CIRCUIT_BREAKER_ENABLED', 'yes')
        monkeypatch.setenv('METRICS_ENABLED', '1')
        monkeypatch.setenv('LOG_FORMAT', 'text')

        settings = Settings()

        assert settings.cache_max_design_systems == 10
        assert settings.cache_default_ttl_seconds == 60.0
        assert settings.cache_key_hash == 'rolling'
        assert settings.retry_max_retries == 5
        assert settings.circuit_breaker_enabled is True
        assert settings.metrics_enabled is True
        assert settings.log_format == 'text'

    @pytest.mark.parametrize('value', ['false', '0', 'no', 'off', 'anything'])
    def test_false_values(self, monkeypatch, value):
        """Test boolean parsing of false-like values."""
        monkeypatch.setenv('METRICS_ENABLED', value)

        assert Settings().metrics_enabled is False

    def test_non_numeric_value(self, monkeypatch):
        """Test that non-numeric values are rejected."""
        monkeypatch.setenv('CACHE_MAX_COMPONENTS', 'lots')

        with pytest.raises(ConfigurationError, match='CACHE_MAX_COMPONENTS'):
            Settings()

    @pytest.mark.parametrize('name, value', [
        ('CACHE_KEY_HASH', 'md5'),
        ('LOG_LEVEL', 'VERBOSE'),
        ('LOG_FORMAT', 'xml'),
        ('CACHE_MAX_DESIGN_SYSTEMS', '0'),
        ('CACHE_MAX_TTL_SECONDS', '60'),
        ('RETRY_BASE_DELAY_MS', '-1'),
        ('CIRCUIT_BREAKER_FAILURE_THRESHOLD', '0'),
    ])
    def test_invalid_values(self, monkeypatch, name, value):
        """Test validation of out-of-range values."""
        monkeypatch.setenv(name, value)

        with pytest.raises(ConfigurationError):
            Settings()

    def test_cache_config(self, monkeypatch):
        """Test building the cache configuration."""
        monkeypatch.setenv('CACHE_MAX_COMPONENTS', '25')

        config = Settings().cache_config()

        assert config.capacity_components == 25
        assert config.capacity_design_systems == 50
        assert config.key_hash == 'fnv1a'

    def test_retry_config(self, monkeypatch):
        """Test building the retry configuration."""
        monkeypatch.setenv('RETRY_MAX_DELAY_MS', '5000')

        config = Settings().retry_config()

        assert config.max_delay_ms == 5000
        assert config.max_retries == 3

    def test_get_settings_is_cached(self, monkeypatch):
        """Test singleton access."""
        monkeypatch.setattr(settings_module, '_settings', None)

        assert get_settings() is get_settings()
