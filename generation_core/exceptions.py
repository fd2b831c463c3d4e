"""
Custom exceptions for the generation core.

The classified failure surfaced to callers is
:class:`generation_core.models.GenerationError`; the exceptions here cover
misuse of the library itself.
"""


class GenerationCoreError(Exception):
    """Base exception for generation core module."""
    pass


class ConfigurationError(GenerationCoreError, ValueError):
    """
    Raised when configuration values are invalid.
    
    This can occur due to:
    - Non-numeric environment variable values
    - Non-positive capacities or TTLs
    - Unknown key hash algorithm or log format
    """
    pass


class CircuitBreakerOpenError(GenerationCoreError):
    """Raised when the circuit breaker rejects a call without running it."""
    
    def __init__(self, message: str, retry_after: float):
        """
        Initialize circuit breaker open error.
        
        Args:
            message: Error message
            retry_after: Seconds until the breaker allows a test call
        """
        super().__init__(message)
        self.retry_after = retry_after
