"""
Error classification for generation failures.

This module maps arbitrary exceptions raised by the external generation
call into GenerationError values carrying a fixed kind, retry flags and
user guidance. Typed failures (botocore, requests, stdlib, and anything
exposing a ``code`` or ``status_code``) are classified structurally;
message substring matching is the fallback for opaque failures.
"""

import json
import logging
from typing import Optional

import requests
from botocore.exceptions import (
    ClientError,
    ConnectTimeoutError,
    ReadTimeoutError
)
from botocore.exceptions import ConnectionError as BotoConnectionError

from generation_core.exceptions import CircuitBreakerOpenError
from generation_core.models import GenerationError, RetryConfig
from generation_core.utils.error_codes import (
    ERROR_KIND_TO_CODE,
    ErrorKind,
    get_error_code,
    get_error_message,
    get_suggested_action,
    is_recoverable,
    is_retryable
)

logger = logging.getLogger(__name__)

_DEFAULT_RETRY_CONFIG = RetryConfig()

CIRCUIT_OPEN_CODE = 'CIRCUIT_OPEN'


# AWS service error code to error kind
CLIENT_ERROR_CODE_TO_KIND = {
    'ThrottlingException': ErrorKind.RATE_LIMIT_ERROR,
    'Throttling': ErrorKind.RATE_LIMIT_ERROR,
    'TooManyRequestsException': ErrorKind.RATE_LIMIT_ERROR,
    'ServiceQuotaExceededException': ErrorKind.QUOTA_EXCEEDED,
    'ValidationException': ErrorKind.VALIDATION_ERROR,
    'ModelTimeoutException': ErrorKind.TIMEOUT_ERROR,
    'RequestTimeout': ErrorKind.TIMEOUT_ERROR,
    'RequestTimeoutException': ErrorKind.TIMEOUT_ERROR,
}


# Codes carried on a `code` attribute by generation clients and sockets
ATTRIBUTE_CODE_TO_KIND = {
    **{code: kind for kind, code in ERROR_KIND_TO_CODE.items()},
    **{kind.value: kind for kind in ErrorKind},
    'rate_limit_exceeded': ErrorKind.RATE_LIMIT_ERROR,
    'insufficient_quota': ErrorKind.QUOTA_EXCEEDED,
    'ECONNRESET': ErrorKind.NETWORK_ERROR,
    'ECONNREFUSED': ErrorKind.NETWORK_ERROR,
    'ENOTFOUND': ErrorKind.NETWORK_ERROR,
    'EAI_AGAIN': ErrorKind.NETWORK_ERROR,
    'ETIMEDOUT': ErrorKind.TIMEOUT_ERROR,
}


# Substring rules for untyped failures, checked in order
MESSAGE_RULES = (
    (('rate limit',), ErrorKind.RATE_LIMIT_ERROR),
    (('quota',), ErrorKind.QUOTA_EXCEEDED),
    (('timeout',), ErrorKind.TIMEOUT_ERROR),
    (('network', 'fetch'), ErrorKind.NETWORK_ERROR),
    (('validation', 'invalid'), ErrorKind.VALIDATION_ERROR),
    (('parse', 'JSON'), ErrorKind.PARSING_ERROR),
)


def create_error(
    kind: ErrorKind,
    message: str,
    details: Optional[str] = None,
    code: Optional[str] = None
) -> GenerationError:
    """
    Create a GenerationError with the fixed metadata of its kind.

    Args:
        kind: Error kind
        message: User-facing message
        details: Raw failure text
        code: Short machine-readable code

    Returns:
        GenerationError with recoverable, retryable and suggested action
        derived from the kind
    """
    kind = ErrorKind(kind)
    return GenerationError(
        kind,
        message,
        recoverable=is_recoverable(kind),
        retryable=is_retryable(kind),
        details=details,
        code=code,
        suggested_action=get_suggested_action(kind)
    )


def from_error(raw: BaseException) -> GenerationError:
    """
    Classify a raw failure.

    An existing GenerationError is returned unchanged. Otherwise the kind
    is taken from the exception type or its code / status, and failing
    that from its message text.

    Args:
        raw: Exception raised by the operation

    Returns:
        Classified GenerationError; details carry the raw message
    """
    if isinstance(raw, GenerationError):
        return raw

    details = str(raw) or type(raw).__name__

    if isinstance(raw, CircuitBreakerOpenError):
        return create_error(
            ErrorKind.AI_API_ERROR,
            get_error_message(ErrorKind.AI_API_ERROR),
            details,
            CIRCUIT_OPEN_CODE
        )

    kind = _classify_structured(raw)
    if kind is None:
        kind = _classify_message(str(raw))

    logger.debug(
        f"Classified {type(raw).__name__} as {kind.value}",
        extra={'error_kind': kind.value, 'error_type': type(raw).__name__}
    )

    return create_error(kind, get_error_message(kind), details, get_error_code(kind))


def is_service_failure(raw: BaseException) -> bool:
    """
    Whether a failure says something about the generation service's health.

    Validation and quota failures are caused by the request or the account
    and do not count toward opening a circuit breaker.
    """
    return from_error(raw).recoverable


def _classify_structured(raw: BaseException) -> Optional[ErrorKind]:
    if isinstance(raw, ClientError):
        error_code = raw.response.get('Error', {}).get('Code', '')
        kind = CLIENT_ERROR_CODE_TO_KIND.get(error_code)
        if kind is None:
            kind = _kind_for_status(
                raw.response.get('ResponseMetadata', {}).get('HTTPStatusCode')
            )
        return kind or ErrorKind.AI_API_ERROR

    # Timeout checks precede connection checks; the timeout types subclass them
    if isinstance(raw, (ConnectTimeoutError, ReadTimeoutError)):
        return ErrorKind.TIMEOUT_ERROR

    if isinstance(raw, BotoConnectionError):
        return ErrorKind.NETWORK_ERROR

    if isinstance(raw, requests.exceptions.Timeout):
        return ErrorKind.TIMEOUT_ERROR

    if isinstance(raw, requests.exceptions.ConnectionError):
        return ErrorKind.NETWORK_ERROR

    if isinstance(raw, requests.exceptions.HTTPError):
        response = raw.response
        kind = _kind_for_status(response.status_code if response is not None else None)
        if kind is not None:
            return kind

    if isinstance(raw, TimeoutError):
        return ErrorKind.TIMEOUT_ERROR

    if isinstance(raw, ConnectionError):
        return ErrorKind.NETWORK_ERROR

    if isinstance(raw, json.JSONDecodeError):
        return ErrorKind.PARSING_ERROR

    code = getattr(raw, 'code', None)
    if isinstance(code, str) and code in ATTRIBUTE_CODE_TO_KIND:
        return ATTRIBUTE_CODE_TO_KIND[code]

    return _kind_for_status(getattr(raw, 'status_code', None))


def _kind_for_status(status: Optional[int]) -> Optional[ErrorKind]:
    if not isinstance(status, int) or isinstance(status, bool):
        return None
    if status == 429:
        return ErrorKind.RATE_LIMIT_ERROR
    if status in (408, 504):
        return ErrorKind.TIMEOUT_ERROR
    if status == 402:
        return ErrorKind.QUOTA_EXCEEDED
    if status in (400, 422):
        return ErrorKind.VALIDATION_ERROR
    if 500 <= status < 600:
        return ErrorKind.AI_API_ERROR
    return None


def _classify_message(message: str) -> ErrorKind:
    for needles, kind in MESSAGE_RULES:
        if any(needle in message for needle in needles):
            return kind
    return ErrorKind.SYSTEM_ERROR


def get_retry_delay(
    kind: ErrorKind,
    attempt: int,
    config: Optional[RetryConfig] = None
) -> int:
    """
    Compute the backoff delay before a retry.

    Retryable kinds back off exponentially from the base delay, doubled
    again for rate limits, and capped at the maximum delay. Non-retryable
    kinds return the base delay.

    Args:
        kind: Error kind of the failure
        attempt: Retry attempt number (1 for the first retry)
        config: Retry configuration (default: RetryConfig())

    Returns:
        Delay in milliseconds

    Examples:
        >>> get_retry_delay(ErrorKind.NETWORK_ERROR, 1)
        2000
        >>> get_retry_delay(ErrorKind.RATE_LIMIT_ERROR, 1)
        4000
    """
    config = config or _DEFAULT_RETRY_CONFIG

    if not is_retryable(kind):
        return config.base_delay_ms

    multiplier = config.rate_limit_multiplier if kind == ErrorKind.RATE_LIMIT_ERROR else 1
    return min(config.base_delay_ms * (2 ** attempt) * multiplier, config.max_delay_ms)


def should_retry(
    error: GenerationError,
    attempts_so_far: int,
    config: Optional[RetryConfig] = None
) -> bool:
    """Whether another attempt is allowed after this failure."""
    config = config or _DEFAULT_RETRY_CONFIG
    return error.retryable and attempts_so_far < config.max_retries


def format_user_message(error: GenerationError) -> str:
    """Join the error message and its suggested action for display."""
    message = error.message

    if error.suggested_action:
        message += f" {error.suggested_action}"

    return message
