"""
Standardized error kinds for design system generation.

This module provides the enumeration of failure kinds surfaced to callers
together with the fixed metadata attached to each kind: recoverability,
retryability, the user-facing message and code used when a raw failure is
classified, and the suggested action rendered by the UI.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """
    Enumeration of all generation failure kinds.

    Kinds are fixed; every classified failure carries exactly one of them.
    """

    VALIDATION_ERROR = 'VALIDATION_ERROR'
    AI_API_ERROR = 'AI_API_ERROR'
    NETWORK_ERROR = 'NETWORK_ERROR'
    PARSING_ERROR = 'PARSING_ERROR'
    RATE_LIMIT_ERROR = 'RATE_LIMIT_ERROR'
    TIMEOUT_ERROR = 'TIMEOUT_ERROR'
    QUOTA_EXCEEDED = 'QUOTA_EXCEEDED'
    INVALID_RESPONSE = 'INVALID_RESPONSE'
    SYSTEM_ERROR = 'SYSTEM_ERROR'


# Kinds the caller cannot fix by trying again with the same input
NON_RECOVERABLE_KINDS = frozenset({
    ErrorKind.VALIDATION_ERROR,
    ErrorKind.QUOTA_EXCEEDED,
})

RETRYABLE_KINDS = frozenset({
    ErrorKind.AI_API_ERROR,
    ErrorKind.NETWORK_ERROR,
    ErrorKind.PARSING_ERROR,
    ErrorKind.RATE_LIMIT_ERROR,
    ErrorKind.TIMEOUT_ERROR,
    ErrorKind.SYSTEM_ERROR,
    ErrorKind.INVALID_RESPONSE,
})


# Error kind to user-friendly message used when classifying raw failures
ERROR_KIND_TO_MESSAGE = {
    ErrorKind.VALIDATION_ERROR: 'Invalid input provided. Please check your form data.',
    ErrorKind.AI_API_ERROR: 'The AI service returned an error. Please try again.',
    ErrorKind.NETWORK_ERROR: 'Network error occurred. Please check your connection.',
    ErrorKind.PARSING_ERROR: 'Failed to process AI response. Please try again.',
    ErrorKind.RATE_LIMIT_ERROR: 'Rate limit exceeded. Please try again later.',
    ErrorKind.TIMEOUT_ERROR: 'Request timed out. Please try again.',
    ErrorKind.QUOTA_EXCEEDED: 'API quota exceeded. Please check your plan.',
    ErrorKind.INVALID_RESPONSE: 'The AI service returned an unusable response.',
    ErrorKind.SYSTEM_ERROR: 'An unexpected error occurred. Please try again.',
}


# Error kind to short code used when classifying raw failures
ERROR_KIND_TO_CODE = {
    ErrorKind.VALIDATION_ERROR: 'VALIDATION',
    ErrorKind.AI_API_ERROR: 'AI_API',
    ErrorKind.NETWORK_ERROR: 'NETWORK',
    ErrorKind.PARSING_ERROR: 'PARSING',
    ErrorKind.RATE_LIMIT_ERROR: 'RATE_LIMIT',
    ErrorKind.TIMEOUT_ERROR: 'TIMEOUT',
    ErrorKind.QUOTA_EXCEEDED: 'QUOTA_EXCEEDED',
    ErrorKind.INVALID_RESPONSE: 'INVALID_RESPONSE',
    ErrorKind.SYSTEM_ERROR: 'SYSTEM',
}


ERROR_KIND_TO_SUGGESTED_ACTION = {
    ErrorKind.VALIDATION_ERROR: 'Please review and correct your input data.',
    ErrorKind.AI_API_ERROR: 'Please try again in a moment.',
    ErrorKind.NETWORK_ERROR: 'Please check your internet connection and try again.',
    ErrorKind.PARSING_ERROR: 'Please try again with different parameters.',
    ErrorKind.RATE_LIMIT_ERROR: 'Please wait a moment before trying again.',
    ErrorKind.TIMEOUT_ERROR: 'Please try again with a simpler request.',
    ErrorKind.QUOTA_EXCEEDED: 'Please check your API quota or upgrade your plan.',
    ErrorKind.INVALID_RESPONSE: 'Please try again with different parameters.',
    ErrorKind.SYSTEM_ERROR: 'Please try again later or contact support if the issue persists.',
}


def is_recoverable(kind: ErrorKind) -> bool:
    """Whether a failure of this kind can be fixed by the caller retrying."""
    return kind not in NON_RECOVERABLE_KINDS


def is_retryable(kind: ErrorKind) -> bool:
    """Whether the orchestrator may re-invoke an operation failing with this kind."""
    return kind in RETRYABLE_KINDS


def get_error_message(kind: ErrorKind) -> str:
    """
    Get user-friendly error message for error kind.

    Args:
        kind: Error kind enum value

    Returns:
        User-friendly error message
    """
    return ERROR_KIND_TO_MESSAGE.get(kind, 'An error occurred')


def get_error_code(kind: ErrorKind) -> str:
    """Get the short code attached to classified failures of this kind."""
    return ERROR_KIND_TO_CODE.get(kind, 'SYSTEM')


def get_suggested_action(kind: ErrorKind) -> str:
    """Get the suggested action rendered next to the error message."""
    return ERROR_KIND_TO_SUGGESTED_ACTION.get(kind, 'Please try again.')
