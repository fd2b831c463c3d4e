"""
Classified generation failure.

GenerationError is both the immutable value describing a failure and the
exception the retry orchestrator raises, so callers catch one type and
render its message and suggested action.
"""

import time
from typing import Any, Dict, Optional

from generation_core.utils.error_codes import ErrorKind


class GenerationError(Exception):
    """
    Classified failure of a generation operation.

    All attributes are read-only; a GenerationError is created once per
    failure and never mutated afterwards.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        *,
        recoverable: bool,
        retryable: bool,
        details: Optional[str] = None,
        code: Optional[str] = None,
        suggested_action: Optional[str] = None,
        occurred_at: Optional[float] = None
    ):
        """
        Initialize generation error.

        Prefer error_classifier.create_error(), which derives the flags
        and suggested action from the kind.

        Args:
            kind: Error kind
            message: User-facing message
            recoverable: Whether the caller can recover by retrying later
            retryable: Whether the orchestrator may retry automatically
            details: Raw failure text
            code: Short machine-readable code
            suggested_action: User guidance
            occurred_at: Unix timestamp (default: now)
        """
        super().__init__(message)
        self._kind = ErrorKind(kind)
        self._message = message
        self._details = details
        self._code = code
        self._recoverable = recoverable
        self._retryable = retryable
        self._suggested_action = suggested_action
        self._occurred_at = occurred_at if occurred_at is not None else time.time()

    @property
    def kind(self) -> ErrorKind:
        return self._kind

    @property
    def message(self) -> str:
        return self._message

    @property
    def details(self) -> Optional[str]:
        return self._details

    @property
    def code(self) -> Optional[str]:
        return self._code

    @property
    def recoverable(self) -> bool:
        return self._recoverable

    @property
    def retryable(self) -> bool:
        return self._retryable

    @property
    def suggested_action(self) -> Optional[str]:
        return self._suggested_action

    @property
    def occurred_at(self) -> float:
        return self._occurred_at

    def to_dict(self) -> Dict[str, Any]:
        """
        Format the error for the UI layer.

        Returns:
            Error payload with a millisecond timestamp

        Example:
            >>> error.to_dict()
            {
                'type': 'error',
                'kind': 'RATE_LIMIT_ERROR',
                'code': 'RATE_LIMIT',
                'message': 'Rate limit exceeded. Please try again later.',
                'suggestedAction': 'Please wait a moment before trying again.',
                'recoverable': True,
                'retryable': True,
                'timestamp': 1699500000000
            }
        """
        payload = {
            'type': 'error',
            'kind': self._kind.value,
            'code': self._code,
            'message': self._message,
            'suggestedAction': self._suggested_action,
            'recoverable': self._recoverable,
            'retryable': self._retryable,
            'timestamp': int(self._occurred_at * 1000)
        }

        if self._details:
            payload['details'] = self._details

        return payload

    def __repr__(self) -> str:
        return (
            f"GenerationError(kind={self._kind.value}, code={self._code!r}, "
            f"message={self._message!r})"
        )
