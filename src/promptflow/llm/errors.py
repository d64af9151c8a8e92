from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorCode(str, Enum):
    MISSING_API_KEY = "MISSING_API_KEY"
    CONFIG_ERROR = "CONFIG_ERROR"
    AUTH_ERROR = "AUTH_ERROR"
    RATE_LIMIT = "RATE_LIMIT"
    SERVER_ERROR = "SERVER_ERROR"
    CLIENT_ERROR = "CLIENT_ERROR"
    HTTP_ERROR = "HTTP_ERROR"
    TIMEOUT = "TIMEOUT"
    NETWORK_ERROR = "NETWORK_ERROR"
    ABORTED = "ABORTED"
    PARSE_ERROR = "PARSE_ERROR"
    REPAIR_FAILED = "REPAIR_FAILED"
    SCHEMA_ERROR = "SCHEMA_ERROR"

    def __str__(self) -> str:
        return self.value


class LLMError(RuntimeError):
    """Single error type surfaced by the chat transport.

    Carries a machine-readable ``code`` and, for HTTP failures, the ``status``.
    """

    default_code = ErrorCode.HTTP_ERROR

    def __init__(
        self,
        message: str,
        *,
        code: Optional[ErrorCode] = None,
        status: Optional[int] = None,
        retry_after_s: Optional[float] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = ErrorCode(code) if code is not None else self.default_code
        self.status = status
        # Server-requested wait before the next attempt (Retry-After)
        self.retry_after_s = retry_after_s

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(message={self.message!r}, "
            f"code={self.code.value!r}, status={self.status!r})"
        )


class ConfigError(LLMError):
    """Raised when a provider config cannot produce a valid request (no endpoint,
    malformed URL, header values that HTTP cannot carry)."""

    default_code = ErrorCode.CONFIG_ERROR


class LLMValidationError(LLMError):
    """Raised when the model output cannot be validated against the requested schema."""

    default_code = ErrorCode.SCHEMA_ERROR


class JSONExtractionError(LLMValidationError):
    """Raised when no complete JSON value can be found in model text."""

    default_code = ErrorCode.PARSE_ERROR


class StructuredOutputError(LLMError):
    default_code = ErrorCode.PARSE_ERROR

    def __init__(
        self,
        message: str,
        *,
        code: Optional[ErrorCode] = None,
        details: Optional[str] = None,
    ) -> None:
        super().__init__(message, code=code)
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


# Statuses worth another attempt
RETRYABLE_STATUSES = frozenset({429, 500, 502, 503, 504})
RETRYABLE_CODES = frozenset({ErrorCode.TIMEOUT, ErrorCode.NETWORK_ERROR})


def code_for_status(status: int) -> ErrorCode:
    if status in (401, 403):
        return ErrorCode.AUTH_ERROR
    if status == 429:
        return ErrorCode.RATE_LIMIT
    if status >= 500:
        return ErrorCode.SERVER_ERROR
    if status >= 400:
        return ErrorCode.CLIENT_ERROR
    return ErrorCode.HTTP_ERROR


def is_retryable_llm_error(error: Exception) -> bool:
    """Return True when a transport error is likely transient."""

    if not isinstance(error, LLMError):
        return False
    if error.status is not None:
        return error.status in RETRYABLE_STATUSES
    return error.code in RETRYABLE_CODES
