"""Closed error taxonomy for product analysis."""

from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    # Configuration: fail fast, no network call.
    NOT_CONFIGURED = "NOT_CONFIGURED"
    PLACEHOLDER_CREDENTIALS = "PLACEHOLDER_CREDENTIALS"
    WRONG_KEY_TYPE = "WRONG_KEY_TYPE"
    # Local input validation.
    MISSING_INPUT = "MISSING_INPUT"
    # Application errors reported by the AI service.
    AI_NOT_CONFIGURED = "AI_NOT_CONFIGURED"
    AI_AUTH_FAILED = "AI_AUTH_FAILED"
    AI_RATE_LIMIT = "AI_RATE_LIMIT"
    AI_SERVICE_UNAVAILABLE = "AI_SERVICE_UNAVAILABLE"
    AI_ANALYSIS_FAILED = "AI_ANALYSIS_FAILED"
    AI_ERROR = "AI_ERROR"
    AI_SERVICE_ERROR = "AI_SERVICE_ERROR"
    # Transport / HTTP.
    AUTH_FAILED = "AUTH_FAILED"
    SERVER_ERROR = "SERVER_ERROR"
    INVALID_REQUEST = "INVALID_REQUEST"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    NO_RESPONSE = "NO_RESPONSE"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class AnalysisError(Exception):
    """A product analysis failure normalised into the error taxonomy.

    ``message`` is safe to show to the user as-is; ``original_error`` keeps
    whatever caused the failure for logging only.
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
        original_error: object = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.original_error = original_error

    def __repr__(self) -> str:
        return f"AnalysisError(code={self.code.value}, message={self.message!r})"
