"""Map failed analysis calls onto the closed error taxonomy.

A failed call is described by up to three things: an HTTP status, a
response body and a raw error message. They are consulted in this order:

1. a JSON body flagged ``manualEntryRequired`` is not an error at all;
2. a JSON body with an ``error`` text is matched against ``_AI_ERROR_RULES``;
3. a recognised HTTP status;
4. whatever short, readable message is left, else a generic prompt to
   enter the details manually.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from .endpoint import NON_2XX_MESSAGE, EndpointError
from .errors import AnalysisError, ErrorCode

logger = logging.getLogger(__name__)

MANUAL_ENTRY_MESSAGE = (
    "Could not identify this product automatically. "
    "Please enter the details manually."
)
_UNABLE_MESSAGE = "Unable to analyze product. Please enter details manually."

_MAX_BODY_MESSAGE_LEN = 200
_MAX_RAW_MESSAGE_LEN = 100

# (substrings, code, message). Order matters: first match wins.
_AI_ERROR_RULES: list[tuple[tuple[str, ...], ErrorCode, str]] = [
    (
        ("openai api key", "api key is not configured"),
        ErrorCode.AI_NOT_CONFIGURED,
        "AI service is not properly configured. Please contact support.",
    ),
    (
        ("invalid", "expired"),
        ErrorCode.AI_AUTH_FAILED,
        "AI service authentication failed. Please try again later.",
    ),
    (
        ("rate limit", "quota"),
        ErrorCode.AI_RATE_LIMIT,
        "AI service is temporarily busy. Please try again in a moment.",
    ),
    (
        ("temporarily unavailable", "service"),
        ErrorCode.AI_SERVICE_UNAVAILABLE,
        "AI service is temporarily unavailable. Please try again later.",
    ),
    (
        ("failed to analyze",),
        ErrorCode.AI_ANALYSIS_FAILED,
        MANUAL_ENTRY_MESSAGE,
    ),
]

_STATUS_RULES: dict[int, tuple[ErrorCode, str]] = {
    401: (ErrorCode.AUTH_FAILED, "Authentication failed. Please restart the app."),
    400: (
        ErrorCode.INVALID_REQUEST,
        "Invalid request. Please check your input and try again.",
    ),
    502: (
        ErrorCode.SERVICE_UNAVAILABLE,
        "Service temporarily unavailable. Please try again later.",
    ),
    503: (
        ErrorCode.SERVICE_UNAVAILABLE,
        "Service temporarily unavailable. Please try again later.",
    ),
}


@dataclass
class ManualEntryRequired:
    """Success variant: the service asks for the product to be entered by hand.

    ``payload`` is the decoded body, which may still carry a partial
    product name, category, expiry date and confidence.
    """

    payload: dict[str, Any] = field(default_factory=dict)


# --- body extraction -------------------------------------------------------

BodyExtractor = Callable[[EndpointError], str | None]


def _from_message(error: EndpointError) -> str | None:
    if error.message and error.message != NON_2XX_MESSAGE:
        return error.message
    return None


def _from_content(error: EndpointError) -> str | None:
    if not error.content:
        return None
    return error.content.decode("utf-8", errors="replace")


def _from_context_body(error: EndpointError) -> str | None:
    if not error.context:
        return None
    body = error.context.get("body")
    if isinstance(body, str):
        return body
    if isinstance(body, bytes):
        return body.decode("utf-8", errors="replace")
    if isinstance(body, Mapping):
        return json.dumps(dict(body))
    return None


BODY_EXTRACTORS: tuple[BodyExtractor, ...] = (
    _from_message,
    _from_content,
    _from_context_body,
)


def extract_error_body(
    error: EndpointError,
    extractors: tuple[BodyExtractor, ...] = BODY_EXTRACTORS,
) -> str | None:
    """Return the first non-empty body any extractor can read from ``error``."""
    for extractor in extractors:
        try:
            body = extractor(error)
        except (UnicodeError, TypeError, ValueError) as exc:
            logger.debug("Body extractor %s failed: %s", extractor.__name__, exc)
            continue
        if body and body.strip():
            return body
    return None


# --- classification --------------------------------------------------------


def _parse_body(body: str | None) -> dict[str, Any] | None:
    if not body:
        return None
    try:
        parsed = json.loads(body)
    except (json.JSONDecodeError, TypeError):
        return None
    return parsed if isinstance(parsed, dict) else None


def _classify_ai_error(error_text: str, original: object) -> AnalysisError:
    lowered = error_text.lower()
    for needles, code, message in _AI_ERROR_RULES:
        if any(n in lowered for n in needles):
            return AnalysisError(message, code, original)
    return AnalysisError(_UNABLE_MESSAGE, ErrorCode.AI_ERROR, original)


def _fallback_message(body: str | None, raw_message: str | None) -> str:
    if body and _parse_body(body) is None and len(body) < _MAX_BODY_MESSAGE_LEN:
        return body.strip()
    if raw_message:
        if "non-2xx" in raw_message:
            return _UNABLE_MESSAGE
        if len(raw_message) < _MAX_RAW_MESSAGE_LEN:
            return raw_message
    return MANUAL_ENTRY_MESSAGE


def classify(
    status: int | None,
    body: str | None,
    raw_message: str | None,
    original: object = None,
) -> AnalysisError | ManualEntryRequired:
    """Classify one failed call.

    Returns ``ManualEntryRequired`` when the body asks for manual entry;
    callers must treat that as a successful outcome, not raise it.
    """
    parsed = _parse_body(body)

    if parsed is not None and parsed.get("manualEntryRequired") is True:
        return ManualEntryRequired(parsed)

    error_text = parsed.get("error") if parsed is not None else None
    if isinstance(error_text, str) and error_text.strip():
        logger.error("Analysis service error: %s", error_text)
        return _classify_ai_error(error_text, original)

    if status == 500 and not body:
        return AnalysisError(
            "Server error occurred. Please try again or enter details manually.",
            ErrorCode.SERVER_ERROR,
            original,
        )
    if status in _STATUS_RULES:
        code, message = _STATUS_RULES[status]
        return AnalysisError(message, code, original)

    return AnalysisError(
        _fallback_message(body, raw_message), ErrorCode.UNKNOWN_ERROR, original
    )


def classify_endpoint_error(
    error: EndpointError,
) -> AnalysisError | ManualEntryRequired:
    """Extract a body from a transport failure and classify it."""
    body = extract_error_body(error)
    if body:
        logger.error("Analysis error response body: %s", body[:500])
    return classify(error.status, body, error.message, original=error)
