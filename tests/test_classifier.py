"""Tests for failure classification and error-body extraction."""

import json

import pytest

from shelfscan.analysis.classifier import (
    MANUAL_ENTRY_MESSAGE,
    ManualEntryRequired,
    classify,
    classify_endpoint_error,
    extract_error_body,
)
from shelfscan.analysis.endpoint import NON_2XX_MESSAGE, EndpointError
from shelfscan.analysis.errors import AnalysisError, ErrorCode


def _body(**fields) -> str:
    return json.dumps(fields)


class TestManualEntryRequired:
    def test_flagged_body_is_not_an_error(self):
        body = _body(manualEntryRequired=True, productName="Mystery Jar")
        outcome = classify(500, body, NON_2XX_MESSAGE)
        assert isinstance(outcome, ManualEntryRequired)
        assert outcome.payload["productName"] == "Mystery Jar"

    def test_flag_beats_error_text(self):
        body = _body(manualEntryRequired=True, error="Failed to analyze product")
        assert isinstance(classify(400, body, None), ManualEntryRequired)

    def test_false_flag_is_ignored(self):
        body = _body(manualEntryRequired=False, error="quota exceeded")
        outcome = classify(None, body, None)
        assert isinstance(outcome, AnalysisError)
        assert outcome.code is ErrorCode.AI_RATE_LIMIT


class TestAIErrorTable:
    @pytest.mark.parametrize(
        "text,code",
        [
            ("OpenAI API key is missing", ErrorCode.AI_NOT_CONFIGURED),
            ("The API key is not configured", ErrorCode.AI_NOT_CONFIGURED),
            ("Invalid authentication", ErrorCode.AI_AUTH_FAILED),
            ("Token expired", ErrorCode.AI_AUTH_FAILED),
            ("Rate limit reached", ErrorCode.AI_RATE_LIMIT),
            ("You exceeded your current quota", ErrorCode.AI_RATE_LIMIT),
            ("Model temporarily unavailable", ErrorCode.AI_SERVICE_UNAVAILABLE),
            ("Upstream service down", ErrorCode.AI_SERVICE_UNAVAILABLE),
            ("Failed to analyze product", ErrorCode.AI_ANALYSIS_FAILED),
            ("Something odd happened", ErrorCode.AI_ERROR),
        ],
    )
    def test_table(self, text, code):
        outcome = classify(None, _body(error=text), None)
        assert isinstance(outcome, AnalysisError)
        assert outcome.code is code

    def test_order_matters(self):
        # "invalid" is checked before "rate limit".
        outcome = classify(None, _body(error="Invalid request: rate limit"), None)
        assert outcome.code is ErrorCode.AI_AUTH_FAILED

    @pytest.mark.parametrize("status", [None, 400, 401, 429, 500, 502, 503])
    def test_rate_limit_regardless_of_status(self, status):
        outcome = classify(status, _body(error="OpenAI rate limit exceeded"), None)
        assert outcome.code is ErrorCode.AI_RATE_LIMIT

    def test_message_hides_provider_text(self):
        outcome = classify(500, _body(error="sk-123 quota exceeded for org-xyz"), None)
        assert "org-xyz" not in outcome.message
        assert outcome.message == (
            "AI service is temporarily busy. Please try again in a moment."
        )


class TestStatusCodes:
    @pytest.mark.parametrize(
        "status,code",
        [
            (401, ErrorCode.AUTH_FAILED),
            (400, ErrorCode.INVALID_REQUEST),
            (502, ErrorCode.SERVICE_UNAVAILABLE),
            (503, ErrorCode.SERVICE_UNAVAILABLE),
        ],
    )
    def test_without_body(self, status, code):
        assert classify(status, None, NON_2XX_MESSAGE).code is code

    def test_500_without_body(self):
        assert classify(500, None, NON_2XX_MESSAGE).code is ErrorCode.SERVER_ERROR

    def test_500_with_body_is_not_server_error(self):
        outcome = classify(500, "upstream exploded", NON_2XX_MESSAGE)
        assert outcome.code is ErrorCode.UNKNOWN_ERROR
        assert outcome.message == "upstream exploded"

    def test_json_body_without_error_falls_to_status(self):
        assert classify(401, _body(detail="nope"), None).code is ErrorCode.AUTH_FAILED

    @pytest.mark.parametrize("error", ["", "   ", None])
    def test_blank_error_text_falls_to_status(self, error):
        assert classify(401, _body(error=error), None).code is ErrorCode.AUTH_FAILED


class TestFallback:
    def test_non_2xx_message(self):
        outcome = classify(418, None, NON_2XX_MESSAGE)
        assert outcome.code is ErrorCode.UNKNOWN_ERROR
        assert outcome.message == (
            "Unable to analyze product. Please enter details manually."
        )

    def test_short_raw_message(self):
        outcome = classify(None, None, "Network request failed")
        assert outcome.message == "Network request failed"

    def test_long_raw_message(self):
        outcome = classify(None, None, "x" * 150)
        assert outcome.message == MANUAL_ENTRY_MESSAGE

    def test_nothing_at_all(self):
        outcome = classify(None, None, None)
        assert outcome.code is ErrorCode.UNKNOWN_ERROR
        assert outcome.message == MANUAL_ENTRY_MESSAGE

    def test_keeps_original(self):
        cause = RuntimeError("boom")
        outcome = classify(503, None, None, original=cause)
        assert outcome.original_error is cause


class TestExtractErrorBody:
    def test_message_first(self):
        err = EndpointError("timed out", content=b'{"error": "x"}')
        assert extract_error_body(err) == "timed out"

    def test_generic_message_skipped_for_content(self):
        err = EndpointError(NON_2XX_MESSAGE, status=500, content=b'{"error": "x"}')
        assert extract_error_body(err) == '{"error": "x"}'

    def test_context_body_last(self):
        err = EndpointError(NON_2XX_MESSAGE, context={"body": {"error": "quota"}})
        assert json.loads(extract_error_body(err)) == {"error": "quota"}

    def test_context_body_string(self):
        err = EndpointError(NON_2XX_MESSAGE, content=b"  ", context={"body": "raw"})
        assert extract_error_body(err) == "raw"

    def test_nothing(self):
        assert extract_error_body(EndpointError(NON_2XX_MESSAGE, status=500)) is None

    def test_failing_extractor_is_skipped(self):
        def broken(error):
            raise ValueError("unreadable")

        def fallback(error):
            return "second"

        err = EndpointError(NON_2XX_MESSAGE)
        assert extract_error_body(err, (broken, fallback)) == "second"


class TestClassifyEndpointError:
    def test_manual_entry_body(self):
        err = EndpointError(
            NON_2XX_MESSAGE,
            status=422,
            content=_body(manualEntryRequired=True, category="Dairy").encode(),
        )
        outcome = classify_endpoint_error(err)
        assert isinstance(outcome, ManualEntryRequired)
        assert outcome.payload["category"] == "Dairy"

    def test_error_body(self):
        err = EndpointError(
            NON_2XX_MESSAGE,
            status=500,
            content=_body(error="OpenAI API key is not set").encode(),
        )
        outcome = classify_endpoint_error(err)
        assert outcome.code is ErrorCode.AI_NOT_CONFIGURED
        assert outcome.original_error is err

    def test_empty_500(self):
        err = EndpointError(NON_2XX_MESSAGE, status=500, content=b"")
        assert classify_endpoint_error(err).code is ErrorCode.SERVER_ERROR
