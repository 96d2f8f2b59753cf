"""Tests for Retry-After and X-Continuation helpers."""

from datetime import datetime, timezone

import httpx
import pytest

from kontent_ai_core.core.headers import get_continuation_token, parse_retry_after


NOW = datetime(2024, 1, 15, 10, 30, 0, tzinfo=timezone.utc)


def fixed_now():
    return NOW


class TestParseRetryAfter:

    def test_delta_seconds(self):
        assert parse_retry_after(httpx.Headers({"Retry-After": "5"})) == 5.0

    def test_fractional_seconds(self):
        assert parse_retry_after(httpx.Headers({"Retry-After": "1.5"})) == 1.5

    def test_http_date(self):
        headers = httpx.Headers({"Retry-After": "Mon, 15 Jan 2024 10:30:30 GMT"})

        assert parse_retry_after(headers, now=fixed_now) == 30.0

    def test_http_date_in_past_clamped(self):
        headers = httpx.Headers({"Retry-After": "Mon, 15 Jan 2024 10:00:00 GMT"})

        assert parse_retry_after(headers, now=fixed_now) == 0.0

    def test_from_response(self):
        response = httpx.Response(429, headers={"Retry-After": "7"})

        assert parse_retry_after(response) == 7.0

    @pytest.mark.parametrize("value", ["soon", "-5", "x" * 150, str(86400 * 400)])
    def test_invalid_values_ignored(self, value):
        assert parse_retry_after(httpx.Headers({"Retry-After": value})) is None

    def test_missing(self):
        assert parse_retry_after(httpx.Headers()) is None


class TestContinuationToken:

    def test_present(self):
        response = httpx.Response(200, headers={"X-Continuation": "+RID:~abc#RT:1"})

        assert get_continuation_token(response) == "+RID:~abc#RT:1"

    def test_case_insensitive(self):
        assert get_continuation_token(httpx.Headers({"x-continuation": "token"})) == "token"

    def test_absent(self):
        assert get_continuation_token(httpx.Response(200)) is None
