"""
Tests for caller identity token validation.
"""

import time

import pytest

from utils.identity import (
    IdentityValidationError,
    MAX_CLOCK_SKEW_SECONDS,
    extract_bearer_token,
    issue_token,
    validate_identity_token,
)

SECRET = "identity_test_secret"


class TestIdentityTokens:

    def test_valid_token_returns_user_id(self):
        token = issue_token("user_1", SECRET)
        assert validate_identity_token(token, SECRET) == "user_1"

    def test_wrong_secret_rejected(self):
        token = issue_token("user_1", SECRET)
        with pytest.raises(IdentityValidationError, match="Invalid signature"):
            validate_identity_token(token, "other_secret")

    def test_tampered_user_id_rejected(self):
        _, issued_at, signature = issue_token("user_1", SECRET).split(".")
        with pytest.raises(IdentityValidationError, match="Invalid signature"):
            validate_identity_token(f"admin.{issued_at}.{signature}", SECRET)

    def test_expired_token_rejected(self):
        token = issue_token("user_1", SECRET, issued_at=int(time.time()) - 7200)
        with pytest.raises(IdentityValidationError, match="too old"):
            validate_identity_token(token, SECRET, max_age_seconds=3600)

    def test_future_token_rejected(self):
        token = issue_token("user_1", SECRET, issued_at=int(time.time()) + MAX_CLOCK_SKEW_SECONDS + 60)
        with pytest.raises(IdentityValidationError, match="future"):
            validate_identity_token(token, SECRET)

    def test_small_clock_skew_tolerated(self):
        token = issue_token("user_1", SECRET, issued_at=int(time.time()) + 10)
        assert validate_identity_token(token, SECRET) == "user_1"

    @pytest.mark.parametrize("token", ["", "abc", "a.b", "user.notanumber.sig", ".123.sig", "a.b.c.d"])
    def test_malformed_tokens_rejected(self, token):
        with pytest.raises(IdentityValidationError):
            validate_identity_token(token, SECRET)

    def test_missing_secret_rejected(self):
        token = issue_token("user_1", SECRET)
        with pytest.raises(IdentityValidationError, match="not configured"):
            validate_identity_token(token, "")

    @pytest.mark.parametrize("user_id", ["", "has.dot"])
    def test_issue_rejects_unusable_user_ids(self, user_id):
        with pytest.raises(ValueError):
            issue_token(user_id, SECRET)


class TestBearerExtraction:

    @pytest.mark.parametrize("header,expected", [
        ("Bearer abc.1.def", "abc.1.def"),
        ("bearer abc.1.def", "abc.1.def"),
        ("Bearer   abc.1.def  ", "abc.1.def"),
        ("Basic dXNlcjpwYXNz", None),
        ("Bearer ", None),
        ("", None),
        (None, None),
    ])
    def test_extract(self, header, expected):
        assert extract_bearer_token(header) == expected
