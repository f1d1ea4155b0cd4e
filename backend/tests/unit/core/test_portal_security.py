"""
Unit Tests for Security Module
Tests for: password hashing, typed JWT tokens
"""
from datetime import timedelta

import pytest

from prefect_portal.core.exceptions import InvalidTokenError
from prefect_portal.core.security import (
    create_access_token,
    create_refresh_token,
    decode_token,
    get_password_hash,
    verify_password,
)


class TestPasswordHashing:
    def test_hash_differs_from_password(self):
        hashed = get_password_hash("testpassword123")

        assert hashed != "testpassword123"

    def test_hash_is_salted(self):
        assert get_password_hash("testpassword123") != get_password_hash("testpassword123")

    def test_verify_correct_password(self):
        hashed = get_password_hash("testpassword123")

        assert verify_password("testpassword123", hashed) is True

    def test_verify_wrong_password(self):
        hashed = get_password_hash("testpassword123")

        assert verify_password("wrongpassword", hashed) is False


class TestTokens:
    def test_access_token_round_trip(self):
        token = create_access_token({"sub": "user-1", "email": "a@school.edu"})
        payload = decode_token(token, expected_type="access")

        assert payload["sub"] == "user-1"
        assert payload["type"] == "access"

    def test_refresh_token_rejected_as_access(self):
        token = create_refresh_token({"sub": "user-1"})

        with pytest.raises(InvalidTokenError):
            decode_token(token, expected_type="access")

    def test_expired_token_rejected(self):
        token = create_access_token({"sub": "user-1"}, expires_delta=timedelta(seconds=-5))

        with pytest.raises(InvalidTokenError):
            decode_token(token)

    def test_garbage_token_rejected(self):
        with pytest.raises(InvalidTokenError):
            decode_token("not-a-jwt")
