"""
Unit Tests for Security Module
Tests for: password hashing, JWT tokens
"""
import pytest
from datetime import datetime, timedelta, timezone
from jose import jwt
from fastapi import HTTPException

from app.core.security import (
    verify_password,
    get_password_hash,
    create_access_token,
    decode_token,
)
from app.core.config import settings


class TestPasswordHashing:
    """Test password hashing functions"""

    def test_hash_password_returns_different_value(self):
        password = "testpassword123"
        hashed = get_password_hash(password)

        assert hashed != password
        assert hashed.startswith("$2")

    def test_hash_password_different_each_time(self):
        """Bcrypt generates different salts"""
        password = "testpassword123"

        assert get_password_hash(password) != get_password_hash(password)

    def test_verify_password_correct(self):
        hashed = get_password_hash("testpassword123")

        assert verify_password("testpassword123", hashed) is True

    def test_verify_password_incorrect(self):
        hashed = get_password_hash("testpassword123")

        assert verify_password("wrongpassword", hashed) is False

    def test_hash_long_password_truncated(self):
        """Bcrypt has a 72 byte limit"""
        long_password = "a" * 100
        hashed = get_password_hash(long_password)

        assert verify_password(long_password, hashed) is True
        assert verify_password("a" * 72, hashed) is True

    def test_verify_against_non_bcrypt_value(self):
        assert verify_password("secret", "not-a-bcrypt-hash") is False


class TestAccessTokens:
    """Test JWT creation and decoding"""

    def test_create_and_decode(self):
        token = create_access_token({"sub": "user-1", "role": "admin"})

        payload = decode_token(token)

        assert payload["sub"] == "user-1"
        assert payload["role"] == "admin"
        assert payload["type"] == "access"

    def test_custom_expiry(self):
        token = create_access_token({"sub": "user-1"}, expires_delta=timedelta(minutes=5))

        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
        expires = datetime.fromtimestamp(payload["exp"], tz=timezone.utc)

        assert expires - datetime.now(timezone.utc) <= timedelta(minutes=5)

    def test_expired_token_rejected(self):
        token = create_access_token({"sub": "user-1"}, expires_delta=timedelta(seconds=-10))

        with pytest.raises(HTTPException) as exc_info:
            decode_token(token)

        assert exc_info.value.status_code == 401

    def test_token_signed_with_other_key_rejected(self):
        token = jwt.encode({"sub": "user-1"}, "some-other-key", algorithm=settings.JWT_ALGORITHM)

        with pytest.raises(HTTPException) as exc_info:
            decode_token(token)

        assert exc_info.value.status_code == 401

    def test_garbage_token_rejected(self):
        with pytest.raises(HTTPException):
            decode_token("not.a.token")
