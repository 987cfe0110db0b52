"""
BookClub Backend — Password Hashing and Token Tests
====================================================

What we test:
    ✅ Stored hashes are salted bcrypt, never the plaintext
    ✅ verify_password accepts the right password only
    ✅ Over-long and non-bcrypt inputs verify as False instead of raising
    ✅ Tokens round-trip to the username they were issued for
    ✅ Expired, tampered, foreign-key and subject-less tokens are rejected
"""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from app.config import settings
from app.services.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    password_fits_bcrypt,
    verify_password,
)


class TestPasswordHashing:

    def test_hash_is_not_plaintext(self):
        hashed = hash_password("s3cret-password")
        assert hashed != "s3cret-password"
        assert hashed.startswith("$2")

    def test_same_password_gets_different_salts(self):
        assert hash_password("s3cret-password") != hash_password("s3cret-password")

    def test_verify_matches_only_original(self):
        hashed = hash_password("s3cret-password")
        assert verify_password("s3cret-password", hashed) is True
        assert verify_password("S3cret-password", hashed) is False

    def test_verify_rejects_non_bcrypt_value(self):
        assert verify_password("plain", "plain") is False

    def test_bcrypt_byte_limit(self):
        assert password_fits_bcrypt("a" * 72)
        assert not password_fits_bcrypt("a" * 73)
        # 36 two-byte characters = 72 bytes; one more goes over
        assert password_fits_bcrypt("é" * 36)
        assert not password_fits_bcrypt("é" * 37)

    def test_verify_over_long_password_is_false(self):
        hashed = hash_password("a" * 72)
        assert verify_password("a" * 73, hashed) is False


class TestAccessTokens:

    def test_round_trip(self):
        token, expires_at = create_access_token("reader01")
        assert decode_access_token(token) == "reader01"
        assert expires_at > datetime.now(timezone.utc)

    def test_expiry_follows_setting(self):
        issued = datetime(2025, 1, 1, tzinfo=timezone.utc)
        _, expires_at = create_access_token("reader01", now=issued)
        assert expires_at == issued + timedelta(minutes=settings.jwt_expiration_minutes)

    def test_expired_token_rejected(self):
        issued = datetime.now(timezone.utc) - timedelta(
            minutes=settings.jwt_expiration_minutes + 5
        )
        token, _ = create_access_token("reader01", now=issued)
        with pytest.raises(jwt.ExpiredSignatureError):
            decode_access_token(token)

    def test_tampered_token_rejected(self):
        token, _ = create_access_token("reader01")
        header, payload, signature = token.split(".")
        forged = jwt.encode(
            {"sub": "admin", "iat": datetime.now(timezone.utc),
             "exp": datetime.now(timezone.utc) + timedelta(hours=1)},
            settings.jwt_secret_key,
            algorithm=settings.jwt_algorithm,
        ).split(".")[1]
        with pytest.raises(jwt.InvalidTokenError):
            decode_access_token(f"{header}.{forged}.{signature}")

    def test_token_signed_with_other_key_rejected(self):
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {"sub": "reader01", "iat": now, "exp": now + timedelta(hours=1)},
            "some-other-secret-key-that-is-long-enough",
            algorithm="HS256",
        )
        with pytest.raises(jwt.InvalidTokenError):
            decode_access_token(token)

    def test_token_without_subject_rejected(self):
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {"iat": now, "exp": now + timedelta(hours=1)},
            settings.jwt_secret_key,
            algorithm=settings.jwt_algorithm,
        )
        with pytest.raises(jwt.InvalidTokenError):
            decode_access_token(token)

    def test_garbage_rejected(self):
        with pytest.raises(jwt.InvalidTokenError):
            decode_access_token("not-a-jwt")
