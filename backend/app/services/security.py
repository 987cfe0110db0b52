"""
BookClub Backend — Password Hashing and Access Tokens
======================================================

What:  The two cryptographic primitives the auth flow relies on.

Passwords:
    Salted bcrypt hashes (`bcrypt.hashpw` with a fresh `gensalt()` per
    password). Verification is `bcrypt.checkpw`, which re-derives the hash
    with the stored salt and compares in constant time. bcrypt only looks at
    the first 72 bytes of input and current releases refuse longer input, so
    callers check password_fits_bcrypt() first.

Access tokens:
    HS256-signed JWTs (PyJWT) with claims:
        sub  username of the member
        iat  issued-at (UTC)
        exp  expiry (iat + JWT_EXPIRATION_MINUTES)
    decode_access_token() verifies the signature and expiry before any claim
    is read; an unsigned or tampered token never yields a username.

Both hashing functions are CPU-bound (tens to hundreds of ms at the default
cost); async callers run them through starlette's run_in_threadpool.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

import bcrypt
import jwt

from app.config import settings

BCRYPT_MAX_BYTES = 72


def password_fits_bcrypt(password: str) -> bool:
    return len(password.encode("utf-8")) <= BCRYPT_MAX_BYTES


def hash_password(password: str) -> str:
    """Returns the bcrypt hash (with embedded salt and cost) as text."""
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("ascii")


def verify_password(password: str, hashed: str) -> bool:
    """
    Checks a candidate password against a stored bcrypt hash.

    Returns False (rather than raising) for over-long input or a stored
    value that is not a bcrypt hash.
    """
    if not password_fits_bcrypt(password):
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("ascii"))
    except ValueError:
        return False


def create_access_token(
    username: str, now: Optional[datetime] = None
) -> Tuple[str, datetime]:
    """
    Issues a signed access token for `username`.

    Returns:
        (token, expires_at) where expires_at is a timezone-aware UTC datetime
    """
    issued_at = now or datetime.now(timezone.utc)
    expires_at = issued_at + timedelta(minutes=settings.jwt_expiration_minutes)
    payload = {
        "sub": username,
        "iat": issued_at,
        "exp": expires_at,
    }
    token = jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
    return token, expires_at


def decode_access_token(token: str) -> str:
    """
    Verifies `token` and returns the username it was issued for.

    Raises:
        jwt.InvalidTokenError: bad signature, malformed token, missing
            claims, or expired (ExpiredSignatureError is a subclass)
    """
    payload = jwt.decode(
        token,
        settings.jwt_secret_key,
        algorithms=[settings.jwt_algorithm],
        options={"require": ["sub", "exp", "iat"]},
    )
    username = payload["sub"]
    if not isinstance(username, str) or not username:
        raise jwt.InvalidTokenError("Token subject must be a non-empty string")
    return username
