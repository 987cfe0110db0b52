"""
BookClub Backend — Auth Service
================================

What:  Join, login and request authentication.
Who:   Member routes call join/login/confirm_password directly; every route
       that needs the caller's identity depends on get_current_member.

Authentication Flow:
    ┌──────────────┐   ┌────────────────┐   ┌──────────────┐   ┌──────────┐
    │ Authorization│──▶│ "Bearer <jwt>" │──▶│ verify + exp │──▶│ load     │
    │ header       │   │ parse          │   │ (PyJWT)      │   │ member   │
    └──────────────┘   └────────────────┘   └──────────────┘   └──────────┘
          │ missing            │ malformed          │ bad/expired      │ gone
          ▼                    ▼                    ▼                  ▼
      UNAUTHORIZED        UNAUTHORIZED        INVALID_TOKEN      UNAUTHORIZED

All four failures are 401s; the codes let the client tell "log in first"
apart from "your token is no good".
"""

import logging
from typing import Mapping, Optional

import jwt
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from app.database import get_db_session
from app.exceptions import MemberErrorCode, MemberException
from app.models.member import Member
from app.schemas.member import JoinRequest, LoginResponse, MemberResponse
from app.services.member_service import member_service
from app.services.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    password_fits_bcrypt,
    verify_password,
)

logger = logging.getLogger(__name__)

BEARER_SCHEME = "bearer"


def extract_bearer_token(headers: Mapping[str, str]) -> Optional[str]:
    """
    Returns the token from an `Authorization: Bearer <token>` header, or None
    when the header is absent or uses another scheme.

    Works with Starlette's case-insensitive Headers as well as plain dicts.
    """
    value = headers.get("authorization") or headers.get("Authorization")
    if not value:
        return None
    scheme, _, token = value.strip().partition(" ")
    token = token.strip()
    if scheme.lower() != BEARER_SCHEME or not token or " " in token:
        return None
    return token


class AuthService:

    async def join(self, db: AsyncSession, registration: JoinRequest) -> Member:
        """
        Register a new member with a bcrypt-hashed password.

        Raises:
            MemberException(DUPLICATE_USERNAME): username already taken
            MemberException(PASSWORD_TOO_LONG): password over 72 UTF-8 bytes
        """
        if not password_fits_bcrypt(registration.password):
            raise MemberException(MemberErrorCode.PASSWORD_TOO_LONG)

        password_hash = await run_in_threadpool(hash_password, registration.password)
        return await member_service.create(
            db,
            username=registration.username,
            password_hash=password_hash,
            email=registration.email,
            nickname=registration.nickname,
            gender=registration.gender,
            birth=registration.birth,
        )

    async def login(self, db: AsyncSession, username: str, password: str) -> LoginResponse:
        """
        Check credentials and issue an access token.

        Raises:
            MemberException(NON_EXISTING_USERNAME): no such member
            MemberException(INCORRECT_PASSWORD): password does not match
        """
        member = await member_service.get_member(db, username)
        if member is None:
            raise MemberException(MemberErrorCode.NON_EXISTING_USERNAME)

        if not await run_in_threadpool(verify_password, password, member.password):
            logger.info("Failed login for member %s", username)
            raise MemberException(MemberErrorCode.INCORRECT_PASSWORD)

        token, expires_at = create_access_token(member.username)
        logger.info("Member %s logged in", member.username)
        return LoginResponse(
            access_token=token,
            expires_at=expires_at,
            member=MemberResponse.model_validate(member),
        )

    async def authenticate(self, db: AsyncSession, headers: Mapping[str, str]) -> Member:
        """
        Resolve the member a request was made by.

        Raises:
            MemberException(UNAUTHORIZED): header missing/malformed, or the
                token's member no longer exists
            MemberException(INVALID_TOKEN): signature, format or expiry check failed
        """
        token = extract_bearer_token(headers)
        if token is None:
            raise MemberException(MemberErrorCode.UNAUTHORIZED)

        try:
            username = decode_access_token(token)
        except jwt.InvalidTokenError as e:
            logger.info("Rejected access token: %s", type(e).__name__)
            raise MemberException(MemberErrorCode.INVALID_TOKEN)

        member = await member_service.get_member(db, username)
        if member is None:
            raise MemberException(MemberErrorCode.UNAUTHORIZED)
        return member

    async def confirm_password(self, member: Member, password: str) -> None:
        """
        Re-confirm the caller's password before a destructive action.

        Raises:
            MemberException(INCORRECT_AUTHORIZED): password does not match
        """
        if not await run_in_threadpool(verify_password, password, member.password):
            raise MemberException(MemberErrorCode.INCORRECT_AUTHORIZED)


# ── Singleton Instance ────────────────────────────────────────────────────
auth_service = AuthService()


async def get_current_member(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> Member:
    """
    FastAPI dependency resolving the authenticated member.

    Shares the request's session with the route handler, so the returned
    Member can be modified and the change commits with the request.
    """
    return await auth_service.authenticate(db, request.headers)
