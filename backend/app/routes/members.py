"""
BookClub Backend — Member Route Handlers
========================================

What:  Join, login, and the caller's own profile (`/members/mine`).
Who:   Called by the frontend sign-up, login and my-page screens.

Authentication:
    `/members/mine` endpoints depend on get_current_member, which reads
    `Authorization: Bearer <token>` and answers 401 on any problem before
    the handler runs.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.models.member import Member
from app.schemas.common import ErrorResponse, GenericResponse
from app.schemas.member import (
    JoinRequest,
    LoginRequest,
    LoginResponse,
    MemberProfileResponse,
    MemberResponse,
    MineUpdateRequest,
    PasswordRequest,
)
from app.services.auth_service import auth_service, get_current_member
from app.services.member_service import member_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/members", tags=["Members"])

AUTH_RESPONSES = {401: {"description": "Missing or invalid token", "model": ErrorResponse}}


@router.post(
    "",
    status_code=201,
    response_model=GenericResponse[MemberResponse],
    responses={400: {"description": "Duplicate username or invalid body", "model": ErrorResponse}},
    summary="Join",
)
async def join(
    body: JoinRequest,
    db: AsyncSession = Depends(get_db_session),
) -> GenericResponse[MemberResponse]:
    member = await auth_service.join(db, body)
    return GenericResponse[MemberResponse].of(
        MemberResponse.model_validate(member), "Join succeeded"
    )


@router.post(
    "/login",
    response_model=GenericResponse[LoginResponse],
    responses={
        400: {"description": "Incorrect password", "model": ErrorResponse},
        404: {"description": "Unknown username", "model": ErrorResponse},
    },
    summary="Log in and receive a bearer token",
)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> GenericResponse[LoginResponse]:
    result = await auth_service.login(db, body.username, body.password)
    return GenericResponse[LoginResponse].of(result, "Login succeeded")


@router.get(
    "/mine",
    response_model=GenericResponse[MemberResponse],
    responses=AUTH_RESPONSES,
    summary="Get my profile",
)
async def get_mine(
    member: Member = Depends(get_current_member),
) -> GenericResponse[MemberResponse]:
    return GenericResponse[MemberResponse].of(
        MemberResponse.model_validate(member), "Profile retrieved"
    )


@router.put(
    "/mine",
    response_model=GenericResponse[MemberResponse],
    responses=AUTH_RESPONSES,
    summary="Update my profile",
    description="Partial update: only the fields present in the body are changed.",
)
async def update_mine(
    body: MineUpdateRequest,
    member: Member = Depends(get_current_member),
    db: AsyncSession = Depends(get_db_session),
) -> GenericResponse[MemberResponse]:
    await member_service.modify(
        db,
        member,
        password=body.password,
        email=body.email,
        gender=body.gender,
        nickname=body.nickname,
        birth=body.birth,
    )
    return GenericResponse[MemberResponse].of(
        MemberResponse.model_validate(member), "Profile updated"
    )


@router.delete(
    "/mine",
    response_model=GenericResponse[None],
    responses=AUTH_RESPONSES,
    summary="Delete my account",
    description="Requires the current password in the body; a mismatch leaves the account intact.",
)
async def delete_mine(
    body: PasswordRequest,
    member: Member = Depends(get_current_member),
    db: AsyncSession = Depends(get_db_session),
) -> GenericResponse[None]:
    await auth_service.confirm_password(member, body.password)
    await member_service.delete(db, member)
    return GenericResponse[None].of(None, "Account deleted")


@router.get(
    "/{username}",
    response_model=GenericResponse[MemberProfileResponse],
    responses={404: {"description": "Unknown username", "model": ErrorResponse}},
    summary="Get a member's public profile",
)
async def get_profile(
    username: str,
    db: AsyncSession = Depends(get_db_session),
) -> GenericResponse[MemberProfileResponse]:
    profile = await member_service.get_profile(db, username)
    return GenericResponse[MemberProfileResponse].of(profile, "Profile retrieved")
