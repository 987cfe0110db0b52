"""Follow route handlers, nested under /members/{username}."""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.models.member import Member
from app.schemas.common import ErrorResponse, GenericResponse
from app.schemas.member import MemberSummary
from app.services.auth_service import get_current_member
from app.services.follow_service import follow_service

router = APIRouter(prefix="/members", tags=["Follows"])

FOLLOW_ERRORS = {
    400: {"description": "Self-follow, duplicate or missing edge", "model": ErrorResponse},
    401: {"description": "Missing or invalid token", "model": ErrorResponse},
    404: {"description": "Unknown member", "model": ErrorResponse},
}


@router.post(
    "/{username}/follow",
    status_code=201,
    response_model=GenericResponse[MemberSummary],
    responses=FOLLOW_ERRORS,
    summary="Follow a member",
)
async def follow(
    username: str,
    member: Member = Depends(get_current_member),
    db: AsyncSession = Depends(get_db_session),
) -> GenericResponse[MemberSummary]:
    followee = await follow_service.follow(db, member, username)
    return GenericResponse[MemberSummary].of(
        MemberSummary.model_validate(followee), f"Now following {followee.username}"
    )


@router.delete(
    "/{username}/follow",
    response_model=GenericResponse[MemberSummary],
    responses=FOLLOW_ERRORS,
    summary="Unfollow a member",
)
async def unfollow(
    username: str,
    member: Member = Depends(get_current_member),
    db: AsyncSession = Depends(get_db_session),
) -> GenericResponse[MemberSummary]:
    followee = await follow_service.unfollow(db, member, username)
    return GenericResponse[MemberSummary].of(
        MemberSummary.model_validate(followee), f"Unfollowed {followee.username}"
    )


@router.get(
    "/{username}/followers",
    response_model=GenericResponse[List[MemberSummary]],
    summary="List a member's followers",
)
async def followers(
    username: str,
    db: AsyncSession = Depends(get_db_session),
) -> GenericResponse[List[MemberSummary]]:
    members = await follow_service.list_followers(db, username)
    return GenericResponse[List[MemberSummary]].of(
        [MemberSummary.model_validate(m) for m in members], "Followers retrieved"
    )


@router.get(
    "/{username}/followings",
    response_model=GenericResponse[List[MemberSummary]],
    summary="List the members a member follows",
)
async def followings(
    username: str,
    db: AsyncSession = Depends(get_db_session),
) -> GenericResponse[List[MemberSummary]]:
    members = await follow_service.list_followings(db, username)
    return GenericResponse[List[MemberSummary]].of(
        [MemberSummary.model_validate(m) for m in members], "Followings retrieved"
    )
