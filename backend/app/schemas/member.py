"""
BookClub Backend — Member Schemas
==================================

Request bodies for join / login / profile update / account deletion and the
member representations returned to clients. The password hash is never
part of any response model.

Password length is capped at 72 characters here; AuthService additionally
rejects passwords whose UTF-8 encoding exceeds bcrypt's 72-byte limit.
"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field

from app.models.member import Gender

USERNAME_PATTERN = r"^[A-Za-z0-9_]+$"
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class JoinRequest(BaseModel):
    """Body of POST /members."""
    username: str = Field(min_length=4, max_length=50, pattern=USERNAME_PATTERN)
    password: str = Field(min_length=8, max_length=72)
    email: str = Field(max_length=255, pattern=EMAIL_PATTERN)
    gender: Optional[Gender] = None
    nickname: str = Field(min_length=1, max_length=50)
    birth: Optional[date] = None


class LoginRequest(BaseModel):
    """Body of POST /members/login."""
    username: str = Field(min_length=1, max_length=50)
    password: str = Field(min_length=1, max_length=72)


class MineUpdateRequest(BaseModel):
    """
    Body of PUT /members/mine.

    Every field is optional; only fields present in the body are changed.
    """
    password: Optional[str] = Field(default=None, min_length=8, max_length=72)
    email: Optional[str] = Field(default=None, max_length=255, pattern=EMAIL_PATTERN)
    gender: Optional[Gender] = None
    nickname: Optional[str] = Field(default=None, min_length=1, max_length=50)
    birth: Optional[date] = None


class PasswordRequest(BaseModel):
    """Body of DELETE /members/mine: the current password, re-confirmed."""
    password: str = Field(min_length=1, max_length=72)


class MemberResponse(BaseModel):
    """The caller's own profile."""
    id: int
    username: str
    email: str
    gender: Optional[Gender] = None
    nickname: str
    birth: Optional[date] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class MemberSummary(BaseModel):
    """Public view of a member (review authors, follower lists)."""
    username: str
    nickname: str

    model_config = {"from_attributes": True}


class MemberProfileResponse(MemberSummary):
    """Public profile returned by GET /members/{username}."""
    follower_count: int = Field(description="Members following this member")
    following_count: int = Field(description="Members this member follows")


class LoginResponse(BaseModel):
    """
    Returned by POST /members/login.

    Send `access_token` back as `Authorization: Bearer <access_token>`.
    """
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
    member: MemberResponse
