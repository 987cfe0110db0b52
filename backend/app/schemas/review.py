"""Review and review comment schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from app.schemas.member import MemberSummary


class ReviewCreateRequest(BaseModel):
    content: str = Field(min_length=1, max_length=5000)
    rating: int = Field(ge=1, le=5)


class ReviewUpdateRequest(BaseModel):
    """Partial update; omitted fields keep their value."""
    content: Optional[str] = Field(default=None, min_length=1, max_length=5000)
    rating: Optional[int] = Field(default=None, ge=1, le=5)


class ReviewResponse(BaseModel):
    id: int
    book_id: int
    author: MemberSummary
    content: str
    rating: int
    created_at: datetime
    updated_at: datetime


class CommentCreateRequest(BaseModel):
    content: str = Field(min_length=1, max_length=1000)


class CommentResponse(BaseModel):
    id: int
    review_id: int
    author: MemberSummary
    content: str
    created_at: datetime
