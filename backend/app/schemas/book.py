"""Book catalog schemas."""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class BookCreateRequest(BaseModel):
    """Body of POST /books."""
    title: str = Field(min_length=1, max_length=255)
    author: str = Field(min_length=1, max_length=255)
    publisher: Optional[str] = Field(default=None, max_length=255)
    isbn: Optional[str] = Field(default=None, description="ISBN-10 or ISBN-13, hyphens allowed")
    description: Optional[str] = Field(default=None, max_length=10000)
    image_url: Optional[str] = Field(default=None, max_length=500)
    published_date: Optional[date] = None

    @field_validator("isbn")
    @classmethod
    def normalize_isbn(cls, v: Optional[str]) -> Optional[str]:
        """Strips hyphens/spaces and checks the remaining length."""
        if v is None:
            return None
        digits = v.replace("-", "").replace(" ", "").upper()
        if len(digits) not in (10, 13) or not digits[:-1].isdigit():
            raise ValueError("isbn must be 10 or 13 digits")
        if not (digits[-1].isdigit() or (len(digits) == 10 and digits[-1] == "X")):
            raise ValueError("isbn must be 10 or 13 digits")
        return digits


class BookResponse(BaseModel):
    id: int
    title: str
    author: str
    publisher: Optional[str] = None
    isbn: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    published_date: Optional[date] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class BookDetailResponse(BookResponse):
    """GET /books/{id}: the book plus aggregate counters."""
    favorite_count: int = 0
    review_count: int = 0
    average_rating: Optional[float] = Field(
        default=None, description="Mean review rating rounded to 2 decimals; null without reviews"
    )
