"""
BookClub Backend — Shared Response Envelopes
=============================================

What:  The uniform wrappers every endpoint answers with.

    Success:  {"data": <payload or null>, "message": "Login succeeded"}
    Error:    {"data": null, "message": "...", "code": "400-2", "request_id": "a1b2c3d4"}

Lists are returned as a PageResponse inside `data`, using the same
limit + 1 cursor pagination for books and reviews.
"""

from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class GenericResponse(BaseModel, Generic[T]):
    """Success envelope carrying an optional payload and a human-readable message."""

    data: Optional[T] = Field(default=None, description="Response payload")
    message: str = Field(description="Human-readable result message")

    @classmethod
    def of(cls, data: Optional[T] = None, message: str = "") -> "GenericResponse[T]":
        return cls(data=data, message=message)


class ErrorResponse(BaseModel):
    """
    Error envelope produced by the global exception handlers.

    Fields:
        data: Always null for errors (keeps the envelope shape uniform)
        message: Human-readable description for display to users
        code: Domain error code, e.g. "400-3" for CAN_NOT_FOLLOW_MYSELF
        request_id: Correlation ID for tracing this error in server logs
    """
    data: None = None
    message: str = Field(description="Human-readable error description")
    code: str = Field(description="Machine-readable error code")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class PageResponse(BaseModel, Generic[T]):
    """
    One page of a cursor-paginated list.

    next_cursor is the id of the last item on this page; pass it back as
    `cursor` to fetch the next page. It is null when has_more is false.
    """
    items: List[T] = Field(description="Items on this page")
    total_count: int = Field(description="Total number of items matching the filters")
    next_cursor: Optional[int] = Field(default=None, description="Cursor for the next page")
    has_more: bool = Field(description="Whether more pages are available")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
