"""
BookClub Backend — Exception Hierarchy and Error Codes
=======================================================

What:  Application exceptions plus the per-domain error code catalogues.
How:   Every error code is an (HTTP status, code, message) triple. Services
       raise a domain exception carrying one of these codes; the global
       handlers in main.py render it as the error envelope:

           {"data": null, "message": "...", "code": "400-2", "request_id": "..."}

Exception Hierarchy:
    BookClubError (base)
    ├── DomainError
    │   ├── MemberException      (MemberErrorCode)
    │   ├── FollowException      (FollowErrorCode)
    │   ├── BookException        (BookErrorCode)
    │   └── ReviewException      (ReviewErrorCode)
    ├── DatabaseError            → 500, generic message
    └── RateLimitExceededError   → 429, Retry-After

Codes are namespaced by domain, so "404-1" from the member domain and
"404-1" from the follow domain are different errors; clients should read
`code` together with the endpoint they called.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(Enum):
    """
    Base for error code enums. Members are declared as
    `NAME = (status, code, message)`.
    """

    def __init__(self, status: int, code: str, message: str):
        self.status = status
        self.code = code
        self.message = message


class MemberErrorCode(ErrorCode):
    NON_EXISTING_USERNAME = (404, "404-1", "No member exists with that username.")
    INCORRECT_PASSWORD = (400, "400-1", "The password is incorrect.")
    DUPLICATE_USERNAME = (400, "400-2", "That username is already taken.")
    PASSWORD_TOO_LONG = (400, "400-3", "The password must be at most 72 bytes long.")
    INCORRECT_AUTHORIZED = (401, "401-1", "Password confirmation failed.")
    UNAUTHORIZED = (401, "401-2", "Authentication is required.")
    INVALID_TOKEN = (401, "401-3", "The access token is invalid or has expired.")


class FollowErrorCode(ErrorCode):
    NOT_FOUND_MEMBER = (404, "404-1", "No member exists with that username.")
    ALREADY_FOLLOWING = (400, "400-2", "You are already following this member.")
    CAN_NOT_FOLLOW_MYSELF = (400, "400-3", "You cannot follow yourself.")
    NOT_FOLLOWING = (400, "400-4", "You are not following this member.")


class BookErrorCode(ErrorCode):
    BOOK_NOT_FOUND = (404, "404-1", "The book does not exist.")
    ALREADY_FAVORITE = (400, "400-1", "The book is already in your favorites.")
    NOT_FAVORITE = (400, "400-2", "The book is not in your favorites.")
    DUPLICATE_ISBN = (400, "400-3", "A book with that ISBN is already registered.")


class ReviewErrorCode(ErrorCode):
    REVIEW_NOT_FOUND = (404, "404-1", "The review does not exist.")
    COMMENT_NOT_FOUND = (404, "404-2", "The comment does not exist.")
    BOOK_NOT_FOUND = (404, "404-3", "The book does not exist.")
    NOT_AUTHOR = (403, "403-1", "Only the author can change this.")


class BookClubError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        status_code: HTTP status the global handler responds with
        code:        Machine-readable error code returned to the client
        message:     User-facing description (safe to return in API response)
        context:     Additional debug info (logged but NOT returned to client)
    """

    status_code: int = 500
    code: str = "500"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class DomainError(BookClubError):
    """A business rule rejected the request; carries one ErrorCode."""

    def __init__(
        self,
        error_code: ErrorCode,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=error_code.message, context=context)
        self.error_code = error_code
        self.status_code = error_code.status
        self.code = error_code.code


class MemberException(DomainError):
    """Join, login, authentication and profile failures."""

    error_code: MemberErrorCode


class FollowException(DomainError):
    """Follow graph failures (self-follow, duplicate edge, unknown member)."""

    error_code: FollowErrorCode


class BookException(DomainError):
    """Catalog and favorite failures."""

    error_code: BookErrorCode


class ReviewException(DomainError):
    """Review and review comment failures."""

    error_code: ReviewErrorCode


class DatabaseError(BookClubError):
    """
    Raised when database operations fail unexpectedly.

    The message returned to the client is always generic; the original
    error type is kept in `context` for the server log.
    """

    code = "500-1"

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(BookClubError):
    """
    Raised when a client exceeds a per-IP request window.

    Rendered directly by RateLimitMiddleware, which runs outside the
    exception handlers.
    """

    status_code = 429
    code = "429-1"

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Rate limit exceeded. Please wait {retry_after} seconds before making more requests."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
