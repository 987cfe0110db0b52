"""Review and review comment route handlers."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.models.member import Member
from app.schemas.common import ErrorResponse, GenericResponse, PageResponse
from app.schemas.review import (
    CommentCreateRequest,
    CommentResponse,
    ReviewCreateRequest,
    ReviewResponse,
    ReviewUpdateRequest,
)
from app.services.auth_service import get_current_member
from app.services.review_service import review_service

router = APIRouter(tags=["Reviews"])

WRITE_ERRORS = {
    401: {"description": "Missing or invalid token", "model": ErrorResponse},
    403: {"description": "Not the author", "model": ErrorResponse},
    404: {"description": "Book, review or comment not found", "model": ErrorResponse},
}


@router.post(
    "/books/{book_id}/reviews",
    status_code=201,
    response_model=GenericResponse[ReviewResponse],
    responses=WRITE_ERRORS,
    summary="Review a book",
)
async def create_review(
    book_id: int,
    body: ReviewCreateRequest,
    member: Member = Depends(get_current_member),
    db: AsyncSession = Depends(get_db_session),
) -> GenericResponse[ReviewResponse]:
    review = await review_service.create_review(db, member, book_id, body)
    return GenericResponse[ReviewResponse].of(review, "Review created")


@router.get(
    "/books/{book_id}/reviews",
    response_model=GenericResponse[PageResponse[ReviewResponse]],
    responses={404: {"description": "Book not found", "model": ErrorResponse}},
    summary="List reviews of a book",
)
async def list_reviews(
    book_id: int,
    limit: int = Query(default=20, ge=1, le=100),
    cursor: Optional[int] = Query(default=None, ge=1, description="Id of the last review seen"),
    db: AsyncSession = Depends(get_db_session),
) -> GenericResponse[PageResponse[ReviewResponse]]:
    page = await review_service.list_reviews(db, book_id, limit=limit, cursor=cursor)
    return GenericResponse[PageResponse[ReviewResponse]].of(page, "Reviews retrieved")


@router.get(
    "/reviews/{review_id}",
    response_model=GenericResponse[ReviewResponse],
    responses={404: {"description": "Review not found", "model": ErrorResponse}},
    summary="Get a review",
)
async def get_review(
    review_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> GenericResponse[ReviewResponse]:
    review = await review_service.get_review(db, review_id)
    return GenericResponse[ReviewResponse].of(review, "Review retrieved")


@router.put(
    "/reviews/{review_id}",
    response_model=GenericResponse[ReviewResponse],
    responses=WRITE_ERRORS,
    summary="Edit my review",
)
async def update_review(
    review_id: int,
    body: ReviewUpdateRequest,
    member: Member = Depends(get_current_member),
    db: AsyncSession = Depends(get_db_session),
) -> GenericResponse[ReviewResponse]:
    review = await review_service.update_review(db, member, review_id, body)
    return GenericResponse[ReviewResponse].of(review, "Review updated")


@router.delete(
    "/reviews/{review_id}",
    response_model=GenericResponse[None],
    responses=WRITE_ERRORS,
    summary="Delete my review",
)
async def delete_review(
    review_id: int,
    member: Member = Depends(get_current_member),
    db: AsyncSession = Depends(get_db_session),
) -> GenericResponse[None]:
    await review_service.delete_review(db, member, review_id)
    return GenericResponse[None].of(None, "Review deleted")


@router.post(
    "/reviews/{review_id}/comments",
    status_code=201,
    response_model=GenericResponse[CommentResponse],
    responses=WRITE_ERRORS,
    summary="Comment on a review",
)
async def add_comment(
    review_id: int,
    body: CommentCreateRequest,
    member: Member = Depends(get_current_member),
    db: AsyncSession = Depends(get_db_session),
) -> GenericResponse[CommentResponse]:
    comment = await review_service.add_comment(db, member, review_id, body)
    return GenericResponse[CommentResponse].of(comment, "Comment created")


@router.get(
    "/reviews/{review_id}/comments",
    response_model=GenericResponse[List[CommentResponse]],
    responses={404: {"description": "Review not found", "model": ErrorResponse}},
    summary="List comments on a review",
)
async def list_comments(
    review_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> GenericResponse[List[CommentResponse]]:
    comments = await review_service.list_comments(db, review_id)
    return GenericResponse[List[CommentResponse]].of(comments, "Comments retrieved")


@router.delete(
    "/comments/{comment_id}",
    response_model=GenericResponse[None],
    responses=WRITE_ERRORS,
    summary="Delete my comment",
)
async def delete_comment(
    comment_id: int,
    member: Member = Depends(get_current_member),
    db: AsyncSession = Depends(get_db_session),
) -> GenericResponse[None]:
    await review_service.delete_comment(db, member, comment_id)
    return GenericResponse[None].of(None, "Comment deleted")
