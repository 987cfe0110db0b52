"""
BookClub Backend — Book and Favorite Route Handlers
====================================================

What:  Book catalog (register, search, detail) and favorite marks.

Route order matters: `/books/favorites` is declared before `/books/{book_id}`
so the literal path is not captured by the id parameter.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.models.member import Member
from app.schemas.book import BookCreateRequest, BookDetailResponse, BookResponse
from app.schemas.common import ErrorResponse, GenericResponse, PageResponse
from app.services.auth_service import get_current_member
from app.services.book_service import book_service
from app.services.favorite_service import favorite_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/books", tags=["Books"])


@router.post(
    "",
    status_code=201,
    response_model=GenericResponse[BookResponse],
    responses={
        400: {"description": "Duplicate ISBN or invalid body", "model": ErrorResponse},
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
    },
    summary="Register a book",
)
async def create_book(
    body: BookCreateRequest,
    member: Member = Depends(get_current_member),
    db: AsyncSession = Depends(get_db_session),
) -> GenericResponse[BookResponse]:
    book = await book_service.create_book(db, body)
    logger.info("Book %s registered by %s", book.id, member.username)
    return GenericResponse[BookResponse].of(BookResponse.model_validate(book), "Book registered")


@router.get(
    "",
    response_model=GenericResponse[PageResponse[BookResponse]],
    summary="Search and list books",
    description=(
        "Newest first. Pass `next_cursor` from the previous page as `cursor` "
        "to continue. `query` matches title or author."
    ),
)
async def list_books(
    limit: int = Query(default=20, ge=1, le=100, description="Items per page (max 100)"),
    cursor: Optional[int] = Query(default=None, ge=1, description="Id of the last book seen"),
    query: Optional[str] = Query(default=None, max_length=100, description="Title/author search"),
    db: AsyncSession = Depends(get_db_session),
) -> GenericResponse[PageResponse[BookResponse]]:
    page = await book_service.list_books(db, limit=limit, cursor=cursor, query=query)
    return GenericResponse[PageResponse[BookResponse]].of(page, "Books retrieved")


@router.get(
    "/favorites",
    response_model=GenericResponse[List[BookResponse]],
    responses={401: {"description": "Missing or invalid token", "model": ErrorResponse}},
    summary="List my favorite books",
)
async def my_favorites(
    member: Member = Depends(get_current_member),
    db: AsyncSession = Depends(get_db_session),
) -> GenericResponse[List[BookResponse]]:
    books = await favorite_service.list_for_member(db, member)
    return GenericResponse[List[BookResponse]].of(
        [BookResponse.model_validate(book) for book in books], "Favorites retrieved"
    )


@router.get(
    "/{book_id}",
    response_model=GenericResponse[BookDetailResponse],
    responses={404: {"description": "Book not found", "model": ErrorResponse}},
    summary="Get a book with favorite and review statistics",
)
async def get_book(
    book_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> GenericResponse[BookDetailResponse]:
    detail = await book_service.get_book_detail(db, book_id)
    return GenericResponse[BookDetailResponse].of(detail, "Book retrieved")


@router.post(
    "/{book_id}/favorite",
    status_code=201,
    response_model=GenericResponse[BookResponse],
    responses={
        400: {"description": "Already a favorite", "model": ErrorResponse},
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        404: {"description": "Book not found", "model": ErrorResponse},
    },
    summary="Add a book to my favorites",
)
async def favorite(
    book_id: int,
    member: Member = Depends(get_current_member),
    db: AsyncSession = Depends(get_db_session),
) -> GenericResponse[BookResponse]:
    book = await favorite_service.add(db, member, book_id)
    return GenericResponse[BookResponse].of(BookResponse.model_validate(book), "Added to favorites")


@router.delete(
    "/{book_id}/favorite",
    response_model=GenericResponse[None],
    responses={
        400: {"description": "Not a favorite", "model": ErrorResponse},
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        404: {"description": "Book not found", "model": ErrorResponse},
    },
    summary="Remove a book from my favorites",
)
async def unfavorite(
    book_id: int,
    member: Member = Depends(get_current_member),
    db: AsyncSession = Depends(get_db_session),
) -> GenericResponse[None]:
    await favorite_service.remove(db, member, book_id)
    return GenericResponse[None].of(None, "Removed from favorites")
