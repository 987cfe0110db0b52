"""
BookClub Backend — Book Service
================================

What:  Catalog operations: register, fetch with aggregates, search/list.

Pagination Strategy (Cursor-Based):
    Books are listed newest first by id. The cursor is the id of the last
    book on the previous page; the next page is WHERE id < :cursor. One
    extra row is fetched to compute has_more without a second query, and a
    separate COUNT reports the total for the same filters.
"""

import logging
from typing import Optional

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import BookErrorCode, BookException, DatabaseError
from app.models.book import Book, Favorite
from app.models.review import Review
from app.schemas.book import BookCreateRequest, BookDetailResponse, BookResponse
from app.schemas.common import PageResponse

logger = logging.getLogger(__name__)

LIKE_ESCAPE = "\\"


def _escape_like(term: str) -> str:
    """Makes % and _ in a search term match literally."""
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


class BookService:
    """
    Responsibilities:
        - create_book(): register a book, unique by ISBN when one is given
        - get_book(): fetch or raise BOOK_NOT_FOUND
        - get_book_detail(): book + favorite count, review count, average rating
        - list_books(): title/author search with cursor pagination
    """

    async def create_book(self, db: AsyncSession, request: BookCreateRequest) -> Book:
        if request.isbn is not None:
            existing = await db.execute(select(Book.id).where(Book.isbn == request.isbn))
            if existing.scalar_one_or_none() is not None:
                raise BookException(BookErrorCode.DUPLICATE_ISBN)

        book = Book(**request.model_dump())
        db.add(book)
        try:
            await db.flush()
        except IntegrityError:
            raise BookException(BookErrorCode.DUPLICATE_ISBN)

        logger.info("Book registered: %s (id=%s)", book.title, book.id)
        return book

    async def get_book(self, db: AsyncSession, book_id: int) -> Book:
        book = await db.get(Book, book_id)
        if book is None:
            raise BookException(BookErrorCode.BOOK_NOT_FOUND, context={"book_id": book_id})
        return book

    async def get_book_detail(self, db: AsyncSession, book_id: int) -> BookDetailResponse:
        book = await self.get_book(db, book_id)

        favorite_count = await db.scalar(
            select(func.count()).select_from(Favorite).where(Favorite.book_id == book_id)
        )
        review_stats = await db.execute(
            select(func.count(Review.id), func.avg(Review.rating)).where(Review.book_id == book_id)
        )
        review_count, average_rating = review_stats.one()

        return BookDetailResponse(
            **BookResponse.model_validate(book).model_dump(),
            favorite_count=favorite_count or 0,
            review_count=review_count or 0,
            average_rating=round(float(average_rating), 2) if average_rating is not None else None,
        )

    async def list_books(
        self,
        db: AsyncSession,
        limit: int = 20,
        cursor: Optional[int] = None,
        query: Optional[str] = None,
    ) -> PageResponse[BookResponse]:
        """
        List books newest first.

        Args:
            limit: Maximum items per page (1-100)
            cursor: id of the last book from the previous page
            query: case-insensitive substring matched against title and author
        """
        try:
            page_query = select(Book)
            count_query = select(func.count(Book.id))
            if query and query.strip():
                pattern = f"%{_escape_like(query.strip())}%"
                matches = or_(
                    Book.title.ilike(pattern, escape=LIKE_ESCAPE),
                    Book.author.ilike(pattern, escape=LIKE_ESCAPE),
                )
                page_query = page_query.where(matches)
                count_query = count_query.where(matches)

            if cursor is not None:
                page_query = page_query.where(Book.id < cursor)
            page_query = page_query.order_by(Book.id.desc()).limit(limit + 1)

            books = list((await db.execute(page_query)).scalars().all())
            total_count = await db.scalar(count_query) or 0
        except SQLAlchemyError as e:
            logger.error("Database error listing books: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve books. Please try again.",
                context={"error_type": type(e).__name__},
            )

        has_more = len(books) > limit
        if has_more:
            books = books[:limit]

        return PageResponse[BookResponse](
            items=[BookResponse.model_validate(book) for book in books],
            total_count=total_count,
            next_cursor=books[-1].id if has_more and books else None,
            has_more=has_more,
        )


book_service = BookService()
