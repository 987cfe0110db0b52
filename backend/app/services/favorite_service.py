"""
BookClub Backend — Favorite Service
====================================

Member ↔ book favorite marks. One mark per (book, member) pair.
"""

import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import BookErrorCode, BookException
from app.models.book import Book, Favorite
from app.models.member import Member
from app.services.book_service import book_service

logger = logging.getLogger(__name__)


class FavoriteService:

    async def _mark(self, db: AsyncSession, book_id: int, member_id: int):
        return await db.get(Favorite, (book_id, member_id))

    async def add(self, db: AsyncSession, member: Member, book_id: int) -> Book:
        """
        Mark a book as favorite.

        Raises:
            BookException(BOOK_NOT_FOUND): no such book
            BookException(ALREADY_FAVORITE): already marked
        """
        book = await book_service.get_book(db, book_id)
        if await self._mark(db, book.id, member.id) is not None:
            raise BookException(BookErrorCode.ALREADY_FAVORITE)

        db.add(Favorite(book_id=book.id, member_id=member.id))
        try:
            await db.flush()
        except IntegrityError:
            raise BookException(BookErrorCode.ALREADY_FAVORITE)

        logger.info("%s favorited book %s", member.username, book.id)
        return book

    async def remove(self, db: AsyncSession, member: Member, book_id: int) -> None:
        """
        Raises:
            BookException(BOOK_NOT_FOUND): no such book
            BookException(NOT_FAVORITE): the book was not marked
        """
        await book_service.get_book(db, book_id)
        favorite = await self._mark(db, book_id, member.id)
        if favorite is None:
            raise BookException(BookErrorCode.NOT_FAVORITE)

        await db.delete(favorite)
        await db.flush()
        logger.info("%s unfavorited book %s", member.username, book_id)

    async def list_for_member(self, db: AsyncSession, member: Member) -> List[Book]:
        """The member's favorite books, most recently marked first."""
        result = await db.execute(
            select(Book)
            .join(Favorite, Favorite.book_id == Book.id)
            .where(Favorite.member_id == member.id)
            .order_by(Favorite.created_at.desc(), Book.id.desc())
        )
        return list(result.scalars().all())


favorite_service = FavoriteService()
