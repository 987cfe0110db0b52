"""
BookClub Backend — Unique Constraint Fallback Tests
====================================================

What:  The services check for duplicates before inserting, and the database
       constraints catch what slips past that check (two concurrent requests).
How:   The up-front lookup is patched to report "nothing there", so the
       insert reaches the constraint on flush. Each step runs in its own
       session against the per-test SQLite database.

What we test:
    ✅ Duplicate username → DUPLICATE_USERNAME from the unique index
    ✅ Duplicate follow edge → ALREADY_FOLLOWING from the primary key
    ✅ Duplicate favorite → ALREADY_FAVORITE from the primary key
"""

from unittest.mock import AsyncMock, patch

import pytest

from app.exceptions import (
    BookErrorCode,
    BookException,
    FollowErrorCode,
    FollowException,
    MemberErrorCode,
    MemberException,
)
from app.models.book import Book
from app.services.favorite_service import FavoriteService, favorite_service
from app.services.follow_service import FollowService, follow_service
from app.services.member_service import MemberService, member_service


async def create_member(session_factory, username: str):
    async with session_factory() as db:
        member = await member_service.create(
            db,
            username=username,
            password_hash="$2b$04$not-a-real-hash",
            email=f"{username}@example.com",
            nickname=username,
        )
        await db.commit()
        return member


class TestUsernameConstraint:

    @pytest.mark.asyncio
    async def test_concurrent_join_is_duplicate_username(self, session_factory):
        await create_member(session_factory, "reader01")

        async with session_factory() as db:
            with patch.object(MemberService, "get_member", AsyncMock(return_value=None)):
                with pytest.raises(MemberException) as exc_info:
                    await member_service.create(
                        db,
                        username="reader01",
                        password_hash="$2b$04$not-a-real-hash",
                        email="other@example.com",
                        nickname="Other",
                    )
            await db.rollback()

        assert exc_info.value.error_code is MemberErrorCode.DUPLICATE_USERNAME


class TestFollowConstraint:

    @pytest.mark.asyncio
    async def test_concurrent_follow_is_already_following(self, session_factory):
        reader = await create_member(session_factory, "reader01")
        await create_member(session_factory, "writer01")

        async with session_factory() as db:
            await follow_service.follow(db, reader, "writer01")
            await db.commit()

        async with session_factory() as db:
            with patch.object(FollowService, "_edge", AsyncMock(return_value=None)):
                with pytest.raises(FollowException) as exc_info:
                    await follow_service.follow(db, reader, "writer01")
            await db.rollback()

        assert exc_info.value.error_code is FollowErrorCode.ALREADY_FOLLOWING


class TestFavoriteConstraint:

    @pytest.mark.asyncio
    async def test_concurrent_favorite_is_already_favorite(self, session_factory):
        reader = await create_member(session_factory, "reader01")
        async with session_factory() as db:
            book = Book(title="Dune", author="Frank Herbert")
            db.add(book)
            await db.commit()

        async with session_factory() as db:
            await favorite_service.add(db, reader, book.id)
            await db.commit()

        async with session_factory() as db:
            with patch.object(FavoriteService, "_mark", AsyncMock(return_value=None)):
                with pytest.raises(BookException) as exc_info:
                    await favorite_service.add(db, reader, book.id)
            await db.rollback()

        assert exc_info.value.error_code is BookErrorCode.ALREADY_FAVORITE
