"""
BookClub Backend — Member Service (Member Store)
=================================================

What:  Persistence operations on members: lookup by username, creation,
       partial profile update, deletion, public profile.
Who:   Called by AuthService (join/login/authenticate) and the member routes.

Transactions:
    Methods only flush. The per-request session from get_db_session commits
    once the handler returns, or rolls back if anything raised, so a profile
    update or account deletion is all-or-nothing.
"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from app.exceptions import DatabaseError, MemberErrorCode, MemberException
from app.models.book import Favorite
from app.models.follow import Follow
from app.models.member import Gender, Member
from app.models.review import Review, ReviewComment
from app.schemas.member import MemberProfileResponse
from app.services.security import hash_password, password_fits_bcrypt

logger = logging.getLogger(__name__)


class MemberService:
    """
    Member store operations.

    Responsibilities:
        - get_member(): lookup by username (None when absent)
        - create(): insert with a pre-hashed password, enforcing unique usernames
        - modify(): apply the provided profile fields
        - delete(): remove the member and everything that references it
        - get_profile(): public profile with follow counters
    """

    async def get_member(self, db: AsyncSession, username: str) -> Optional[Member]:
        result = await db.execute(select(Member).where(Member.username == username))
        return result.scalar_one_or_none()

    async def create(
        self,
        db: AsyncSession,
        *,
        username: str,
        password_hash: str,
        email: str,
        nickname: str,
        gender: Optional[Gender] = None,
        birth: Optional[date] = None,
    ) -> Member:
        """
        Insert a new member.

        Raises:
            MemberException(DUPLICATE_USERNAME): username already registered.
                Checked up front and again by the unique constraint, which
                catches two concurrent joins with the same name.
        """
        if await self.get_member(db, username) is not None:
            raise MemberException(MemberErrorCode.DUPLICATE_USERNAME)

        member = Member(
            username=username,
            password=password_hash,
            email=email,
            nickname=nickname,
            gender=gender,
            birth=birth,
        )
        db.add(member)
        try:
            await db.flush()
        except IntegrityError:
            logger.info("Concurrent join lost the race for username '%s'", username)
            raise MemberException(MemberErrorCode.DUPLICATE_USERNAME)

        logger.info("Member joined: %s (id=%s)", member.username, member.id)
        return member

    async def modify(
        self,
        db: AsyncSession,
        member: Member,
        *,
        password: Optional[str] = None,
        email: Optional[str] = None,
        gender: Optional[Gender] = None,
        nickname: Optional[str] = None,
        birth: Optional[date] = None,
    ) -> Member:
        """
        Apply a partial profile update. Arguments left as None are unchanged.
        A new password is hashed before it is stored.
        """
        if password is not None:
            if not password_fits_bcrypt(password):
                raise MemberException(MemberErrorCode.PASSWORD_TOO_LONG)
            member.password = await run_in_threadpool(hash_password, password)
        if email is not None:
            member.email = email
        if gender is not None:
            member.gender = gender
        if nickname is not None:
            member.nickname = nickname
        if birth is not None:
            member.birth = birth

        await db.flush()
        logger.info("Member %s updated profile", member.username)
        return member

    async def delete(self, db: AsyncSession, member: Member) -> None:
        """
        Remove a member together with their favorites, follow edges (both
        directions), reviews, comments on those reviews and their own comments.
        """
        member_id = member.id
        own_reviews = select(Review.id).where(Review.member_id == member_id)
        statements = [
            delete(ReviewComment).where(
                or_(
                    ReviewComment.member_id == member_id,
                    ReviewComment.review_id.in_(own_reviews),
                )
            ),
            delete(Review).where(Review.member_id == member_id),
            delete(Favorite).where(Favorite.member_id == member_id),
            delete(Follow).where(
                or_(Follow.follower_id == member_id, Follow.followee_id == member_id)
            ),
        ]
        try:
            for statement in statements:
                await db.execute(statement.execution_options(synchronize_session=False))
            await db.delete(member)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Failed to delete member %s: %s", member.username, str(e))
            raise DatabaseError(
                message="Could not delete the account. Please try again.",
                context={"member_id": member_id, "error_type": type(e).__name__},
            )

        logger.info("Member deleted: %s (id=%s)", member.username, member_id)

    async def get_profile(self, db: AsyncSession, username: str) -> MemberProfileResponse:
        member = await self.get_member(db, username)
        if member is None:
            raise MemberException(MemberErrorCode.NON_EXISTING_USERNAME)

        follower_count = await db.scalar(
            select(func.count()).select_from(Follow).where(Follow.followee_id == member.id)
        )
        following_count = await db.scalar(
            select(func.count()).select_from(Follow).where(Follow.follower_id == member.id)
        )
        return MemberProfileResponse(
            username=member.username,
            nickname=member.nickname,
            follower_count=follower_count or 0,
            following_count=following_count or 0,
        )


# ── Singleton Instance ────────────────────────────────────────────────────
member_service = MemberService()
