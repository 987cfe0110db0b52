"""
BookClub Backend — Follow Service
==================================

Directed follow edges between members.

Rules:
    - A member cannot follow themselves (CAN_NOT_FOLLOW_MYSELF)
    - The target must exist (NOT_FOUND_MEMBER)
    - At most one edge per (follower, followee) pair (ALREADY_FOLLOWING)
    - Unfollowing requires an existing edge (NOT_FOLLOWING)
"""

import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import FollowErrorCode, FollowException
from app.models.follow import Follow
from app.models.member import Member
from app.services.member_service import member_service

logger = logging.getLogger(__name__)


class FollowService:

    async def _target(self, db: AsyncSession, username: str) -> Member:
        member = await member_service.get_member(db, username)
        if member is None:
            raise FollowException(FollowErrorCode.NOT_FOUND_MEMBER)
        return member

    async def _edge(self, db: AsyncSession, follower_id: int, followee_id: int):
        return await db.get(Follow, (follower_id, followee_id))

    async def follow(self, db: AsyncSession, follower: Member, username: str) -> Member:
        """Create the edge follower → username and return the followed member."""
        if follower.username == username:
            raise FollowException(FollowErrorCode.CAN_NOT_FOLLOW_MYSELF)

        followee = await self._target(db, username)
        if await self._edge(db, follower.id, followee.id) is not None:
            raise FollowException(FollowErrorCode.ALREADY_FOLLOWING)

        db.add(Follow(follower_id=follower.id, followee_id=followee.id))
        try:
            await db.flush()
        except IntegrityError:
            raise FollowException(FollowErrorCode.ALREADY_FOLLOWING)

        logger.info("%s now follows %s", follower.username, followee.username)
        return followee

    async def unfollow(self, db: AsyncSession, follower: Member, username: str) -> Member:
        """Remove the edge follower → username and return the unfollowed member."""
        if follower.username == username:
            raise FollowException(FollowErrorCode.CAN_NOT_FOLLOW_MYSELF)

        followee = await self._target(db, username)
        edge = await self._edge(db, follower.id, followee.id)
        if edge is None:
            raise FollowException(FollowErrorCode.NOT_FOLLOWING)

        await db.delete(edge)
        await db.flush()
        logger.info("%s unfollowed %s", follower.username, followee.username)
        return followee

    async def list_followers(self, db: AsyncSession, username: str) -> List[Member]:
        """Members following `username`, most recent first."""
        member = await self._target(db, username)
        result = await db.execute(
            select(Member)
            .join(Follow, Follow.follower_id == Member.id)
            .where(Follow.followee_id == member.id)
            .order_by(Follow.created_at.desc(), Member.id.desc())
        )
        return list(result.scalars().all())

    async def list_followings(self, db: AsyncSession, username: str) -> List[Member]:
        """Members `username` follows, most recent first."""
        member = await self._target(db, username)
        result = await db.execute(
            select(Member)
            .join(Follow, Follow.followee_id == Member.id)
            .where(Follow.follower_id == member.id)
            .order_by(Follow.created_at.desc(), Member.id.desc())
        )
        return list(result.scalars().all())


follow_service = FollowService()
