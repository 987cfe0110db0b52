"""
BookClub Backend — Review Service
==================================

What:  Reviews of books and comments on reviews.

Ownership:
    Only the author of a review (or comment) may update or delete it;
    anyone else gets NOT_AUTHOR (403). Deleting a review deletes its comments.

Author loading:
    Responses embed the author's username/nickname. Async sessions cannot
    lazy-load on attribute access, so every query that returns reviews or
    comments uses selectinload(...member), and freshly created rows get
    their `member` assigned directly.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.exceptions import DatabaseError, ReviewErrorCode, ReviewException
from app.models.book import Book
from app.models.member import Member
from app.models.review import Review, ReviewComment
from app.schemas.common import PageResponse
from app.schemas.member import MemberSummary
from app.schemas.review import (
    CommentCreateRequest,
    CommentResponse,
    ReviewCreateRequest,
    ReviewResponse,
    ReviewUpdateRequest,
)

logger = logging.getLogger(__name__)


def to_review_response(review: Review) -> ReviewResponse:
    return ReviewResponse(
        id=review.id,
        book_id=review.book_id,
        author=MemberSummary.model_validate(review.member),
        content=review.content,
        rating=review.rating,
        created_at=review.created_at,
        updated_at=review.updated_at,
    )


def to_comment_response(comment: ReviewComment) -> CommentResponse:
    return CommentResponse(
        id=comment.id,
        review_id=comment.review_id,
        author=MemberSummary.model_validate(comment.member),
        content=comment.content,
        created_at=comment.created_at,
    )


class ReviewService:

    # ── Lookups ───────────────────────────────────────────────────────────

    async def _book_exists(self, db: AsyncSession, book_id: int) -> None:
        if await db.get(Book, book_id) is None:
            raise ReviewException(ReviewErrorCode.BOOK_NOT_FOUND, context={"book_id": book_id})

    async def _get_review(self, db: AsyncSession, review_id: int) -> Review:
        result = await db.execute(
            select(Review).options(selectinload(Review.member)).where(Review.id == review_id)
        )
        review = result.scalar_one_or_none()
        if review is None:
            raise ReviewException(ReviewErrorCode.REVIEW_NOT_FOUND, context={"review_id": review_id})
        return review

    async def _get_comment(self, db: AsyncSession, comment_id: int) -> ReviewComment:
        result = await db.execute(
            select(ReviewComment)
            .options(selectinload(ReviewComment.member))
            .where(ReviewComment.id == comment_id)
        )
        comment = result.scalar_one_or_none()
        if comment is None:
            raise ReviewException(
                ReviewErrorCode.COMMENT_NOT_FOUND, context={"comment_id": comment_id}
            )
        return comment

    # ── Reviews ───────────────────────────────────────────────────────────

    async def create_review(
        self, db: AsyncSession, member: Member, book_id: int, request: ReviewCreateRequest
    ) -> ReviewResponse:
        await self._book_exists(db, book_id)

        review = Review(
            member_id=member.id,
            book_id=book_id,
            content=request.content,
            rating=request.rating,
        )
        review.member = member
        db.add(review)
        await db.flush()

        logger.info("Review %s created by %s for book %s", review.id, member.username, book_id)
        return to_review_response(review)

    async def get_review(self, db: AsyncSession, review_id: int) -> ReviewResponse:
        return to_review_response(await self._get_review(db, review_id))

    async def list_reviews(
        self,
        db: AsyncSession,
        book_id: int,
        limit: int = 20,
        cursor: Optional[int] = None,
    ) -> PageResponse[ReviewResponse]:
        """
        Reviews of a book, newest first, cursor-paginated by review id.
        """
        await self._book_exists(db, book_id)

        try:
            query = (
                select(Review)
                .options(selectinload(Review.member))
                .where(Review.book_id == book_id)
            )
            if cursor is not None:
                query = query.where(Review.id < cursor)
            query = query.order_by(Review.id.desc()).limit(limit + 1)

            reviews = list((await db.execute(query)).scalars().all())
            total_count = await db.scalar(
                select(func.count(Review.id)).where(Review.book_id == book_id)
            ) or 0
        except SQLAlchemyError as e:
            logger.error("Database error listing reviews of book %s: %s", book_id, str(e))
            raise DatabaseError(
                message="Could not retrieve reviews. Please try again.",
                context={"book_id": book_id, "error_type": type(e).__name__},
            )

        has_more = len(reviews) > limit
        if has_more:
            reviews = reviews[:limit]

        return PageResponse[ReviewResponse](
            items=[to_review_response(review) for review in reviews],
            total_count=total_count,
            next_cursor=reviews[-1].id if has_more and reviews else None,
            has_more=has_more,
        )

    async def update_review(
        self, db: AsyncSession, member: Member, review_id: int, request: ReviewUpdateRequest
    ) -> ReviewResponse:
        review = await self._get_review(db, review_id)
        if review.member_id != member.id:
            raise ReviewException(ReviewErrorCode.NOT_AUTHOR)

        if request.content is not None:
            review.content = request.content
        if request.rating is not None:
            review.rating = request.rating
        review.updated_at = datetime.now(timezone.utc)
        await db.flush()

        logger.info("Review %s updated by %s", review.id, member.username)
        return to_review_response(review)

    async def delete_review(self, db: AsyncSession, member: Member, review_id: int) -> None:
        review = await self._get_review(db, review_id)
        if review.member_id != member.id:
            raise ReviewException(ReviewErrorCode.NOT_AUTHOR)

        await db.execute(
            delete(ReviewComment)
            .where(ReviewComment.review_id == review.id)
            .execution_options(synchronize_session=False)
        )
        await db.delete(review)
        await db.flush()
        logger.info("Review %s deleted by %s", review_id, member.username)

    # ── Comments ──────────────────────────────────────────────────────────

    async def add_comment(
        self, db: AsyncSession, member: Member, review_id: int, request: CommentCreateRequest
    ) -> CommentResponse:
        review = await self._get_review(db, review_id)

        comment = ReviewComment(review_id=review.id, member_id=member.id, content=request.content)
        comment.member = member
        db.add(comment)
        await db.flush()

        logger.info("Comment %s added to review %s by %s", comment.id, review.id, member.username)
        return to_comment_response(comment)

    async def list_comments(self, db: AsyncSession, review_id: int) -> List[CommentResponse]:
        """Comments of a review, oldest first."""
        await self._get_review(db, review_id)
        result = await db.execute(
            select(ReviewComment)
            .options(selectinload(ReviewComment.member))
            .where(ReviewComment.review_id == review_id)
            .order_by(ReviewComment.id.asc())
        )
        return [to_comment_response(comment) for comment in result.scalars().all()]

    async def delete_comment(self, db: AsyncSession, member: Member, comment_id: int) -> None:
        comment = await self._get_comment(db, comment_id)
        if comment.member_id != member.id:
            raise ReviewException(ReviewErrorCode.NOT_AUTHOR)

        await db.delete(comment)
        await db.flush()
        logger.info("Comment %s deleted by %s", comment_id, member.username)


review_service = ReviewService()
