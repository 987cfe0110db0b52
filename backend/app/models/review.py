"""
BookClub Backend — Review and ReviewComment Models
===================================================

What:  A member's review of a book (text + 1..5 rating) and comments on it.

Query Patterns:
    - Reviews of a book, newest first: WHERE book_id = :id ORDER BY id DESC
      → idx_reviews_book_id
    - Comments of a review, oldest first: WHERE review_id = :id ORDER BY id
      → idx_review_comments_review_id

    The `member` relationships are many-to-one and are eager-loaded with
    selectinload() by ReviewService when the author is rendered.
"""

from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base
from app.models.book import Book
from app.models.member import Member


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Review(Base):
    __tablename__ = "reviews"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    member_id: Mapped[int] = mapped_column(
        ForeignKey("members.id", ondelete="CASCADE"), nullable=False
    )
    book_id: Mapped[int] = mapped_column(
        ForeignKey("books.id", ondelete="CASCADE"), nullable=False
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    rating: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
        server_default=func.now(),
    )

    member: Mapped[Member] = relationship(lazy="select")
    book: Mapped[Book] = relationship(lazy="select")

    __table_args__ = (
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_reviews_rating_range"),
        Index("idx_reviews_book_id", "book_id"),
        Index("idx_reviews_member_id", "member_id"),
    )

    def __repr__(self) -> str:
        return f"<Review(id={self.id}, book_id={self.book_id}, rating={self.rating})>"


class ReviewComment(Base):
    __tablename__ = "review_comments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    review_id: Mapped[int] = mapped_column(
        ForeignKey("reviews.id", ondelete="CASCADE"), nullable=False
    )
    member_id: Mapped[int] = mapped_column(
        ForeignKey("members.id", ondelete="CASCADE"), nullable=False
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now()
    )

    member: Mapped[Member] = relationship(lazy="select")

    __table_args__ = (
        Index("idx_review_comments_review_id", "review_id"),
    )

    def __repr__(self) -> str:
        return f"<ReviewComment(id={self.id}, review_id={self.review_id})>"
