"""
BookClub Backend — Book and Favorite Models
============================================

What:  The book catalog and the member ↔ book "favorite" association.

Favorite Design:
    Composite primary key (book_id, member_id) makes a duplicate favorite
    impossible at the storage level; FavoriteService still checks first so
    the client gets ALREADY_FAVORITE instead of a constraint error.
    Both sides are many-to-one and loaded lazily; services that need the
    book of a favorite select it explicitly (async sessions cannot lazy-load
    on attribute access).
"""

from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import Date, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base
from app.models.member import Member


class Book(Base):
    """A book that members can favorite and review."""

    __tablename__ = "books"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    author: Mapped[str] = mapped_column(String(255), nullable=False)
    publisher: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # ISBN-13 without hyphens; NULL for books registered without one.
    isbn: Mapped[Optional[str]] = mapped_column(String(13), nullable=True, unique=True)

    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    image_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    published_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
    )

    def __repr__(self) -> str:
        return f"<Book(id={self.id}, title='{self.title}')>"


class Favorite(Base):
    """A member's favorite mark on a book."""

    __tablename__ = "favorites"

    book_id: Mapped[int] = mapped_column(
        ForeignKey("books.id", ondelete="CASCADE"), primary_key=True
    )
    member_id: Mapped[int] = mapped_column(
        ForeignKey("members.id", ondelete="CASCADE"), primary_key=True, index=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
    )

    book: Mapped[Book] = relationship(lazy="select")
    member: Mapped[Member] = relationship(lazy="select")

    def __repr__(self) -> str:
        return f"<Favorite(book_id={self.book_id}, member_id={self.member_id})>"
