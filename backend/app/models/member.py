"""
BookClub Backend — Member SQLAlchemy Model
===========================================

What:  ORM model representing the `members` table.
Who:   Used by MemberService/AuthService and by Alembic for schema management.

Table Design:
    - username: natural key for every public lookup (unique index)
    - password: bcrypt hash (60 chars, `$2b$` prefix); plaintext is never stored
    - gender / nickname / birth: optional profile fields editable via PUT /members/mine

    Only child tables point at members (favorites, follows, reviews,
    comments). Their foreign keys cascade at the database level and
    MemberService.delete() removes them explicitly as well, so deleting a
    member never needs to load collections.
"""

import enum
from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import Date, DateTime, Enum, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class Gender(str, enum.Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"


class Member(Base):
    """A registered member of the community."""

    __tablename__ = "members"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    username: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        unique=True,
        index=True,
        comment="Login name; unique across all members",
    )

    password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="bcrypt hash of the member's password",
    )

    email: Mapped[str] = mapped_column(String(255), nullable=False)

    gender: Mapped[Optional[Gender]] = mapped_column(
        Enum(Gender, name="gender", native_enum=False, length=10),
        nullable=True,
    )

    nickname: Mapped[str] = mapped_column(String(50), nullable=False)

    birth: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
    )

    def __repr__(self) -> str:
        return f"<Member(id={self.id}, username='{self.username}')>"
