"""
BookClub Backend — Follow Model
================================

A directed edge: `follower_id` follows `followee_id`.

Constraints:
    - Composite primary key: one edge per ordered pair
    - CHECK follower_id <> followee_id: no self-follow even if the
      service-level check were bypassed
"""

from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, func
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class Follow(Base):
    __tablename__ = "follows"

    follower_id: Mapped[int] = mapped_column(
        ForeignKey("members.id", ondelete="CASCADE"), primary_key=True
    )
    followee_id: Mapped[int] = mapped_column(
        ForeignKey("members.id", ondelete="CASCADE"), primary_key=True, index=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
    )

    __table_args__ = (
        CheckConstraint("follower_id <> followee_id", name="ck_follows_not_self"),
    )

    def __repr__(self) -> str:
        return f"<Follow({self.follower_id} -> {self.followee_id})>"
