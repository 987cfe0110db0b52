"""
ORM models. Importing this package registers every table on Base.metadata,
which Alembic and create_tables() rely on.
"""

from app.models.member import Member
from app.models.book import Book, Favorite
from app.models.follow import Follow
from app.models.review import Review, ReviewComment

__all__ = ["Member", "Book", "Favorite", "Follow", "Review", "ReviewComment"]
