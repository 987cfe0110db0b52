"""
BookClub Backend — Application Package
========================================

What: The `app` package holding the book community API.
Who:  Imported by uvicorn (`app.main:app`), Alembic and pytest.

Architecture Note:
    The backend is layered the same way for every domain:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP verbs, envelopes, status codes
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← auth, members, books, follows, reviews
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Domain failures are raised as exceptions from the service layer and turned
    into the `{data, message, code}` error envelope by handlers in main.py.
"""

__version__ = "1.0.0"
