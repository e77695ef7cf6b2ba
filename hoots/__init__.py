"""
Hoots Backend — Application Package
====================================

What: CRUD backend for "hoots": short posts with a title, text, category and
      an ordered list of embedded comments.
How:  Layered FastAPI application.

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │    Services (Business Rules/Auth)   │  ← validation, ownership checks
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
