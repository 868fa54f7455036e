"""ORM Models — SQLAlchemy declarative models for the relational store.

Invariants:
    - All models inherit from Base (db/base.py)
    - User is the aggregate root; favorites are scoped by user_id

Design Decisions:
    - One file per entity for locality (ADR: ExMA max 3-4 files to understand a feature)
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs (ADR: standard SQLAlchemy pattern)
"""

from app.models.user import User  # noqa: F401
from app.models.favorite import Favorite  # noqa: F401
