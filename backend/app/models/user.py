"""User ORM — persists identity records keyed by the provider-issued open_id.

Invariants:
    - id is an autoincrement integer primary key (store-assigned)
    - open_id is unique and non-nullable — exactly one row per identity
    - role is 'user' or 'admin', default 'user'
    - last_signed_in refreshed on every login upsert

Design Decisions:
    - role as String(16) over a native enum: portable across PostgreSQL and SQLite test DBs
    - favorites relationship uses passive_deletes: the FK's ON DELETE CASCADE does the work
"""

from datetime import datetime, timezone

from sqlalchemy import Integer, String, Text, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base


def _now() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """User entity — owns a favorites list."""
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True,
    )
    open_id: Mapped[str] = mapped_column(
        String(64), nullable=False, unique=True,
    )
    name: Mapped[str | None] = mapped_column(Text, nullable=True)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    login_method: Mapped[str | None] = mapped_column(
        String(64), nullable=True,
    )
    role: Mapped[str] = mapped_column(
        String(16), nullable=False, default="user",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_now,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_now, onupdate=_now,
    )
    last_signed_in: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_now,
    )

    # Relationships
    favorites: Mapped[list["Favorite"]] = relationship(
        "Favorite", back_populates="user",
        cascade="all, delete-orphan", passive_deletes=True,
    )
