"""Favorite ORM — one saved catalog movie for one user.

Invariants:
    - Always belongs to a User (user_id FK, ON DELETE CASCADE)
    - ghibli_movie_id is the external catalog id, non-nullable
    - (user_id, ghibli_movie_id) is NOT unique at the storage level

Design Decisions:
    - Movie metadata copied at insert time: list() renders without a catalog round-trip
    - No unique constraint on (user_id, ghibli_movie_id): uniqueness is a caller
      convention; adding one changes behavior under concurrent duplicate adds
"""

from datetime import datetime, timezone

from sqlalchemy import Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base


class Favorite(Base):
    """Favorite entity — a movie saved by a user."""
    __tablename__ = "favorites"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True,
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    ghibli_movie_id: Mapped[str] = mapped_column(String(64), nullable=False)
    movie_title: Mapped[str | None] = mapped_column(Text, nullable=True)
    movie_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    release_date: Mapped[str | None] = mapped_column(String(10), nullable=True)
    running_time: Mapped[str | None] = mapped_column(String(10), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="favorites")
