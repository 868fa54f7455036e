"""Favorites Schemas — Pydantic models with field-level validation for API boundaries.

Invariants:
    - FavoriteCreate.ghibli_movie_id: 1-64 chars, stripped, non-empty
    - Optional metadata lengths match the favorites table columns
    - FavoriteResponse mirrors core.domain_types.Favorite

Design Decisions:
    - field_validator for side-effect-free transforms (strip) — keeps models pure
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.core.domain_types import MovieData


class FavoriteCreate(BaseModel):
    """Add-favorite payload — catalog id plus metadata copied from the catalog."""
    ghibli_movie_id: str = Field(min_length=1, max_length=64)
    title: str | None = None
    description: str | None = None
    release_date: str | None = Field(None, max_length=10)
    running_time: str | None = Field(None, max_length=10)

    @field_validator("ghibli_movie_id")
    @classmethod
    def strip_movie_id(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("ghibli_movie_id cannot be empty or whitespace")
        return v

    def to_movie_data(self) -> MovieData:
        return MovieData(
            title=self.title,
            description=self.description,
            release_date=self.release_date,
            running_time=self.running_time,
        )


class FavoriteResponse(BaseModel):
    """A saved favorite."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    ghibli_movie_id: str
    movie_title: str | None = None
    movie_description: str | None = None
    release_date: str | None = None
    running_time: str | None = None
    created_at: datetime


class FavoriteStatus(BaseModel):
    ghibli_movie_id: str
    favorited: bool
