"""Favorite schemas — request validation and domain mapping at the API boundary.

Invariants:
    - ghibli_movie_id is required, stripped, 1-64 chars
    - Metadata is optional; release_date/running_time capped at 10 chars
    - Response models read straight from domain dataclasses
"""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from app.core.domain_types import Favorite, MovieData, Role, User
from app.schemas.auth import UserResponse
from app.schemas.favorites import FavoriteCreate, FavoriteResponse


# --- FavoriteCreate -----------------------------------------------------------

def test_movie_id_is_stripped():
    body = FavoriteCreate(ghibli_movie_id="  2baf70d1  ")
    assert body.ghibli_movie_id == "2baf70d1"


@pytest.mark.parametrize("movie_id", ["", "   ", "x" * 65])
def test_invalid_movie_id_rejected(movie_id):
    with pytest.raises(ValidationError):
        FavoriteCreate(ghibli_movie_id=movie_id)


def test_running_time_max_length_enforced():
    with pytest.raises(ValidationError):
        FavoriteCreate(ghibli_movie_id="m1", running_time="x" * 11)


def test_to_movie_data_copies_metadata():
    body = FavoriteCreate(
        ghibli_movie_id="m1", title="Whisper of the Heart", release_date="1995",
    )
    assert body.to_movie_data() == MovieData(
        title="Whisper of the Heart", release_date="1995",
    )


def test_to_movie_data_defaults_to_nulls():
    assert FavoriteCreate(ghibli_movie_id="m1").to_movie_data() == MovieData()


# --- Responses ----------------------------------------------------------------

NOW = datetime(2024, 5, 1, tzinfo=timezone.utc)


def test_user_response_from_domain_user():
    user = User(
        id=7, open_id="u7", name="Marnie", email=None, login_method="oauth",
        role=Role.ADMIN, created_at=NOW, updated_at=NOW, last_signed_in=NOW,
    )
    data = UserResponse.model_validate(user).model_dump(mode="json")
    assert data["role"] == "admin"
    assert data["open_id"] == "u7"
    assert data["email"] is None


def test_favorite_response_from_domain_favorite():
    favorite = Favorite(
        id=3, user_id=7, ghibli_movie_id="m1", movie_title="Arrietty",
        movie_description=None, release_date="2010", running_time="94",
        created_at=NOW,
    )
    data = FavoriteResponse.model_validate(favorite).model_dump()
    assert data["movie_title"] == "Arrietty"
    assert data["created_at"] == NOW
