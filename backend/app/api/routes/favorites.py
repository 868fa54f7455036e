"""Favorites Routes — protected CRUD over the signed-in user's favorite movies.

Invariants:
    - Every route depends on require_user: anonymous calls fail with 401 before
      the handler body runs and before any persistence call
    - Scoped by the resolved user's id — never reads another user's rows
"""

import logging

from fastapi import APIRouter, Depends, status

from app.core.domain_types import User
from app.schemas.auth import SuccessResponse
from app.schemas.favorites import FavoriteCreate, FavoriteResponse, FavoriteStatus
from app.services.favorites import FavoritesService
from app.api.dependencies import get_favorites_service, require_user

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/movies/favorites", tags=["favorites"])


@router.get("", response_model=list[FavoriteResponse])
async def list_favorites(
    user: User = Depends(require_user),
    favorites: FavoritesService = Depends(get_favorites_service),
):
    """All favorites for the current user, oldest first."""
    rows = await favorites.list(user.id)
    return [FavoriteResponse.model_validate(f) for f in rows]


@router.post(
    "", response_model=SuccessResponse, status_code=status.HTTP_201_CREATED,
)
async def add_favorite(
    body: FavoriteCreate,
    user: User = Depends(require_user),
    favorites: FavoritesService = Depends(get_favorites_service),
):
    await favorites.add(user.id, body.ghibli_movie_id, body.to_movie_data())
    return SuccessResponse(success=True)


@router.delete("/{ghibli_movie_id}", response_model=SuccessResponse)
async def remove_favorite(
    ghibli_movie_id: str,
    user: User = Depends(require_user),
    favorites: FavoritesService = Depends(get_favorites_service),
):
    """Remove a movie; removing one that is not saved still succeeds."""
    await favorites.remove(user.id, ghibli_movie_id)
    return SuccessResponse(success=True)


@router.get("/{ghibli_movie_id}", response_model=FavoriteStatus)
async def is_favorited(
    ghibli_movie_id: str,
    user: User = Depends(require_user),
    favorites: FavoritesService = Depends(get_favorites_service),
):
    favorited = await favorites.is_favorited(user.id, ghibli_movie_id)
    return FavoriteStatus(ghibli_movie_id=ghibli_movie_id, favorited=favorited)
