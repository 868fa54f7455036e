"""Favorites — a user's saved movies, identical over both persistence variants."""

import logging

from app.core.domain_types import Favorite, MovieData
from app.core.errors import ErrorContext, InvalidArgumentError
from app.core.repository_protocols import PersistenceBackend

logger = logging.getLogger(__name__)


def _require_movie_id(user_id: int, movie_id: str) -> None:
    if not movie_id:
        raise InvalidArgumentError(
            "ghibliMovieId is required", "ghibli_movie_id",
            ErrorContext(user_id=user_id),
        )


class FavoritesService:
    """CRUD over favorites. add() does not de-duplicate (caller convention)."""

    def __init__(self, backend: PersistenceBackend):
        self.backend = backend

    async def add(
        self, user_id: int, movie_id: str, movie_data: MovieData | None = None,
    ) -> None:
        _require_movie_id(user_id, movie_id)
        await self.backend.add_favorite(user_id, movie_id, movie_data or MovieData())
        logger.info(
            "Favorite added",
            extra={"user_id": user_id, "ghibli_movie_id": movie_id},
        )

    async def remove(self, user_id: int, movie_id: str) -> None:
        """Delete every (user_id, movie_id) row; zero rows is not an error."""
        _require_movie_id(user_id, movie_id)
        await self.backend.remove_favorite(user_id, movie_id)
        logger.info(
            "Favorite removed",
            extra={"user_id": user_id, "ghibli_movie_id": movie_id},
        )

    async def list(self, user_id: int) -> list[Favorite]:
        return await self.backend.list_favorites(user_id)

    async def is_favorited(self, user_id: int, movie_id: str) -> bool:
        _require_movie_id(user_id, movie_id)
        return await self.backend.is_favorited(user_id, movie_id)
