"""Boundary Protocols — the persistence capability set consumed by services.

Invariants:
    - Services depend on PersistenceBackend only, never on a concrete store
    - Both variants (RelationalStore, FileBackedStore) return identical shapes
      (core.domain_types records) for identical call histories
    - Implementations provided by the shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, the two stores share no base class
      (ADR: tagged choice of variants, not a class hierarchy)
    - Async in Protocol: implementations do IO; callers await one round-trip each
"""

from typing import Protocol

from app.core.domain_types import Favorite, MovieData, User, UserUpsert


class PersistenceBackend(Protocol):
    """Contract for user and favorites persistence — implemented by the shell."""
    kind: str

    async def upsert_user(self, upsert: UserUpsert) -> None: ...
    async def get_user_by_open_id(self, open_id: str) -> User | None: ...
    async def list_favorites(self, user_id: int) -> list[Favorite]: ...
    async def add_favorite(
        self, user_id: int, ghibli_movie_id: str, movie_data: MovieData,
    ) -> None: ...
    async def remove_favorite(self, user_id: int, ghibli_movie_id: str) -> None: ...
    async def is_favorited(self, user_id: int, ghibli_movie_id: str) -> bool: ...
    async def health_check(self) -> bool: ...
    async def dispose(self) -> None: ...
