"""Relational Store — PersistenceBackend variant over SQLAlchemy async sessions.

Invariants:
    - Every operation is exactly one statement in its own session (no multi-statement transactions)
    - upsert_user is a single INSERT ... ON CONFLICT (open_id) DO UPDATE,
      or DO NOTHING when the plan carries no update columns
    - Failures carry backend and user_id/open_id in ErrorContext
    - Driver errors surface as PersistenceFailureError (mapped by DatabaseSessionManager)
    - Returned rows are converted to core.domain_types records — ORM objects never escape

Design Decisions:
    - Dialect-specific insert (postgresql / sqlite): both expose on_conflict_do_update
      with the same signature, so one code path covers production and tests
    - list_favorites orders by (created_at, id): id breaks timestamp ties in insertion order
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import delete, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError

from app.core.domain_types import Favorite, MovieData, Role, User, UserUpsert
from app.core.errors import PersistenceFailureError, PersistenceUnavailableError
from app.infrastructure.database import DatabaseSessionManager
from app.models.favorite import Favorite as FavoriteModel
from app.models.user import User as UserModel

logger = logging.getLogger(__name__)

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def _aware(value: datetime) -> datetime:
    """SQLite drops tzinfo on the way back; stored values are always UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _to_user(row: UserModel) -> User:
    return User(
        id=row.id,
        open_id=row.open_id,
        name=row.name,
        email=row.email,
        login_method=row.login_method,
        role=Role(row.role),
        created_at=_aware(row.created_at),
        updated_at=_aware(row.updated_at),
        last_signed_in=_aware(row.last_signed_in),
    )


def _to_favorite(row: FavoriteModel) -> Favorite:
    return Favorite(
        id=row.id,
        user_id=row.user_id,
        ghibli_movie_id=row.ghibli_movie_id,
        movie_title=row.movie_title,
        movie_description=row.movie_description,
        release_date=row.release_date,
        running_time=row.running_time,
        created_at=_aware(row.created_at),
    )


def _column_values(values: dict) -> dict:
    return {
        key: value.value if isinstance(value, Role) else value
        for key, value in values.items()
    }


class RelationalStore:
    """Users and favorites in PostgreSQL (or SQLite for tests)."""
    kind = "relational"

    def __init__(self, db: DatabaseSessionManager):
        self.db = db
        insert_fn = _UPSERT_DIALECTS.get(db.dialect_name)
        if insert_fn is None:
            raise PersistenceUnavailableError(
                f"unsupported dialect '{db.dialect_name}'",
            )
        self._insert = insert_fn

    def _failed(self, error: PersistenceFailureError, message: str, **fields) -> None:
        """Log a failed operation and stamp the error context for the response."""
        error.context.backend = self.kind
        error.context.user_id = fields.get("user_id")
        error.context.open_id = fields.get("open_id")
        logger.error(message, extra={**fields, "backend": self.kind})

    def _upsert_statement(self, upsert: UserUpsert):
        stmt = self._insert(UserModel).values(
            open_id=upsert.open_id, **_column_values(upsert.insert_values),
        )
        if not upsert.update_values:
            return stmt.on_conflict_do_nothing(index_elements=[UserModel.open_id])
        return stmt.on_conflict_do_update(
            index_elements=[UserModel.open_id],
            set_=_column_values(upsert.update_values),
        )

    async def upsert_user(self, upsert: UserUpsert) -> None:
        try:
            stmt = self._upsert_statement(upsert)
        except (SQLAlchemyError, ValueError) as e:
            error = PersistenceFailureError("Invalid upsert plan", "upsert")
            self._failed(error, f"Failed to build upsert: {e}", open_id=upsert.open_id)
            raise error from e
        try:
            async with self.db.session() as session:
                await session.execute(stmt)
                await session.commit()
        except PersistenceFailureError as e:
            self._failed(e, "Failed to upsert user", open_id=upsert.open_id)
            raise

    async def get_user_by_open_id(self, open_id: str) -> User | None:
        try:
            async with self.db.session() as session:
                result = await session.execute(
                    select(UserModel).where(UserModel.open_id == open_id).limit(1),
                )
                row = result.scalar_one_or_none()
        except PersistenceFailureError as e:
            self._failed(e, "Failed to look up user", open_id=open_id)
            raise
        return _to_user(row) if row else None

    async def list_favorites(self, user_id: int) -> list[Favorite]:
        try:
            async with self.db.session() as session:
                result = await session.execute(
                    select(FavoriteModel)
                    .where(FavoriteModel.user_id == user_id)
                    .order_by(FavoriteModel.created_at, FavoriteModel.id),
                )
                rows = result.scalars().all()
        except PersistenceFailureError as e:
            self._failed(e, "Failed to get favorites", user_id=user_id)
            raise
        return [_to_favorite(r) for r in rows]

    async def add_favorite(
        self, user_id: int, ghibli_movie_id: str, movie_data: MovieData,
    ) -> None:
        try:
            async with self.db.session() as session:
                session.add(FavoriteModel(
                    user_id=user_id,
                    ghibli_movie_id=ghibli_movie_id,
                    movie_title=movie_data.title,
                    movie_description=movie_data.description,
                    release_date=movie_data.release_date,
                    running_time=movie_data.running_time,
                ))
                await session.commit()
        except PersistenceFailureError as e:
            self._failed(
                e, "Failed to add favorite",
                user_id=user_id, ghibli_movie_id=ghibli_movie_id,
            )
            raise

    async def remove_favorite(self, user_id: int, ghibli_movie_id: str) -> None:
        try:
            async with self.db.session() as session:
                await session.execute(
                    delete(FavoriteModel).where(
                        FavoriteModel.user_id == user_id,
                        FavoriteModel.ghibli_movie_id == ghibli_movie_id,
                    ),
                )
                await session.commit()
        except PersistenceFailureError as e:
            self._failed(
                e, "Failed to remove favorite",
                user_id=user_id, ghibli_movie_id=ghibli_movie_id,
            )
            raise

    async def is_favorited(self, user_id: int, ghibli_movie_id: str) -> bool:
        try:
            async with self.db.session() as session:
                result = await session.execute(
                    select(FavoriteModel.id).where(
                        FavoriteModel.user_id == user_id,
                        FavoriteModel.ghibli_movie_id == ghibli_movie_id,
                    ).limit(1),
                )
                found = result.first() is not None
        except PersistenceFailureError as e:
            self._failed(
                e, "Failed to check favorite",
                user_id=user_id, ghibli_movie_id=ghibli_movie_id,
            )
            raise
        return found

    async def health_check(self) -> bool:
        return await self.db.health_check()

    async def dispose(self) -> None:
        await self.db.dispose()


async def connect_relational(
    database_url: str, pool_size: int = 20, max_overflow: int = 10,
) -> RelationalStore:
    """Build the engine and prove connectivity, or raise PersistenceUnavailableError."""
    try:
        db = DatabaseSessionManager(
            database_url, pool_size=pool_size, max_overflow=max_overflow,
        )
    except (SQLAlchemyError, ImportError, ValueError) as e:
        raise PersistenceUnavailableError(str(e)) from e
    try:
        await db.ping()
        return RelationalStore(db)
    except PersistenceUnavailableError:
        await db.dispose()
        raise
