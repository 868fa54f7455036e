"""File-Backed Store — PersistenceBackend variant over a single local JSON document.

Invariants:
    - Document shape: {"users": [...], "favorites": [...], "next_user_id": int, "next_favorite_id": int}
    - Missing file is initialized with empty collections and counters at 1
    - Surrogate ids come from the counters and only ever increase
    - Every mutation rewrites the whole document via temp file + os.replace
    - A corrupt, unreadable or wrongly shaped document raises PersistenceFailureError
      (never reset silently); client-facing messages never include paths or OS text

Design Decisions:
    - Development fallback only: read-modify-write has a lost-update race under
      concurrent writers and there is deliberately no lock (ADR: single-writer dev usage)
    - File IO runs in asyncio.to_thread so the event loop never blocks on disk
    - Records stored with the same field names as the relational columns so both
      variants produce identical domain records
"""

import asyncio
import json
import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any, Callable

from app.core.domain_types import (
    Favorite, MovieData, Role, User, UserUpsert, utc_now,
)
from app.core.errors import ErrorContext, PersistenceFailureError

logger = logging.getLogger(__name__)


def empty_document() -> dict:
    return {"users": [], "favorites": [], "next_user_id": 1, "next_favorite_id": 1}


def _encode(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Role):
        return value.value
    return value


def _encode_values(values: dict) -> dict:
    return {key: _encode(value) for key, value in values.items()}


def _to_user(record: dict) -> User:
    return User(
        id=record["id"],
        open_id=record["open_id"],
        name=record.get("name"),
        email=record.get("email"),
        login_method=record.get("login_method"),
        role=Role(record.get("role", Role.USER.value)),
        created_at=datetime.fromisoformat(record["created_at"]),
        updated_at=datetime.fromisoformat(record["updated_at"]),
        last_signed_in=datetime.fromisoformat(record["last_signed_in"]),
    )


def _to_favorite(record: dict) -> Favorite:
    return Favorite(
        id=record["id"],
        user_id=record["user_id"],
        ghibli_movie_id=record["ghibli_movie_id"],
        movie_title=record.get("movie_title"),
        movie_description=record.get("movie_description"),
        release_date=record.get("release_date"),
        running_time=record.get("running_time"),
        created_at=datetime.fromisoformat(record["created_at"]),
    )


def _well_formed(document: Any) -> bool:
    return (
        isinstance(document, dict)
        and isinstance(document.get("users"), list)
        and isinstance(document.get("favorites"), list)
        and isinstance(document.get("next_user_id"), int)
        and isinstance(document.get("next_favorite_id"), int)
    )


def _matches(record: dict, user_id: int, ghibli_movie_id: str) -> bool:
    return (
        record["user_id"] == user_id
        and record["ghibli_movie_id"] == ghibli_movie_id
    )


class FileBackedStore:
    """Users and favorites in one JSON file — the degraded fallback."""
    kind = "file"

    def __init__(self, path: str | Path):
        self.path = Path(path)

    # ─── Document IO (sync, run in worker thread) ───────────────

    def _failure(self, message: str, operation: str) -> PersistenceFailureError:
        return PersistenceFailureError(
            message, operation, ErrorContext(backend=self.kind),
        )

    def _read(self) -> dict:
        if not self.path.exists():
            document = empty_document()
            self._write(document)
            logger.info(
                f"Initialized file store at {self.path}",
                extra={"backend": self.kind},
            )
            return document
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                document = json.load(fh)
        except (OSError, ValueError) as e:
            logger.error(
                f"File store read failed: {e}",
                extra={"backend": self.kind, "operation": "read"},
            )
            raise self._failure("Dataset file unreadable", "read") from e
        if not _well_formed(document):
            logger.error(
                f"File store document at {self.path} is malformed",
                extra={"backend": self.kind, "operation": "read"},
            )
            raise self._failure("Dataset file malformed", "read")
        return document

    def _write(self, document: dict) -> None:
        directory = self.path.parent
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=directory,
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(document, fh, indent=2)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            logger.error(
                f"File store write failed: {e}",
                extra={"backend": self.kind, "operation": "write"},
            )
            raise self._failure("Dataset file not writable", "write") from e

    def _mutate_sync(self, mutation: Callable[[dict], bool]) -> None:
        document = self._read()
        if mutation(document):
            self._write(document)

    async def _query(self, query: Callable[[dict], Any]) -> Any:
        document = await asyncio.to_thread(self._read)
        return query(document)

    async def _mutate(self, mutation: Callable[[dict], bool]) -> None:
        """Run read-modify-write; mutation returns False to skip the rewrite."""
        await asyncio.to_thread(self._mutate_sync, mutation)

    # ─── PersistenceBackend ─────────────────────────────────────

    async def upsert_user(self, upsert: UserUpsert) -> None:
        def apply(document: dict) -> bool:
            now = utc_now().isoformat()
            existing = next(
                (u for u in document["users"] if u["open_id"] == upsert.open_id),
                None,
            )
            if existing is None:
                record = {
                    "id": document["next_user_id"],
                    "open_id": upsert.open_id,
                    "name": None,
                    "email": None,
                    "login_method": None,
                    "role": Role.USER.value,
                    "created_at": now,
                    "updated_at": now,
                    "last_signed_in": now,
                }
                record.update(_encode_values(upsert.insert_values))
                document["next_user_id"] += 1
                document["users"].append(record)
            else:
                existing.update(_encode_values(upsert.update_values))
            return True

        await self._mutate(apply)

    async def get_user_by_open_id(self, open_id: str) -> User | None:
        def find(document: dict) -> User | None:
            for record in document["users"]:
                if record["open_id"] == open_id:
                    return _to_user(record)
            return None

        return await self._query(find)

    async def list_favorites(self, user_id: int) -> list[Favorite]:
        def collect(document: dict) -> list[Favorite]:
            rows = [f for f in document["favorites"] if f["user_id"] == user_id]
            rows.sort(key=lambda f: (datetime.fromisoformat(f["created_at"]), f["id"]))
            return [_to_favorite(f) for f in rows]

        return await self._query(collect)

    async def add_favorite(
        self, user_id: int, ghibli_movie_id: str, movie_data: MovieData,
    ) -> None:
        def append(document: dict) -> bool:
            document["favorites"].append({
                "id": document["next_favorite_id"],
                "user_id": user_id,
                "ghibli_movie_id": ghibli_movie_id,
                "movie_title": movie_data.title,
                "movie_description": movie_data.description,
                "release_date": movie_data.release_date,
                "running_time": movie_data.running_time,
                "created_at": utc_now().isoformat(),
            })
            document["next_favorite_id"] += 1
            return True

        await self._mutate(append)

    async def remove_favorite(self, user_id: int, ghibli_movie_id: str) -> None:
        def drop(document: dict) -> bool:
            before = len(document["favorites"])
            document["favorites"] = [
                f for f in document["favorites"]
                if not _matches(f, user_id, ghibli_movie_id)
            ]
            return len(document["favorites"]) != before

        await self._mutate(drop)

    async def is_favorited(self, user_id: int, ghibli_movie_id: str) -> bool:
        return await self._query(
            lambda document: any(
                _matches(f, user_id, ghibli_movie_id)
                for f in document["favorites"]
            ),
        )

    async def health_check(self) -> bool:
        try:
            await asyncio.to_thread(self._read)
            return True
        except PersistenceFailureError:
            return False

    async def dispose(self) -> None:
        return None
