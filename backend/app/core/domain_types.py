"""Domain Types — identity and favorites records shared by services and both stores.

Invariants:
    - open_id is the natural key of a User; id is a store-assigned surrogate
    - All timestamps are timezone-aware UTC on the way in
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - Frozen dataclasses over ORM rows: services never see SQLAlchemy objects,
      so RelationalStore and FileBackedStore return the same shape
    - TypedDict(total=False) for patches: key presence means "provided",
      an explicit None is a value (ADR: partial update semantics)
    - str Enums: serialize to JSON without custom encoders
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import NewType, TypedDict


# ─── Identity Types ──────────────────────────────────────────────

OpenId = NewType("OpenId", str)
UserId = NewType("UserId", int)
MovieId = NewType("MovieId", str)


# ─── Enums ───────────────────────────────────────────────────────

class Role(str, Enum):
    """User role — admin only via owner promotion or explicit patch."""
    USER = "user"
    ADMIN = "admin"


class DeploymentMode(str, Enum):
    """Where the process runs — drives cookie policy and dev bypass."""
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TEST = "test"


# ─── Records ─────────────────────────────────────────────────────

@dataclass(frozen=True)
class User:
    id: int
    open_id: str
    name: str | None
    email: str | None
    login_method: str | None
    role: Role
    created_at: datetime
    updated_at: datetime
    last_signed_in: datetime


@dataclass(frozen=True)
class Favorite:
    id: int
    user_id: int
    ghibli_movie_id: str
    movie_title: str | None
    movie_description: str | None
    release_date: str | None
    running_time: str | None
    created_at: datetime


@dataclass(frozen=True)
class MovieData:
    """Catalog metadata copied onto a Favorite at insert time."""
    title: str | None = None
    description: str | None = None
    release_date: str | None = None
    running_time: str | None = None


class UserPatch(TypedDict, total=False):
    """Fields a login may provide. Absent key = leave untouched."""
    name: str | None
    email: str | None
    login_method: str | None
    role: Role
    last_signed_in: datetime


@dataclass(frozen=True)
class UserUpsert:
    """Insert-or-update plan keyed by open_id.

    insert_values apply when no row exists, update_values when one does.
    Neither contains open_id.
    """
    open_id: str
    insert_values: dict
    update_values: dict


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
