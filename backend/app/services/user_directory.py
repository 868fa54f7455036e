"""User Directory — upsert and lookup of identity records on any PersistenceBackend.

Invariants:
    - Empty open_id or an unknown role raises InvalidArgumentError before the backend is touched
    - Create applies only provided patch fields; absent fields take column defaults
    - Owner open_id without explicit role → admin, only on creation
    - Update applies only provided fields and always refreshes last_signed_in and updated_at
    - Explicit None in the patch is written verbatim (distinct from "not provided")

Design Decisions:
    - The service builds a UserUpsert plan (insert_values / update_values) and the
      backend applies it mechanically: role policy lives in one place and the
      relational variant can still issue a single atomic statement
"""

import logging

from app.core.domain_types import Role, User, UserPatch, UserUpsert, utc_now
from app.core.errors import ErrorContext, InvalidArgumentError
from app.core.repository_protocols import PersistenceBackend

logger = logging.getLogger(__name__)

_TEXT_FIELDS = ("name", "email", "login_method")


def _parse_role(open_id: str, value) -> Role:
    try:
        return Role(value)
    except ValueError:
        raise InvalidArgumentError(
            f"Unknown role '{value}'", "role", ErrorContext(open_id=open_id),
        ) from None


def build_user_upsert(
    open_id: str, patch: UserPatch, owner_open_id: str = "",
) -> UserUpsert:
    """Split a login patch into insert/update column sets."""
    now = utc_now()
    insert_values: dict = {}
    update_values: dict = {}

    for field in _TEXT_FIELDS:
        if field in patch:
            insert_values[field] = patch[field]
            update_values[field] = patch[field]

    if "role" in patch:
        role = _parse_role(open_id, patch["role"])
        insert_values["role"] = role
        update_values["role"] = role
    elif owner_open_id and open_id == owner_open_id:
        insert_values["role"] = Role.ADMIN

    signed_in = patch.get("last_signed_in") or now
    insert_values["last_signed_in"] = signed_in
    update_values["last_signed_in"] = signed_in
    update_values["updated_at"] = now

    return UserUpsert(
        open_id=open_id,
        insert_values=insert_values,
        update_values=update_values,
    )


class UserDirectoryService:
    """Identity records keyed by open_id."""

    def __init__(self, backend: PersistenceBackend, owner_open_id: str = ""):
        self.backend = backend
        self.owner_open_id = owner_open_id

    async def upsert_user(self, open_id: str, patch: UserPatch | None = None) -> None:
        if not open_id:
            raise InvalidArgumentError(
                "User openId is required for upsert", "open_id",
            )
        upsert = build_user_upsert(open_id, patch or {}, self.owner_open_id)
        await self.backend.upsert_user(upsert)
        logger.info(
            "User upserted",
            extra={"open_id": open_id, "backend": self.backend.kind},
        )

    async def get_user_by_open_id(self, open_id: str) -> User | None:
        return await self.backend.get_user_by_open_id(open_id)
