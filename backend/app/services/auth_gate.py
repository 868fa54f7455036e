"""Auth Gate — request-scoped identity resolution and the public/protected split.

Invariants:
    - resolve_context never raises for an absent, malformed or expired token → user None
    - No persistence call when the token is absent or fails verification
    - ensure_authenticated raises UnauthorizedError when user is None, before any handler logic
    - Public procedures receive the RequestContext whatever its user

Design Decisions:
    - Verifier and directory injected as arguments: the gate holds no state and no
      module-level globals, so tests run isolated and in parallel
    - Valid token for an unknown open_id resolves to user None (not an error):
      the session outlived its user record
"""

import logging
from dataclasses import dataclass

from app.core.domain_types import User
from app.core.errors import UnauthorizedError
from app.infrastructure.identity import IdentityVerifier
from app.services.user_directory import UserDirectoryService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RequestContext:
    user: User | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None


async def resolve_context(
    token: str | None,
    verifier: IdentityVerifier,
    users: UserDirectoryService,
) -> RequestContext:
    """Resolve the session token into a RequestContext."""
    claims = await verifier.verify_session(token)
    if claims is None:
        return RequestContext(user=None)
    user = await users.get_user_by_open_id(claims.open_id)
    if user is None:
        logger.info(
            "Session token references unknown user",
            extra={"open_id": claims.open_id},
        )
    return RequestContext(user=user)


def ensure_authenticated(ctx: RequestContext) -> User:
    """Gate for protected procedures."""
    if ctx.user is None:
        raise UnauthorizedError()
    return ctx.user
