"""Identity Verifier — signs and validates opaque session tokens carried in the session cookie.

Invariants:
    - verify_session never raises: missing, malformed, tampered or expired tokens → None
    - Tokens carry the open_id in `sub`; the user record is looked up separately
    - create_session_token is the only minting path (login completion, dev bypass)

Design Decisions:
    - HS256 JWT via PyJWT: stateless, no session table, expiry enforced by the library
    - IdentityVerifier Protocol: AuthGate depends on the contract, tests inject fakes
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Protocol

import jwt

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


@dataclass(frozen=True)
class SessionClaims:
    open_id: str
    name: str | None = None


class IdentityVerifier(Protocol):
    """Contract for session token validation — implemented by the shell."""
    async def verify_session(self, token: str | None) -> SessionClaims | None: ...


class SessionTokenService:
    """Mints and verifies session JWTs with a shared secret."""

    def __init__(self, secret: str):
        self._secret = secret

    def create_session_token(
        self, open_id: str, name: str | None = None,
        expires_in: timedelta = timedelta(days=365),
    ) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "sub": open_id,
            "name": name,
            "iat": now,
            "exp": now + expires_in,
        }
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    async def verify_session(self, token: str | None) -> SessionClaims | None:
        if not token:
            return None
        try:
            payload = jwt.decode(
                token, self._secret, algorithms=[ALGORITHM],
                options={"require": ["sub", "exp"]},
            )
        except jwt.ExpiredSignatureError:
            logger.info("Session token expired")
            return None
        except jwt.PyJWTError as e:
            logger.warning(f"Session verification failed: {e}")
            return None
        open_id = payload.get("sub")
        if not isinstance(open_id, str) or not open_id:
            return None
        return SessionClaims(open_id=open_id, name=payload.get("name"))
