"""Cookie Policy — decides session-cookie attributes per request and deployment mode.

Invariants:
    - decide() is pure: same signals + mode → same options, no IO
    - Never returns same_site="none" together with secure=False
    - development over plain HTTP always yields lax / not secure / no domain
    - Evaluated per request (proxy headers vary), never cached

Design Decisions:
    - Browsers reject SameSite=None without Secure, so insecure local dev falls
      back to Lax instead of producing a cookie that is silently dropped
    - RequestSignals decouples the policy from Starlette's Request type so the
      policy stays testable without an ASGI scope
"""

from dataclasses import dataclass, field
from typing import Literal

from app.core.domain_types import DeploymentMode

DEFAULT_DOMAIN_SUFFIX = ".csb.app"


@dataclass(frozen=True)
class RequestSignals:
    """Transport facts the policy needs: own scheme and forwarded protocol(s)."""
    protocol: str
    forwarded_proto: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class CookieOptions:
    http_only: bool
    path: str
    same_site: Literal["lax", "none"]
    secure: bool
    domain: str | None = None

    def as_cookie_kwargs(self) -> dict:
        """Keyword arguments for Starlette set_cookie / delete_cookie."""
        return {
            "httponly": self.http_only,
            "path": self.path,
            "samesite": self.same_site,
            "secure": self.secure,
            "domain": self.domain,
        }


def is_secure_request(signals: RequestSignals) -> bool:
    if signals.protocol.lower() == "https":
        return True
    for header_value in signals.forwarded_proto:
        for proto in header_value.split(","):
            if proto.strip().lower() == "https":
                return True
    return False


def decide(
    signals: RequestSignals,
    deployment_mode: DeploymentMode,
    *,
    hosted: bool = False,
    domain_suffix: str = DEFAULT_DOMAIN_SUFFIX,
) -> CookieOptions:
    """Session cookie attributes for this request."""
    secure = is_secure_request(signals)

    if deployment_mode is DeploymentMode.DEVELOPMENT and not secure:
        return CookieOptions(
            http_only=True, path="/", same_site="lax", secure=False,
        )

    domain = (
        domain_suffix
        if deployment_mode is DeploymentMode.PRODUCTION or hosted
        else None
    )
    return CookieOptions(
        http_only=True, path="/", same_site="none", secure=True, domain=domain,
    )
