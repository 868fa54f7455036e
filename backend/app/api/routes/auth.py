"""Auth Routes — current identity, logout, and the developer bypass login.

Invariants:
    - me and logout are public: they run with or without a resolved identity
    - logout clears the cookie with the exact attributes used to set it; idempotent
    - dev_router is only included by create_app() outside production

Design Decisions:
    - Dev bypass swallows PersistenceFailureError on its upsert so local dev works
      without a provisioned database; this is the ONLY route that does so
"""

import logging
from datetime import timedelta

from fastapi import APIRouter, Depends, Response
from fastapi.responses import RedirectResponse

from app.config import Settings
from app.core.cookie_policy import CookieOptions
from app.core.errors import PersistenceFailureError
from app.infrastructure.identity import SessionTokenService
from app.schemas.auth import SuccessResponse, UserResponse
from app.services.auth_gate import RequestContext
from app.services.user_directory import UserDirectoryService
from app.api.dependencies import (
    get_app_settings, get_cookie_options, get_request_context,
    get_token_service, get_user_directory,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/auth", tags=["auth"])
dev_router = APIRouter(tags=["dev"])

DEV_OPEN_ID = "dev-user"
DEV_USER_NAME = "Dev User"


@router.get("/me", response_model=UserResponse | None)
async def me(ctx: RequestContext = Depends(get_request_context)):
    """Current identity, or null when not signed in."""
    if ctx.user is None:
        return None
    return UserResponse.model_validate(ctx.user)


@router.post("/logout", response_model=SuccessResponse)
async def logout(
    response: Response,
    cookie_options: CookieOptions = Depends(get_cookie_options),
    settings: Settings = Depends(get_app_settings),
):
    """Clear the session cookie. Succeeds with or without an active session."""
    response.delete_cookie(
        settings.session_cookie_name, **cookie_options.as_cookie_kwargs(),
    )
    return SuccessResponse(success=True)


@dev_router.get("/dev-login")
async def dev_login(
    users: UserDirectoryService = Depends(get_user_directory),
    tokens: SessionTokenService = Depends(get_token_service),
    cookie_options: CookieOptions = Depends(get_cookie_options),
    settings: Settings = Depends(get_app_settings),
):
    """Manufacture a placeholder session without an identity provider."""
    try:
        await users.upsert_user(DEV_OPEN_ID, {"name": DEV_USER_NAME})
    except PersistenceFailureError as e:
        logger.warning(
            f"Ignoring persistence error during dev login: {e.message}",
            extra={"open_id": DEV_OPEN_ID, "error_code": e.code},
        )

    max_age = timedelta(days=settings.session_max_age_days)
    token = tokens.create_session_token(
        DEV_OPEN_ID, DEV_USER_NAME, expires_in=max_age,
    )
    response = RedirectResponse(url="/", status_code=302)
    response.set_cookie(
        settings.session_cookie_name, token,
        max_age=int(max_age.total_seconds()),
        **cookie_options.as_cookie_kwargs(),
    )
    return response
