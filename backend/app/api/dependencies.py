"""API Dependencies — FastAPI providers wiring app.state collaborators into routes.

Invariants:
    - Backend obtained per request from app.state.backend_selector (selected once)
    - require_user runs before the handler body; on rejection no service method is called
    - Cookie options recomputed on every request (proxy headers vary per request)

Design Decisions:
    - Collaborators live on app.state, not module globals: create_app() builds
      isolated instances and tests override via app.dependency_overrides
"""

from fastapi import Depends, Request

from app.config import Settings
from app.core.cookie_policy import CookieOptions, RequestSignals, decide
from app.core.domain_types import User
from app.core.repository_protocols import PersistenceBackend
from app.infrastructure.identity import SessionTokenService
from app.services.auth_gate import RequestContext, ensure_authenticated, resolve_context
from app.services.favorites import FavoritesService
from app.services.user_directory import UserDirectoryService


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


async def get_backend(request: Request) -> PersistenceBackend:
    return await request.app.state.backend_selector.get()


def get_token_service(request: Request) -> SessionTokenService:
    return request.app.state.token_service


def get_user_directory(
    backend: PersistenceBackend = Depends(get_backend),
    settings: Settings = Depends(get_app_settings),
) -> UserDirectoryService:
    return UserDirectoryService(backend, owner_open_id=settings.owner_open_id)


def get_favorites_service(
    backend: PersistenceBackend = Depends(get_backend),
) -> FavoritesService:
    return FavoritesService(backend)


def signals_from_request(request: Request) -> RequestSignals:
    return RequestSignals(
        protocol=request.url.scheme,
        forwarded_proto=tuple(request.headers.getlist("x-forwarded-proto")),
    )


def get_cookie_options(
    request: Request, settings: Settings = Depends(get_app_settings),
) -> CookieOptions:
    return decide(
        signals_from_request(request),
        settings.deployment_mode,
        hosted=settings.is_hosted,
        domain_suffix=settings.cookie_domain_suffix,
    )


async def get_request_context(
    request: Request,
    verifier: SessionTokenService = Depends(get_token_service),
    users: UserDirectoryService = Depends(get_user_directory),
    settings: Settings = Depends(get_app_settings),
) -> RequestContext:
    token = request.cookies.get(settings.session_cookie_name)
    return await resolve_context(token, verifier, users)


def require_user(ctx: RequestContext = Depends(get_request_context)) -> User:
    return ensure_authenticated(ctx)
