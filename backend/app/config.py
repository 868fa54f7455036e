"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded outside dev defaults)
    - get_settings() is cached (lru_cache) — single instance per process
    - database_url is optional: absence selects the file-backed fallback store

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support (ADR: developer UX)
    - Defaults provided for all non-secret settings: works out-of-the-box for local dev
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.core.domain_types import DeploymentMode


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database: None means "not provisioned"
    database_url: str | None = None

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str | None) -> str | None:
        """Hosting platforms provide postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str):
            v = v.strip()
            if not v:
                return None
            if v.startswith("postgresql://"):
                return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # File-backed fallback store
    dev_db_path: str = "server_data.json"

    # Identity
    owner_open_id: str = ""
    jwt_secret: str = "dev-only-session-secret"
    session_cookie_name: str = "app_session_id"
    session_max_age_days: int = 365

    # Deployment
    deployment_mode: DeploymentMode = DeploymentMode.DEVELOPMENT
    sandbox_host: str | None = None
    cookie_domain_suffix: str = ".csb.app"

    # API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @property
    def is_hosted(self) -> bool:
        return bool(self.sandbox_host)

    @property
    def dev_login_enabled(self) -> bool:
        return self.deployment_mode is not DeploymentMode.PRODUCTION


@lru_cache
def get_settings() -> Settings:
    return Settings()
