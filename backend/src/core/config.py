"""Application configuration using pydantic-settings."""
from functools import lru_cache
from typing import Literal
from urllib.parse import urlparse

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Database
    database_url: str
    db_pool_size: int = Field(default=5, validation_alias="DB_POOL_SIZE")
    db_max_overflow: int = Field(default=10, validation_alias="DB_MAX_OVERFLOW")

    # Google OAuth client
    google_client_id: str = Field(default="", validation_alias="GOOGLE_CLIENT_ID")
    google_client_secret: str = Field(default="", validation_alias="GOOGLE_CLIENT_SECRET")
    google_redirect_uri: str = Field(default="", validation_alias="GOOGLE_REDIRECT_URI")
    # Applies to both the code exchange and the JWKS fetch; failures are never retried
    oauth_timeout_seconds: float = Field(default=10.0, validation_alias="OAUTH_TIMEOUT_SECONDS")

    # Frontend - OAuth callback redirects land here
    frontend_url: str = Field(
        default="http://localhost:5173",
        validation_alias="FRONTEND_URL",
    )

    # CORS - comma-separated list of allowed origins (stored as string, parsed via property)
    cors_origins_str: str = Field(
        default="http://localhost:5173",
        validation_alias="CORS_ORIGINS",
    )

    # Session cookie
    session_cookie_name: str = Field(
        default="taskboard_session", validation_alias="SESSION_COOKIE_NAME",
    )
    session_lifetime_minutes: int = Field(default=120, validation_alias="SESSION_LIFETIME")
    session_cookie_secure: bool = Field(default=True, validation_alias="SESSION_SECURE_COOKIE")
    session_cookie_samesite: Literal["lax", "strict", "none"] = Field(
        default="lax", validation_alias="SESSION_SAME_SITE",
    )

    # Redis - session lookup cache
    redis_url: str = Field(default="redis://localhost:6379", validation_alias="REDIS_URL")
    redis_enabled: bool = Field(default=True, validation_alias="REDIS_ENABLED")
    redis_pool_size: int = Field(default=20, validation_alias="REDIS_POOL_SIZE")

    # Exposes exception detail in 500 responses
    debug: bool = Field(default=False, validation_alias="APP_DEBUG")

    @model_validator(mode="after")
    def validate_session_lifetime(self) -> "Settings":
        """Reject non-positive session lifetimes."""
        if self.session_lifetime_minutes <= 0:
            raise ValueError("SESSION_LIFETIME must be a positive number of minutes.")
        return self

    @model_validator(mode="after")
    def validate_debug_security(self) -> "Settings":
        """
        Prevent APP_DEBUG from being enabled with a production database.

        APP_DEBUG leaks exception detail to clients, so it is only allowed
        against local development databases.
        """
        if not self.debug:
            return self

        if self.database_url.startswith("sqlite"):
            return self

        try:
            parsed = urlparse(self.database_url)
            hostname = parsed.hostname or ""
        except ValueError:
            hostname = ""

        local_hosts = {"localhost", "127.0.0.1", "0.0.0.0", "::1"}
        if hostname.lower() not in local_hosts:
            raise ValueError(
                f"APP_DEBUG cannot be enabled with a non-local database. "
                f"Database host '{hostname}' appears to be a production database.",
            )

        return self

    @property
    def cors_origins(self) -> list[str]:
        """Parse comma-separated CORS origins string into a list."""
        if not self.cors_origins_str:
            return []
        return [origin.strip() for origin in self.cors_origins_str.split(",") if origin.strip()]

    @property
    def google_configured(self) -> bool:
        """True when every value needed for the authorization code flow is present."""
        return bool(
            self.google_client_id and self.google_client_secret and self.google_redirect_uri,
        )

    @property
    def google_auth_url(self) -> str:
        """Google consent screen endpoint."""
        return "https://accounts.google.com/o/oauth2/v2/auth"

    @property
    def google_token_url(self) -> str:
        """Google authorization code exchange endpoint."""
        return "https://oauth2.googleapis.com/token"

    @property
    def google_jwks_url(self) -> str:
        """Google JWKS URL for fetching identity token public keys."""
        return "https://www.googleapis.com/oauth2/v3/certs"

    @property
    def google_issuers(self) -> tuple[str, ...]:
        """Issuer values Google puts in identity tokens."""
        return ("https://accounts.google.com", "accounts.google.com")

    @property
    def session_lifetime_seconds(self) -> int:
        """Session lifetime in seconds (cookie max-age)."""
        return self.session_lifetime_minutes * 60


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
