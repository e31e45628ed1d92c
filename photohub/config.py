"""
Application configuration using Pydantic Settings.
Loads environment variables and provides type-safe configuration.
"""

from typing import List, Optional
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from urllib.parse import urlparse


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    environment: str = Field(default="development", description="Current environment")
    debug: bool = Field(default=False, description="Debug mode")

    # API Configuration
    api_title: str = Field(default="Secure Photo Hub")
    api_version: str = Field(default="1.0.0")
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8085)
    home_path: str = Field(default="/")
    health_check_path: str = Field(default="/healthcheck")

    # OpenID Connect client
    oidc_auth_server_url: str = Field(
        default="http://localhost:8080/realms/secure-photo-hub",
        description="Realm URL of the identity provider"
    )
    oidc_client_id: str = Field(default="secure-photo-hub-rest-api")
    oidc_client_secret: str = Field(default="")
    oidc_redirect_uri: str = Field(default="http://localhost:8085/oauth/callback")
    oidc_scopes: str | List[str] = Field(default="openid profile email")
    oidc_access_token_audience: str = Field(
        default="account",
        description="Audience expected in end user access tokens"
    )
    jwks_min_refresh_interval_seconds: int = Field(default=60)

    # Sessions
    session_secret_key: str = Field(default="development-session-key-change-in-production")
    session_cookie_name: str = Field(default="photohub_session")
    session_https_only: bool = Field(default=False)
    session_ttl_seconds: int = Field(default=60 * 60 * 24)
    redis_url: Optional[str] = Field(default=None, description="Redis URL for the session store")

    # Outbound HTTP
    http_timeout_seconds: float = Field(default=10.0)

    # Authorization
    authz_max_concurrent_requests: Optional[int] = Field(
        default=None,
        description="Upper bound on concurrent permission requests when filtering lists"
    )

    # Image storage
    storage_backend: str = Field(default="memory", description="memory or supabase")
    supabase_url: str = Field(default="https://example.supabase.co", description="Supabase project URL")
    supabase_service_key: str = Field(default="", description="Supabase service role key")
    image_bucket: str = Field(default="images")
    image_base_url: str = Field(
        default="http://localhost:8085/images",
        description="Public URL prefix of the image download route"
    )

    # CORS
    cors_origins: str | List[str] = Field(
        default="http://localhost:3000,http://localhost:5173"
    )
    cors_allow_credentials: bool = Field(default=True)
    cors_allow_methods: List[str] = Field(default=["*"])
    cors_allow_headers: List[str] = Field(default=["*"])

    # Sentry (Optional)
    sentry_dsn: Optional[str] = Field(default=None)
    sentry_traces_sample_rate: float = Field(default=0.1)

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS origins from comma-separated string or list."""
        if isinstance(v, str):
            if not v or v.strip() == "":
                return ["http://localhost:3000", "http://localhost:5173"]
            return [origin.strip() for origin in v.split(",")]
        elif v is None:
            return ["http://localhost:3000", "http://localhost:5173"]
        return v

    @field_validator("oidc_scopes", mode="before")
    @classmethod
    def parse_oidc_scopes(cls, v):
        """Scopes arrive whitespace separated, the way OIDC_SCOPES is written."""
        if isinstance(v, str):
            return v.split()
        elif v is None:
            return ["openid"]
        return v

    @field_validator("oidc_auth_server_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment.lower() == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing environment."""
        return self.environment.lower() == "testing"

    @property
    def redirect_path(self) -> str:
        """Path component of the redirect URI, served by the callback route."""
        return urlparse(self.oidc_redirect_uri).path or "/"

    def validate_environment(self) -> None:
        """Validate that all required environment variables are set."""
        required_vars = [
            "oidc_auth_server_url",
            "oidc_client_id",
            "oidc_client_secret",
            "oidc_redirect_uri",
            "session_secret_key",
        ]
        if self.storage_backend == "supabase":
            required_vars.append("supabase_service_key")

        missing_vars = []
        for var in required_vars:
            if not getattr(self, var, None):
                missing_vars.append(var.upper())

        if missing_vars:
            raise ValueError(
                f"Missing required environment variables: {', '.join(missing_vars)}"
            )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Use this function to get settings throughout the application.
    """
    settings = Settings()

    # Validate environment in production
    if settings.is_production:
        settings.validate_environment()

    return settings


# Create a global settings instance
settings = get_settings()
