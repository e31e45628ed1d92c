"""
Main FastAPI application entry point.
Configures the app, middleware, routers, and startup/shutdown events.
"""

from contextlib import asynccontextmanager
import logging

import httpx
import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from sentry_sdk.integrations.fastapi import FastApiIntegration
from starlette.middleware.sessions import SessionMiddleware

from photohub.config import Settings, settings
from photohub.infrastructure.auth.client_session import OAuthClientAccessToken
from photohub.infrastructure.auth.oauth_client import OAuthClient
from photohub.infrastructure.auth.provider import JwksCache, OidcProvider, discover, discover_uma2
from photohub.infrastructure.auth.session_store import create_session_store
from photohub.infrastructure.authz import (
    AlbumPolicyEnforcer,
    ImagePolicyEnforcer,
    PhotoPolicyEnforcer,
)
from photohub.infrastructure.authz.policy_client import PolicyDecisionClient
from photohub.infrastructure.repositories import (
    InMemoryAlbumRepository,
    InMemoryImageReferenceRepository,
    InMemoryPhotoRepository,
)
from photohub.infrastructure.storage import ImageReferenceUrlBuilder, create_image_storage
from photohub.infrastructure.web.dependencies import ServiceContainer
from photohub.infrastructure.web.middleware.auth_middleware import AuthenticationMiddleware
from photohub.infrastructure.web.middleware.error_handler import ErrorHandlerMiddleware
from photohub.infrastructure.web.routers import albums, health, home, images, oauth, photos

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


async def build_identity(app: FastAPI, config: Settings, http_client: httpx.AsyncClient) -> PolicyDecisionClient:
    """
    Discover the identity provider, load its keys, start this service's own
    session and return a policy decision client bound to it.
    """
    discovery = await discover(http_client, config.oidc_auth_server_url)
    uma2 = await discover_uma2(http_client, config.oidc_auth_server_url)

    jwks = JwksCache(
        http_client,
        discovery.jwks_uri,
        min_refresh_interval=config.jwks_min_refresh_interval_seconds,
    )
    await jwks.load()

    oauth_client = OAuthClient(
        http_client,
        token_endpoint=discovery.token_endpoint,
        userinfo_endpoint=discovery.userinfo_endpoint,
        client_id=config.oidc_client_id,
        client_secret=config.oidc_client_secret,
        redirect_uri=config.oidc_redirect_uri,
    )
    app.state.oidc = OidcProvider(
        discovery=discovery,
        jwks=jwks,
        oauth_client=oauth_client,
        scopes=list(config.oidc_scopes),
        access_token_audience=config.oidc_access_token_audience,
    )

    client_access_token = await OAuthClientAccessToken.start_session(
        oauth_client,
        jwks,
        list(config.oidc_scopes),
        config.oidc_access_token_audience,
    )
    return PolicyDecisionClient(
        http_client,
        token_endpoint=uma2.token_endpoint,
        resource_registration_endpoint=uma2.resource_registration_endpoint,
        client_id=config.oidc_client_id,
        client_secret=config.oidc_client_secret,
        client_access_token=client_access_token,
        max_concurrent_requests=config.authz_max_concurrent_requests,
    )


def build_container(config: Settings, policy_client: PolicyDecisionClient) -> ServiceContainer:
    return ServiceContainer(
        photo_repository=InMemoryPhotoRepository(),
        album_repository=InMemoryAlbumRepository(),
        image_reference_repository=InMemoryImageReferenceRepository(),
        image_storage=create_image_storage(config),
        photo_policy_enforcer=PhotoPolicyEnforcer(policy_client),
        album_policy_enforcer=AlbumPolicyEnforcer(policy_client),
        image_policy_enforcer=ImagePolicyEnforcer(policy_client),
        url_builder=ImageReferenceUrlBuilder(config.image_base_url),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifecycle.
    Setup and teardown operations.
    """
    # Startup
    logger.info(f"Starting {settings.api_title} v{settings.api_version}")
    logger.info(f"Environment: {settings.environment}")

    if settings.sentry_dsn and not settings.is_development:
        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            traces_sample_rate=settings.sentry_traces_sample_rate,
            environment=settings.environment,
            integrations=[FastApiIntegration(transaction_style="endpoint")],
        )
        logger.info("Sentry initialized")

    http_client = httpx.AsyncClient(timeout=settings.http_timeout_seconds)
    try:
        policy_client = await build_identity(app, settings, http_client)
    except Exception:
        await http_client.aclose()
        raise
    logger.info(f"Connected to identity provider {settings.oidc_auth_server_url}")

    app.state.session_store = create_session_store(settings.redis_url, settings.session_ttl_seconds)
    app.state.container = build_container(settings, policy_client)

    yield

    # Shutdown
    logger.info("Shutting down application")
    await app.state.session_store.close()
    await http_client.aclose()


def create_application() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """
    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        debug=settings.debug,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan
    )

    # Middleware added last runs first: errors, CORS, cookie session, authentication
    app.add_middleware(
        AuthenticationMiddleware,
        health_check_path=settings.health_check_path,
        redirect_path=settings.redirect_path,
    )
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret_key,
        session_cookie=settings.session_cookie_name,
        max_age=settings.session_ttl_seconds,
        same_site="lax",
        https_only=settings.session_https_only,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    # Add trusted host middleware for production
    if settings.is_production:
        app.add_middleware(
            TrustedHostMiddleware,
            allowed_hosts=["*"]  # Configure with your domain
        )

    app.add_middleware(ErrorHandlerMiddleware)

    # Include routers
    app.include_router(health.router, tags=["Health"])
    app.include_router(home.router, tags=["Home"])
    app.include_router(oauth.router, prefix=settings.redirect_path, tags=["Authentication"])
    app.include_router(photos.router, prefix="/photos", tags=["Photos"])
    app.include_router(albums.router, prefix="/albums", tags=["Albums"])
    app.include_router(images.router, prefix="/images", tags=["Images"])

    return app


# Create the FastAPI app instance
app = create_application()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "photohub.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
        log_level="debug" if settings.debug else "info",
    )
