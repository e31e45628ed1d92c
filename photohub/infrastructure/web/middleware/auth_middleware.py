"""
Authentication middleware for FastAPI.
Resolves the request principal from a bearer token or from the cookie
session, refreshing expired sessions and starting the authorization code
flow for browsers that have no session yet.
"""

import logging
from typing import Iterable, Optional, Tuple

from fastapi import Request, Response, status
from fastapi.responses import RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware

from photohub.infrastructure.auth.authorization_request import AuthorizationRequestState
from photohub.infrastructure.auth.oauth_client import OAuthError
from photohub.infrastructure.auth.provider import OidcProvider
from photohub.infrastructure.auth.session_store import (
    AUTHORIZATION_REQUEST_STATE_KEY,
    OAUTH_SESSION_KEY,
    USER_KEY,
    SessionStore,
    get_session_id,
)
from photohub.infrastructure.auth.token_validator import TokenValidationError, validate_access_token
from photohub.infrastructure.auth.user import AuthenticatedUser, AuthenticationMethod
from photohub.infrastructure.auth.user_session import SessionTokens, UserSession

logger = logging.getLogger(__name__)


class AuthenticationMiddleware(BaseHTTPMiddleware):
    """Middleware attaching an AuthenticatedUser to every non-public request."""

    def __init__(
        self,
        app,
        health_check_path: str = "/healthcheck",
        redirect_path: str = "/oauth/callback",
        public_endpoints: Optional[Iterable[str]] = None,
    ):
        super().__init__(app)
        self.health_check_path = health_check_path
        self.redirect_path = redirect_path
        self.public_endpoints = set(public_endpoints or ())

    async def dispatch(self, request: Request, call_next):
        """Process request through authentication middleware."""
        path = request.url.path

        if path == self.health_check_path or path in self.public_endpoints:
            return await call_next(request)

        if getattr(request.state, "user", None) is not None:
            return await call_next(request)

        oidc: OidcProvider = request.app.state.oidc
        store: SessionStore = request.app.state.session_store

        token = self._extract_token(request)
        if token is not None:
            user = await self._authenticate_bearer(oidc, token)
            if user is None:
                return self._unauthorized()
            await self._clear_session(request, store)
            self._attach(request, user, AuthenticationMethod.BEARER)
            return await call_next(request)

        session_id = get_session_id(request)
        stored_session = await store.get(session_id, OAUTH_SESSION_KEY) if session_id else None
        stored_profile = await store.get(session_id, USER_KEY) if session_id else None

        if stored_session is None or stored_profile is None:
            if path == self.redirect_path:
                return await call_next(request)
            return await self._start_authorization(request, oidc, store)

        try:
            user_session = UserSession.from_dict(stored_session)
            user = AuthenticatedUser.from_profile(stored_profile, user_session.tokens.access_token)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Discarding unreadable session: {e}")
            await self._clear_session(request, store)
            return await self._start_authorization(request, oidc, store)

        if user_session.is_access_token_expired():
            refreshed = await self._refresh(oidc, user_session)
            if refreshed is None:
                await self._clear_session(request, store)
                return self._unauthorized()
            user_session, user = refreshed
            await store.set(session_id, OAUTH_SESSION_KEY, user_session.to_dict())
            await store.set(session_id, USER_KEY, user.profile())

        self._attach(request, user, AuthenticationMethod.OAUTH_CODE_FLOW)
        return await call_next(request)

    async def _authenticate_bearer(self, oidc: OidcProvider, token: str) -> Optional[AuthenticatedUser]:
        try:
            key_set = await oidc.jwks.key_set_for(token)
            validate_access_token(token, key_set, oidc.access_token_audience)
            user_info = await oidc.oauth_client.user_info(token)
        except TokenValidationError as e:
            logger.info(f"Rejected bearer token ({e.kind.value}): {e.message}")
            return None
        except OAuthError as e:
            logger.info(f"Userinfo lookup failed for bearer token: {e}")
            return None
        return AuthenticatedUser.from_user_info(user_info, token)

    async def _refresh(
        self,
        oidc: OidcProvider,
        user_session: UserSession,
    ) -> Optional[Tuple[UserSession, AuthenticatedUser]]:
        refresh_token = user_session.tokens.refresh_token
        if not refresh_token or user_session.is_refresh_token_expired():
            logger.info("Session expired and cannot be refreshed")
            return None

        try:
            token_response = await oidc.oauth_client.refresh(refresh_token, oidc.scopes)
            tokens = SessionTokens.from_token_response(token_response)
            key_set = await oidc.jwks.key_set_for(tokens.access_token)
            new_session, id_claims = UserSession.validate(
                tokens, key_set, oidc.client_id, oidc.access_token_audience
            )
            user = AuthenticatedUser.from_id_token_claims(id_claims, tokens.access_token)
        except (OAuthError, TokenValidationError, ValueError) as e:
            logger.info(f"Session refresh failed: {e}")
            return None

        logger.debug("Session refreshed")
        return new_session, user

    async def _start_authorization(
        self,
        request: Request,
        oidc: OidcProvider,
        store: SessionStore,
    ) -> Response:
        request_state = AuthorizationRequestState.random()
        session_id = get_session_id(request, create=True)
        await store.set(session_id, AUTHORIZATION_REQUEST_STATE_KEY, request_state.to_dict())
        url = request_state.authorization_url(
            oidc.authorization_endpoint,
            oidc.client_id,
            oidc.redirect_uri,
            oidc.scopes,
        )
        return RedirectResponse(url, status_code=status.HTTP_302_FOUND)

    async def _clear_session(self, request: Request, store: SessionStore) -> None:
        session_id = get_session_id(request)
        if session_id is None:
            return
        await store.remove(session_id, OAUTH_SESSION_KEY)
        await store.remove(session_id, USER_KEY)

    def _attach(self, request: Request, user: AuthenticatedUser, method: AuthenticationMethod) -> None:
        request.state.user = user
        request.state.authentication_method = method

    def _extract_token(self, request: Request) -> Optional[str]:
        """Extract the token from an Authorization: Bearer header."""
        auth_header = request.headers.get("authorization")
        if not auth_header:
            return None

        scheme, _, token = auth_header.partition(" ")
        if scheme.lower() != "bearer" or not token.strip():
            return None

        return token.strip()

    def _unauthorized(self) -> Response:
        return Response(
            status_code=status.HTTP_401_UNAUTHORIZED,
            headers={"WWW-Authenticate": "Bearer"},
        )
