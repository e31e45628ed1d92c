"""
Authentication infrastructure module.
Handles OIDC sessions, token validation and the machine credential.
"""

from .authorization_request import AuthorizationRequestState
from .client_session import OAuthClientAccessToken
from .oauth_client import OAuthClient, OAuthError, TokenResponse, UserInfo
from .provider import JwksCache, OidcDiscoveryDocument, OidcProvider, Uma2Configuration
from .session_store import InMemorySessionStore, RedisSessionStore, SessionStore
from .token_validator import (
    IdTokenClaims,
    KeySet,
    TokenClaims,
    TokenValidationError,
    TokenValidationErrorKind,
    validate_access_token,
    validate_id_token,
)
from .user import AuthenticatedUser, AuthenticationMethod
from .user_session import SessionTokens, UserSession
from .dependencies import get_authenticated_user, get_authentication_method

__all__ = [
    "AuthorizationRequestState",
    "OAuthClientAccessToken",
    "OAuthClient",
    "OAuthError",
    "TokenResponse",
    "UserInfo",
    "JwksCache",
    "OidcDiscoveryDocument",
    "OidcProvider",
    "Uma2Configuration",
    "InMemorySessionStore",
    "RedisSessionStore",
    "SessionStore",
    "IdTokenClaims",
    "KeySet",
    "TokenClaims",
    "TokenValidationError",
    "TokenValidationErrorKind",
    "validate_access_token",
    "validate_id_token",
    "AuthenticatedUser",
    "AuthenticationMethod",
    "SessionTokens",
    "UserSession",
    "get_authenticated_user",
    "get_authentication_method",
]
