"""
Access token of this service's own identity (client credentials grant).
Used to authenticate calls into the policy server's protection API.
"""

import asyncio
import logging
from typing import List, Optional

from .oauth_client import OAuthClient
from .provider import JwksCache
from .user_session import SessionTokens, UserSession, validate_tokens

logger = logging.getLogger(__name__)


class OAuthClientAccessToken:
    """Holds one valid machine access token and refreshes it when it expires."""

    def __init__(
        self,
        oauth_client: OAuthClient,
        jwks: JwksCache,
        scopes: List[str],
        access_token_audience: str,
        session: UserSession,
    ):
        self.oauth_client = oauth_client
        self.jwks = jwks
        self.scopes = list(scopes)
        self.access_token_audience = access_token_audience
        self._session = session
        self._lock = asyncio.Lock()

    @classmethod
    async def start_session(
        cls,
        oauth_client: OAuthClient,
        jwks: JwksCache,
        scopes: List[str],
        access_token_audience: str,
    ) -> "OAuthClientAccessToken":
        """
        Perform a client credentials grant and validate the issued tokens.

        Raises:
            OAuthError: If the grant fails
            TokenValidationError: If the issued tokens do not validate
        """
        session = await cls._grant(oauth_client, jwks, scopes, access_token_audience, None)
        logger.info(f"Started client session for {oauth_client.client_id}")
        return cls(oauth_client, jwks, scopes, access_token_audience, session)

    @property
    def session(self) -> UserSession:
        return self._session

    async def get_access_token(self) -> str:
        """Return the cached token, refreshing it first if it has expired."""
        async with self._lock:
            if self._session.is_access_token_expired():
                logger.debug("Client access token expired, refreshing")
                refresh_token = None
                if not self._session.is_refresh_token_expired():
                    refresh_token = self._session.tokens.refresh_token
                self._session = await self._grant(
                    self.oauth_client,
                    self.jwks,
                    self.scopes,
                    self.access_token_audience,
                    refresh_token,
                )
            return self._session.tokens.access_token

    @staticmethod
    async def _grant(
        oauth_client: OAuthClient,
        jwks: JwksCache,
        scopes: List[str],
        access_token_audience: str,
        refresh_token: Optional[str],
    ) -> UserSession:
        # Keycloak only issues refresh tokens to service accounts when asked to
        if refresh_token:
            token_response = await oauth_client.refresh(refresh_token, scopes)
        else:
            token_response = await oauth_client.client_credentials(scopes)

        key_set = await jwks.key_set_for(token_response.access_token)
        validated = validate_tokens(
            SessionTokens.from_token_response(token_response),
            key_set,
            oauth_client.client_id,
            access_token_audience,
            require_id_token=False,
        )
        return UserSession.from_validated(validated)
