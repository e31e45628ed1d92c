"""
Identity provider metadata: OIDC and UMA2 discovery, signing keys and the
assembled provider handle used by the authentication middleware.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError as PydanticValidationError

from .oauth_client import OAuthClient, OAuthError
from .token_validator import KeySet, get_unverified_kid

logger = logging.getLogger(__name__)

OPENID_CONFIGURATION_PATH = "/.well-known/openid-configuration"
UMA2_CONFIGURATION_PATH = "/.well-known/uma2-configuration"


class OidcDiscoveryDocument(BaseModel):
    model_config = ConfigDict(extra="ignore")

    issuer: str
    authorization_endpoint: str
    token_endpoint: str
    userinfo_endpoint: str
    jwks_uri: str
    introspection_endpoint: Optional[str] = None
    end_session_endpoint: Optional[str] = None


class Uma2Configuration(BaseModel):
    model_config = ConfigDict(extra="ignore")

    issuer: Optional[str] = None
    token_endpoint: str
    resource_registration_endpoint: str
    permission_endpoint: Optional[str] = None
    policy_endpoint: Optional[str] = None


async def _get_json(http_client: httpx.AsyncClient, url: str) -> dict:
    try:
        response = await http_client.get(url)
        response.raise_for_status()
        return response.json()
    except httpx.HTTPError as e:
        raise OAuthError(f"Request to {url} failed: {e}") from e
    except ValueError as e:
        raise OAuthError(f"Invalid JSON from {url}: {e}") from e


async def discover(http_client: httpx.AsyncClient, auth_server_url: str) -> OidcDiscoveryDocument:
    """Fetch the OpenID provider configuration of a realm."""
    url = f"{auth_server_url.rstrip('/')}{OPENID_CONFIGURATION_PATH}"
    try:
        return OidcDiscoveryDocument.model_validate(await _get_json(http_client, url))
    except PydanticValidationError as e:
        raise OAuthError(f"Malformed OpenID configuration: {e}") from e


async def discover_uma2(http_client: httpx.AsyncClient, auth_server_url: str) -> Uma2Configuration:
    """Fetch the UMA2 configuration of a realm."""
    url = f"{auth_server_url.rstrip('/')}{UMA2_CONFIGURATION_PATH}"
    try:
        return Uma2Configuration.model_validate(await _get_json(http_client, url))
    except PydanticValidationError as e:
        raise OAuthError(f"Malformed UMA2 configuration: {e}") from e


class JwksCache:
    """
    Caches the provider's key set and refetches it when a token names a kid
    the cache does not know, at most once per refresh interval.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        jwks_uri: str,
        key_set: Optional[KeySet] = None,
        min_refresh_interval: float = 60.0,
    ):
        self.http_client = http_client
        self.jwks_uri = jwks_uri
        self.min_refresh_interval = min_refresh_interval
        self._key_set = key_set or KeySet()
        self._last_fetch: Optional[float] = time.monotonic() if key_set is not None else None
        self._lock = asyncio.Lock()

    @property
    def key_set(self) -> KeySet:
        return self._key_set

    async def load(self) -> KeySet:
        """Fetch the JWKS document and replace the cached key set."""
        jwks = await _get_json(self.http_client, self.jwks_uri)
        self._key_set = KeySet.from_jwks(jwks)
        self._last_fetch = time.monotonic()
        logger.info(f"Loaded {len(self._key_set)} signing keys from {self.jwks_uri}")
        return self._key_set

    async def key_set_for(self, token: str) -> KeySet:
        """Return a key set that contains the token's kid if the provider has it."""
        kid = get_unverified_kid(token)
        if kid is None or kid in self._key_set:
            return self._key_set

        async with self._lock:
            if kid in self._key_set:
                return self._key_set
            if self._last_fetch is not None and time.monotonic() - self._last_fetch < self.min_refresh_interval:
                return self._key_set
            logger.info(f"Unknown signing key {kid}, refreshing JWKS")
            try:
                return await self.load()
            except OAuthError as e:
                logger.warning(f"JWKS refresh failed: {e}")
                self._last_fetch = time.monotonic()
                return self._key_set


@dataclass
class OidcProvider:
    """Everything the authentication layer needs to talk to the identity provider."""

    discovery: OidcDiscoveryDocument
    jwks: JwksCache
    oauth_client: OAuthClient
    scopes: List[str] = field(default_factory=lambda: ["openid"])
    access_token_audience: str = "account"

    @property
    def client_id(self) -> str:
        return self.oauth_client.client_id

    @property
    def redirect_uri(self) -> str:
        return self.oauth_client.redirect_uri

    @property
    def authorization_endpoint(self) -> str:
        return self.discovery.authorization_endpoint
