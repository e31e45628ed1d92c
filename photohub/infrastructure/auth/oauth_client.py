"""
Client for the identity provider's token and userinfo endpoints.
Implements the authorization_code, refresh_token and client_credentials grants.
"""

import logging
from typing import Any, Dict, Iterable, Optional
import uuid

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError as PydanticValidationError

logger = logging.getLogger(__name__)


class OAuthError(Exception):
    """Transport or decoding failure while talking to the identity provider."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class TokenResponse(BaseModel):
    """Successful response of the token endpoint."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    access_token: str
    token_type: Optional[str] = None
    refresh_token: Optional[str] = None
    id_token: Optional[str] = None
    expires_in: Optional[int] = None
    refresh_expires_in: Optional[int] = None
    not_before_policy: Optional[int] = Field(default=None, alias="not-before-policy")
    session_state: Optional[str] = None
    scope: Optional[str] = None


class UserInfo(BaseModel):
    """Response of the userinfo endpoint."""

    model_config = ConfigDict(extra="ignore")

    sub: uuid.UUID
    email_verified: bool = False
    name: Optional[str] = None
    preferred_username: Optional[str] = None
    given_name: Optional[str] = None
    family_name: Optional[str] = None
    email: Optional[str] = None


class OAuthClient:
    """Confidential OAuth 2.0 client registered at the identity provider."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        token_endpoint: str,
        userinfo_endpoint: str,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
    ):
        self.http_client = http_client
        self.token_endpoint = token_endpoint
        self.userinfo_endpoint = userinfo_endpoint
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri

    async def exchange_code(self, code: str, code_verifier: str) -> TokenResponse:
        """Redeem an authorization code together with its PKCE verifier."""
        return await self._request_token({
            "grant_type": "authorization_code",
            "code": code,
            "code_verifier": code_verifier,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "redirect_uri": self.redirect_uri,
        })

    async def client_credentials(self, scopes: Iterable[str]) -> TokenResponse:
        return await self._request_token({
            "grant_type": "client_credentials",
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "scope": " ".join(scopes),
        })

    async def refresh(self, refresh_token: str, scopes: Iterable[str]) -> TokenResponse:
        return await self._request_token({
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "scope": " ".join(scopes),
        })

    async def user_info(self, access_token: str) -> UserInfo:
        """
        Fetch the profile of the user owning an access token.

        Raises:
            OAuthError: If the endpoint rejects the token or returns garbage
        """
        try:
            response = await self.http_client.get(
                self.userinfo_endpoint,
                headers={"Authorization": f"Bearer {access_token}"},
            )
            response.raise_for_status()
            return UserInfo.model_validate(response.json())
        except httpx.HTTPStatusError as e:
            raise OAuthError(
                f"Userinfo request failed with status {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise OAuthError(f"Userinfo request failed: {e}") from e
        except (ValueError, PydanticValidationError) as e:
            raise OAuthError(f"Malformed userinfo response: {e}") from e

    async def _request_token(self, form: Dict[str, Any]) -> TokenResponse:
        grant_type = form["grant_type"]
        try:
            response = await self.http_client.post(
                self.token_endpoint,
                data=form,
                headers={"Accept": "application/json"},
            )
        except httpx.HTTPError as e:
            raise OAuthError(f"Token request ({grant_type}) failed: {e}") from e

        if response.is_error:
            logger.warning(
                f"Token endpoint rejected {grant_type} grant with status {response.status_code}"
            )
            raise OAuthError(
                f"Token request ({grant_type}) failed with status {response.status_code}",
                status_code=response.status_code,
            )

        try:
            return TokenResponse.model_validate(response.json())
        except (ValueError, PydanticValidationError) as e:
            raise OAuthError(f"Malformed token response ({grant_type}): {e}") from e
