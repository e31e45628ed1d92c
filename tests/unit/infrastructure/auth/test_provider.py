"""
Unit tests for provider discovery and the JWKS cache.
"""

import httpx
import pytest
import respx
from cryptography.hazmat.primitives.asymmetric import rsa

from photohub.infrastructure.auth.oauth_client import OAuthError
from photohub.infrastructure.auth.provider import JwksCache, discover, discover_uma2
from photohub.infrastructure.auth.token_validator import KeySet

from support import TokenFactory, make_jwk

REALM = "https://idp.example.com/realms/photos"
JWKS_URL = f"{REALM}/protocol/openid-connect/certs"


class TestDiscovery:
    """Test cases for well-known configuration documents."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_discover(self):
        """Test that the OpenID configuration is parsed."""
        respx.get(f"{REALM}/.well-known/openid-configuration").respond(200, json={
            "issuer": REALM,
            "authorization_endpoint": f"{REALM}/protocol/openid-connect/auth",
            "token_endpoint": f"{REALM}/protocol/openid-connect/token",
            "userinfo_endpoint": f"{REALM}/protocol/openid-connect/userinfo",
            "jwks_uri": JWKS_URL,
            "grant_types_supported": ["authorization_code"],
        })

        async with httpx.AsyncClient() as http_client:
            document = await discover(http_client, REALM + "/")

        assert document.jwks_uri == JWKS_URL
        assert document.token_endpoint.endswith("/token")

    @pytest.mark.asyncio
    @respx.mock
    async def test_discover_uma2(self):
        """Test that the UMA2 configuration exposes the protection API."""
        respx.get(f"{REALM}/.well-known/uma2-configuration").respond(200, json={
            "issuer": REALM,
            "token_endpoint": f"{REALM}/protocol/openid-connect/token",
            "resource_registration_endpoint": f"{REALM}/authz/protection/resource_set",
            "permission_endpoint": f"{REALM}/authz/protection/permission",
        })

        async with httpx.AsyncClient() as http_client:
            configuration = await discover_uma2(http_client, REALM)

        assert configuration.resource_registration_endpoint.endswith("/resource_set")

    @pytest.mark.asyncio
    @respx.mock
    async def test_discover_malformed_document(self):
        """Test that a document missing endpoints is rejected."""
        respx.get(f"{REALM}/.well-known/openid-configuration").respond(200, json={"issuer": REALM})

        async with httpx.AsyncClient() as http_client:
            with pytest.raises(OAuthError):
                await discover(http_client, REALM)


class TestJwksCache:
    """Test cases for key rotation handling."""

    @pytest.fixture
    def rotated_key(self):
        return rsa.generate_private_key(public_exponent=65537, key_size=2048)

    @pytest.mark.asyncio
    @respx.mock
    async def test_unknown_kid_triggers_refetch(self, jwks, private_key, rotated_key):
        """Test that a token signed with a new key causes one JWKS refetch."""
        route = respx.get(JWKS_URL).respond(
            200, json={"keys": jwks["keys"] + [make_jwk(rotated_key, kid="rotated")]}
        )
        token = TokenFactory(rotated_key, kid="rotated").access_token()

        async with httpx.AsyncClient() as http_client:
            cache = JwksCache(http_client, JWKS_URL, key_set=KeySet.from_jwks(jwks), min_refresh_interval=0)
            key_set = await cache.key_set_for(token)

        assert "rotated" in key_set
        assert route.call_count == 1

    @pytest.mark.asyncio
    @respx.mock
    async def test_known_kid_does_not_refetch(self, jwks, tokens):
        """Test that tokens signed with a cached key need no network."""
        route = respx.get(JWKS_URL).respond(200, json=jwks)

        async with httpx.AsyncClient() as http_client:
            cache = JwksCache(http_client, JWKS_URL, key_set=KeySet.from_jwks(jwks), min_refresh_interval=0)
            await cache.key_set_for(tokens.access_token())

        assert route.call_count == 0

    @pytest.mark.asyncio
    @respx.mock
    async def test_refetch_is_rate_limited(self, jwks, rotated_key):
        """Test that unknown kids inside the refresh interval do not refetch."""
        route = respx.get(JWKS_URL).respond(200, json=jwks)
        token = TokenFactory(rotated_key, kid="rotated").access_token()

        async with httpx.AsyncClient() as http_client:
            cache = JwksCache(http_client, JWKS_URL, min_refresh_interval=3600)
            await cache.load()
            key_set = await cache.key_set_for(token)

        assert "rotated" not in key_set
        assert route.call_count == 1

    @pytest.mark.asyncio
    @respx.mock
    async def test_failed_refetch_keeps_old_keys(self, jwks, rotated_key):
        """Test that a JWKS outage leaves the cached keys in place."""
        respx.get(JWKS_URL).respond(503)
        token = TokenFactory(rotated_key, kid="rotated").access_token()

        async with httpx.AsyncClient() as http_client:
            cache = JwksCache(http_client, JWKS_URL, key_set=KeySet.from_jwks(jwks), min_refresh_interval=0)
            key_set = await cache.key_set_for(token)

        assert len(key_set) == 1
