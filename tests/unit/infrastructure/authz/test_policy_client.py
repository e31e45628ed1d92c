"""
Unit tests for the UMA2 policy decision client.
"""

import asyncio
import base64
import json
from urllib.parse import parse_qs
from unittest.mock import AsyncMock, Mock
import uuid

import httpx
import pytest
import pytest_asyncio
import respx

from photohub.domain.models.base import Visibility
from photohub.infrastructure.auth.oauth_client import OAuthError
from photohub.infrastructure.authz.claims import AuthorizationScope, CommonClaims
from photohub.infrastructure.authz.policy_client import (
    Decision,
    PolicyDecisionClient,
    PolicyServerError,
    ResourceIdCache,
)

REALM = "https://idp.example.com/realms/photos"
TOKEN_URL = f"{REALM}/protocol/openid-connect/token"
RESOURCE_SET_URL = f"{REALM}/authz/protection/resource_set"
RESOURCE_ID = uuid.UUID("9a3c1e52-7d44-4b8e-a1f0-5c6d7e8f9012")


def form_of(request: httpx.Request) -> dict:
    return {key: values[0] for key, values in parse_qs(request.content.decode()).items()}


def claims_of(request: httpx.Request) -> dict:
    encoded = form_of(request)["claim_token"]
    return json.loads(base64.b64decode(encoded + "=" * (-len(encoded) % 4)))


@pytest.fixture
def client_access_token():
    token = Mock()
    token.get_access_token = AsyncMock(return_value="machine-token")
    return token


@pytest_asyncio.fixture
async def http_client():
    async with httpx.AsyncClient() as client:
        yield client


def make_policy_client(http_client, client_access_token, **kwargs) -> PolicyDecisionClient:
    return PolicyDecisionClient(
        http_client,
        token_endpoint=TOKEN_URL,
        resource_registration_endpoint=RESOURCE_SET_URL,
        client_id="secure-photo-hub-rest-api",
        client_secret="s3cret",
        client_access_token=client_access_token,
        **kwargs,
    )


class TestResourceIdLookup:
    """Test cases for resolving resource ids."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_lookup_query_and_credentials(self, http_client, client_access_token):
        """Test the protection API query and its bearer token."""
        route = respx.get(RESOURCE_SET_URL).respond(200, json=[str(RESOURCE_ID)])
        policy_client = make_policy_client(http_client, client_access_token)

        assert await policy_client.get_resource_id("/photos/{id}") == RESOURCE_ID

        request = route.calls.last.request
        assert request.headers["Authorization"] == "Bearer machine-token"
        assert dict(request.url.params) == {
            "matchingUri": "true",
            "uri": "/photos/{id}",
            "deep": "false",
            "max": "1",
        }

    @pytest.mark.asyncio
    @respx.mock
    async def test_lookup_is_cached(self, http_client, client_access_token):
        """Test that repeated lookups of a path hit the network once."""
        route = respx.get(RESOURCE_SET_URL).respond(200, json=[str(RESOURCE_ID)])
        policy_client = make_policy_client(http_client, client_access_token)

        await policy_client.get_resource_id("/photos/{id}")
        await policy_client.get_resource_id("/photos/{id}")

        assert route.call_count == 1

    @pytest.mark.asyncio
    @respx.mock
    async def test_concurrent_misses_fetch_once(self, http_client, client_access_token):
        """Test that concurrent first lookups share a single fetch."""
        route = respx.get(RESOURCE_SET_URL).respond(200, json=[str(RESOURCE_ID)])
        policy_client = make_policy_client(http_client, client_access_token)

        results = await asyncio.gather(*(policy_client.get_resource_id("/albums/{id}") for _ in range(5)))

        assert set(results) == {RESOURCE_ID}
        assert route.call_count == 1

    @pytest.mark.asyncio
    @respx.mock
    async def test_cache_ttl_expires_entries(self, http_client, client_access_token):
        """Test that a zero ttl refetches every time."""
        route = respx.get(RESOURCE_SET_URL).respond(200, json=[str(RESOURCE_ID)])
        policy_client = make_policy_client(
            http_client, client_access_token, resource_cache=ResourceIdCache(ttl_seconds=0)
        )

        await policy_client.get_resource_id("/photos/{id}")
        await policy_client.get_resource_id("/photos/{id}")

        assert route.call_count == 2

    @pytest.mark.asyncio
    @respx.mock
    async def test_unregistered_path(self, http_client, client_access_token):
        """Test that an empty result is an error and is not cached."""
        respx.get(RESOURCE_SET_URL).respond(200, json=[])
        policy_client = make_policy_client(http_client, client_access_token)

        with pytest.raises(PolicyServerError):
            await policy_client.get_resource_id("/photos/{id}")

        assert len(policy_client.resource_cache) == 0

    @pytest.mark.asyncio
    async def test_machine_token_failure(self, http_client, client_access_token):
        """Test that a failing client session becomes PolicyServerError."""
        client_access_token.get_access_token.side_effect = OAuthError("down")
        policy_client = make_policy_client(http_client, client_access_token)

        with pytest.raises(PolicyServerError):
            await policy_client.get_resource_id("/photos/{id}")


class TestDecisionResponseMode:
    """Test cases for sending permission requests."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_permission_request_form(self, http_client, client_access_token, user):
        """Test the UMA ticket grant sent on behalf of the user."""
        route = respx.post(TOKEN_URL).respond(200, json={"result": True})
        policy_client = make_policy_client(http_client, client_access_token)
        owner = uuid.uuid4()
        request = policy_client.permission_request(
            user,
            CommonClaims.for_owner(owner),
            RESOURCE_ID,
            [AuthorizationScope.CHANGE_VISIBILITY, AuthorizationScope.EDIT_TITLE],
        )

        assert await policy_client.decision_response_mode_send(request) is True

        sent = route.calls.last.request
        form = form_of(sent)
        assert form["grant_type"] == "urn:ietf:params:oauth:grant-type:uma-ticket"
        assert form["permission"] == str(RESOURCE_ID)
        assert form["audience"] == "secure-photo-hub-rest-api"
        assert form["subject_token"] == user.access_token
        assert form["claim_token_format"] == "urn:ietf:params:oauth:token-type:jwt"
        assert form["response_mode"] == "decision"
        assert form["scope"] == "ChangeVisibility, EditTitle"
        assert claims_of(sent) == {"resourceOwner": [str(owner)]}

    @pytest.mark.asyncio
    @respx.mock
    async def test_access_denied_is_false(self, http_client, client_access_token, user):
        """Test that the policy server's 403 access_denied is a negative decision."""
        respx.post(TOKEN_URL).respond(403, json={"error": "access_denied", "error_description": "not_authorized"})
        policy_client = make_policy_client(http_client, client_access_token)
        request = policy_client.permission_request(user, CommonClaims.empty(), RESOURCE_ID, [AuthorizationScope.CREATE])

        assert await policy_client.decision_response_mode_send(request) is False

    @pytest.mark.asyncio
    @respx.mock
    async def test_server_error_raises(self, http_client, client_access_token, user):
        """Test that other error statuses are not read as decisions."""
        respx.post(TOKEN_URL).respond(500, text="boom")
        policy_client = make_policy_client(http_client, client_access_token)
        request = policy_client.permission_request(user, CommonClaims.empty(), RESOURCE_ID, [AuthorizationScope.VIEW])

        with pytest.raises(PolicyServerError) as exc_info:
            await policy_client.decision_response_mode_send(request)

        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    @respx.mock
    async def test_malformed_decision_raises(self, http_client, client_access_token, user):
        """Test that a body without a boolean result is an error."""
        respx.post(TOKEN_URL).respond(200, json={"result": "yes"})
        policy_client = make_policy_client(http_client, client_access_token)
        request = policy_client.permission_request(user, CommonClaims.empty(), RESOURCE_ID, [AuthorizationScope.VIEW])

        with pytest.raises(PolicyServerError):
            await policy_client.decision_response_mode_send(request)


class TestEvaluate:
    """Test cases for tri-state evaluation."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_allow_and_deny(self, http_client, client_access_token, user):
        """Test that positive and negative answers map to ALLOW and DENY."""
        respx.get(RESOURCE_SET_URL).respond(200, json=[str(RESOURCE_ID)])
        respx.post(TOKEN_URL).mock(side_effect=[
            httpx.Response(200, json={"result": True}),
            httpx.Response(403, json={"error": "access_denied"}),
        ])
        policy_client = make_policy_client(http_client, client_access_token)
        claims = CommonClaims.for_view(user.id, Visibility.PRIVATE)

        assert await policy_client.evaluate(user, "/photos/{id}", claims, [AuthorizationScope.VIEW]) is Decision.ALLOW
        assert await policy_client.evaluate(user, "/photos/{id}", claims, [AuthorizationScope.VIEW]) is Decision.DENY

    @pytest.mark.asyncio
    @respx.mock
    async def test_unreachable_server_is_error(self, http_client, client_access_token, user):
        """Test that transport failures are reported as ERROR, not DENY."""
        respx.get(RESOURCE_SET_URL).respond(200, json=[str(RESOURCE_ID)])
        respx.post(TOKEN_URL).mock(side_effect=httpx.ConnectError("refused"))
        policy_client = make_policy_client(http_client, client_access_token)

        decision = await policy_client.evaluate(user, "/photos/{id}", CommonClaims.empty(), [AuthorizationScope.CREATE])

        assert decision is Decision.ERROR
        assert not decision.allowed

    @pytest.mark.asyncio
    @respx.mock
    async def test_empty_scopes_deny_without_request(self, http_client, client_access_token, user):
        """Test that asking for nothing is denied locally."""
        route = respx.post(TOKEN_URL).respond(200, json={"result": True})
        policy_client = make_policy_client(http_client, client_access_token)

        assert await policy_client.evaluate(user, "/photos/{id}", CommonClaims.empty(), []) is Decision.DENY
        assert route.call_count == 0


class TestFilterAllowed:
    """Test cases for bulk filtering."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_one_request_per_item(self, http_client, client_access_token, user):
        """Test that five items produce five permission requests and keep only allowed ones."""
        owners = [uuid.uuid4() for _ in range(5)]
        allowed_owners = {str(owners[0]), str(owners[2]), str(owners[4])}

        def decide(request: httpx.Request) -> httpx.Response:
            owner = claims_of(request)["resourceOwner"][0]
            if owner in allowed_owners:
                return httpx.Response(200, json={"result": True})
            return httpx.Response(403, json={"error": "access_denied"})

        respx.get(RESOURCE_SET_URL).respond(200, json=[str(RESOURCE_ID)])
        decisions = respx.post(TOKEN_URL).mock(side_effect=decide)
        policy_client = make_policy_client(http_client, client_access_token, max_concurrent_requests=2)

        kept = await policy_client.filter_allowed(
            user,
            owners,
            "/photos/{id}",
            lambda owner: CommonClaims.for_view(owner, Visibility.PUBLIC),
            [AuthorizationScope.VIEW],
        )

        assert kept == [owners[0], owners[2], owners[4]]
        assert decisions.call_count == 5

    @pytest.mark.asyncio
    @respx.mock
    async def test_errors_count_as_deny(self, http_client, client_access_token, user):
        """Test that an item whose check failed is dropped."""
        respx.get(RESOURCE_SET_URL).respond(200, json=[str(RESOURCE_ID)])
        respx.post(TOKEN_URL).mock(side_effect=[
            httpx.Response(200, json={"result": True}),
            httpx.Response(502),
        ])
        policy_client = make_policy_client(http_client, client_access_token, max_concurrent_requests=1)

        kept = await policy_client.filter_allowed(
            user, ["a", "b"], "/photos/{id}", lambda _: CommonClaims.empty(), [AuthorizationScope.VIEW]
        )

        assert kept == ["a"]
