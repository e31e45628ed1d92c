"""
Client for Keycloak's UMA2 authorization services.

Resource ids are looked up through the protection API with this service's
own access token. Permission requests are sent to the token endpoint in
decision response mode, on behalf of the end user.
"""

import asyncio
import contextlib
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Dict, Iterable, List, Optional, Sequence, Tuple, TypeVar
import uuid

import httpx

from photohub.infrastructure.auth.client_session import OAuthClientAccessToken
from photohub.infrastructure.auth.oauth_client import OAuthError
from photohub.infrastructure.auth.token_validator import TokenValidationError
from photohub.infrastructure.auth.user import AuthenticatedUser

from .claims import AuthorizationScope, CommonClaims

logger = logging.getLogger(__name__)

UMA_TICKET_GRANT_TYPE = "urn:ietf:params:oauth:grant-type:uma-ticket"
JWT_CLAIM_TOKEN_FORMAT = "urn:ietf:params:oauth:token-type:jwt"
DECISION_RESPONSE_MODE = "decision"

T = TypeVar("T")


class PolicyServerError(Exception):
    """The policy server could not be reached or answered something unusable."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class Decision(str, Enum):
    """Outcome of a permission request."""
    ALLOW = "allow"
    DENY = "deny"
    ERROR = "error"

    @property
    def allowed(self) -> bool:
        return self is Decision.ALLOW


class ResourceIdCache:
    """
    Maps protected resource paths to the policy server's resource ids.

    The lock is held from lookup until insert, so each path is fetched once
    even under concurrent misses. With a ttl, entries older than ttl seconds
    are fetched again.
    """

    def __init__(self, ttl_seconds: Optional[float] = None):
        self.ttl_seconds = ttl_seconds
        self._entries: Dict[str, Tuple[uuid.UUID, float]] = {}
        self._lock = asyncio.Lock()

    def _fresh(self, path: str) -> Optional[uuid.UUID]:
        entry = self._entries.get(path)
        if entry is None:
            return None
        resource_id, stored_at = entry
        if self.ttl_seconds is not None and time.monotonic() - stored_at >= self.ttl_seconds:
            return None
        return resource_id

    async def get_or_fetch(self, path: str, fetch: Callable[[], Awaitable[uuid.UUID]]) -> uuid.UUID:
        async with self._lock:
            resource_id = self._fresh(path)
            if resource_id is None:
                resource_id = await fetch()
                self._entries[path] = (resource_id, time.monotonic())
            return resource_id

    def invalidate(self, path: Optional[str] = None) -> None:
        if path is None:
            self._entries.clear()
        else:
            self._entries.pop(path, None)

    def __len__(self) -> int:
        return len(self._entries)


@dataclass(frozen=True)
class PermissionRequest:
    """An UMA ticket grant asking for a decision on one resource."""

    token_endpoint: str
    resource_id: uuid.UUID
    subject_token: str
    client_id: str
    client_secret: str
    claims: CommonClaims
    scopes: Tuple[AuthorizationScope, ...]

    def form(self) -> Dict[str, str]:
        return {
            "grant_type": UMA_TICKET_GRANT_TYPE,
            "permission": str(self.resource_id),
            "audience": self.client_id,
            "subject_token": self.subject_token,
            "claim_token": self.claims.encode(),
            "claim_token_format": JWT_CLAIM_TOKEN_FORMAT,
            "response_mode": DECISION_RESPONSE_MODE,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "scope": ", ".join(AuthorizationScope(scope).value for scope in self.scopes),
        }


class PolicyDecisionClient:
    """Asks the policy server whether a user may act on a protected resource."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        token_endpoint: str,
        resource_registration_endpoint: str,
        client_id: str,
        client_secret: str,
        client_access_token: OAuthClientAccessToken,
        resource_cache: Optional[ResourceIdCache] = None,
        max_concurrent_requests: Optional[int] = None,
    ):
        self.http_client = http_client
        self.token_endpoint = token_endpoint
        self.resource_registration_endpoint = resource_registration_endpoint
        self.client_id = client_id
        self.client_secret = client_secret
        self.client_access_token = client_access_token
        self.resource_cache = resource_cache if resource_cache is not None else ResourceIdCache()
        self._semaphore = asyncio.Semaphore(max_concurrent_requests) if max_concurrent_requests else None

    async def get_resource_id(self, path: str) -> uuid.UUID:
        """
        Resolve the resource id registered for a path.

        Raises:
            PolicyServerError: If the lookup fails or nothing is registered
        """
        return await self.resource_cache.get_or_fetch(path, lambda: self._fetch_resource_id(path))

    async def _fetch_resource_id(self, path: str) -> uuid.UUID:
        try:
            access_token = await self.client_access_token.get_access_token()
        except (OAuthError, TokenValidationError) as e:
            raise PolicyServerError(f"Could not obtain client access token: {e}") from e

        try:
            response = await self.http_client.get(
                self.resource_registration_endpoint,
                params={"matchingUri": "true", "uri": path, "deep": "false", "max": "1"},
                headers={"Authorization": f"Bearer {access_token}"},
            )
            response.raise_for_status()
            resource_ids = response.json()
        except httpx.HTTPStatusError as e:
            raise PolicyServerError(
                f"Resource lookup for {path} failed with status {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise PolicyServerError(f"Resource lookup for {path} failed: {e}") from e
        except ValueError as e:
            raise PolicyServerError(f"Malformed resource lookup response for {path}") from e

        if not isinstance(resource_ids, list) or not resource_ids:
            raise PolicyServerError(f"No resource registered for {path}")

        try:
            resource_id = uuid.UUID(str(resource_ids[0]))
        except ValueError as e:
            raise PolicyServerError(f"Invalid resource id for {path}: {resource_ids[0]!r}") from e

        logger.debug(f"Resolved resource {path} to {resource_id}")
        return resource_id

    def permission_request(
        self,
        user: AuthenticatedUser,
        claims: CommonClaims,
        resource_id: uuid.UUID,
        scopes: Iterable[AuthorizationScope],
    ) -> PermissionRequest:
        return PermissionRequest(
            token_endpoint=self.token_endpoint,
            resource_id=resource_id,
            subject_token=user.access_token,
            client_id=self.client_id,
            client_secret=self.client_secret,
            claims=claims,
            scopes=tuple(scopes),
        )

    async def decision_response_mode_send(self, permission_request: PermissionRequest) -> bool:
        """
        Send a permission request and return the policy server's verdict.

        Raises:
            PolicyServerError: On transport failure or an unexpected response
        """
        try:
            response = await self.http_client.post(
                permission_request.token_endpoint,
                data=permission_request.form(),
                headers={"Accept": "application/json"},
            )
        except httpx.HTTPError as e:
            raise PolicyServerError(f"Permission request failed: {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = None

        # Keycloak answers a negative decision with 403 access_denied
        if response.status_code == 403 and isinstance(body, dict) and body.get("error") == "access_denied":
            return False

        if response.is_error:
            raise PolicyServerError(
                f"Permission request failed with status {response.status_code}",
                status_code=response.status_code,
            )

        if not isinstance(body, dict) or not isinstance(body.get("result"), bool):
            raise PolicyServerError("Malformed decision response")

        return body["result"]

    async def evaluate(
        self,
        user: AuthenticatedUser,
        resource_path: str,
        claims: CommonClaims,
        scopes: Sequence[AuthorizationScope],
    ) -> Decision:
        """Ask for a decision, reporting failures as Decision.ERROR."""
        if not scopes:
            return Decision.DENY

        limiter = self._semaphore if self._semaphore is not None else contextlib.nullcontext()
        async with limiter:
            try:
                resource_id = await self.get_resource_id(resource_path)
                request = self.permission_request(user, claims, resource_id, scopes)
                allowed = await self.decision_response_mode_send(request)
            except PolicyServerError as e:
                logger.error(f"Policy decision for {resource_path} failed: {e}")
                return Decision.ERROR

        return Decision.ALLOW if allowed else Decision.DENY

    async def filter_allowed(
        self,
        user: AuthenticatedUser,
        items: Sequence[T],
        resource_path: str,
        claims_for: Callable[[T], CommonClaims],
        scopes: Sequence[AuthorizationScope],
    ) -> List[T]:
        """
        Keep the items the user is allowed to act on.
        One request per item, evaluated concurrently. Errors count as deny.
        """
        decisions = await asyncio.gather(
            *(self.evaluate(user, resource_path, claims_for(item), scopes) for item in items)
        )
        return [item for item, decision in zip(items, decisions) if decision.allowed]
