"""
Server side session storage.

The browser only holds a signed cookie (Starlette's SessionMiddleware) that
carries an opaque session id. Tokens and the user profile live in the store,
addressed by that id, under fixed keys.
"""

import json
import logging
import secrets
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Tuple

from redis import asyncio as aioredis
from starlette.requests import Request

logger = logging.getLogger(__name__)

OAUTH_SESSION_KEY = "oauth_session"
USER_KEY = "user"
AUTHORIZATION_REQUEST_STATE_KEY = "oauth_authorization_request_state"

SESSION_ID_COOKIE_KEY = "sid"


def get_session_id(request: Request, create: bool = False) -> Optional[str]:
    """Read the session id from the signed cookie, minting one if asked to."""
    session_id = request.session.get(SESSION_ID_COOKIE_KEY)
    if session_id is None and create:
        session_id = secrets.token_urlsafe(32)
        request.session[SESSION_ID_COOKIE_KEY] = session_id
    return session_id


class SessionStore(ABC):
    """Key-value storage of JSON values per session id."""

    @abstractmethod
    async def get(self, session_id: str, key: str) -> Optional[Any]:
        pass

    @abstractmethod
    async def set(self, session_id: str, key: str, value: Any) -> None:
        pass

    @abstractmethod
    async def remove(self, session_id: str, key: str) -> None:
        pass

    async def close(self) -> None:
        pass


class InMemorySessionStore(SessionStore):
    """Process-local store for development and tests."""

    def __init__(self, ttl_seconds: int = 60 * 60 * 24):
        self.ttl_seconds = ttl_seconds
        self._sessions: Dict[str, Tuple[float, Dict[str, str]]] = {}

    def _entries(self, session_id: str) -> Optional[Dict[str, str]]:
        record = self._sessions.get(session_id)
        if record is None:
            return None
        expires_at, entries = record
        if time.time() >= expires_at:
            del self._sessions[session_id]
            return None
        return entries

    async def get(self, session_id: str, key: str) -> Optional[Any]:
        entries = self._entries(session_id)
        if entries is None or key not in entries:
            return None
        return json.loads(entries[key])

    async def set(self, session_id: str, key: str, value: Any) -> None:
        entries = self._entries(session_id) or {}
        entries[key] = json.dumps(value)
        self._sessions[session_id] = (time.time() + self.ttl_seconds, entries)

    async def remove(self, session_id: str, key: str) -> None:
        entries = self._entries(session_id)
        if entries is not None:
            entries.pop(key, None)

    def keys(self, session_id: str) -> Dict[str, Any]:
        """Snapshot of a session's decoded values."""
        entries = self._entries(session_id) or {}
        return {key: json.loads(value) for key, value in entries.items()}


class RedisSessionStore(SessionStore):
    """Redis backed store. Each session is a hash with a sliding expiry."""

    def __init__(self, redis_client, ttl_seconds: int = 60 * 60 * 24, prefix: str = "photohub:session:"):
        self.redis = redis_client
        self.ttl_seconds = ttl_seconds
        self.prefix = prefix

    @classmethod
    def from_url(cls, redis_url: str, ttl_seconds: int = 60 * 60 * 24) -> "RedisSessionStore":
        return cls(aioredis.from_url(redis_url, decode_responses=True), ttl_seconds)

    def _key(self, session_id: str) -> str:
        return f"{self.prefix}{session_id}"

    async def get(self, session_id: str, key: str) -> Optional[Any]:
        value = await self.redis.hget(self._key(session_id), key)
        if value is None:
            return None
        return json.loads(value)

    async def set(self, session_id: str, key: str, value: Any) -> None:
        redis_key = self._key(session_id)
        pipe = self.redis.pipeline()
        pipe.hset(redis_key, key, json.dumps(value))
        pipe.expire(redis_key, self.ttl_seconds)
        await pipe.execute()

    async def remove(self, session_id: str, key: str) -> None:
        await self.redis.hdel(self._key(session_id), key)

    async def close(self) -> None:
        await self.redis.aclose()


def create_session_store(redis_url: Optional[str], ttl_seconds: int) -> SessionStore:
    """Pick the Redis store when a URL is configured, otherwise in-memory."""
    if redis_url:
        logger.info("Using Redis session store")
        return RedisSessionStore.from_url(redis_url, ttl_seconds)
    logger.info("Using in-memory session store")
    return InMemorySessionStore(ttl_seconds)
