"""
Token set of an OAuth session and the absolute expiries recorded for it.
"""

import time
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional, Tuple

from .oauth_client import TokenResponse
from .token_validator import (
    IdTokenClaims,
    KeySet,
    TokenClaims,
    read_unverified_exp,
    validate_access_token,
    validate_id_token,
)


def _now() -> int:
    return int(time.time())


@dataclass(frozen=True)
class SessionTokens:
    """Tokens issued together by one grant. Replaced wholesale on refresh."""

    access_token: str
    refresh_token: Optional[str] = None
    id_token: Optional[str] = None
    nonce: Optional[str] = None

    @classmethod
    def from_token_response(
        cls,
        token_response: TokenResponse,
        nonce: Optional[str] = None,
    ) -> "SessionTokens":
        return cls(
            access_token=token_response.access_token,
            refresh_token=token_response.refresh_token,
            id_token=token_response.id_token,
            nonce=nonce,
        )


@dataclass(frozen=True)
class ValidatedTokens:
    """Tokens whose signatures and audiences have been verified."""

    tokens: SessionTokens
    access_token_claims: TokenClaims
    id_token_claims: Optional[IdTokenClaims]

    @property
    def access_token_exp(self) -> int:
        return self.access_token_claims.exp

    @property
    def id_token_exp(self) -> int:
        if self.id_token_claims is None:
            return self.access_token_exp
        return self.id_token_claims.exp

    @property
    def refresh_token_exp(self) -> int:
        if self.tokens.refresh_token:
            exp = read_unverified_exp(self.tokens.refresh_token)
            if exp is not None:
                return exp
        return self.access_token_exp


def validate_tokens(
    tokens: SessionTokens,
    key_set: KeySet,
    client_id: str,
    access_token_audience: str,
    require_id_token: bool = True,
) -> ValidatedTokens:
    """
    Validate the ID token (against the client id and stored nonce) and then
    the access token (against the platform audience).

    Raises:
        TokenValidationError: The first failure encountered
    """
    id_token_claims = None
    if tokens.id_token is not None or require_id_token:
        id_token_claims = validate_id_token(
            tokens.id_token or "",
            tokens.nonce,
            key_set,
            client_id,
        )
    access_token_claims = validate_access_token(tokens.access_token, key_set, access_token_audience)
    return ValidatedTokens(
        tokens=tokens,
        access_token_claims=access_token_claims,
        id_token_claims=id_token_claims,
    )


@dataclass(frozen=True)
class UserSession:
    """
    An OAuth session with expiries taken from validated exp claims.
    Never mutated; a refresh produces a new instance.
    """

    tokens: SessionTokens
    access_token_exp: int
    refresh_token_exp: int
    id_token_exp: int

    @classmethod
    def from_validated(cls, validated: ValidatedTokens) -> "UserSession":
        return cls(
            tokens=validated.tokens,
            access_token_exp=validated.access_token_exp,
            refresh_token_exp=validated.refresh_token_exp,
            id_token_exp=validated.id_token_exp,
        )

    @classmethod
    def validate(
        cls,
        tokens: SessionTokens,
        key_set: KeySet,
        client_id: str,
        access_token_audience: str,
    ) -> Tuple["UserSession", IdTokenClaims]:
        validated = validate_tokens(tokens, key_set, client_id, access_token_audience)
        return cls.from_validated(validated), validated.id_token_claims

    def is_access_token_expired(self, now: Optional[int] = None) -> bool:
        return (_now() if now is None else now) >= self.access_token_exp

    def is_refresh_token_expired(self, now: Optional[int] = None) -> bool:
        return (_now() if now is None else now) >= self.refresh_token_exp

    def is_id_token_expired(self, now: Optional[int] = None) -> bool:
        return (_now() if now is None else now) >= self.id_token_exp

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserSession":
        return cls(
            tokens=SessionTokens(**data["tokens"]),
            access_token_exp=int(data["access_token_exp"]),
            refresh_token_exp=int(data["refresh_token_exp"]),
            id_token_exp=int(data["id_token_exp"]),
        )
