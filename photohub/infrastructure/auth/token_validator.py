"""
JWT validation against the identity provider's JSON Web Key Set.

Only an expired signature is reported as EXPIRED_SIGNATURE. Every other
failure (unknown key, bad signature, wrong audience, nonce mismatch,
malformed claims) is reported as UNKNOWN, because callers use the
distinction to decide whether a refresh grant is worth attempting.
"""

import logging
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Union

import jwt
from pydantic import BaseModel, ConfigDict, ValidationError as PydanticValidationError

logger = logging.getLogger(__name__)


class TokenValidationErrorKind(str, Enum):
    EXPIRED_SIGNATURE = "expired_signature"
    UNKNOWN = "unknown"


class TokenValidationError(Exception):
    """Raised when a token cannot be trusted."""

    def __init__(self, kind: TokenValidationErrorKind, message: str = ""):
        self.kind = kind
        self.message = message or kind.value
        super().__init__(self.message)

    @property
    def is_expired(self) -> bool:
        return self.kind == TokenValidationErrorKind.EXPIRED_SIGNATURE

    @classmethod
    def expired(cls, message: str = "Token signature has expired") -> "TokenValidationError":
        return cls(TokenValidationErrorKind.EXPIRED_SIGNATURE, message)

    @classmethod
    def unknown(cls, message: str) -> "TokenValidationError":
        return cls(TokenValidationErrorKind.UNKNOWN, message)


class KeySet:
    """Signing keys published by the identity provider, indexed by kid."""

    def __init__(self, keys: Optional[Dict[str, jwt.PyJWK]] = None):
        self._keys: Dict[str, jwt.PyJWK] = dict(keys or {})

    @classmethod
    def from_jwks(cls, jwks: Dict[str, Any]) -> "KeySet":
        """
        Build a key set from a JWKS document.

        Keys that are not usable for signature verification (encryption
        keys, unsupported algorithms, keys without a kid) are skipped.
        """
        keys: Dict[str, jwt.PyJWK] = {}
        for jwk_data in jwks.get("keys", []):
            kid = jwk_data.get("kid")
            if not kid or jwk_data.get("use", "sig") != "sig":
                continue
            try:
                keys[kid] = jwt.PyJWK(jwk_data)
            except (jwt.PyJWKError, jwt.InvalidKeyError) as e:
                logger.debug(f"Skipping JWK {kid}: {e}")
        return cls(keys)

    def get(self, kid: Optional[str]) -> Optional[jwt.PyJWK]:
        if kid is None:
            return None
        return self._keys.get(kid)

    def __contains__(self, kid: object) -> bool:
        return kid in self._keys

    def __len__(self) -> int:
        return len(self._keys)

    @property
    def kids(self) -> List[str]:
        return list(self._keys)


class TokenClaims(BaseModel):
    """Registered claims shared by access and ID tokens."""

    model_config = ConfigDict(extra="allow")

    exp: int
    iat: Optional[int] = None
    iss: Optional[str] = None
    sub: Optional[str] = None
    aud: Optional[Union[str, List[str]]] = None
    azp: Optional[str] = None
    jti: Optional[str] = None
    typ: Optional[str] = None
    scope: Optional[str] = None


class IdTokenClaims(TokenClaims):
    """Claims of an OpenID Connect ID token."""

    sub: str
    acr: Optional[str] = None
    at_hash: Optional[str] = None
    auth_time: Optional[int] = None
    nonce: Optional[str] = None
    sid: Optional[str] = None
    name: Optional[str] = None
    preferred_username: Optional[str] = None
    given_name: Optional[str] = None
    family_name: Optional[str] = None
    email: Optional[str] = None
    email_verified: bool = False


def get_unverified_kid(token: str) -> Optional[str]:
    """Read the key id from a token header without verifying anything."""
    try:
        return jwt.get_unverified_header(token).get("kid")
    except jwt.InvalidTokenError:
        return None


def _decode(token: str, key_set: KeySet, audience: Union[str, Iterable[str]]) -> Dict[str, Any]:
    try:
        header = jwt.get_unverified_header(token)
    except jwt.InvalidTokenError as e:
        raise TokenValidationError.unknown(f"Malformed token header: {e}") from e

    kid = header.get("kid")
    jwk = key_set.get(kid)
    if jwk is None:
        raise TokenValidationError.unknown(f"No signing key found for kid {kid!r}")

    algorithm = header.get("alg")
    if algorithm != jwk.algorithm_name:
        raise TokenValidationError.unknown(
            f"Token algorithm {algorithm!r} does not match key algorithm {jwk.algorithm_name!r}"
        )

    try:
        return jwt.decode(
            token,
            jwk.key,
            algorithms=[algorithm],
            audience=audience,
            options={"require": ["exp"]},
        )
    except jwt.ExpiredSignatureError as e:
        raise TokenValidationError.expired() from e
    except jwt.InvalidTokenError as e:
        raise TokenValidationError.unknown(f"Invalid token: {e}") from e


def validate_access_token(token: str, key_set: KeySet, audience: str = "account") -> TokenClaims:
    """
    Validate an access token's signature, expiry and audience.

    Raises:
        TokenValidationError: EXPIRED_SIGNATURE or UNKNOWN
    """
    payload = _decode(token, key_set, audience)
    try:
        return TokenClaims.model_validate(payload)
    except PydanticValidationError as e:
        raise TokenValidationError.unknown(f"Malformed access token claims: {e}") from e


def validate_id_token(
    token: str,
    expected_nonce: Optional[str],
    key_set: KeySet,
    expected_audience: str,
) -> IdTokenClaims:
    """
    Validate an ID token issued to this client.

    When the token carries a nonce and an expected nonce is supplied they
    must be identical.

    Raises:
        TokenValidationError: EXPIRED_SIGNATURE or UNKNOWN
    """
    payload = _decode(token, key_set, expected_audience)
    try:
        claims = IdTokenClaims.model_validate(payload)
    except PydanticValidationError as e:
        raise TokenValidationError.unknown(f"Malformed ID token claims: {e}") from e

    if claims.nonce is not None and expected_nonce is not None and claims.nonce != expected_nonce:
        raise TokenValidationError.unknown("ID token nonce mismatch")

    return claims


def read_unverified_exp(token: str) -> Optional[int]:
    """
    Read the exp claim of a token without checking its signature.

    Used for refresh tokens, which the identity provider verifies itself
    when they are redeemed. Returns None for opaque tokens.
    """
    try:
        payload = jwt.decode(token, options={"verify_signature": False})
    except jwt.InvalidTokenError:
        return None
    exp = payload.get("exp")
    return int(exp) if isinstance(exp, (int, float)) else None
