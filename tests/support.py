"""
Test helpers: signing key material and a factory for tokens shaped like
the identity provider's.
"""

import json
import time
import uuid
from typing import Any, Dict, Optional

import jwt
from jwt.algorithms import RSAAlgorithm


KID = "test-signing-key"
CLIENT_ID = "secure-photo-hub-rest-api"
ACCESS_TOKEN_AUDIENCE = "account"
USER_ID = uuid.UUID("6f1c2b6e-3a4d-4c57-9a0e-2f1d8b7c9e11")


def make_jwk(private_key, kid: str = KID) -> Dict[str, Any]:
    jwk = json.loads(RSAAlgorithm.to_jwk(private_key.public_key()))
    jwk.update({"kid": kid, "alg": "RS256", "use": "sig"})
    return jwk


class TokenFactory:
    """Signs tokens with the test key."""

    def __init__(self, private_key, kid: str = KID):
        self.private_key = private_key
        self.kid = kid

    def sign(self, payload: Dict[str, Any], kid: Optional[str] = None) -> str:
        return jwt.encode(payload, self.private_key, algorithm="RS256", headers={"kid": kid or self.kid})

    def access_token(
        self,
        sub: uuid.UUID = USER_ID,
        exp: Optional[int] = None,
        aud: str = ACCESS_TOKEN_AUDIENCE,
        **claims: Any,
    ) -> str:
        now = int(time.time())
        payload = {
            "sub": str(sub),
            "aud": aud,
            "azp": CLIENT_ID,
            "iat": now,
            "exp": exp if exp is not None else now + 300,
            "typ": "Bearer",
        }
        payload.update(claims)
        return self.sign(payload)

    def id_token(
        self,
        sub: uuid.UUID = USER_ID,
        nonce: Optional[str] = None,
        exp: Optional[int] = None,
        aud: str = CLIENT_ID,
        **claims: Any,
    ) -> str:
        now = int(time.time())
        payload = {
            "sub": str(sub),
            "aud": aud,
            "iat": now,
            "exp": exp if exp is not None else now + 300,
            "typ": "ID",
            "preferred_username": "ada",
            "given_name": "Ada",
            "family_name": "Lovelace",
            "name": "Ada Lovelace",
            "email": "ada@example.com",
            "email_verified": True,
        }
        if nonce is not None:
            payload["nonce"] = nonce
        payload.update(claims)
        return self.sign(payload)

    def refresh_token(self, exp: Optional[int] = None) -> str:
        now = int(time.time())
        return self.sign({"typ": "Refresh", "iat": now, "exp": exp if exp is not None else now + 1800})


REALM = "https://idp.example.com/realms/photos"
AUTHORIZATION_ENDPOINT = f"{REALM}/protocol/openid-connect/auth"
