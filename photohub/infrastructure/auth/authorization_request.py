"""
Authorization code flow request state (PKCE, state and nonce).
"""

import base64
import hashlib
import secrets
from dataclasses import dataclass, asdict
from typing import Any, Dict, Iterable
from urllib.parse import urlencode

RANDOM_BYTES = 64
CODE_CHALLENGE_METHOD = "S256"


def _urlsafe(data: bytes, padding: bool = True) -> str:
    encoded = base64.urlsafe_b64encode(data).decode("ascii")
    return encoded if padding else encoded.rstrip("=")


def code_challenge(code_verifier: str) -> str:
    """S256 transform: base64url without padding of SHA-256(verifier)."""
    digest = hashlib.sha256(code_verifier.encode("ascii")).digest()
    return _urlsafe(digest, padding=False)


@dataclass(frozen=True)
class AuthorizationRequestState:
    """Values generated for one authorization redirect and checked at callback."""

    state: str
    nonce: str
    code_verifier: str
    code_verifier_digest: str

    @classmethod
    def random(cls) -> "AuthorizationRequestState":
        state = _urlsafe(secrets.token_bytes(RANDOM_BYTES))
        nonce = _urlsafe(secrets.token_bytes(RANDOM_BYTES))
        code_verifier = _urlsafe(secrets.token_bytes(RANDOM_BYTES), padding=False)
        return cls(
            state=state,
            nonce=nonce,
            code_verifier=code_verifier,
            code_verifier_digest=code_challenge(code_verifier),
        )

    def authorization_url(
        self,
        authorization_endpoint: str,
        client_id: str,
        redirect_uri: str,
        scopes: Iterable[str],
    ) -> str:
        """Build the identity provider redirect for this request."""
        params = [
            ("client_id", client_id),
            ("redirect_uri", redirect_uri),
            ("state", self.state),
            ("response_type", "code"),
            ("scope", " ".join(scopes)),
            ("code_challenge", self.code_verifier_digest),
            ("code_challenge_method", CODE_CHALLENGE_METHOD),
            ("nonce", self.nonce),
        ]
        separator = "&" if "?" in authorization_endpoint else "?"
        return f"{authorization_endpoint}{separator}{urlencode(params)}"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AuthorizationRequestState":
        return cls(
            state=data["state"],
            nonce=data["nonce"],
            code_verifier=data["code_verifier"],
            code_verifier_digest=data["code_verifier_digest"],
        )
