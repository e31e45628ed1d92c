"""
The authenticated principal attached to each request.
"""

from enum import Enum
from typing import Any, Dict, Optional
import uuid

from pydantic import BaseModel, ConfigDict

from .oauth_client import UserInfo
from .token_validator import IdTokenClaims


class AuthenticationMethod(str, Enum):
    """How the principal of a request was established."""
    BEARER = "bearer"
    OAUTH_CODE_FLOW = "oauth_code_flow"


class AuthenticatedUser(BaseModel):
    """
    End user identity plus the access token used as the UMA subject token.
    The access token is excluded from the serialized profile.
    """

    model_config = ConfigDict(frozen=True)

    id: uuid.UUID
    username: Optional[str] = None
    given_name: Optional[str] = None
    family_name: Optional[str] = None
    full_name: Optional[str] = None
    email: Optional[str] = None
    email_verified: bool = False
    access_token: str = ""

    @classmethod
    def from_id_token_claims(cls, claims: IdTokenClaims, access_token: str) -> "AuthenticatedUser":
        """
        Raises:
            ValueError: If the subject is not a UUID
        """
        return cls(
            id=uuid.UUID(claims.sub),
            username=claims.preferred_username,
            given_name=claims.given_name,
            family_name=claims.family_name,
            full_name=claims.name,
            email=claims.email,
            email_verified=claims.email_verified,
            access_token=access_token,
        )

    @classmethod
    def from_user_info(cls, user_info: UserInfo, access_token: str) -> "AuthenticatedUser":
        return cls(
            id=user_info.sub,
            username=user_info.preferred_username,
            given_name=user_info.given_name,
            family_name=user_info.family_name,
            full_name=user_info.name,
            email=user_info.email,
            email_verified=user_info.email_verified,
            access_token=access_token,
        )

    def profile(self) -> Dict[str, Any]:
        """Serializable profile stored in the session under the user key."""
        return self.model_dump(mode="json", exclude={"access_token"})

    @classmethod
    def from_profile(cls, profile: Dict[str, Any], access_token: str) -> "AuthenticatedUser":
        return cls.model_validate({**profile, "access_token": access_token})
