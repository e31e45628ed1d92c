"""
Authorization scopes and the claims pushed to the policy server.
"""

import base64
import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple
import uuid

from photohub.domain.models.base import Visibility


class AuthorizationScope(str, Enum):
    """Scopes registered on the protected resources."""
    VIEW = "View"
    VIEW_ALL = "ViewAll"
    VIEW_OWN = "ViewOwn"
    CREATE = "Create"
    TRANSFORM = "Transform"
    DOWNLOAD = "Download"
    CHANGE_ALBUM = "ChangeAlbum"
    CHANGE_VISIBILITY = "ChangeVisibility"
    EDIT_TITLE = "EditTitle"


@dataclass(frozen=True)
class CommonClaims:
    """
    Facts about the target entity that policies evaluate, e.g.
    "visibility is Public or the resource owner is the caller".
    Unset fields are left out of the serialized claims.
    """

    resource_owner: Optional[Tuple[uuid.UUID, ...]] = None
    visibility: Optional[Tuple[Visibility, ...]] = None

    @classmethod
    def for_view(cls, owner_id: uuid.UUID, visibility: Visibility) -> "CommonClaims":
        return cls(resource_owner=(owner_id,), visibility=(visibility,))

    @classmethod
    def for_owner(cls, owner_id: uuid.UUID) -> "CommonClaims":
        return cls(resource_owner=(owner_id,))

    @classmethod
    def empty(cls) -> "CommonClaims":
        return cls()

    def to_dict(self) -> Dict[str, Any]:
        claims: Dict[str, Any] = {}
        if self.resource_owner is not None:
            claims["resourceOwner"] = [str(owner) for owner in self.resource_owner]
        if self.visibility is not None:
            claims["visibility"] = [Visibility(v).value for v in self.visibility]
        return claims

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"))

    def encode(self) -> str:
        """Standard base64 without padding of the compact JSON claims."""
        return base64.b64encode(self.to_json().encode("utf-8")).decode("ascii").rstrip("=")
