"""
Authorization infrastructure module.
Delegates permission decisions to the UMA2 policy server.
"""

from .claims import AuthorizationScope, CommonClaims
from .policy_client import (
    Decision,
    PermissionRequest,
    PolicyDecisionClient,
    PolicyServerError,
    ResourceIdCache,
)
from .photo import PhotoPolicyEnforcer, PHOTO_BY_ID_RESOURCE
from .album import AlbumPolicyEnforcer, ALBUM_BY_ID_RESOURCE
from .image import ImagePolicyEnforcer, IMAGE_BY_ID_RESOURCE

__all__ = [
    "AuthorizationScope",
    "CommonClaims",
    "Decision",
    "PermissionRequest",
    "PolicyDecisionClient",
    "PolicyServerError",
    "ResourceIdCache",
    "PhotoPolicyEnforcer",
    "AlbumPolicyEnforcer",
    "ImagePolicyEnforcer",
    "PHOTO_BY_ID_RESOURCE",
    "ALBUM_BY_ID_RESOURCE",
    "IMAGE_BY_ID_RESOURCE",
]
