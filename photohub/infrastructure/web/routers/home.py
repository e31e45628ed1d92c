"""
Landing route for users coming back from the login flow.
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from photohub.infrastructure.auth import AuthenticatedUser, get_authenticated_user

router = APIRouter()


@router.get("/")
async def home(user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]):
    """Return the signed in user's profile."""
    return user.profile()
