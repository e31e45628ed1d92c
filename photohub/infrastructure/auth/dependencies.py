"""
Authentication dependencies for FastAPI.
Expose the principal resolved by AuthenticationMiddleware to route handlers.
"""

from typing import Optional

from fastapi import HTTPException, Request, status

from .user import AuthenticatedUser, AuthenticationMethod


def get_authenticated_user(request: Request) -> AuthenticatedUser:
    """
    FastAPI dependency returning the current authenticated user.

    Raises:
        HTTPException: If the middleware did not authenticate the request
    """
    user: Optional[AuthenticatedUser] = getattr(request.state, "user", None)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def get_authentication_method(request: Request) -> Optional[AuthenticationMethod]:
    return getattr(request.state, "authentication_method", None)
