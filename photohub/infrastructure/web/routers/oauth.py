"""
OIDC redirect callback router.
Completes the authorization code flow started by AuthenticationMiddleware.
"""

import logging
import secrets
from typing import Optional

from fastapi import APIRouter, Request, status
from fastapi.responses import RedirectResponse

from photohub.config import settings
from photohub.infrastructure.auth.authorization_request import AuthorizationRequestState
from photohub.infrastructure.auth.oauth_client import OAuthError
from photohub.infrastructure.auth.provider import OidcProvider
from photohub.infrastructure.auth.session_store import (
    AUTHORIZATION_REQUEST_STATE_KEY,
    OAUTH_SESSION_KEY,
    USER_KEY,
    SessionStore,
    get_session_id,
)
from photohub.infrastructure.auth.token_validator import TokenValidationError
from photohub.infrastructure.auth.user import AuthenticatedUser
from photohub.infrastructure.auth.user_session import SessionTokens, UserSession

logger = logging.getLogger(__name__)

router = APIRouter()


def _go_home() -> RedirectResponse:
    return RedirectResponse(settings.home_path, status_code=status.HTTP_302_FOUND)


@router.get("", include_in_schema=False)
async def redirect_endpoint(
    request: Request,
    code: Optional[str] = None,
    state: Optional[str] = None,
):
    """
    Exchange the authorization code for tokens and store the session.

    Every failure redirects home without detail.
    """
    oidc: OidcProvider = request.app.state.oidc
    store: SessionStore = request.app.state.session_store

    session_id = get_session_id(request)
    if session_id is None or not code or not state:
        logger.info("Callback without session or parameters")
        return _go_home()

    stored_state = await store.get(session_id, AUTHORIZATION_REQUEST_STATE_KEY)
    if stored_state is None:
        logger.info("Callback without pending authorization request")
        return _go_home()

    request_state = AuthorizationRequestState.from_dict(stored_state)
    if not secrets.compare_digest(request_state.state, state):
        logger.warning("Callback state mismatch")
        return _go_home()

    try:
        token_response = await oidc.oauth_client.exchange_code(code, request_state.code_verifier)
        tokens = SessionTokens.from_token_response(token_response, nonce=request_state.nonce)
        key_set = await oidc.jwks.key_set_for(tokens.id_token or tokens.access_token)
        user_session, id_claims = UserSession.validate(
            tokens, key_set, oidc.client_id, oidc.access_token_audience
        )
        user = AuthenticatedUser.from_id_token_claims(id_claims, tokens.access_token)
    except OAuthError as e:
        logger.warning(f"Authorization code exchange failed: {e}")
        return _go_home()
    except TokenValidationError as e:
        logger.warning(f"Tokens from code exchange did not validate ({e.kind.value}): {e.message}")
        return _go_home()
    except ValueError as e:
        logger.warning(f"Unusable identity in ID token: {e}")
        return _go_home()
    finally:
        # A code exchange consumes the pending request whatever its outcome
        await store.remove(session_id, AUTHORIZATION_REQUEST_STATE_KEY)

    await store.set(session_id, OAUTH_SESSION_KEY, user_session.to_dict())
    await store.set(session_id, USER_KEY, user.profile())
    logger.info(f"User {user.id} signed in")

    return _go_home()
