"""
Unit tests for the authorization code callback.
"""

from urllib.parse import parse_qs, urlsplit

from photohub.infrastructure.auth.oauth_client import OAuthError, TokenResponse
from photohub.infrastructure.auth.session_store import (
    AUTHORIZATION_REQUEST_STATE_KEY,
    OAUTH_SESSION_KEY,
    USER_KEY,
)

from support import USER_ID


def begin(client, session_store):
    """Start a login and return (session id, redirect query parameters)."""
    response = client.get("/photos")
    params = {key: values[0] for key, values in parse_qs(urlsplit(response.headers["location"]).query).items()}
    (session_id,) = session_store._sessions.keys()
    return session_id, params


class TestOAuthCallback:
    """Test cases for completing the code flow."""

    def test_successful_callback_stores_session(self, client, session_store, oauth_client, tokens):
        """Test that a matching state exchanges the code and stores the session."""
        session_id, params = begin(client, session_store)
        oauth_client.exchange_code.return_value = TokenResponse(
            access_token=tokens.access_token(),
            refresh_token=tokens.refresh_token(),
            id_token=tokens.id_token(nonce=params["nonce"]),
        )
        pending = session_store.keys(session_id)[AUTHORIZATION_REQUEST_STATE_KEY]

        response = client.get("/oauth/callback", params={"code": "auth-code", "state": params["state"]})

        assert response.status_code == 302
        assert response.headers["location"] == "/"
        stored = session_store.keys(session_id)
        assert stored[USER_KEY]["id"] == str(USER_ID)
        assert "access_token" not in stored[USER_KEY]
        assert OAUTH_SESSION_KEY in stored
        assert AUTHORIZATION_REQUEST_STATE_KEY not in stored
        code, verifier = oauth_client.exchange_code.await_args.args
        assert code == "auth-code"
        assert verifier == pending["code_verifier"]

    def test_session_works_after_callback(self, client, session_store, oauth_client, tokens):
        """Test that the stored session authenticates the follow-up request."""
        _, params = begin(client, session_store)
        oauth_client.exchange_code.return_value = TokenResponse(
            access_token=tokens.access_token(),
            id_token=tokens.id_token(nonce=params["nonce"]),
        )
        client.get("/oauth/callback", params={"code": "c", "state": params["state"]})

        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["email"] == "ada@example.com"

    def test_state_mismatch(self, client, session_store, oauth_client):
        """Test that a forged state redirects home and writes nothing."""
        session_id, _ = begin(client, session_store)

        response = client.get("/oauth/callback", params={"code": "c", "state": "forged"})

        assert response.status_code == 302
        assert response.headers["location"] == "/"
        stored = session_store.keys(session_id)
        assert OAUTH_SESSION_KEY not in stored
        assert USER_KEY not in stored
        oauth_client.exchange_code.assert_not_awaited()
        assert AUTHORIZATION_REQUEST_STATE_KEY in stored

    def test_nonce_mismatch(self, client, session_store, oauth_client, tokens):
        """Test that an ID token carrying another nonce is refused."""
        session_id, params = begin(client, session_store)
        oauth_client.exchange_code.return_value = TokenResponse(
            access_token=tokens.access_token(),
            id_token=tokens.id_token(nonce="replayed"),
        )

        response = client.get("/oauth/callback", params={"code": "c", "state": params["state"]})

        assert response.headers["location"] == "/"
        assert OAUTH_SESSION_KEY not in session_store.keys(session_id)
        assert AUTHORIZATION_REQUEST_STATE_KEY not in session_store.keys(session_id)

    def test_failed_exchange(self, client, session_store, oauth_client):
        """Test that a rejected code redirects home and consumes the pending request."""
        session_id, params = begin(client, session_store)
        oauth_client.exchange_code.side_effect = OAuthError("invalid_grant", status_code=400)

        response = client.get("/oauth/callback", params={"code": "c", "state": params["state"]})
        replay = client.get("/oauth/callback", params={"code": "c", "state": params["state"]})

        assert response.status_code == 302
        assert replay.status_code == 302
        stored = session_store.keys(session_id)
        assert USER_KEY not in stored
        assert AUTHORIZATION_REQUEST_STATE_KEY not in stored
        assert oauth_client.exchange_code.await_count == 1

    def test_callback_without_pending_request(self, client, oauth_client):
        """Test that a callback with no session redirects home."""
        response = client.get("/oauth/callback", params={"code": "c", "state": "s"})

        assert response.status_code == 302
        assert response.headers["location"] == "/"
        oauth_client.exchange_code.assert_not_awaited()
