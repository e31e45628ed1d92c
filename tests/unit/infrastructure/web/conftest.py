"""
Fixtures building the application with an in-memory session store, a mocked
identity provider and in-memory repositories.
"""

from unittest.mock import AsyncMock, Mock

import pytest
from fastapi.testclient import TestClient

from photohub.infrastructure.auth.oauth_client import UserInfo
from photohub.infrastructure.auth.provider import JwksCache, OidcDiscoveryDocument, OidcProvider
from photohub.infrastructure.auth.session_store import InMemorySessionStore
from photohub.infrastructure.authz.policy_client import Decision
from photohub.infrastructure.repositories import (
    InMemoryAlbumRepository,
    InMemoryImageReferenceRepository,
    InMemoryPhotoRepository,
)
from photohub.infrastructure.storage import ImageReferenceUrlBuilder, InMemoryImageStorage
from photohub.infrastructure.web.dependencies import ServiceContainer
from photohub.main import create_application

from support import AUTHORIZATION_ENDPOINT, CLIENT_ID, REALM, USER_ID


@pytest.fixture
def oauth_client():
    client = Mock()
    client.client_id = CLIENT_ID
    client.redirect_uri = "http://localhost:8085/oauth/callback"
    client.exchange_code = AsyncMock()
    client.refresh = AsyncMock()
    client.user_info = AsyncMock(return_value=UserInfo(
        sub=USER_ID,
        preferred_username="ada",
        given_name="Ada",
        family_name="Lovelace",
        name="Ada Lovelace",
        email="ada@example.com",
        email_verified=True,
    ))
    return client


@pytest.fixture
def oidc(oauth_client, key_set):
    discovery = OidcDiscoveryDocument(
        issuer=REALM,
        authorization_endpoint=AUTHORIZATION_ENDPOINT,
        token_endpoint=f"{REALM}/protocol/openid-connect/token",
        userinfo_endpoint=f"{REALM}/protocol/openid-connect/userinfo",
        jwks_uri=f"{REALM}/protocol/openid-connect/certs",
    )
    return OidcProvider(
        discovery=discovery,
        jwks=JwksCache(Mock(), discovery.jwks_uri, key_set=key_set, min_refresh_interval=3600),
        oauth_client=oauth_client,
        scopes=["openid", "profile", "email"],
        access_token_audience="account",
    )


@pytest.fixture
def session_store():
    return InMemorySessionStore()


def allowing_enforcer(*methods: str) -> Mock:
    enforcer = Mock()
    for method in methods:
        setattr(enforcer, method, AsyncMock(return_value=Decision.ALLOW))
    return enforcer


@pytest.fixture
def container():
    photo_enforcer = allowing_enforcer("can_view_photo", "can_create_photo", "can_edit_photo")
    photo_enforcer.filter_photos_by_view_permission = AsyncMock(side_effect=lambda user, photos: photos)
    album_enforcer = allowing_enforcer("can_view_album", "can_create_album", "can_edit_album")
    album_enforcer.filter_albums_by_view_permission = AsyncMock(side_effect=lambda user, albums: albums)
    image_enforcer = allowing_enforcer("can_view", "can_download", "can_download_then_transform", "can_create")
    return ServiceContainer(
        photo_repository=InMemoryPhotoRepository(),
        album_repository=InMemoryAlbumRepository(),
        image_reference_repository=InMemoryImageReferenceRepository(),
        image_storage=InMemoryImageStorage(),
        photo_policy_enforcer=photo_enforcer,
        album_policy_enforcer=album_enforcer,
        image_policy_enforcer=image_enforcer,
        url_builder=ImageReferenceUrlBuilder("http://testserver/images"),
    )


@pytest.fixture
def app(oidc, session_store, container):
    application = create_application()
    application.state.oidc = oidc
    application.state.session_store = session_store
    application.state.container = container
    return application


@pytest.fixture
def client(app):
    # Not used as a context manager, so the lifespan never contacts the identity provider
    return TestClient(app, follow_redirects=False)


@pytest.fixture
def auth_headers(tokens):
    return {"Authorization": f"Bearer {tokens.access_token()}"}
