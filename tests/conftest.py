"""
Shared fixtures for the test suite.
"""

import pytest
from cryptography.hazmat.primitives.asymmetric import rsa

from photohub.infrastructure.auth.token_validator import KeySet
from photohub.infrastructure.auth.user import AuthenticatedUser

from support import USER_ID, TokenFactory, make_jwk


@pytest.fixture(scope="session")
def private_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def jwks(private_key):
    return {"keys": [make_jwk(private_key)]}


@pytest.fixture
def key_set(jwks):
    return KeySet.from_jwks(jwks)


@pytest.fixture
def tokens(private_key):
    return TokenFactory(private_key)


@pytest.fixture
def user():
    return AuthenticatedUser(
        id=USER_ID,
        username="ada",
        given_name="Ada",
        family_name="Lovelace",
        full_name="Ada Lovelace",
        email="ada@example.com",
        email_verified=True,
        access_token="user-access-token",
    )
