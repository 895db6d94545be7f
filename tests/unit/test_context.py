"""Unit tests for Required/Optional auth context extraction."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from conduit.kernel.errors import UnauthorizedError
from conduit.kernel.identity.context import OptionalAuth, RequiredAuth
from conduit.kernel.identity.jwt import Principal, TokenAuthenticator


@pytest.fixture
def authenticator() -> TokenAuthenticator:
    return TokenAuthenticator(secret_key="context-test-secret-key-0123456789abcdef")


@pytest.fixture
def principal() -> Principal:
    return Principal(user_id=uuid.uuid4())


def wrong_signature_header(principal: Principal) -> str:
    forger = TokenAuthenticator(secret_key="not-the-server-secret-key-0123456789")
    return f"Token {forger.issue(principal)}"


class TestRequiredAuth:
    def test_valid_token(self, authenticator, principal):
        auth = RequiredAuth(authenticator)

        assert auth.extract(f"Token {authenticator.issue(principal)}") == principal

    def test_missing_header(self, authenticator):
        with pytest.raises(UnauthorizedError):
            RequiredAuth(authenticator).extract(None)

    @pytest.mark.parametrize("header", ["", "Token", "Token ", "Bearer abc.def.ghi", "token abc"])
    def test_bad_scheme_or_empty_token(self, authenticator, header):
        with pytest.raises(UnauthorizedError):
            RequiredAuth(authenticator).extract(header)

    def test_bearer_scheme_with_valid_token(self, authenticator, principal):
        """Only the Token scheme is accepted, even for a good token."""
        with pytest.raises(UnauthorizedError):
            RequiredAuth(authenticator).extract(f"Bearer {authenticator.issue(principal)}")

    def test_wrong_signature(self, authenticator, principal):
        with pytest.raises(UnauthorizedError):
            RequiredAuth(authenticator).extract(wrong_signature_header(principal))


class TestOptionalAuth:
    def test_missing_header_is_anonymous(self, authenticator):
        assert OptionalAuth(authenticator).extract(None) is None

    def test_valid_token(self, authenticator, principal):
        auth = OptionalAuth(authenticator)

        assert auth.extract(f"Token {authenticator.issue(principal)}") == principal

    def test_wrong_signature_is_rejected(self, authenticator, principal):
        """A bad credential never degrades to anonymous access."""
        with pytest.raises(UnauthorizedError):
            OptionalAuth(authenticator).extract(wrong_signature_header(principal))

    def test_expired_token_is_rejected(self, principal):
        short = TokenAuthenticator(
            secret_key="context-test-secret-key-0123456789abcdef",
            session_length=timedelta(minutes=5),
        )
        token = short.issue(principal, now=datetime.now(timezone.utc) - timedelta(hours=1))

        with pytest.raises(UnauthorizedError):
            OptionalAuth(short).extract(f"Token {token}")

    def test_garbage_is_rejected(self, authenticator):
        with pytest.raises(UnauthorizedError):
            OptionalAuth(authenticator).extract("Token garbage")
