"""
Caller identity extraction from the ``Authorization`` header.

Both variants share one verification path. They differ only in how they
treat a request that carries no credential at all: RequiredAuth rejects it,
OptionalAuth lets it through as anonymous. A credential that *is* present
is held to the same standard either way.
"""

from abc import ABC, abstractmethod
from typing import Optional

from conduit.kernel.errors import UnauthorizedError
from conduit.kernel.identity.jwt import Principal, TokenAuthenticator, TokenError, get_authenticator
from conduit.logging_config import get_logger

logger = get_logger(__name__)

SCHEME = "Token"


class AuthContext(ABC):
    """Turn a raw ``Authorization`` header value into a principal."""

    def __init__(self, authenticator: Optional[TokenAuthenticator] = None):
        self._authenticator = authenticator

    @property
    def authenticator(self) -> TokenAuthenticator:
        return self._authenticator or get_authenticator()

    def _verify_header(self, header: str) -> Principal:
        scheme, _, token = header.strip().partition(" ")
        token = token.strip()
        if scheme != SCHEME or not token:
            logger.debug("Rejected authorization header with scheme %r", scheme)
            raise UnauthorizedError("Authorization header must be of the form 'Token <token>'")

        try:
            return self.authenticator.verify(token)
        except TokenError as exc:
            logger.debug("Rejected token: %s", type(exc).__name__)
            raise UnauthorizedError("Invalid or expired token") from exc

    @abstractmethod
    def extract(self, header: Optional[str]) -> Optional[Principal]:
        """Return the caller, ``None`` for anonymous, or raise UnauthorizedError."""


class RequiredAuth(AuthContext):
    """A valid credential must be presented."""

    def extract(self, header: Optional[str]) -> Principal:
        if header is None:
            raise UnauthorizedError()
        return self._verify_header(header)


class OptionalAuth(AuthContext):
    """Absence of a credential is fine; an invalid one is not."""

    def extract(self, header: Optional[str]) -> Optional[Principal]:
        if header is None:
            return None
        return self._verify_header(header)
