"""
Signed bearer tokens identifying a principal.

Tokens are HS256 JWTs carrying the principal id in ``sub`` and, when a
session length is configured, an ``exp`` claim. Nothing about a token is
stored server-side.
"""

import re
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import ExpiredSignatureError, JWTError, jwk, jwt
from jose.utils import base64url_decode

from conduit.config import get_settings

# header.claims.signature, each base64url without padding
_JWS_SHAPE = re.compile(r"^[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+$")


@dataclass(frozen=True)
class Principal:
    """An authenticated caller, valid for the duration of one request."""

    user_id: uuid.UUID


class TokenError(Exception):
    """Base class for token verification failures."""


class MalformedTokenError(TokenError):
    """The token could not be parsed or lacks a usable subject."""


class BadSignatureError(TokenError):
    """The signature does not match (tampered token or wrong key)."""


class ExpiredTokenError(TokenError):
    """The token carried an ``exp`` claim that has elapsed."""


class TokenAuthenticator:
    """
    Token issuing and verification.

    Issuing is deterministic: the same principal issued at the same instant
    always yields the same token.
    """

    def __init__(
        self,
        secret_key: Optional[str] = None,
        algorithm: Optional[str] = None,
        session_length: Optional[timedelta] = None,
    ):
        settings = get_settings()
        self.secret_key = secret_key or settings.secret_key
        self.algorithm = algorithm or settings.algorithm
        if session_length is None and settings.session_length_days > 0:
            session_length = timedelta(days=settings.session_length_days)
        self.session_length = session_length

    def issue(self, principal: Principal, now: Optional[datetime] = None) -> str:
        """
        Sign a token for ``principal``.

        Args:
            principal: Caller the token identifies
            now: Issue time; only relevant when a session length is configured

        Returns:
            The serialized token
        """
        claims: Dict[str, Any] = {"sub": str(principal.user_id)}
        if self.session_length is not None:
            issued_at = now or datetime.now(timezone.utc)
            claims["exp"] = int((issued_at + self.session_length).timestamp())
        return jwt.encode(claims, self.secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> Principal:
        """
        Check the signature of ``token`` and decode its principal.

        The signature is checked over the raw ``header.claims`` text before
        either segment is decoded, so any altered byte is a bad signature.

        Raises:
            MalformedTokenError: not a three-segment JWS, or unusable claims
            BadSignatureError: signature mismatch
            ExpiredTokenError: ``exp`` has elapsed
        """
        if not _JWS_SHAPE.match(token or ""):
            raise MalformedTokenError("token is not a signed JWT")

        signing_input, _, encoded_signature = token.rpartition(".")
        try:
            signature = base64url_decode(encoded_signature.encode("ascii"))
        except (ValueError, TypeError) as exc:
            raise MalformedTokenError("signature is not base64url") from exc

        key = jwk.construct(self.secret_key, self.algorithm)
        if not key.verify(signing_input.encode("ascii"), signature):
            raise BadSignatureError("signature verification failed")

        try:
            claims = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"require_exp": False},
            )
        except ExpiredSignatureError as exc:
            raise ExpiredTokenError(str(exc)) from exc
        except JWTError as exc:
            # authentic but not decodable as our claims
            raise MalformedTokenError(str(exc)) from exc

        try:
            return Principal(user_id=uuid.UUID(str(claims["sub"])))
        except (KeyError, ValueError) as exc:
            raise MalformedTokenError("token subject is not a user id") from exc


# Default authenticator instance
_authenticator: Optional[TokenAuthenticator] = None


def get_authenticator() -> TokenAuthenticator:
    """Get or create the default authenticator."""
    global _authenticator
    if _authenticator is None:
        _authenticator = TokenAuthenticator()
    return _authenticator


def issue_token(user_id: uuid.UUID) -> str:
    """Issue a token for a user id with the default authenticator."""
    return get_authenticator().issue(Principal(user_id=user_id))
