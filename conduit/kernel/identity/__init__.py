"""
Identity Core - Authentication and user management.
"""

from conduit.kernel.identity.password import CredentialVerifier, PasswordCheck, hash_password, verify_password
from conduit.kernel.identity.jwt import (
    BadSignatureError,
    ExpiredTokenError,
    MalformedTokenError,
    Principal,
    TokenAuthenticator,
    TokenError,
    issue_token,
)
from conduit.kernel.identity.context import AuthContext, OptionalAuth, RequiredAuth
from conduit.kernel.identity.identity_service import AuthenticatedUser, IdentityService

__all__ = [
    "CredentialVerifier",
    "PasswordCheck",
    "hash_password",
    "verify_password",
    "BadSignatureError",
    "ExpiredTokenError",
    "MalformedTokenError",
    "Principal",
    "TokenAuthenticator",
    "TokenError",
    "issue_token",
    "AuthContext",
    "OptionalAuth",
    "RequiredAuth",
    "AuthenticatedUser",
    "IdentityService",
]
