"""
Identity service for user registration, login and account updates.
"""

import uuid
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from conduit.database import commit_or_fail
from conduit.kernel.errors import InternalError, NotFoundError, UnauthorizedError
from conduit.kernel.identity.jwt import Principal, TokenAuthenticator, get_authenticator
from conduit.kernel.identity.password import CredentialVerifier, PasswordCheck, get_credential_verifier
from conduit.kernel.models import User
from conduit.kernel.storage.constraints import on_constraint
from conduit.logging_config import get_logger

logger = get_logger(__name__)

USER_CONSTRAINTS = {
    "users_username_key": ("username", "username taken"),
    "users_email_key": ("email", "email taken"),
}


@dataclass
class AuthenticatedUser:
    """A user together with a freshly issued token."""

    user: User
    token: str


class IdentityService:
    """
    Service for user identity operations.

    Password hashing is delegated to the CredentialVerifier's worker pool;
    tokens are issued by the TokenAuthenticator.
    """

    def __init__(
        self,
        session: AsyncSession,
        verifier: Optional[CredentialVerifier] = None,
        authenticator: Optional[TokenAuthenticator] = None,
    ):
        self.session = session
        self.verifier = verifier or get_credential_verifier()
        self.authenticator = authenticator or get_authenticator()

    def _with_token(self, user: User) -> AuthenticatedUser:
        return AuthenticatedUser(
            user=user,
            token=self.authenticator.issue(Principal(user_id=user.id)),
        )

    async def _save(self, user: User) -> None:
        await on_constraint(self.session.flush, USER_CONSTRAINTS)
        await commit_or_fail(self.session)
        await self.session.refresh(user)

    async def register_user(self, username: str, email: str, password: str) -> AuthenticatedUser:
        """
        Register a new user.

        Args:
            username: Public handle, unique
            email: Login email, unique
            password: Plain text password

        Returns:
            The created user with a token

        Raises:
            UnprocessableEntityError: username or email already taken
        """
        user = User(
            username=username,
            email=email.lower().strip(),
            password_hash=await self.verifier.hash(password),
            bio="",
        )
        self.session.add(user)
        await self._save(user)

        logger.info("User registered: %s", user.id)
        return self._with_token(user)

    async def login(self, email: str, password: str) -> AuthenticatedUser:
        """
        Check credentials and issue a token.

        A hash produced with outdated parameters is replaced on success.

        Raises:
            NotFoundError: no user has this email
            UnauthorizedError: wrong password
            InternalError: the stored hash is unusable
        """
        user = await self.get_user_by_email(email)
        if user is None:
            raise NotFoundError("User not found")

        check = await self.verifier.verify(password, user.password_hash)
        if check is PasswordCheck.WRONG_PASSWORD:
            logger.debug("Wrong password for user %s", user.id)
            raise UnauthorizedError("Invalid email or password")
        if check is PasswordCheck.CORRUPT_HASH:
            logger.error("Stored password hash for user %s is corrupt", user.id)
            raise InternalError()

        if self.verifier.needs_rehash(user.password_hash):
            user.password_hash = await self.verifier.hash(password)
            await self.session.flush()
            await commit_or_fail(self.session)
            logger.info("Upgraded password hash for user %s", user.id)

        return self._with_token(user)

    async def get_user_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        result = await self.session.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_user_by_email(self, email: str) -> Optional[User]:
        result = await self.session.execute(
            select(User).where(User.email == email.lower().strip())
        )
        return result.scalar_one_or_none()

    async def current_user(self, principal: Principal) -> AuthenticatedUser:
        """The principal's account with a renewed token."""
        user = await self.get_user_by_id(principal.user_id)
        if user is None:
            raise NotFoundError("User not found")
        return self._with_token(user)

    async def update_user(
        self,
        principal: Principal,
        username: Optional[str] = None,
        email: Optional[str] = None,
        password: Optional[str] = None,
        bio: Optional[str] = None,
        image: Optional[str] = None,
    ) -> AuthenticatedUser:
        """
        Apply the given fields to the principal's account.

        Fields left as ``None`` are unchanged. A new password is hashed
        before anything is written.
        """
        user = await self.get_user_by_id(principal.user_id)
        if user is None:
            raise NotFoundError("User not found")

        if password is not None:
            user.password_hash = await self.verifier.hash(password)
        if username is not None:
            user.username = username
        if email is not None:
            user.email = email.lower().strip()
        if bio is not None:
            user.bio = bio
        if image is not None:
            user.image = image

        await self._save(user)
        return self._with_token(user)
