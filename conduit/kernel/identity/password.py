"""
Password hashing with argon2id, run off the event loop.

Argon2 is deliberately expensive in CPU and memory, so every hash and
verify call is submitted to a dedicated thread pool. A burst of logins
then queues up on that pool instead of stalling unrelated requests.
"""

import asyncio
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from typing import Callable, Optional, TypeVar

from argon2 import PasswordHasher, profiles
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

from conduit.config import get_settings
from conduit.kernel.errors import InternalError
from conduit.logging_config import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class PasswordCheck(str, Enum):
    """Result of checking a password against a stored hash."""
    OK = "ok"
    WRONG_PASSWORD = "wrong_password"
    CORRUPT_HASH = "corrupt_hash"


class CredentialVerifier:
    """
    Hash and verify passwords on a private worker pool.

    Failures inside the worker (anything other than a plain mismatch or an
    unparseable stored hash) are logged and surfaced as InternalError.
    """

    def __init__(
        self,
        hasher: Optional[PasswordHasher] = None,
        max_workers: Optional[int] = None,
    ):
        settings = get_settings()
        if hasher is None:
            profile = (
                profiles.CHEAPEST
                if settings.allow_weak_password_hashes
                else profiles.RFC_9106_LOW_MEMORY
            )
            hasher = PasswordHasher.from_parameters(profile)
        self.hasher = hasher
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers or settings.password_hash_workers,
            thread_name_prefix="argon2",
        )

    async def _offload(self, func: Callable[..., T], *args) -> T:
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(self._executor, func, *args)
        except Exception as exc:
            logger.exception("Password hashing worker failed")
            raise InternalError("password hashing failed") from exc

    async def hash(self, password: str) -> str:
        """Hash ``password`` with a fresh random salt."""
        return await self._offload(self.hasher.hash, password)

    async def verify(self, password: str, stored_hash: str) -> PasswordCheck:
        """Check ``password`` against ``stored_hash`` in constant time."""
        return await self._offload(self._verify_sync, password, stored_hash)

    def _verify_sync(self, password: str, stored_hash: str) -> PasswordCheck:
        try:
            self.hasher.verify(stored_hash, password)
        except VerifyMismatchError:
            return PasswordCheck.WRONG_PASSWORD
        except (InvalidHashError, VerificationError):
            # VerificationError without a mismatch means the stored
            # parameters could not be used, which is also our fault
            return PasswordCheck.CORRUPT_HASH
        return PasswordCheck.OK

    def needs_rehash(self, stored_hash: str) -> bool:
        """Whether ``stored_hash`` was produced with other parameters than ours."""
        try:
            return self.hasher.check_needs_rehash(stored_hash)
        except (InvalidHashError, ValueError):
            return True

    def shutdown(self) -> None:
        """Stop the worker pool; jobs already abandoned are not waited for."""
        self._executor.shutdown(wait=False, cancel_futures=True)


# Default verifier instance
_verifier: Optional[CredentialVerifier] = None


def get_credential_verifier() -> CredentialVerifier:
    """Get or create the default verifier."""
    global _verifier
    if _verifier is None:
        _verifier = CredentialVerifier()
    return _verifier


def shutdown_credential_verifier() -> None:
    """Shut down the default verifier's pool, if one was created."""
    global _verifier
    if _verifier is not None:
        _verifier.shutdown()
        _verifier = None


# Convenience functions
async def hash_password(password: str) -> str:
    """Hash a password."""
    return await get_credential_verifier().hash(password)


async def verify_password(password: str, stored_hash: str) -> PasswordCheck:
    """Verify a password."""
    return await get_credential_verifier().verify(password, stored_hash)
