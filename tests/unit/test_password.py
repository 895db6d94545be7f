"""Unit tests for password hashing."""

from unittest.mock import Mock

import pytest
import pytest_asyncio
from argon2 import PasswordHasher, profiles

from conduit.kernel.errors import InternalError
from conduit.kernel.identity.password import CredentialVerifier, PasswordCheck


@pytest_asyncio.fixture
async def verifier():
    verifier = CredentialVerifier(
        hasher=PasswordHasher.from_parameters(profiles.CHEAPEST),
        max_workers=1,
    )
    yield verifier
    verifier.shutdown()


class TestCredentialVerifier:
    """Tests for CredentialVerifier."""

    @pytest.mark.asyncio
    async def test_round_trip(self, verifier):
        """Correct password verifies, a wrong one is a mismatch."""
        stored = await verifier.hash("TestPassword123")

        assert await verifier.verify("TestPassword123", stored) is PasswordCheck.OK
        assert await verifier.verify("wrong", stored) is PasswordCheck.WRONG_PASSWORD

    @pytest.mark.asyncio
    async def test_hash_creates_different_hashes(self, verifier):
        """Same password should create different hashes (due to salt)."""
        first = await verifier.hash("TestPassword123")
        second = await verifier.hash("TestPassword123")

        assert first != second
        assert first.startswith("$argon2id$")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("stored", ["", "not-a-hash", "$2b$12$abcdefghijklmnopqrstuv"])
    async def test_corrupt_hash(self, verifier, stored):
        """An unusable stored hash is our fault, not a wrong password."""
        assert await verifier.verify("anything", stored) is PasswordCheck.CORRUPT_HASH

    @pytest.mark.asyncio
    async def test_needs_rehash(self, verifier):
        stored = await verifier.hash("TestPassword123")
        stronger = CredentialVerifier(
            hasher=PasswordHasher.from_parameters(profiles.RFC_9106_LOW_MEMORY),
            max_workers=1,
        )
        try:
            assert verifier.needs_rehash(stored) is False
            assert stronger.needs_rehash(stored) is True
            assert stronger.needs_rehash("garbage") is True
        finally:
            stronger.shutdown()

    @pytest.mark.asyncio
    async def test_worker_failure_is_internal_error(self):
        hasher = Mock()
        hasher.hash.side_effect = RuntimeError("boom")
        verifier = CredentialVerifier(hasher=hasher, max_workers=1)
        try:
            with pytest.raises(InternalError):
                await verifier.hash("TestPassword123")
        finally:
            verifier.shutdown()
