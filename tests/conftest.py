"""Global test configuration and fixtures for Signet."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Generator
from dataclasses import dataclass
from typing import Any

import pytest
from faker import Faker
from loguru import logger

from domain.signing import Bytes32, SigningConfig, build_signing_digest
from infrastructure.accounts import LocalAccount, ProtectedLocalAccount, UnlockedAccount


# Initialize Faker
fake = Faker()
Faker.seed(42)  # For reproducible tests


STUB_PUBLIC_KEY = "stub-public-key"


@dataclass(frozen=True)
class Checkpoint:
    """Small typed payload used across signing tests."""

    epoch: int
    root: Bytes32


@dataclass(frozen=True)
class Attestation:
    """Nested typed payload used across signing tests."""

    slot: int
    index: int
    committee: list[int]
    source: Checkpoint
    target: Checkpoint
    aggregated: bool
    note: bytes


class StubSignature:
    """Signature that verifies when digest and key match what was signed."""

    def __init__(self, digest: bytes, public_key: Any = STUB_PUBLIC_KEY) -> None:
        self.digest = digest
        self.public_key = public_key

    def verify(self, digest: bytes, public_key: Any) -> bool:
        return digest == self.digest and public_key == self.public_key


class StubLocker:
    """Lockable account stub recording every call it receives."""

    def __init__(
        self,
        passphrase: bytes = b"correct horse",
        unlocked: bool = False,
        fail_lock: bool = False,
        fail_is_unlocked: bool = False,
        hang: frozenset[str] = frozenset(),
    ) -> None:
        self.name = "stub"
        self.calls: list[tuple[Any, ...]] = []
        self._passphrase = passphrase
        self._unlocked = unlocked
        self._fail_lock = fail_lock
        self._fail_is_unlocked = fail_is_unlocked
        self._hang = hang

    async def _maybe_hang(self, operation: str) -> None:
        if operation in self._hang:
            await asyncio.Event().wait()

    async def is_unlocked(self) -> bool:
        self.calls.append(("is_unlocked",))
        await self._maybe_hang("is_unlocked")
        if self._fail_is_unlocked:
            raise RuntimeError("state unavailable")
        return self._unlocked

    async def unlock(self, passphrase: bytes) -> None:
        self.calls.append(("unlock", passphrase))
        await self._maybe_hang("unlock")
        if passphrase != self._passphrase:
            raise ValueError("incorrect passphrase")
        self._unlocked = True

    async def lock(self) -> None:
        self.calls.append(("lock",))
        await self._maybe_hang("lock")
        if self._fail_lock:
            raise RuntimeError("lock rejected")
        self._unlocked = False

    def public_key(self) -> Any:
        return STUB_PUBLIC_KEY

    @property
    def unlocked_now(self) -> bool:
        return self._unlocked

    def operations(self) -> list[str]:
        return [call[0] for call in self.calls]


class StubGenericAccount(StubLocker):
    """Lockable generic signer stub."""

    async def sign(self, digest: bytes) -> StubSignature:
        self.calls.append(("sign", digest))
        await self._maybe_hang("sign")
        return StubSignature(digest)


class StubProtectingAccount(StubLocker):
    """Lockable protecting signer stub that builds its own digest."""

    async def sign_generic(self, data: bytes, domain: bytes) -> StubSignature:
        self.calls.append(("sign_generic", data, domain))
        await self._maybe_hang("sign_generic")
        return StubSignature(build_signing_digest(data, domain))


class StubDualAccount(StubProtectingAccount, StubGenericAccount):
    """Stub offering both signing protocols."""


class StubPlainSigner:
    """Generic signer with no lock discipline."""

    def __init__(self) -> None:
        self.calls: list[tuple[Any, ...]] = []

    def sign(self, digest: bytes) -> StubSignature:
        self.calls.append(("sign", digest))
        return StubSignature(digest)

    def public_key(self) -> Any:
        return STUB_PUBLIC_KEY


@pytest.fixture(autouse=True)
def silence_logs() -> Generator[None, None, None]:
    """Keep loguru quiet during tests while still exercising log calls."""
    logger.remove()
    logger.add(lambda _: None, level="TRACE")
    yield
    # Tests may reconfigure sinks themselves
    logger.remove()


@pytest.fixture
def fake_instance() -> Faker:
    """Provide a Faker instance for test data generation."""
    return fake


@pytest.fixture
def test_domain() -> bytes:
    """Provide a consistent 32-byte signing domain."""
    return bytes.fromhex("01000000") + b"\x5a" * 28


@pytest.fixture
def test_passphrase() -> str:
    return "correct horse"


@pytest.fixture
def test_config(test_passphrase: str) -> SigningConfig:
    """Provide a config with a wrong candidate followed by the right one."""
    return SigningConfig(timeout=1.0, passphrases=("wrong", test_passphrase))


@pytest.fixture
def checkpoint() -> Checkpoint:
    return Checkpoint(epoch=7, root=b"\x11" * 32)


@pytest.fixture
def attestation(checkpoint: Checkpoint, fake_instance: Faker) -> Attestation:
    return Attestation(
        slot=fake_instance.random_int(min=1, max=1_000_000),
        index=3,
        committee=[fake_instance.random_int(min=0, max=512) for _ in range(5)],
        source=checkpoint,
        target=Checkpoint(epoch=8, root=b"\x22" * 32),
        aggregated=False,
        note=fake_instance.binary(length=45),
    )


@pytest.fixture
def stub_classes() -> dict[str, Callable[..., Any]]:
    """Provide the account stub classes by role."""
    return {
        "generic": StubGenericAccount,
        "protecting": StubProtectingAccount,
        "dual": StubDualAccount,
        "plain": StubPlainSigner,
    }


@pytest.fixture
def generic_account() -> StubGenericAccount:
    return StubGenericAccount()


@pytest.fixture
def protecting_account() -> StubProtectingAccount:
    return StubProtectingAccount()


@pytest.fixture
def local_account(test_passphrase: str) -> LocalAccount:
    """Provide a locked ECDSA account encrypted with the test passphrase."""
    return LocalAccount.generate("local", test_passphrase.encode("utf-8"))


@pytest.fixture
def protected_account(test_passphrase: str) -> ProtectedLocalAccount:
    """Provide a locked ECDSA account with a signing ledger."""
    account = ProtectedLocalAccount.generate("protected", test_passphrase.encode("utf-8"))
    assert isinstance(account, ProtectedLocalAccount)
    return account


@pytest.fixture
def unlocked_account() -> UnlockedAccount:
    return UnlockedAccount.generate("hot")
