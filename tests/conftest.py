"""Pytest configuration and fixtures."""

import os

import pytest

from typedsign.config import Settings
from typedsign.digest import TypedDataDigest
from typedsign.errors import AccountDerivationFailed, DeviceLocked
from typedsign.signing.base import Signature
from typedsign.signing.device import DeviceHub, HardwareWallet
from typedsign.signing.local import PrivateKeySigner

# Standard BIP39 test vector
TEST_MNEMONIC = (
    "abandon abandon abandon abandon abandon abandon "
    "abandon abandon abandon abandon abandon about"
)
# m/44'/60'/0'/0/0 of TEST_MNEMONIC
TEST_PRIVATE_KEY = "1ab42cc412b618bdea3a599e3c9bae199ebf030895b039e9db1e30dafb12b727"
TEST_ADDRESS = "0x9858EfFD232B4033E47d90003D41EC34EcaEda94"

DOMAIN_HASH = bytes.fromhex("aa" * 32)
MESSAGE_HASH = bytes.fromhex("bb" * 32)
DIGEST_HEX = "0x1901" + DOMAIN_HASH.hex() + MESSAGE_HASH.hex()
# Signature of keccak256(DIGEST_HEX) by TEST_PRIVATE_KEY
TEST_SIGNATURE = (
    "48cbbac7078407f9a647e723cdd9aa81f992bf1323fe3dde07587865e4e53ecf"
    "67f11b0db5652ca168843b0bab6455fea33b2be515d762a92bc5006e404afe14"
    "1c"
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Isolate tests from TYPEDSIGN_* variables and any local .env file."""
    for key in list(os.environ):
        if key.startswith("TYPEDSIGN_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def digest() -> TypedDataDigest:
    return TypedDataDigest.from_parts(b"\x19\x01", DOMAIN_HASH, MESSAGE_HASH)


def make_settings(**kwargs) -> Settings:
    """Build settings without reading a .env file."""
    return Settings(_env_file=None, **kwargs)


class FakeWallet(HardwareWallet):
    """In-memory stand-in for a hardware wallet holding TEST_PRIVATE_KEY."""

    def __init__(self, name: str = "fake", fail_open: bool = False, fail_derive: bool = False):
        self.name = name
        self.fail_open = fail_open
        self.fail_derive = fail_derive
        self.opened = False
        self.close_calls = 0
        self.requests: list[tuple] = []
        self._key = PrivateKeySigner(TEST_PRIVATE_KEY)

    @property
    def label(self) -> str:
        return f"Fake {self.name}"

    def open(self) -> None:
        if self.fail_open:
            raise DeviceLocked("error opening ledger: device locked")
        self.opened = True

    def derive(self, path) -> str:
        if self.fail_derive:
            raise AccountDerivationFailed("error deriving ledger account (have you unlocked?)")
        return self._key.address

    def sign_typed_data(self, path, mimetype, domain_hash, message_hash) -> Signature:
        self.requests.append((str(path), mimetype, domain_hash, message_hash))
        digest = TypedDataDigest.from_parts(b"\x19\x01", domain_hash, message_hash)
        return self._key.sign(digest)

    def close(self) -> None:
        self.close_calls += 1
        self.opened = False


class FakeHub(DeviceHub):
    """Device hub returning a fixed list of wallets."""

    def __init__(self, wallets=None):
        self._wallets = list(wallets or [])
        self.calls = 0

    def wallets(self) -> list[HardwareWallet]:
        self.calls += 1
        return list(self._wallets)
