"""Base interfaces for typed-data signing.

Signing flow:
1. Extract the 66-byte digest from the input text
2. Build exactly one signer backend from the configured credential
3. Signer returns a 65-byte r || s || v signature (v is 27 or 28)
4. Report digest, signer address and signature

Every backend produces the same encoding, so a signature made with a raw
key, with the same key derived from a mnemonic, or on a device holding that
key verifies identically.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

from typedsign.digest import TypedDataDigest
from typedsign.errors import SigningFailed

logger = logging.getLogger(__name__)

SIGNATURE_LENGTH = 65
RECOVERY_ID_OFFSET = 64
LEGACY_V_OFFSET = 27


class SignerType(str, Enum):
    """Type of signing backend."""
    PRIVATE_KEY = "private_key"   # Raw key supplied by the operator
    MNEMONIC = "mnemonic"         # Key derived from a BIP39 phrase
    LEDGER = "ledger"             # Key held by a Ledger device


@dataclass(frozen=True)
class Signature:
    """Recoverable secp256k1 signature.

    Attributes:
        r: R component
        s: S component
        v: Recovery byte in the legacy 27/28 form
    """
    r: int
    s: int
    v: int

    @classmethod
    def from_bytes(cls, signature: bytes) -> "Signature":
        """Parse r || s || v, normalising a 0/1 recovery id to 27/28."""
        if len(signature) != SIGNATURE_LENGTH:
            raise SigningFailed(
                f"expected {SIGNATURE_LENGTH}-byte signature, got {len(signature)} bytes"
            )
        return cls.from_vrs(
            signature[RECOVERY_ID_OFFSET],
            int.from_bytes(signature[0:32], "big"),
            int.from_bytes(signature[32:64], "big"),
        )

    @classmethod
    def from_vrs(cls, v: int, r: int, s: int) -> "Signature":
        if v in (0, 1):
            v += LEGACY_V_OFFSET
        if v not in (27, 28):
            raise SigningFailed(f"unexpected recovery byte {v}")
        return cls(r=r, s=s, v=v)

    @property
    def recovery_id(self) -> int:
        """Raw 0/1 recovery id."""
        return self.v - LEGACY_V_OFFSET

    def to_bytes(self) -> bytes:
        return self.r.to_bytes(32, "big") + self.s.to_bytes(32, "big") + bytes([self.v])

    def hex(self) -> str:
        """Signature as hex without a 0x prefix."""
        return self.to_bytes().hex()


class SignerBackend(ABC):
    """Abstract base class for signing backends.

    Backends own their credential material for their whole lifetime. Use as
    a context manager so any session is released on every exit path.
    """

    def __init__(self, signer_type: SignerType):
        self.signer_type = signer_type

    @property
    @abstractmethod
    def address(self) -> str:
        """Checksum address of the signing key."""
        pass

    @abstractmethod
    def sign(self, digest: TypedDataDigest) -> Signature:
        """Sign a typed-data digest.

        Args:
            digest: Validated 66-byte digest

        Returns:
            Signature with v normalised to 27/28

        Raises:
            SigningFailed: If the backend cannot produce a signature
        """
        pass

    def close(self) -> None:
        """Release any resources held by the backend."""
        pass

    def __enter__(self) -> "SignerBackend":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(type={self.signer_type.value})"
