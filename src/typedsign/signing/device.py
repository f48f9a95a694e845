"""Hardware wallet signing backend.

The device holds the key; this backend only keeps the opened session and the
account derived on it, and forwards the digest for signing. The vendor
transport (USB/HID framing, APDUs) lives behind HardwareWallet and is not
implemented here.

Signing blocks until the operator confirms or rejects on the device. There
is no software timeout.
"""

import logging
from abc import ABC, abstractmethod

from typedsign.digest import TypedDataDigest
from typedsign.errors import SigningFailed
from typedsign.hdwallet.path import DerivationPath
from typedsign.signing.base import Signature, SignerBackend, SignerType

logger = logging.getLogger(__name__)

# Tag identifying the payload as EIP-712 typed data rather than a plain message
MIMETYPE_TYPED_DATA = "data/typed"


class HardwareWallet(ABC):
    """Capability boundary for a single connected device."""

    @property
    @abstractmethod
    def label(self) -> str:
        """Human readable device description."""
        pass

    @abstractmethod
    def open(self) -> None:
        """Open a session.

        Raises:
            DeviceLocked: If the device cannot be opened
        """
        pass

    @abstractmethod
    def derive(self, path: DerivationPath) -> str:
        """Derive the account at `path` and return its checksum address.

        Raises:
            AccountDerivationFailed: If the device rejects the path
        """
        pass

    @abstractmethod
    def sign_typed_data(
        self,
        path: DerivationPath,
        mimetype: str,
        domain_hash: bytes,
        message_hash: bytes,
    ) -> Signature:
        """Sign EIP-712 hashes with the account at `path`.

        Raises:
            SigningFailed: If the device rejects or fails the request
        """
        pass

    @abstractmethod
    def close(self) -> None:
        pass


class DeviceHub(ABC):
    """Discovers connected hardware wallets."""

    @abstractmethod
    def wallets(self) -> list[HardwareWallet]:
        pass


class DeviceSigner(SignerBackend):
    """Signs on a hardware wallet through an opened session."""

    def __init__(self, wallet: HardwareWallet, path: DerivationPath, address: str):
        super().__init__(SignerType.LEDGER)
        self.wallet = wallet
        self.derivation_path = path
        self._address = address
        self._closed = False

    @property
    def address(self) -> str:
        return self._address

    def sign(self, digest: TypedDataDigest) -> Signature:
        """Forward the digest to the device unmodified."""
        if self._closed:
            raise SigningFailed("device session already closed")
        if not digest.is_eip712:
            raise SigningFailed(
                f"device only signs EIP-712 typed data (prefix 0x1901), "
                f"got prefix 0x{digest.scheme_prefix.hex()}"
            )

        logger.info(f"Awaiting confirmation on {self.wallet.label} for {self._address}")
        signature = self.wallet.sign_typed_data(
            self.derivation_path,
            MIMETYPE_TYPED_DATA,
            digest.domain_hash,
            digest.message_hash,
        )
        return Signature.from_vrs(signature.v, signature.r, signature.s)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.wallet.close()
        logger.debug(f"Closed session on {self.wallet.label}")
