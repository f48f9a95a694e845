"""Typed-data signing backends.

Provides interchangeable signers with one signature encoding:
- PrivateKeySigner: raw private key in memory
- MnemonicSigner: key derived from a BIP39 mnemonic
- DeviceSigner: key held by a hardware wallet (Ledger)
"""

from typedsign.signing.base import (
    Signature,
    SignerBackend,
    SignerType,
)
from typedsign.signing.device import DeviceHub, DeviceSigner, HardwareWallet
from typedsign.signing.factory import create_signer
from typedsign.signing.local import MnemonicSigner, PrivateKeySigner

__all__ = [
    "Signature",
    "SignerBackend",
    "SignerType",
    "DeviceHub",
    "DeviceSigner",
    "HardwareWallet",
    "MnemonicSigner",
    "PrivateKeySigner",
    "create_signer",
]
