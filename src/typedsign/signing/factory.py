"""Signer factory.

Creates the signing backend for the single configured credential source.

SECURITY NOTE:
- Exactly one of private key, mnemonic and ledger must be configured
- Ambiguity is reported before any derivation or device discovery happens
- There is never a fallback from one credential source to another
"""

import logging
from typing import TYPE_CHECKING, Optional

from typedsign.errors import (
    AmbiguousCredential,
    AmbiguousDevice,
    NoDeviceFound,
)
from typedsign.hdwallet.path import DerivationPath
from typedsign.signing.base import SignerBackend, SignerType
from typedsign.signing.device import DeviceHub, DeviceSigner

if TYPE_CHECKING:
    from typedsign.config import Settings

logger = logging.getLogger(__name__)


def get_signer_type(settings: "Settings") -> SignerType:
    """Determine which signer to use.

    Raises:
        AmbiguousCredential: If zero or several credential sources are set
    """
    sources = settings.credential_sources
    if len(sources) != 1:
        raise AmbiguousCredential([source.value for source in sources])
    return sources[0]


def open_device_signer(hub: DeviceHub, path: DerivationPath) -> DeviceSigner:
    """Open the single connected device and derive the account at `path`.

    Raises:
        NoDeviceFound: If no device is connected
        AmbiguousDevice: If more than one device is connected
        DeviceLocked: If the device cannot be opened
        AccountDerivationFailed: If the device rejects the path
    """
    wallets = hub.wallets()
    if not wallets:
        raise NoDeviceFound()
    if len(wallets) > 1:
        raise AmbiguousDevice(len(wallets))

    wallet = wallets[0]
    wallet.open()
    try:
        address = wallet.derive(path)
    except Exception:
        wallet.close()
        raise

    logger.info(f"Using {wallet.label} account {address} at {path}")
    return DeviceSigner(wallet, path, address)


def create_signer(settings: "Settings", hub: Optional[DeviceHub] = None) -> SignerBackend:
    """Create the signing backend described by `settings`.

    Args:
        settings: Run configuration
        hub: Device discovery for ledger mode (defaults to LedgerHub)

    Returns:
        SignerBackend instance

    Raises:
        AmbiguousCredential: If zero or several credential sources are set
        InvalidDerivationPath: If the configured path does not parse
        TypedSignError: Any backend-specific construction failure
    """
    signer_type = get_signer_type(settings)
    path = settings.derivation_path
    logger.info(f"Initializing {signer_type.value} signer")

    if signer_type == SignerType.PRIVATE_KEY:
        from typedsign.signing.local import PrivateKeySigner
        return PrivateKeySigner(settings.private_key)

    if signer_type == SignerType.MNEMONIC:
        from typedsign.signing.local import MnemonicSigner
        return MnemonicSigner(settings.mnemonic, path)

    if hub is None:
        from typedsign.signing.ledger import LedgerHub
        hub = LedgerHub()
    return open_device_signer(hub, path)
