"""Ledger hardware wallet transport.

Discovery uses hidapi directly so that the number of connected devices can
be checked before anything is opened. Sessions, account derivation and
EIP-712 signing go through ledgereth.

Setup:
1. Connect exactly one Ledger over USB
2. Unlock it with the PIN
3. Open the Ethereum app

Reference:
- https://github.com/LedgerHQ/app-ethereum/blob/develop/doc/ethapp.adoc
"""

import logging
from typing import Any, Optional

from typedsign.errors import AccountDerivationFailed, DeviceLocked, SigningFailed
from typedsign.hdwallet.path import HARDENED_OFFSET, DerivationPath, is_hardened
from typedsign.signing.base import Signature
from typedsign.signing.device import MIMETYPE_TYPED_DATA, DeviceHub, HardwareWallet

logger = logging.getLogger(__name__)

LEDGER_VENDOR_ID = 0x2C97
LEDGER_USAGE_PAGE = 0xFFA0

# Account shapes the Ethereum app accepts through ledgereth
SUPPORTED_PATHS = ("44'/60'/N'/N/N", "44'/60'/N'/N")


def _is_ledger_interface(info: dict) -> bool:
    """Match the HID interface the Ethereum app talks on."""
    if info.get("vendor_id") != LEDGER_VENDOR_ID:
        return False
    return info.get("interface_number") == 0 or info.get("usage_page") == LEDGER_USAGE_PAGE


def is_supported_path(path: DerivationPath) -> bool:
    """Check that `path` has one of the SUPPORTED_PATHS shapes."""
    indexes = path.indexes
    if len(indexes) not in (4, 5):
        return False
    if indexes[0] != HARDENED_OFFSET + 44 or indexes[1] != HARDENED_OFFSET + 60:
        return False
    if not is_hardened(indexes[2]):
        return False
    return not any(is_hardened(index) for index in indexes[3:])


class LedgerWallet(HardwareWallet):
    """A single connected Ledger device."""

    def __init__(self, info: dict):
        self.info = info
        self._dongle: Optional[Any] = None

    @property
    def label(self) -> str:
        product = self.info.get("product_string") or "Ledger"
        path = self.info.get("path", b"")
        if isinstance(path, bytes):
            path = path.decode(errors="replace")
        return f"{product} ({path})"

    def open(self) -> None:
        from ledgereth.comms import init_dongle
        from ledgereth.exceptions import LedgerError

        try:
            self._dongle = init_dongle()
        except (LedgerError, OSError, NotImplementedError) as e:
            raise DeviceLocked(f"error opening ledger: {e}") from e
        logger.info(f"Opened session on {self.label}")

    def derive(self, path: DerivationPath) -> str:
        from ledgereth.accounts import get_account_by_path
        from ledgereth.exceptions import LedgerError

        if not is_supported_path(path):
            raise AccountDerivationFailed(
                f"ledger cannot derive {path}: supported paths are "
                f"{', '.join(SUPPORTED_PATHS)}"
            )

        try:
            account = get_account_by_path(path.relative(), dongle=self._dongle)
        except (LedgerError, OSError, ValueError) as e:
            raise AccountDerivationFailed(
                f"error deriving ledger account at {path} (have you unlocked?): {e}"
            ) from e
        return account.address

    def sign_typed_data(
        self,
        path: DerivationPath,
        mimetype: str,
        domain_hash: bytes,
        message_hash: bytes,
    ) -> Signature:
        from ledgereth.exceptions import LedgerError
        from ledgereth.messages import sign_typed_data_draft

        if mimetype != MIMETYPE_TYPED_DATA:
            raise SigningFailed(f"unsupported payload type {mimetype}")

        try:
            signed = sign_typed_data_draft(
                domain_hash=domain_hash,
                message_hash=message_hash,
                sender_path=path.relative(),
                dongle=self._dongle,
            )
        except (LedgerError, OSError, ValueError) as e:
            raise SigningFailed(f"ledger signing failed: {e}") from e

        return Signature.from_vrs(signed.v, signed.r, signed.s)

    def close(self) -> None:
        if self._dongle is None:
            return
        dongle, self._dongle = self._dongle, None
        dongle.close()


class LedgerHub(DeviceHub):
    """Enumerates Ledger devices over USB HID."""

    def wallets(self) -> list[HardwareWallet]:
        import hid

        found: dict[Any, dict] = {}
        for info in hid.enumerate(LEDGER_VENDOR_ID, 0):
            if not _is_ledger_interface(info):
                continue
            # Ledgers share one serial number, the path is what tells them apart
            found.setdefault(info.get("path"), info)

        logger.debug(f"Found {len(found)} ledger device(s)")
        return [LedgerWallet(info) for info in found.values()]
