"""Exception hierarchy for typedsign.

Every failure is fatal for the run: nothing here is retried and there is no
fallback between credential sources. The CLI catches TypedSignError, prints
the message on stderr and exits non-zero.
"""

from typing import Optional


class TypedSignError(Exception):
    """Base class for all typedsign failures."""
    pass


class AmbiguousCredential(TypedSignError):
    """Raised when zero or more than one credential source is configured."""

    def __init__(self, sources: list[str]):
        self.sources = sources
        if sources:
            found = ", ".join(sources)
        else:
            found = "none"
        super().__init__(
            "One (and only one) of --private-key, --ledger, --mnemonic must be set "
            f"(got: {found})"
        )


class MalformedDigest(TypedSignError):
    """Raised when the input does not decode to a 66-byte EIP-712 digest."""

    def __init__(self, message: str, length: Optional[int] = None):
        self.length = length
        super().__init__(message)


class InvalidDerivationPath(TypedSignError):
    """Raised when a derivation path string cannot be parsed."""
    pass


class InvalidMnemonic(TypedSignError):
    """Raised when a mnemonic fails wordlist or checksum validation."""
    pass


class DerivationFailed(TypedSignError):
    """Raised when a BIP32 derivation step produces an invalid key."""
    pass


class KeyConversionFailed(TypedSignError):
    """Raised when derived key bytes are not a valid secp256k1 scalar."""
    pass


class InvalidPrivateKey(TypedSignError):
    """Raised when a supplied raw private key cannot be parsed."""
    pass


class SigningFailed(TypedSignError):
    """Raised when the signing primitive or device rejects the request."""
    pass


class DeviceError(TypedSignError):
    """Base class for hardware wallet discovery and session failures."""
    pass


class NoDeviceFound(DeviceError):
    """Raised when no hardware wallet is connected."""

    def __init__(self):
        super().__init__("no ledgers found, please connect your ledger")


class AmbiguousDevice(DeviceError):
    """Raised when more than one hardware wallet is connected."""

    def __init__(self, count: int):
        self.count = count
        super().__init__(
            f"multiple ledgers found ({count}), please use one ledger at a time"
        )


class DeviceLocked(DeviceError):
    """Raised when the device session cannot be opened."""
    pass


class AccountDerivationFailed(DeviceError):
    """Raised when the device refuses to derive the requested account."""
    pass


class InputError(TypedSignError):
    """Raised when the input text cannot be obtained."""

    def __init__(self, message: str, returncode: Optional[int] = None):
        self.returncode = returncode
        super().__init__(message)
