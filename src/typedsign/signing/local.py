"""Local signing backends.

Both backends keep a secp256k1 private key in memory:
- PrivateKeySigner: key supplied directly by the operator
- MnemonicSigner: key derived once, at construction, from a BIP39 phrase

The digest is hashed with keccak256 and signed as-is (no personal-message
prefix), which is exactly what EIP-712 verification expects.
"""

import logging
from typing import Union

from eth_keys import keys
from eth_utils import ValidationError, keccak

from typedsign.digest import TypedDataDigest
from typedsign.errors import InvalidPrivateKey, KeyConversionFailed, SigningFailed
from typedsign.hdwallet.derivation import derive_account, scalar_to_private_key
from typedsign.hdwallet.path import DerivationPath
from typedsign.signing.base import Signature, SignerBackend, SignerType

logger = logging.getLogger(__name__)


def parse_private_key(private_key: Union[str, bytes]) -> keys.PrivateKey:
    """Parse a hex (optionally 0x-prefixed) or raw 32-byte private key.

    Raises:
        InvalidPrivateKey: If the value is not a valid secp256k1 scalar
    """
    if isinstance(private_key, str):
        text = private_key.strip()
        if text[:2] in ("0x", "0X"):
            text = text[2:]
        try:
            raw = bytes.fromhex(text)
        except ValueError as e:
            raise InvalidPrivateKey(f"error parsing private key: {e}") from e
    else:
        raw = bytes(private_key)

    try:
        return scalar_to_private_key(raw)
    except KeyConversionFailed as e:
        raise InvalidPrivateKey(f"error parsing private key: {e}") from e


class PrivateKeySigner(SignerBackend):
    """Signs with an in-memory secp256k1 private key."""

    def __init__(self, private_key: Union[str, bytes, keys.PrivateKey], signer_type: SignerType = SignerType.PRIVATE_KEY):
        super().__init__(signer_type)
        if isinstance(private_key, keys.PrivateKey):
            self._key = private_key
        else:
            self._key = parse_private_key(private_key)

    @property
    def address(self) -> str:
        return self._key.public_key.to_checksum_address()

    def sign(self, digest: TypedDataDigest) -> Signature:
        """Sign keccak256(digest) and return r || s || v with v in {27, 28}."""
        try:
            signature = self._key.sign_msg_hash(keccak(digest.raw))
        except (ValidationError, ValueError) as e:
            raise SigningFailed(f"error signing data: {e}") from e

        return Signature.from_bytes(signature.to_bytes())


class MnemonicSigner(PrivateKeySigner):
    """Signs with a key derived from a BIP39 mnemonic.

    Derivation happens once in the constructor, so an invalid phrase or path
    fails before anything is signed.
    """

    def __init__(self, mnemonic: str, path: DerivationPath):
        account = derive_account(mnemonic, path)
        super().__init__(account, signer_type=SignerType.MNEMONIC)
        self.derivation_path = path
        logger.info(f"Derived signing key at {path}")
