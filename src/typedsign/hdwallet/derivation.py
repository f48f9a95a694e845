"""Private key derivation from a BIP39 mnemonic.

mnemonic --BIP39--> seed --BIP32 master--> m --ChildKey--> ... --> leaf

The master key is built with null key net versions: the derived key is only
used for its raw secp256k1 scalar, so the serialized extended-key version
bytes carry no network meaning.
"""

import logging

from bip_utils import (
    Bip32KeyError,
    Bip32KeyNetVersions,
    Bip32Secp256k1,
    Bip39Languages,
    Bip39MnemonicValidator,
    Bip39SeedGenerator,
    MnemonicChecksumError,
)
from eth_keys import keys

from typedsign.errors import DerivationFailed, InvalidMnemonic, KeyConversionFailed
from typedsign.hdwallet.path import DerivationPath

logger = logging.getLogger(__name__)

# Order of the secp256k1 group
SECP256K1_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141

NULL_KEY_NET_VERSIONS = Bip32KeyNetVersions(b"\x00\x00\x00\x00", b"\x00\x00\x00\x00")


def mnemonic_to_seed(mnemonic: str) -> bytes:
    """Validate an English BIP39 mnemonic and compute its seed.

    The passphrase is always empty.

    Raises:
        InvalidMnemonic: If a word is not in the wordlist, the word count is
            wrong or the checksum does not match
    """
    mnemonic = " ".join(mnemonic.split())
    try:
        Bip39MnemonicValidator(Bip39Languages.ENGLISH).Validate(mnemonic)
    except MnemonicChecksumError as e:
        raise InvalidMnemonic(f"invalid mnemonic checksum: {e}") from e
    except ValueError as e:
        raise InvalidMnemonic(f"invalid mnemonic: {e}") from e

    return bytes(Bip39SeedGenerator(mnemonic, Bip39Languages.ENGLISH).Generate(""))


def scalar_to_private_key(raw: bytes) -> keys.PrivateKey:
    """Convert a raw 32-byte scalar into an eth_keys private key.

    Raises:
        KeyConversionFailed: If the scalar is not in [1, n)
    """
    if len(raw) != 32:
        raise KeyConversionFailed(f"expected 32-byte private key, got {len(raw)} bytes")

    value = int.from_bytes(raw, "big")
    if value == 0 or value >= SECP256K1_N:
        raise KeyConversionFailed("derived key is not a valid secp256k1 scalar")

    return keys.PrivateKey(raw)


def derive_private_key(mnemonic: str, path: DerivationPath) -> bytes:
    """Derive the raw private key at `path` from `mnemonic`.

    Args:
        mnemonic: BIP39 phrase (English wordlist)
        path: Non-empty derivation path

    Returns:
        32-byte private key

    Raises:
        InvalidMnemonic: If the phrase is invalid
        DerivationFailed: If the path is empty or a derivation step is invalid
        KeyConversionFailed: If the resulting scalar is unusable
    """
    if len(path) == 0:
        raise DerivationFailed("cannot derive a key along an empty path")

    seed = mnemonic_to_seed(mnemonic)

    try:
        ctx = Bip32Secp256k1.FromSeed(seed, NULL_KEY_NET_VERSIONS)
    except (Bip32KeyError, ValueError) as e:
        raise DerivationFailed(f"invalid master key: {e}") from e

    for depth, index in enumerate(path, start=1):
        try:
            ctx = ctx.ChildKey(index)
        except (Bip32KeyError, ValueError) as e:
            raise DerivationFailed(
                f"invalid child at depth {depth} (index {index}) of {path}: {e}"
            ) from e

    raw = ctx.PrivateKey().Raw().ToBytes()
    scalar_to_private_key(raw)

    logger.debug("Derived key at %s", path)
    return raw


def derive_account(mnemonic: str, path: DerivationPath) -> keys.PrivateKey:
    """Derive the eth_keys private key at `path` from `mnemonic`."""
    return keys.PrivateKey(derive_private_key(mnemonic, path))
