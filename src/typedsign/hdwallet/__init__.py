"""HD key derivation from BIP39 mnemonics along BIP32 paths."""

from typedsign.hdwallet.derivation import derive_account, derive_private_key, mnemonic_to_seed
from typedsign.hdwallet.path import DEFAULT_PATH, DEFAULT_PATH_STRING, DerivationPath

__all__ = [
    "DerivationPath",
    "DEFAULT_PATH",
    "DEFAULT_PATH_STRING",
    "derive_account",
    "derive_private_key",
    "mnemonic_to_seed",
]
