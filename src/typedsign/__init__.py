"""typedsign - sign EIP-712 digests with a private key, a mnemonic or a Ledger."""

__version__ = "0.1.0"
