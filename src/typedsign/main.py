"""Main entry point - extract a typed-data digest and sign it.

Usage:
    forge script Deploy.s.sol | typedsign --ledger
    typedsign --mnemonic "..." --hd-paths "m/44'/60'/0'/0/1" -- forge script Deploy.s.sol
    TYPEDSIGN_PRIVATE_KEY=... typedsign < digest.txt

The run is strictly sequential: input -> digest -> signer -> signature ->
report. Any failure aborts the whole run with exit status 1.
"""

import logging
import sys
from dataclasses import dataclass
from typing import Optional, Sequence, TextIO, Union

from pydantic import ValidationError

from typedsign.config import Settings, get_settings
from typedsign.digest import TypedDataDigest, extract_digest
from typedsign.errors import TypedSignError
from typedsign.runner import read_stdin, run_command
from typedsign.signing.base import Signature, SignerType
from typedsign.signing.device import DeviceHub
from typedsign.signing.factory import create_signer, get_signer_type

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SigningReport:
    """Everything printed after a successful signature."""
    digest: TypedDataDigest
    address: str
    signature: Signature

    def lines(self) -> list[str]:
        return [
            "",
            f"Data: {self.digest.hex()}",
            f"Signer: {self.address}",
            f"Signature: {self.signature.hex()}",
        ]


def setup_logging(log_level: str) -> None:
    """Configure logging on stderr so stdout carries only the report."""
    logging.basicConfig(
        level=getattr(logging, log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def sign_input(
    settings: Settings,
    data: Union[bytes, str],
    hub: Optional[DeviceHub] = None,
    out: Optional[TextIO] = None,
) -> SigningReport:
    """Extract the digest from `data` and sign it with the configured signer.

    Args:
        settings: Run configuration
        data: Text containing the framed digest
        hub: Device discovery override for ledger mode
        out: Stream for the operator-facing report (stdout by default)

    Returns:
        SigningReport

    Raises:
        TypedSignError: On any failure; nothing is retried
    """
    if out is None:
        out = sys.stdout

    out.write("\n")
    digest = extract_digest(data, settings.prefix, settings.suffix)

    with create_signer(settings, hub=hub) as signer:
        out.write(f"Domain hash: 0x{digest.domain_hash.hex()}\n")
        out.write(f"Message hash: 0x{digest.message_hash.hex()}\n")

        if signer.signer_type == SignerType.LEDGER:
            out.write("Data sent to ledger, awaiting signature...")
            out.flush()
            signature = signer.sign(digest)
            out.write("done\n")
        else:
            signature = signer.sign(digest)

        report = SigningReport(digest=digest, address=signer.address, signature=signature)

    for line in report.lines():
        out.write(f"{line}\n")
    return report


def run(settings: Settings, hub: Optional[DeviceHub] = None) -> SigningReport:
    """Check the credential setup, obtain the input text, then sign it.

    Credentials and the derivation path are validated before the command is
    spawned or stdin is read.
    """
    signer_type = get_signer_type(settings)
    path = settings.derivation_path
    logger.info(f"Signing with {signer_type.value} at {path}")

    if settings.command:
        data = run_command(settings.command, settings.workdir)
    else:
        data = read_stdin()
    return sign_input(settings, data, hub=hub)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entry point."""
    try:
        settings = get_settings(argv)
    except ValidationError as e:
        print(f"Error: Configuration validation error: {e}", file=sys.stderr)
        return 1

    setup_logging(settings.log_level)
    logger.debug(f"Settings: {settings.get_safe_dict()}")

    try:
        run(settings)
    except TypedSignError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nAborted", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
