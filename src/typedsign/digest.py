"""EIP-712 digest extraction.

The digest is the 66-byte pre-image of the EIP-712 signing hash:

    0x19 0x01 || domainSeparator (32 bytes) || hashStruct(message) (32 bytes)

It usually arrives embedded in noisy text (for example the output of a
forge script), framed by a prefix and a suffix marker:

    ...noise vvvvvvvv0x1901<domain><message>^^^^^^^^ noise...

Markers are matched literally on their first occurrence. If the hex payload
itself ever contained a marker string the split would happen in the wrong
place; the markers are chosen so that this cannot happen for hex text.
"""

import binascii
import logging
from dataclasses import dataclass
from typing import Union

from typedsign.errors import MalformedDigest

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "vvvvvvvv"
DEFAULT_SUFFIX = "^^^^^^^^"

DIGEST_LENGTH = 66
EIP712_PREFIX = b"\x19\x01"


@dataclass(frozen=True)
class TypedDataDigest:
    """A validated 66-byte typed-data digest.

    Attributes:
        raw: The full digest bytes (prefix + domain hash + message hash)
    """

    raw: bytes

    def __post_init__(self):
        if len(self.raw) != DIGEST_LENGTH:
            raise MalformedDigest(
                f"Expected EIP-712 hex string with {DIGEST_LENGTH} bytes, "
                f"got {len(self.raw)} bytes",
                length=len(self.raw),
            )

    @classmethod
    def from_parts(cls, scheme_prefix: bytes, domain_hash: bytes, message_hash: bytes) -> "TypedDataDigest":
        """Assemble a digest from its three components."""
        return cls(bytes(scheme_prefix) + bytes(domain_hash) + bytes(message_hash))

    @property
    def scheme_prefix(self) -> bytes:
        """Two-byte scheme prefix (0x1901 for EIP-712)."""
        return self.raw[0:2]

    @property
    def domain_hash(self) -> bytes:
        return self.raw[2:34]

    @property
    def message_hash(self) -> bytes:
        return self.raw[34:66]

    @property
    def is_eip712(self) -> bool:
        return self.scheme_prefix == EIP712_PREFIX

    def hex(self) -> str:
        """Full digest as 0x-prefixed hex."""
        return "0x" + self.raw.hex()

    def __bytes__(self) -> bytes:
        return self.raw


def _decode_hex(text: str) -> bytes:
    """Decode hex with an optional 0x prefix, tolerating an odd length."""
    if text[:2] in ("0x", "0X"):
        text = text[2:]
    if len(text) % 2 == 1:
        text = "0" + text
    try:
        return binascii.unhexlify(text)
    except (binascii.Error, ValueError) as e:
        raise MalformedDigest(f"Input is not a hex string: {e}") from e


def extract_digest(
    data: Union[bytes, str],
    prefix: str = DEFAULT_PREFIX,
    suffix: str = DEFAULT_SUFFIX,
) -> TypedDataDigest:
    """Locate, decode and validate the digest inside arbitrary text.

    Args:
        data: Raw input (stdin contents or captured command output)
        prefix: Marker preceding the digest; ignored if empty or absent
        suffix: Marker following the digest; ignored if empty or absent

    Returns:
        TypedDataDigest

    Raises:
        MalformedDigest: If the framed text is not hex or not 66 bytes long
    """
    if isinstance(data, str):
        data = data.encode("utf-8")

    if prefix:
        marker = prefix.encode("utf-8")
        index = data.find(marker)
        if index >= 0:
            data = data[index + len(marker):]

    if suffix:
        marker = suffix.encode("utf-8")
        index = data.find(marker)
        if index >= 0:
            data = data[:index]

    try:
        text = data.decode("ascii").strip()
    except UnicodeDecodeError as e:
        raise MalformedDigest(f"Input is not a hex string: {e}") from e

    raw = _decode_hex(text)
    if len(raw) != DIGEST_LENGTH:
        raise MalformedDigest(
            f"Expected EIP-712 hex string with {DIGEST_LENGTH} bytes, "
            f"got {len(raw)} bytes, value: {text}",
            length=len(raw),
        )

    logger.debug("Extracted %d-byte digest", len(raw))
    return TypedDataDigest(raw)
