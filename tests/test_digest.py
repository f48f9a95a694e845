"""Tests for digest extraction."""

import pytest

from typedsign.digest import DEFAULT_PREFIX, DEFAULT_SUFFIX, TypedDataDigest, extract_digest
from typedsign.errors import MalformedDigest

from conftest import DIGEST_HEX, DOMAIN_HASH, MESSAGE_HASH


class TestExtractDigest:
    """Tests for locating the digest inside surrounding text."""

    def test_extracts_between_default_markers(self):
        """Test that noise around the markers is discarded."""
        text = f"noise {DEFAULT_PREFIX}{DIGEST_HEX}{DEFAULT_SUFFIX}noise"
        digest = extract_digest(text)

        assert digest.hex() == DIGEST_HEX
        assert digest.domain_hash == DOMAIN_HASH
        assert digest.message_hash == MESSAGE_HASH

    def test_extracts_from_multiline_script_output(self):
        """Test realistic script output with newlines around the digest."""
        text = (
            "Compiling 1 files...\n"
            "== Logs ==\n"
            f"  {DEFAULT_PREFIX}\n"
            f"  {DIGEST_HEX}\n"
            f"  {DEFAULT_SUFFIX}\n"
            "Script ran successfully.\n"
        ).encode()

        assert extract_digest(text).hex() == DIGEST_HEX

    def test_plain_hex_without_markers(self):
        """Test that bare hex input works when markers are absent."""
        assert extract_digest(f"  {DIGEST_HEX}\n").hex() == DIGEST_HEX

    def test_hex_without_0x_prefix(self):
        """Test that the 0x prefix is optional."""
        assert extract_digest(DIGEST_HEX[2:]).hex() == DIGEST_HEX

    def test_uppercase_hex(self):
        """Test uppercase hex and 0X prefix."""
        assert extract_digest("0X" + DIGEST_HEX[2:].upper()).hex() == DIGEST_HEX

    def test_odd_length_is_left_padded(self):
        """Test that an odd number of hex digits gets a leading zero."""
        # 131 hex digits: "0x901..." decodes as 0x0901...
        odd = "0x" + "9" + "01" + DOMAIN_HASH.hex() + MESSAGE_HASH.hex()
        digest = extract_digest(odd)

        assert digest.scheme_prefix == b"\x09\x01"

    def test_custom_markers(self):
        """Test non-default prefix and suffix markers."""
        text = f"<<<{DIGEST_HEX}>>> trailing"
        assert extract_digest(text, prefix="<<<", suffix=">>>").hex() == DIGEST_HEX

    def test_empty_markers_are_ignored(self):
        """Test that empty markers do not cut the input."""
        assert extract_digest(DIGEST_HEX, prefix="", suffix="").hex() == DIGEST_HEX

    def test_only_first_prefix_occurrence_is_used(self):
        """Test that the text after the first prefix is kept verbatim."""
        text = f"{DEFAULT_PREFIX}{DEFAULT_PREFIX}{DIGEST_HEX}{DEFAULT_SUFFIX}"

        with pytest.raises(MalformedDigest):
            extract_digest(text)

    def test_missing_suffix_keeps_rest_of_text(self):
        """Test that a missing suffix leaves the remainder intact."""
        text = f"log line {DEFAULT_PREFIX} {DIGEST_HEX}  \n"
        assert extract_digest(text).hex() == DIGEST_HEX

    @pytest.mark.parametrize("length", [0, 1, 32, 64, 65, 67, 132])
    def test_wrong_length_reports_actual_length(self, length):
        """Test that any length other than 66 bytes is rejected."""
        text = f"{DEFAULT_PREFIX}0x{'ab' * length}{DEFAULT_SUFFIX}"

        with pytest.raises(MalformedDigest) as exc_info:
            extract_digest(text)

        assert exc_info.value.length == length
        assert f"got {length} bytes" in str(exc_info.value)

    def test_non_hex_input(self):
        """Test that undecodable hex is rejected."""
        with pytest.raises(MalformedDigest) as exc_info:
            extract_digest(f"{DEFAULT_PREFIX}0x{'zz' * 66}{DEFAULT_SUFFIX}")

        assert exc_info.value.length is None

    def test_non_ascii_input(self):
        """Test that non-ASCII bytes between the markers are rejected."""
        with pytest.raises(MalformedDigest):
            extract_digest(DEFAULT_PREFIX.encode() + b"\xff\xfe" + DEFAULT_SUFFIX.encode())


class TestTypedDataDigest:
    """Tests for the digest value type."""

    def test_components_are_fixed_slices(self, digest):
        """Test domain and message hash offsets."""
        assert digest.scheme_prefix == b"\x19\x01"
        assert digest.domain_hash == digest.raw[2:34]
        assert digest.message_hash == digest.raw[34:66]
        assert digest.is_eip712

    def test_reassembles_from_parts(self, digest):
        """Test prefix + domain + message reconstructs the digest."""
        rebuilt = TypedDataDigest.from_parts(
            digest.scheme_prefix, digest.domain_hash, digest.message_hash
        )

        assert rebuilt == digest
        assert bytes(rebuilt) == digest.raw

    def test_rejects_wrong_length(self):
        """Test that the constructor enforces 66 bytes."""
        with pytest.raises(MalformedDigest) as exc_info:
            TypedDataDigest(b"\x19\x01" + b"\x00" * 63)

        assert exc_info.value.length == 65

    def test_non_eip712_prefix(self):
        """Test that other scheme prefixes are representable but flagged."""
        digest = TypedDataDigest(b"\x19\x00" + b"\x00" * 64)

        assert not digest.is_eip712
