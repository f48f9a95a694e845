"""Configuration using pydantic-settings.

Values come from TYPEDSIGN_* environment variables (or a .env file) and are
overridden by command-line flags. The resulting Settings object is frozen
and passed down explicitly; nothing reads configuration from global state.

Secrets (private key, mnemonic) can be supplied through the environment so
they do not show up in the process list.
"""

import argparse
from typing import Optional, Sequence

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from typedsign.digest import DEFAULT_PREFIX, DEFAULT_SUFFIX
from typedsign.hdwallet.path import DEFAULT_PATH_STRING, DerivationPath
from typedsign.signing.base import SignerType

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """Signing run configuration."""

    model_config = SettingsConfigDict(
        env_prefix="TYPEDSIGN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # ======================
    # Credential sources (exactly one)
    # ======================
    private_key: Optional[str] = Field(default=None, description="Private key to use for signing")
    mnemonic: Optional[str] = Field(default=None, description="Mnemonic to use for signing")
    ledger: bool = Field(default=False, description="Use ledger device for signing")

    hd_path: str = Field(
        default=DEFAULT_PATH_STRING,
        description="Hierarchical deterministic derivation path for mnemonic or ledger",
    )

    # ======================
    # Input
    # ======================
    prefix: str = Field(default=DEFAULT_PREFIX, description="String that prefixes the data to be signed")
    suffix: str = Field(default=DEFAULT_SUFFIX, description="String that suffixes the data to be signed")
    workdir: str = Field(default=".", description="Directory in which to run the subprocess")
    command: list[str] = Field(
        default_factory=list,
        description="Command whose output contains the data to sign (stdin if empty)",
    )

    # ======================
    # Logging
    # ======================
    log_level: str = Field(default="WARNING", description="Logging level")

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in VALID_LOG_LEVELS:
            raise ValueError(f"log_level must be one of {VALID_LOG_LEVELS}, got {value}")
        return level

    @property
    def credential_sources(self) -> list[SignerType]:
        """Credential sources that are set, in flag order."""
        sources = []
        if self.private_key:
            sources.append(SignerType.PRIVATE_KEY)
        if self.ledger:
            sources.append(SignerType.LEDGER)
        if self.mnemonic:
            sources.append(SignerType.MNEMONIC)
        return sources

    @property
    def derivation_path(self) -> DerivationPath:
        """Parsed hd_path.

        Raises:
            InvalidDerivationPath: If hd_path does not parse
        """
        return DerivationPath.parse(self.hd_path)

    def get_safe_dict(self) -> dict:
        """Return settings dict with secrets redacted."""
        return {
            "private_key": "***" if self.private_key else "(not set)",
            "mnemonic": "***" if self.mnemonic else "(not set)",
            "ledger": self.ledger,
            "hd_path": self.hd_path,
            "prefix": self.prefix,
            "suffix": self.suffix,
            "workdir": self.workdir,
            "command": self.command,
            "log_level": self.log_level,
        }


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="typedsign",
        description=(
            "Sign an EIP-712 digest found in stdin, or in the output of COMMAND, "
            "with a private key, a mnemonic or a Ledger"
        ),
    )
    parser.add_argument("--private-key", default=None, help="Private key to use for signing")
    parser.add_argument(
        "--ledger",
        action="store_true",
        default=None,
        help="Use ledger device for signing",
    )
    parser.add_argument("--mnemonic", default=None, help="Mnemonic to use for signing")
    parser.add_argument(
        "--hd-paths",
        dest="hd_path",
        default=None,
        help=f"Hierarchical deterministic derivation path for mnemonic or ledger (default: {DEFAULT_PATH_STRING})",
    )
    parser.add_argument(
        "--prefix",
        default=None,
        help=f"String that prefixes the data to be signed (default: {DEFAULT_PREFIX})",
    )
    parser.add_argument(
        "--suffix",
        default=None,
        help=f"String that suffixes the data to be signed (default: {DEFAULT_SUFFIX})",
    )
    parser.add_argument(
        "--workdir",
        default=None,
        help="Directory in which to run the subprocess (default: .)",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=VALID_LOG_LEVELS,
        default=None,
        help="Logging level (default: WARNING)",
    )
    parser.add_argument(
        "command",
        nargs=argparse.REMAINDER,
        help="Command to run; its output is searched for the data to sign",
    )
    return parser


def get_settings(argv: Optional[Sequence[str]] = None) -> Settings:
    """Parse command line arguments on top of the environment.

    Raises:
        pydantic.ValidationError: If a value fails validation
    """
    args = build_parser().parse_args(argv)

    overrides = {
        key: value
        for key, value in vars(args).items()
        if value is not None and key != "command"
    }
    command = list(args.command or [])
    if command and command[0] == "--":
        command = command[1:]
    if command:
        overrides["command"] = command

    return Settings(**overrides)
