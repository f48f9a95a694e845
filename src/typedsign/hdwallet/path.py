"""BIP32 derivation paths.

Paths use the usual Ethereum notation:

- Absolute: m/44'/60'/0'/0/0
- Relative: 0/5, appended to the default root m/44'/60'/0'

A trailing apostrophe marks a hardened index. Components may be decimal or
0x-prefixed hex.
"""

from dataclasses import dataclass
from typing import Iterator

from typedsign.errors import InvalidDerivationPath

HARDENED_OFFSET = 0x80000000
MAX_INDEX = 0xFFFFFFFF


@dataclass(frozen=True)
class DerivationPath:
    """Ordered sequence of uint32 child indexes from the master key."""

    indexes: tuple[int, ...]

    def __post_init__(self):
        for index in self.indexes:
            if index < 0 or index > MAX_INDEX:
                raise InvalidDerivationPath(f"index {index} is not a uint32")

    @classmethod
    def parse(cls, path: str) -> "DerivationPath":
        """Parse a path string.

        Raises:
            InvalidDerivationPath: If the path is empty, ambiguous or has a
                component that is not a number in range
        """
        components = path.split("/")
        indexes: list[int] = []

        head = components[0].strip()
        if head == "":
            raise InvalidDerivationPath(
                "ambiguous path: use 'm/' prefix for absolute paths, "
                "or no leading '/' for relative ones"
            )
        if head == "m":
            components = components[1:]
        else:
            indexes.extend(DEFAULT_ROOT_PATH.indexes)

        if not components:
            raise InvalidDerivationPath("empty derivation path")

        for component in components:
            indexes.append(_parse_component(component))

        return cls(tuple(indexes))

    def relative(self) -> str:
        """Render without the leading m/ (e.g. 44'/60'/0'/0/0)."""
        parts = []
        for index in self.indexes:
            if is_hardened(index):
                parts.append(f"{index - HARDENED_OFFSET}'")
            else:
                parts.append(str(index))
        return "/".join(parts)

    def __str__(self) -> str:
        return "m/" + self.relative()

    def __iter__(self) -> Iterator[int]:
        return iter(self.indexes)

    def __len__(self) -> int:
        return len(self.indexes)


def is_hardened(index: int) -> bool:
    """Check whether an index uses hardened derivation."""
    return index >= HARDENED_OFFSET


def _parse_component(component: str) -> int:
    component = component.strip()
    offset = 0
    if component.endswith("'"):
        offset = HARDENED_OFFSET
        component = component[:-1].strip()

    try:
        value = int(component, 0)
    except ValueError:
        raise InvalidDerivationPath(f"invalid component: {component}")

    limit = MAX_INDEX - offset
    if value < 0 or value > limit:
        if offset:
            raise InvalidDerivationPath(
                f"component {value} out of allowed hardened range [0, {limit}]"
            )
        raise InvalidDerivationPath(
            f"component {value} out of allowed range [0, {limit}]"
        )

    return offset + value


DEFAULT_ROOT_PATH = DerivationPath((HARDENED_OFFSET + 44, HARDENED_OFFSET + 60, HARDENED_OFFSET))
DEFAULT_PATH_STRING = "m/44'/60'/0'/0/0"
DEFAULT_PATH = DerivationPath.parse(DEFAULT_PATH_STRING)
