"""
ABI type classification.

Maps a Solidity type string to the decoding strategy used by the decoder.
Categories are tried in a fixed order: scalars first, then single-level
arrays of scalars. Anything else is rejected.

Usage:
    from eth_rpc.abi.types import classify_type

    abi_type = classify_type("bytes14")
    abi_type.category  # AbiCategory.FIXED_BYTES
    abi_type.size      # 14
"""

import re
from dataclasses import dataclass
from enum import Enum

from .exceptions import UnsupportedCombination, UnsupportedType

WORD_HEX_LENGTH = 64  # 32 bytes


class AbiCategory(Enum):
    """Decoding strategies, listed in classification precedence order."""

    FIXED_BYTES = "bytesN"
    BYTES = "bytes"
    STRING = "string"
    ADDRESS = "address"
    BOOL = "bool"
    UINT = "uintN"
    INT = "intN"
    BOOL_ARRAY = "bool[]"
    FIXED_BYTES_ARRAY = "bytesN[]"
    STRING_ARRAY = "string[]"
    ADDRESS_ARRAY = "address[]"
    UINT_ARRAY = "uintN[]"
    INT_ARRAY = "intN[]"


DYNAMIC_CATEGORIES = frozenset(
    {
        AbiCategory.BYTES,
        AbiCategory.STRING,
        AbiCategory.BOOL_ARRAY,
        AbiCategory.FIXED_BYTES_ARRAY,
        AbiCategory.STRING_ARRAY,
        AbiCategory.ADDRESS_ARRAY,
        AbiCategory.UINT_ARRAY,
        AbiCategory.INT_ARRAY,
    }
)

ARRAY_ELEMENT_CATEGORY = {
    AbiCategory.BOOL_ARRAY: AbiCategory.BOOL,
    AbiCategory.FIXED_BYTES_ARRAY: AbiCategory.FIXED_BYTES,
    AbiCategory.STRING_ARRAY: AbiCategory.STRING,
    AbiCategory.ADDRESS_ARRAY: AbiCategory.ADDRESS,
    AbiCategory.UINT_ARRAY: AbiCategory.UINT,
    AbiCategory.INT_ARRAY: AbiCategory.INT,
}

# Size kinds: "bytes" for bytesN (1..32), "bits" for (u)intN (8..256, step 8)
_RULES = [
    (re.compile(r"^bytes([0-9]+)$"), AbiCategory.FIXED_BYTES, "bytes"),
    (re.compile(r"^bytes$"), AbiCategory.BYTES, None),
    (re.compile(r"^string$"), AbiCategory.STRING, None),
    (re.compile(r"^address$"), AbiCategory.ADDRESS, None),
    (re.compile(r"^bool$"), AbiCategory.BOOL, None),
    (re.compile(r"^uint([0-9]*)$"), AbiCategory.UINT, "bits"),
    (re.compile(r"^int([0-9]*)$"), AbiCategory.INT, "bits"),
    (re.compile(r"^bool\[\]$"), AbiCategory.BOOL_ARRAY, None),
    (re.compile(r"^bytes([0-9]+)\[\]$"), AbiCategory.FIXED_BYTES_ARRAY, "bytes"),
    (re.compile(r"^string\[\]$"), AbiCategory.STRING_ARRAY, None),
    (re.compile(r"^address\[\]$"), AbiCategory.ADDRESS_ARRAY, None),
    (re.compile(r"^uint([0-9]*)\[\]$"), AbiCategory.UINT_ARRAY, "bits"),
    (re.compile(r"^int([0-9]*)\[\]$"), AbiCategory.INT_ARRAY, "bits"),
]

_ARRAY_SUFFIX_RE = re.compile(r"\[[0-9]*\]$")


@dataclass(frozen=True)
class AbiType:
    """
    Classified ABI type.

    Attributes:
        name: Type string as given (whitespace stripped)
        category: Decoding strategy
        size: Byte length for bytesN / bytesN[], bit width for (u)intN / (u)intN[],
            None for everything else
    """

    name: str
    category: AbiCategory
    size: int | None = None

    @property
    def is_dynamic(self) -> bool:
        return self.category in DYNAMIC_CATEGORIES

    @property
    def is_array(self) -> bool:
        return self.category in ARRAY_ELEMENT_CATEGORY


def _parse_size(name: str, digits: str, kind: str) -> int:
    if kind == "bytes":
        size = int(digits)
        if not 1 <= size <= 32:
            raise UnsupportedType(name)
        return size

    # Bare "uint" / "int" are aliases for the 256-bit types
    if not digits:
        return 256
    width = int(digits)
    if width % 8 != 0 or not 8 <= width <= 256:
        raise UnsupportedType(name)
    return width


def classify_type(abi_type: str) -> AbiType:
    """
    Classify an ABI type string.

    Args:
        abi_type: Solidity type, e.g. "uint256", "bytes32", "string[]"

    Returns:
        AbiType with the first matching category

    Raises:
        UnsupportedType: If the string is not a recognized scalar or
            single-level array of a scalar
        UnsupportedCombination: If the string is an array of dynamic elements
            (e.g. "bytes[]"), a nested or fixed-length array, or a tuple
    """
    if not isinstance(abi_type, str):
        raise UnsupportedType(repr(abi_type))

    name = abi_type.strip()

    for pattern, category, size_kind in _RULES:
        match = pattern.match(name)
        if match is None:
            continue
        size = _parse_size(name, match.group(1), size_kind) if size_kind else None
        return AbiType(name, category, size)

    _reject_combination(name)
    raise UnsupportedType(name)


def _reject_combination(name: str) -> None:
    """Raise UnsupportedCombination for aggregates the decoder cannot express."""
    if name.startswith("(") or name.startswith("tuple"):
        raise UnsupportedCombination(name, "tuples are not supported")

    if not _ARRAY_SUFFIX_RE.search(name):
        return

    element = _ARRAY_SUFFIX_RE.sub("", name)
    if _ARRAY_SUFFIX_RE.search(element):
        raise UnsupportedCombination(name, "nested arrays are not supported")
    if element == "bytes":
        raise UnsupportedCombination(name, "arrays of dynamic bytes are not supported")
    if not name.endswith("[]"):
        raise UnsupportedCombination(name, "fixed-length arrays are not supported")


def is_dynamic(abi_type: str) -> bool:
    """Return True if the type is encoded through a head offset and a tail."""
    return classify_type(abi_type).is_dynamic
