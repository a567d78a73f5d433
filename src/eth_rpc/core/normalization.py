"""
Hex normalization utilities.

JSON-RPC responses carry 0x-prefixed hex strings, Web3.py hands out HexBytes,
and the ABI decoder works on bare hex. The helpers here convert between
those forms so the codec and the client never handle format variations
themselves.

Usage:
    from eth_rpc.core.normalization import normalize_hex_string, strip_hex_prefix

    selector = normalize_hex_string(Web3.keccak(text="id()")[:4])  # '0xaf640d0f'
    stream = strip_hex_prefix(rpc_result)
"""

import logging
import re

from hexbytes import HexBytes

logger = logging.getLogger(__name__)

_HEX_RE = re.compile(r"[0-9a-f]+")


def strip_hex_prefix(hex_string: str) -> str:
    """Remove a leading 0x (or 0X) if present."""
    if hex_string[:2] in ("0x", "0X"):
        return hex_string[2:]
    return hex_string


def is_hex(value: str) -> bool:
    """
    Check whether a string is hexadecimal.

    An optional 0x prefix is ignored; the remainder must be a non-empty run
    of hex digits in either case.

    Examples:
        >>> is_hex("0x1a")
        True
        >>> is_hex("latest")
        False
    """
    if not isinstance(value, str):
        return False
    return bool(_HEX_RE.fullmatch(strip_hex_prefix(value).lower()))


def parse_hex_int(value: str | int) -> int:
    """
    Parse a 0x-prefixed hex quantity from an RPC response.

    Integers pass through unchanged.

    Raises:
        ValueError: If the value is not a hex quantity
    """
    if isinstance(value, int):
        return value
    if not is_hex(value):
        raise ValueError(f"Expected hex quantity, got: {value!r}")
    return int(strip_hex_prefix(value), 16)


def normalize_hex_field(hex_string: str | HexBytes | bytes | None) -> bytes:
    """
    Normalize a hex field to bytes, handling various input formats.

    Handles:
    - Strings with 0x prefix: "0x1234..."
    - Strings without 0x prefix: "1234..."
    - HexBytes objects (from Web3.py)
    - Raw bytes objects
    - Empty values: "0x", "", None

    Args:
        hex_string: Hex data in any supported format

    Returns:
        Raw bytes representation of the hex data

    Raises:
        ValueError: If the input cannot be parsed as hex data
    """
    if hex_string is None or hex_string == "" or hex_string == "0x":
        return b""

    # HexBytes is a bytes subclass
    if isinstance(hex_string, bytes):
        return bytes(hex_string)

    if isinstance(hex_string, str):
        hex_clean = strip_hex_prefix(hex_string)
        if not hex_clean:
            return b""

        try:
            return bytes.fromhex(hex_clean)
        except ValueError as e:
            raise ValueError(f"Invalid hex string: {hex_string}") from e

    raise ValueError(f"Unsupported hex field type: {type(hex_string)}")


def normalize_hex_string(
    hex_data: str | HexBytes | bytes | None, with_prefix: bool = True
) -> str:
    """
    Normalize hex data to a lowercase hex string.

    Args:
        hex_data: Hex data in any supported format
        with_prefix: If True, include '0x' prefix in output

    Examples:
        >>> normalize_hex_string("1234", with_prefix=True)
        '0x1234'
        >>> normalize_hex_string("0x1234", with_prefix=False)
        '1234'
        >>> normalize_hex_string(HexBytes("0x1234"))
        '0x1234'
    """
    hex_str = normalize_hex_field(hex_data).hex()
    return f"0x{hex_str}" if with_prefix else hex_str
