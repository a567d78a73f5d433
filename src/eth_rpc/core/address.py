"""
Address helpers.

Pure predicates over 0x-prefixed 20-byte hex addresses, plus derivation of
an address from a private key.
"""

from eth_account import Account

from .normalization import is_hex, normalize_hex_field, strip_hex_prefix

# 2 chars for the 0x prefix + 40 chars for 20 bytes
ADDRESS_LENGTH = 42


def is_zero_address(address: str) -> bool:
    """
    Check whether an address is the zero address.

    Returns False for anything that does not parse as hex.
    """
    try:
        return int(strip_hex_prefix(address), 16) == 0
    except (TypeError, ValueError):
        return False


def is_valid_address(address: str) -> bool:
    """
    Validate an address.

    True iff the value is a 0x-prefixed string of 40 hex digits that is not
    the zero address. Checksum casing is not enforced.

    Examples:
        >>> is_valid_address("0x0ccaf8cb1c92aef64dd36ce1f3882d195180ad5c")
        True
        >>> is_valid_address("0x0ccaf8cb1c92aef64dd36ce1f3882d195180ad5")
        False
    """
    return (
        isinstance(address, str)
        and len(address) == ADDRESS_LENGTH
        and address.startswith("0x")
        and is_hex(address)
        and not is_zero_address(address)
    )


def private_to_address(private_key: str | bytes) -> str:
    """
    Derive the lowercase 0x-prefixed address of a private key.

    Args:
        private_key: 32-byte key as raw bytes or hex (with or without 0x)

    Raises:
        ValueError: If the key is not valid hex
    """
    key = normalize_hex_field(private_key)
    return Account.from_key(key).address.lower()
