"""
Build call data for contract calls and transactions.

Call data is the 4-byte method selector (first 4 bytes of the Keccak-256
hash of the canonical signature) followed by the ABI-encoded arguments.
Argument packing is delegated to eth_abi.

Usage:
    from eth_rpc.abi.encoder import encode_tx_data

    encode_tx_data("id()")  # '0xaf640d0f'
    encode_tx_data("balanceOf(address)", ["0x0ccaf8cb1c92aef64dd36ce1f3882d195180ad5c"])
"""

import logging
from typing import Any, Sequence

from eth_abi import encode as abi_encode
from web3 import Web3

from ..core.normalization import normalize_hex_field, normalize_hex_string

logger = logging.getLogger(__name__)


def method_selector(signature: str) -> str:
    """
    Compute the 4-byte selector of a canonical method signature.

    Args:
        signature: Canonical signature without spaces or parameter names,
            e.g. "transfer(address,uint256)"

    Returns:
        0x-prefixed selector, e.g. "0xa9059cbb"
    """
    return normalize_hex_string(Web3.keccak(text=signature)[:4])


def parse_signature_types(signature: str) -> list[str]:
    """
    Extract parameter types from a method signature.

    Splits on top-level commas only, so tuple parameters stay intact.

    Examples:
        >>> parse_signature_types("transfer(address,uint256)")
        ['address', 'uint256']
        >>> parse_signature_types("id()")
        []
    """
    if "(" not in signature or not signature.endswith(")"):
        raise ValueError(f"Invalid method signature: {signature!r}")

    params = signature[signature.index("(") + 1 : -1]
    if not params:
        return []

    types = []
    depth = 0
    current = ""
    for char in params:
        if char == "," and depth == 0:
            types.append(current.strip())
            current = ""
            continue
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        current += char
    types.append(current.strip())

    return types


def _coerce_value(abi_type: str, value: Any) -> Any:
    """Convert JSON-friendly values (hex/decimal strings) to what eth_abi expects."""
    if abi_type.endswith("]") and isinstance(value, (list, tuple)):
        element_type = abi_type[: abi_type.rindex("[")]
        return [_coerce_value(element_type, item) for item in value]

    if abi_type == "bool" and isinstance(value, str):
        return value.lower() in ("true", "1")

    if abi_type.startswith(("uint", "int")) and isinstance(value, str):
        return int(value, 16) if value.startswith("0x") else int(value)

    if abi_type.startswith("bytes") and isinstance(value, str):
        return normalize_hex_field(value)

    return value


def encode_tx_data(method_signature: str, values: Sequence[Any] = ()) -> str:
    """
    Build call data from a method signature and argument values.

    Argument count is not checked here; eth_abi rejects mismatches.

    Args:
        method_signature: Canonical method signature, e.g. "mint(uint256)"
        values: Argument values in parameter order. Integers may be given as
            decimal or 0x-hex strings, bytes values as hex strings.

    Returns:
        0x-prefixed hex call data

    Raises:
        ValueError: If the signature has no parameter list
        eth_abi.exceptions.EncodingError: If eth_abi cannot encode the values
    """
    values = list(values)
    selector = method_selector(method_signature)

    if not values:
        return selector

    types = parse_signature_types(method_signature)
    if len(types) == len(values):
        values = [_coerce_value(t, v) for t, v in zip(types, values)]

    encoded = abi_encode(types, values)
    logger.debug(
        f"Encoded {method_signature} with {len(values)} argument(s): "
        f"{len(encoded)} bytes"
    )
    return selector + encoded.hex()
