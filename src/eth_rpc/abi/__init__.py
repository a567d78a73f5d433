"""
Ethereum contract ABI codec.

Decodes eth_call results from a list of output types and builds call data
(method selector plus encoded arguments).
"""

from .decoder import (
    Cursor,
    decode_address,
    decode_bool,
    decode_int,
    decode_raw_output,
    decode_string,
    decode_uint,
)
from .encoder import encode_tx_data, method_selector, parse_signature_types
from .exceptions import (
    AbiError,
    MalformedStream,
    UnsupportedCombination,
    UnsupportedType,
)
from .types import AbiCategory, AbiType, classify_type, is_dynamic

__all__ = [
    "AbiCategory",
    "AbiError",
    "AbiType",
    "Cursor",
    "MalformedStream",
    "UnsupportedCombination",
    "UnsupportedType",
    "classify_type",
    "decode_address",
    "decode_bool",
    "decode_int",
    "decode_raw_output",
    "decode_string",
    "decode_uint",
    "encode_tx_data",
    "is_dynamic",
    "method_selector",
    "parse_signature_types",
]
