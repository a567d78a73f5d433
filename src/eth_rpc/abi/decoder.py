"""
Decode ABI-encoded contract call output.

The payload carries no type tags: structure is recovered from the caller's
list of output types alone, by walking a cursor over the hex stream from left
to right. Static values take one 32-byte word each. A dynamic value (string,
bytes, or an array) is laid out as an offset word, a length word and the
payload, so its length always sits at hex offset 64 and its payload starts at
hex offset 128 relative to the cursor.

Usage:
    from eth_rpc.abi.decoder import decode_raw_output

    decode_raw_output(["uint256", "address"], result)
    # ['1000', '0x0ccaf8cb1c92aef64dd36ce1f3882d195180ad5c']

See https://docs.soliditylang.org/en/latest/abi-spec.html
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Callable

from ..core.normalization import strip_hex_prefix
from .exceptions import MalformedStream, UnsupportedCombination, UnsupportedType
from .types import (
    ARRAY_ELEMENT_CATEGORY,
    WORD_HEX_LENGTH,
    AbiCategory,
    AbiType,
    classify_type,
)

logger = logging.getLogger(__name__)

# Hex offsets of the length word and the payload of a dynamic value
LENGTH_OFFSET = WORD_HEX_LENGTH
PAYLOAD_OFFSET = 2 * WORD_HEX_LENGTH

INT_SIGN_THRESHOLD = 2**128 - 1
WORD_MASK = 2**256 - 1

_HEX_WORD_RE = re.compile(r"[0-9a-fA-F]+")


@dataclass(frozen=True)
class Cursor:
    """
    Read position over an undecoded hex stream.

    Cursors are immutable: every decoding step returns a new cursor
    alongside the decoded value.

    Attributes:
        stream: Complete hex payload without 0x prefix
        position: Hex character offset of the next undecoded word
    """

    stream: str
    position: int = 0

    @property
    def remaining(self) -> str:
        return self.stream[self.position :]

    def read(self, start: int, end: int, abi_type: str | None = None) -> str:
        """
        Return hex characters [start, end) relative to the cursor.

        Raises:
            MalformedStream: If the range runs past the end of the stream
        """
        if start < 0 or end < start or self.position + end > len(self.stream):
            raise MalformedStream(
                f"read of [{start}, {end}) exceeds {len(self.remaining)} remaining hex chars",
                abi_type,
                self.position,
            )
        return self.stream[self.position + start : self.position + end]

    def read_word(self, start: int = 0, abi_type: str | None = None) -> str:
        return self.read(start, start + WORD_HEX_LENGTH, abi_type)

    def advance(self, count: int, abi_type: str | None = None) -> "Cursor":
        """
        Return a cursor moved forward by count hex characters.

        Raises:
            MalformedStream: If the new position lies past the end of the stream
        """
        if count < 0 or self.position + count > len(self.stream):
            raise MalformedStream(
                f"cannot advance {count} hex chars, {len(self.remaining)} remaining",
                abi_type,
                self.position,
            )
        return Cursor(self.stream, self.position + count)


def _parse_hex(
    value: str, abi_type: str | None = None, position: int = 0
) -> int:
    # int() alone would also take signs, underscores, whitespace and 0x
    if not isinstance(value, str) or not _HEX_WORD_RE.fullmatch(value):
        raise MalformedStream(f"invalid hex word {value!r}", abi_type, position)
    return int(value, 16)


def _padded(hex_length: int) -> int:
    """Round a hex length up to a whole number of words."""
    return -(-hex_length // WORD_HEX_LENGTH) * WORD_HEX_LENGTH


def _split_words(data: str) -> list[str]:
    return [
        data[i : i + WORD_HEX_LENGTH] for i in range(0, len(data), WORD_HEX_LENGTH)
    ]


# Scalar decoders


def decode_int(bytes32: str) -> str:
    """
    Decode a signed integer word.

    Values above 2**128 - 1 are read as negative 256-bit two's complement,
    whatever the declared bit width.

    Args:
        bytes32: 64 hex characters

    Returns:
        Integer as a decimal string
    """
    value = _parse_hex(bytes32, "int")
    if value > INT_SIGN_THRESHOLD:
        return str(-((value ^ WORD_MASK) + 1))
    return str(value)


def decode_uint(bytes32: str) -> str:
    """Decode an unsigned integer word to a decimal string."""
    return str(_parse_hex(bytes32, "uint"))


def decode_address(bytes32: str) -> str:
    """Decode an address word: the low 20 bytes, 0x-prefixed."""
    return "0x" + bytes32[24:]


def decode_bool(bytes32: str) -> bool:
    """Decode a boolean word. Any nonzero value is True."""
    return _parse_hex(bytes32, "bool") != 0


def decode_string(hex_bytes: str) -> str:
    """
    Decode UTF-8 text from hex.

    Raises:
        MalformedStream: If the data is not valid hex or valid UTF-8
    """
    try:
        return bytes.fromhex(hex_bytes).decode("utf-8")
    except ValueError as e:
        raise MalformedStream(f"invalid UTF-8 string payload: {e}", "string") from e


_WORD_DECODERS: dict[AbiCategory, Callable[[str], Any]] = {
    AbiCategory.BOOL: decode_bool,
    AbiCategory.ADDRESS: decode_address,
    AbiCategory.UINT: decode_uint,
    AbiCategory.INT: decode_int,
}


# Decoding steps. Each takes the classified type and the cursor and returns
# the decoded value together with the advanced cursor.


def _decode_word(abi_type: AbiType, cursor: Cursor) -> tuple[Any, Cursor]:
    word = cursor.read_word(abi_type=abi_type.name)
    try:
        value = _WORD_DECODERS[abi_type.category](word)
    except MalformedStream as e:
        raise MalformedStream(e.reason, abi_type.name, cursor.position) from e
    return value, cursor.advance(WORD_HEX_LENGTH, abi_type.name)


def _decode_fixed_bytes(abi_type: AbiType, cursor: Cursor) -> tuple[str, Cursor]:
    # Read from the start of the whole stream, not from the cursor
    origin = Cursor(cursor.stream)
    value = "0x" + origin.read(0, abi_type.size * 2, abi_type.name)
    return value, cursor.advance(WORD_HEX_LENGTH, abi_type.name)


def _read_count(abi_type: AbiType, cursor: Cursor, start: int = LENGTH_OFFSET) -> int:
    """Parse a length or element-count word at the given offset."""
    word = cursor.read_word(start, abi_type.name)
    return _parse_hex(word, abi_type.name, cursor.position + start)


def _check_head_offset(abi_type: AbiType, cursor: Cursor) -> None:
    """The leading offset word of a dynamic value must point inside the stream."""
    offset = _read_count(abi_type, cursor, 0)
    if cursor.position + offset * 2 >= len(cursor.stream):
        raise MalformedStream(
            f"offset {offset} points past the end of the stream",
            abi_type.name,
            cursor.position,
        )


def _decode_dynamic_payload(abi_type: AbiType, cursor: Cursor) -> tuple[str, Cursor]:
    _check_head_offset(abi_type, cursor)
    length = _read_count(abi_type, cursor)
    end = PAYLOAD_OFFSET + length * 2
    payload = cursor.read(PAYLOAD_OFFSET, end, abi_type.name)
    return payload, cursor.advance(_padded(end), abi_type.name)


def _decode_bytes(abi_type: AbiType, cursor: Cursor) -> tuple[str, Cursor]:
    payload, cursor = _decode_dynamic_payload(abi_type, cursor)
    return "0x" + payload, cursor


def _decode_string(abi_type: AbiType, cursor: Cursor) -> tuple[str, Cursor]:
    payload, next_cursor = _decode_dynamic_payload(abi_type, cursor)
    try:
        return decode_string(payload), next_cursor
    except MalformedStream as e:
        raise MalformedStream(e.reason, abi_type.name, cursor.position) from e


def _decode_word_array(abi_type: AbiType, cursor: Cursor) -> tuple[list, Cursor]:
    """Arrays of one-word elements: bool[], bytesN[], address[], uintN[], intN[]."""
    _check_head_offset(abi_type, cursor)
    count = _read_count(abi_type, cursor)
    end = PAYLOAD_OFFSET + count * WORD_HEX_LENGTH
    words = _split_words(cursor.read(PAYLOAD_OFFSET, end, abi_type.name))

    if abi_type.category == AbiCategory.FIXED_BYTES_ARRAY:
        values = ["0x" + word[: abi_type.size * 2] for word in words]
    else:
        element_decoder = _WORD_DECODERS[ARRAY_ELEMENT_CATEGORY[abi_type.category]]
        try:
            values = [element_decoder(word) for word in words]
        except MalformedStream as e:
            raise MalformedStream(e.reason, abi_type.name, cursor.position) from e

    return values, cursor.advance(end, abi_type.name)


def _decode_string_array(abi_type: AbiType, cursor: Cursor) -> tuple[list[str], Cursor]:
    """
    Decode string[].

    After the element count come one offset word per element, then the
    elements themselves, each a length word and a padded payload, laid out
    back to back. Each offset must point at the element the scan reaches.
    """
    _check_head_offset(abi_type, cursor)
    count = _read_count(abi_type, cursor)
    offsets_end = PAYLOAD_OFFSET + count * WORD_HEX_LENGTH
    offsets = _split_words(cursor.read(PAYLOAD_OFFSET, offsets_end, abi_type.name))

    strings = []
    i = offsets_end
    for index, offset_word in enumerate(offsets):
        expected = PAYLOAD_OFFSET + _parse_hex(
            offset_word, abi_type.name, cursor.position
        ) * 2
        if expected != i:
            raise MalformedStream(
                f"element {index} offset points to hex offset {expected}, "
                f"expected {i}",
                abi_type.name,
                cursor.position,
            )

        length = _read_count(abi_type, cursor, i)
        payload = cursor.read(
            i + WORD_HEX_LENGTH, i + WORD_HEX_LENGTH + length * 2, abi_type.name
        )
        try:
            strings.append(decode_string(payload))
        except MalformedStream as e:
            raise MalformedStream(e.reason, abi_type.name, cursor.position + i) from e

        i += WORD_HEX_LENGTH + _padded(length * 2)

    return strings, cursor.advance(i, abi_type.name)


_STEPS: dict[AbiCategory, Callable[[AbiType, Cursor], tuple[Any, Cursor]]] = {
    AbiCategory.FIXED_BYTES: _decode_fixed_bytes,
    AbiCategory.BYTES: _decode_bytes,
    AbiCategory.STRING: _decode_string,
    AbiCategory.ADDRESS: _decode_word,
    AbiCategory.BOOL: _decode_word,
    AbiCategory.UINT: _decode_word,
    AbiCategory.INT: _decode_word,
    AbiCategory.BOOL_ARRAY: _decode_word_array,
    AbiCategory.FIXED_BYTES_ARRAY: _decode_word_array,
    AbiCategory.STRING_ARRAY: _decode_string_array,
    AbiCategory.ADDRESS_ARRAY: _decode_word_array,
    AbiCategory.UINT_ARRAY: _decode_word_array,
    AbiCategory.INT_ARRAY: _decode_word_array,
}


def decode_step(abi_type: str, cursor: Cursor) -> tuple[Any, Cursor]:
    """
    Decode one value at the cursor.

    Args:
        abi_type: Solidity type string
        cursor: Current read position

    Returns:
        Tuple of (decoded value, cursor past the consumed data)

    Raises:
        UnsupportedType: If the type is not recognized
        UnsupportedCombination: If the type is an unsupported aggregate
        MalformedStream: If a read would run past the end of the stream
    """
    try:
        classified = classify_type(abi_type)
    except UnsupportedType as e:
        raise UnsupportedType(e.abi_type, cursor.remaining) from e

    value, next_cursor = _STEPS[classified.category](classified, cursor)
    logger.debug(
        f"Decoded {classified.name} at hex offset {cursor.position} "
        f"({next_cursor.position - cursor.position} hex chars)"
    )
    return value, next_cursor


def decode_raw_output(types: list[str], raw_output: str) -> list[Any]:
    """
    Decode raw contract call output.

    Args:
        types: Output parameter types in declaration order
        raw_output: Hex result of an eth_call, with or without 0x prefix

    Returns:
        Decoded values in the same order as types:
        - (u)intN: decimal string
        - bool: bool
        - address: 0x-prefixed lowercase hex
        - bytesN, bytes: 0x-prefixed hex
        - string: str
        - arrays: list of the element values

    Raises:
        UnsupportedType: If a type is not recognized
        UnsupportedCombination: If a type is an unsupported aggregate, or a
            dynamic type is combined with other outputs
        MalformedStream: If a length or offset runs past the end of the data

    Example:
        >>> decode_raw_output(["int32"], "ff" * 31 + "fe")
        ['-2']
    """
    types = list(types)
    classified = []
    for abi_type in types:
        try:
            classified.append(classify_type(abi_type))
        except UnsupportedType as e:
            raise UnsupportedType(e.abi_type, strip_hex_prefix(raw_output)) from e

    if len(classified) > 1:
        dynamic = [t.name for t in classified if t.is_dynamic]
        if dynamic:
            raise UnsupportedCombination(
                "(" + ",".join(t.name for t in classified) + ")",
                f"dynamic outputs {dynamic} cannot be combined with other outputs",
            )

    cursor = Cursor(strip_hex_prefix(raw_output))
    result = []
    for abi_type in types:
        value, cursor = decode_step(abi_type, cursor)
        result.append(value)

    return result
