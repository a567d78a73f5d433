"""
Unit tests for the ABI decoder.

Values are encoded with eth_abi (trusted) and decoded with our decoder.
Covers:
- Round-trip for every supported scalar and single-level array type
- Sign detection threshold for signed integers
- Zero-length dynamic values and empty arrays
- Malformed streams and unsupported types
"""

import random

import pytest
from eth_abi import encode

from eth_rpc.abi.decoder import (
    Cursor,
    decode_address,
    decode_bool,
    decode_int,
    decode_raw_output,
    decode_step,
    decode_string,
    decode_uint,
)
from eth_rpc.abi.exceptions import (
    MalformedStream,
    UnsupportedCombination,
    UnsupportedType,
)

BIT_WIDTHS = list(range(8, 257, 8))
BYTE_SIZES = list(range(1, 33))


@pytest.fixture
def rng() -> random.Random:
    """Deterministic random source for generated values."""
    return random.Random(1337)


def random_address(rng: random.Random) -> str:
    return "0x" + "".join(rng.choice("0123456789abcdef") for _ in range(40))


def random_uint(rng: random.Random, bits: int) -> int:
    return rng.randint(0, 2**bits - 1)


def random_int(rng: random.Random, bits: int) -> int:
    # Magnitudes stay below 2**(bits/2) so int256 values never cross 2**128
    bound = 2 ** (bits // 2) - 1
    return rng.randint(-bound, bound)


def random_text(rng: random.Random, max_length: int = 80) -> str:
    alphabet = "abcdefghijklmnopqrstuvwxyz ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789éü✓€"
    return "".join(rng.choice(alphabet) for _ in range(rng.randint(1, max_length)))


def encode_and_decode(types: list[str], values: list) -> list:
    """Encode with eth_abi, decode with eth_rpc."""
    raw_output = encode(types, values).hex()
    return decode_raw_output(types, raw_output)


class TestScalarDecoders:
    """Test single-word decoders."""

    def test_decode_uint(self):
        """Test unsigned integer decoding to decimal string."""
        assert decode_uint("00" * 31 + "ff") == "255"

    def test_decode_int_negative(self):
        """Test two's complement negative value."""
        assert decode_int("ff" * 31 + "fe") == "-2"

    def test_decode_int_sign_threshold_positive(self):
        """Test that 2**128 - 1 is still decoded as positive."""
        word = format(2**128 - 1, "064x")
        assert decode_int(word) == "340282366920938463463374607431768211455"

    def test_decode_int_sign_threshold_negative(self):
        """Test that 2**128 is decoded as negative."""
        word = format(2**128, "064x")
        assert decode_int(word) == str(2**128 - 2**256)
        assert decode_int(word).startswith("-")

    def test_decode_address(self):
        """Test address is taken from the low 20 bytes."""
        word = "00" * 12 + "0ccaf8cb1c92aef64dd36ce1f3882d195180ad5c"
        assert decode_address(word) == "0x0ccaf8cb1c92aef64dd36ce1f3882d195180ad5c"

    def test_decode_bool(self):
        """Test any nonzero word is True."""
        assert decode_bool("00" * 32) is False
        assert decode_bool("00" * 31 + "01") is True
        assert decode_bool("00" * 31 + "02") is True

    @pytest.mark.parametrize(
        "word",
        [
            "-" + "0" * 62 + "1",
            "0x" + "0" * 61 + "1",
            "0" * 30 + "_" + "0" * 32 + "1",
            " " + "0" * 62 + "1",
            "0" * 63 + "g",
        ],
    )
    def test_non_hex_word_rejected(self, word):
        """Test signs, separators, whitespace and inner 0x are not hex digits."""
        with pytest.raises(MalformedStream, match="invalid hex word"):
            decode_uint(word)
        with pytest.raises(MalformedStream):
            decode_int(word)
        with pytest.raises(MalformedStream):
            decode_bool(word)

    def test_non_hex_word_in_stream(self):
        """Test a signed word inside call output is reported with its type."""
        with pytest.raises(MalformedStream) as exc_info:
            decode_raw_output(["uint256"], "-" + "0" * 62 + "1")
        assert exc_info.value.abi_type == "uint256"

    def test_decode_string(self):
        """Test UTF-8 decoding of hex payload."""
        assert decode_string("héllo".encode("utf-8").hex()) == "héllo"

    def test_decode_string_invalid_utf8(self):
        """Test invalid UTF-8 raises MalformedStream."""
        with pytest.raises(MalformedStream):
            decode_string("ff")

    def test_invalid_hex_word(self):
        """Test non-hex word raises MalformedStream."""
        with pytest.raises(MalformedStream, match="invalid hex word"):
            decode_uint("zz" * 32)


class TestConcreteVectors:
    """Test known input/output pairs."""

    def test_int32_minus_two(self):
        """Test decoding a negative int32."""
        raw = "ff" * 31 + "fe"
        assert decode_raw_output(["int32"], raw) == ["-2"]

    def test_only_first_word_consumed(self):
        """Test trailing data after the last value is ignored."""
        raw = "ff" * 31 + "fe" + "00" * 31 + "07"
        assert decode_raw_output(["int32"], raw) == ["-2"]

    def test_prefixed_input(self):
        """Test 0x prefix from RPC results is accepted."""
        raw = "0x" + "00" * 31 + "2a"
        assert decode_raw_output(["uint256"], raw) == ["42"]

    def test_empty_type_list(self):
        """Test no types decode to no values."""
        assert decode_raw_output([], "00" * 32) == []


class TestRoundTrip:
    """Test decode(encode(values)) == values for every supported type."""

    def test_bool(self):
        """Test bool round-trip."""
        assert encode_and_decode(["bool"], [True]) == [True]
        assert encode_and_decode(["bool"], [False]) == [False]

    def test_address(self, rng):
        """Test address round-trip."""
        address = random_address(rng)
        assert encode_and_decode(["address"], [address]) == [address]

    def test_string(self, rng):
        """Test string round-trip including multi-byte characters."""
        text = random_text(rng)
        assert encode_and_decode(["string"], [text]) == [text]

    def test_long_string(self):
        """Test string spanning several words."""
        text = "x" * 100
        assert encode_and_decode(["string"], [text]) == [text]

    def test_dynamic_bytes(self, rng):
        """Test dynamic bytes round-trip."""
        payload = bytes(rng.randrange(256) for _ in range(45))
        assert encode_and_decode(["bytes"], [payload]) == ["0x" + payload.hex()]

    @pytest.mark.parametrize("bits", BIT_WIDTHS)
    def test_uint(self, rng, bits):
        """Test uintN round-trip for every bit width."""
        value = random_uint(rng, bits)
        assert encode_and_decode([f"uint{bits}"], [value]) == [str(value)]

    @pytest.mark.parametrize("bits", BIT_WIDTHS)
    def test_int(self, rng, bits):
        """Test intN round-trip for every bit width, negative and positive."""
        for value in (random_int(rng, bits), -1, 1):
            assert encode_and_decode([f"int{bits}"], [value]) == [str(value)]

    @pytest.mark.parametrize("size", BYTE_SIZES)
    def test_fixed_bytes(self, rng, size):
        """Test bytesN round-trip for every byte size."""
        value = bytes(rng.randrange(256) for _ in range(size))
        assert encode_and_decode([f"bytes{size}"], [value]) == ["0x" + value.hex()]

    def test_bool_array(self, rng):
        """Test bool[] round-trip."""
        values = [rng.choice([True, False]) for _ in range(rng.randint(1, 20))]
        assert encode_and_decode(["bool[]"], [values]) == [values]

    @pytest.mark.parametrize("size", BYTE_SIZES)
    def test_fixed_bytes_array(self, rng, size):
        """Test bytesN[] round-trip for every byte size."""
        values = [
            bytes(rng.randrange(256) for _ in range(size))
            for _ in range(rng.randint(1, 20))
        ]
        expected = ["0x" + value.hex() for value in values]
        assert encode_and_decode([f"bytes{size}[]"], [values]) == [expected]

    def test_string_array(self, rng):
        """Test string[] round-trip."""
        values = [random_text(rng) for _ in range(rng.randint(1, 20))]
        assert encode_and_decode(["string[]"], [values]) == [values]

    def test_address_array(self, rng):
        """Test address[] round-trip."""
        values = [random_address(rng) for _ in range(rng.randint(1, 20))]
        assert encode_and_decode(["address[]"], [values]) == [values]

    @pytest.mark.parametrize("bits", BIT_WIDTHS)
    def test_uint_array(self, rng, bits):
        """Test uintN[] round-trip for every bit width."""
        values = [random_uint(rng, bits) for _ in range(rng.randint(1, 20))]
        assert encode_and_decode([f"uint{bits}[]"], [values]) == [
            [str(v) for v in values]
        ]

    @pytest.mark.parametrize("bits", BIT_WIDTHS)
    def test_int_array(self, rng, bits):
        """Test intN[] round-trip for every bit width."""
        values = [random_int(rng, bits) for _ in range(rng.randint(1, 20))]
        assert encode_and_decode([f"int{bits}[]"], [values]) == [
            [str(v) for v in values]
        ]

    def test_multiple_static_values(self, rng):
        """Test several static values decode left to right."""
        address = random_address(rng)
        types = ["uint256", "address", "bool", "int8"]
        values = [10**30, address, True, -5]
        assert encode_and_decode(types, values) == [str(10**30), address, True, "-5"]


class TestEdgeCases:
    """Test boundary conditions."""

    def test_empty_string(self):
        """Test empty string decodes to empty value."""
        assert encode_and_decode(["string"], [""]) == [""]

    def test_empty_bytes(self):
        """Test empty bytes decodes to empty value."""
        assert encode_and_decode(["bytes"], [b""]) == ["0x"]

    def test_empty_arrays(self):
        """Test empty arrays decode to empty lists."""
        for abi_type in ["bool[]", "bytes4[]", "string[]", "address[]", "uint8[]", "int256[]"]:
            assert encode_and_decode([abi_type], [[]]) == [[]]

    def test_string_array_with_empty_elements(self):
        """Test empty strings inside string[] keep the cursor aligned."""
        values = ["", "a", "", "x" * 33]
        assert encode_and_decode(["string[]"], [values]) == [values]

    def test_idempotent(self, rng):
        """Test decoding the same input twice gives identical output."""
        values = [random_text(rng) for _ in range(5)]
        raw = encode(["string[]"], [values]).hex()
        assert decode_raw_output(["string[]"], raw) == decode_raw_output(
            ["string[]"], raw
        )

    def test_fixed_bytes_reads_from_stream_start(self):
        """Test bytesN takes its bytes from the start of the whole stream."""
        raw = "aa" * 32 + "bb" * 32
        assert decode_raw_output(["uint8", "bytes2"], raw) == [
            str(int("aa" * 32, 16)),
            "0xaaaa",
        ]


class TestCursor:
    """Test the cursor threaded through decoding steps."""

    def test_step_returns_advanced_cursor(self):
        """Test a static value advances by one word."""
        cursor = Cursor("00" * 31 + "01" + "00" * 31 + "02")
        value, cursor = decode_step("uint256", cursor)

        assert value == "1"
        assert cursor.position == 64
        assert cursor.remaining == "00" * 31 + "02"

    def test_dynamic_step_consumes_padded_payload(self):
        """Test a string consumes head, length and padded payload."""
        cursor = Cursor(encode(["string"], ["hello"]).hex())
        value, next_cursor = decode_step("string", cursor)

        assert value == "hello"
        assert next_cursor.position == 192

    def test_read_past_end(self):
        """Test reading beyond the stream raises MalformedStream."""
        with pytest.raises(MalformedStream):
            Cursor("00" * 16).read_word()

    def test_cursor_is_immutable(self):
        """Test advancing returns a new cursor."""
        cursor = Cursor("00" * 64)
        advanced = cursor.advance(64)

        assert cursor.position == 0
        assert advanced.position == 64


class TestDecodeErrors:
    """Test error reporting."""

    def test_unsupported_type(self):
        """Test unknown types raise UnsupportedType with diagnostics."""
        raw = "00" * 32
        with pytest.raises(UnsupportedType) as exc_info:
            decode_raw_output(["fixed128x18"], raw)

        assert exc_info.value.abi_type == "fixed128x18"
        assert exc_info.value.remaining == raw

    def test_bytes_array_rejected(self):
        """Test arrays of dynamic bytes are rejected."""
        with pytest.raises(UnsupportedCombination):
            decode_raw_output(["bytes[]"], "00" * 64)

    def test_dynamic_mixed_with_static_rejected(self):
        """Test a dynamic output combined with other outputs is rejected."""
        raw = encode(["uint256", "string"], [1, "a"]).hex()
        with pytest.raises(UnsupportedCombination):
            decode_raw_output(["uint256", "string"], raw)

    def test_truncated_word(self):
        """Test a stream shorter than one word raises MalformedStream."""
        with pytest.raises(MalformedStream):
            decode_raw_output(["uint256"], "00" * 31)

    def test_truncated_string_payload(self):
        """Test a string whose length exceeds the data raises MalformedStream."""
        raw = encode(["string"], ["x" * 40]).hex()
        with pytest.raises(MalformedStream):
            decode_raw_output(["string"], raw[: 128 + 40])

    def test_array_count_past_end(self):
        """Test an element count larger than the data raises MalformedStream."""
        raw = format(32, "064x") + format(5, "064x") + "00" * 32
        with pytest.raises(MalformedStream):
            decode_raw_output(["uint256[]"], raw)

    def test_head_offset_past_end(self):
        """Test an offset pointing outside the stream raises MalformedStream."""
        raw = format(4096, "064x") + format(0, "064x")
        with pytest.raises(MalformedStream, match="offset"):
            decode_raw_output(["string"], raw)

    def test_non_hex_length(self):
        """Test a length word that is not hex raises MalformedStream."""
        raw = format(32, "064x") + "zz" * 32
        with pytest.raises(MalformedStream):
            decode_raw_output(["bytes"], raw)

    def test_string_array_offset_mismatch(self):
        """Test string[] element offsets must point at the scanned element."""
        raw = encode(["string[]"], [["a", "b"]]).hex()
        # Corrupt the second element's offset word
        corrupted = raw[:192] + format(0, "064x") + raw[256:]
        with pytest.raises(MalformedStream, match="element 1"):
            decode_raw_output(["string[]"], corrupted)

    def test_no_partial_results(self):
        """Test a failure part way through raises instead of returning a prefix."""
        raw = "00" * 31 + "01"
        with pytest.raises(MalformedStream):
            decode_raw_output(["uint256", "uint256"], raw)
