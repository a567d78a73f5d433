"""
Errors raised by the ABI codec.

All codec failures derive from AbiError (a ValueError), so callers can catch
either the specific failure or the whole family.
"""

SNAPSHOT_LENGTH = 80


def _snapshot(remaining: str) -> str:
    """Shorten a hex stream for inclusion in error messages."""
    if len(remaining) <= SNAPSHOT_LENGTH:
        return remaining
    return f"{remaining[:SNAPSHOT_LENGTH]}... ({len(remaining)} hex chars)"


class AbiError(ValueError):
    """Base class for ABI encoding and decoding failures."""


class UnsupportedType(AbiError):
    """Type string does not match any recognized ABI type form."""

    def __init__(self, abi_type: str, remaining: str = ""):
        self.abi_type = abi_type
        self.remaining = remaining
        message = f"Unsupported ABI type: {abi_type!r}"
        if remaining:
            message += f". Remaining stream: {_snapshot(remaining)}"
        super().__init__(message)


class MalformedStream(AbiError):
    """Length or offset field points past the data, or cannot be parsed."""

    def __init__(self, reason: str, abi_type: str | None = None, position: int = 0):
        self.reason = reason
        self.abi_type = abi_type
        self.position = position
        prefix = f"Malformed stream while decoding {abi_type!r}" if abi_type else "Malformed stream"
        super().__init__(f"{prefix} at hex offset {position}: {reason}")


class UnsupportedCombination(AbiError):
    """Array of dynamic elements, or a dynamic value mixed into an aggregate."""

    def __init__(self, abi_type: str, reason: str):
        self.abi_type = abi_type
        self.reason = reason
        super().__init__(f"Unsupported type combination {abi_type!r}: {reason}")
