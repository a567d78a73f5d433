"""Errors raised by the JSON-RPC client."""

from typing import Any


class RpcError(RuntimeError):
    """
    JSON-RPC request failed at the node.

    Attributes:
        code: JSON-RPC error code, if the node sent one
        message: Error message
        data: Additional error data, if any
    """

    def __init__(self, message: str, code: int | None = None, data: Any = None):
        self.code = code
        self.message = message
        self.data = data

        parts = []
        if code is not None:
            parts.append(f"code {code}")
        parts.append(message)
        if data:
            parts.append(str(data))
        super().__init__(f"RPC error: {': '.join(parts)}")

    @classmethod
    def from_response(cls, error: Any) -> "RpcError":
        """Build from the "error" member of a JSON-RPC response."""
        if isinstance(error, dict):
            return cls(
                str(error.get("message") or "unknown error"),
                code=error.get("code"),
                data=error.get("data"),
            )
        return cls(str(error))


class BlockReconciliationError(RpcError):
    """Logs fetched in a batch do not belong to the blocks fetched with them."""
