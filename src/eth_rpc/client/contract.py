"""
Contract bindings.

Exposes the functions of a contract ABI as objects that build call data,
issue eth_call and decode the declared outputs.

Usage:
    token = client.eth.contract(load_abi("erc20"), TOKEN_ADDRESS)
    token.decimals.call()           # ['6']
    token.balanceOf.call(HOLDER)    # ['1000000']
"""

import logging
from typing import TYPE_CHECKING, Any

from ..abi.decoder import decode_raw_output
from ..core.address import is_valid_address

if TYPE_CHECKING:
    from .eth import Eth

logger = logging.getLogger(__name__)


def _canonical_type(param: dict[str, Any]) -> str:
    """Expand tuple parameters into their component list."""
    abi_type = param["type"]
    if not abi_type.startswith("tuple"):
        return abi_type
    components = ",".join(_canonical_type(c) for c in param.get("components", []))
    return f"({components}){abi_type[len('tuple'):]}"


def function_signature(entry: dict[str, Any]) -> str:
    """
    Build the canonical signature of an ABI function entry.

    Example:
        >>> function_signature({"name": "transfer", "inputs": [
        ...     {"name": "to", "type": "address"}, {"name": "value", "type": "uint256"}]})
        'transfer(address,uint256)'
    """
    types = ",".join(_canonical_type(p) for p in entry.get("inputs", []))
    return f"{entry['name']}({types})"


class ContractFunction:
    """A single contract function bound to an address."""

    def __init__(self, eth: "Eth", address: str, entry: dict[str, Any]):
        self.eth = eth
        self.address = address
        self.name = entry["name"]
        self.signature = function_signature(entry)
        self.output_types = [_canonical_type(o) for o in entry.get("outputs", [])]

    def __repr__(self) -> str:
        return f"<ContractFunction {self.signature} at {self.address}>"

    def call(self, *args: Any, block_number: str = "latest") -> list[Any]:
        """
        Call the function and decode its outputs.

        Returns:
            Decoded output values in declaration order
        """
        raw = self.eth.call(
            to=self.address,
            method_signature=self.signature,
            args=args,
            block_number=block_number,
        )
        return decode_raw_output(self.output_types, raw)

    def transaction(self, private_key: str | bytes, *args: Any, **tx_options: Any) -> str:
        """
        Send a transaction calling this function.

        Args:
            private_key: Sender's private key
            *args: Function arguments
            **tx_options: nonce, value, gas_limit, gas_price

        Returns:
            Transaction hash
        """
        return self.eth.transaction(
            private_key=private_key,
            to=self.address,
            method_signature=self.signature,
            args=args,
            **tx_options,
        )


class Contract:
    """
    Contract instance built from an ABI and a deployed address.

    Functions are reachable as attributes by name and by item lookup by
    name or full signature. Overloaded names resolve to the first
    declaration; use the signature to pick another overload.
    """

    def __init__(self, eth: "Eth", abi: list[dict[str, Any]], address: str):
        if not is_valid_address(address):
            raise ValueError(f"Invalid contract address: {address!r}")

        self.address = address
        self.abi = abi
        self.functions: dict[str, ContractFunction] = {}

        for entry in abi:
            if entry.get("type", "function") != "function" or not entry.get("name"):
                continue

            function = ContractFunction(eth, address, entry)
            self.functions[function.signature] = function
            if function.name in self.functions:
                logger.debug(
                    f"Overloaded function {function.signature}; "
                    f"{function.name} resolves to "
                    f"{self.functions[function.name].signature}"
                )
            else:
                self.functions[function.name] = function

    def __getitem__(self, name: str) -> ContractFunction:
        return self.functions[name]

    def __getattr__(self, name: str) -> ContractFunction:
        functions = self.__dict__.get("functions", {})
        if name in functions:
            return functions[name]
        raise AttributeError(f"Contract at {self.__dict__.get('address')} has no function {name!r}")

    def __contains__(self, name: str) -> bool:
        return name in self.functions
