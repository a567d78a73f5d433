"""
Eth namespace API.

Wraps the eth_* JSON-RPC methods used to call contracts, submit signed
transactions and fetch blocks with their logs.

Usage:
    client = EthRpc(rpc_url="http://localhost:8545")

    raw = client.eth.call(to=TOKEN, method_signature="totalSupply()")
    tx_hash = client.eth.transaction(
        private_key=KEY, to=TOKEN, method_signature="mint(uint256)", args=[100]
    )
"""

import logging
from typing import TYPE_CHECKING, Any, Sequence

from eth_account import Account
from web3 import Web3

from ..abi.encoder import encode_tx_data
from ..core.address import private_to_address
from ..core.normalization import (
    is_hex,
    normalize_hex_field,
    normalize_hex_string,
    parse_hex_int,
)
from .contract import Contract
from .exceptions import BlockReconciliationError

if TYPE_CHECKING:
    from .rpc import EthRpc

logger = logging.getLogger(__name__)


def _format_log_options(from_block: int, to_block: int) -> dict[str, str]:
    return {"fromBlock": hex(from_block), "toBlock": hex(to_block)}


def _parse_block(block: dict[str, Any]) -> dict[str, Any]:
    """Convert the block number and timestamp quantities to integers."""
    block["number"] = parse_hex_int(block["number"])
    block["timestamp"] = parse_hex_int(block["timestamp"])
    return block


class Eth:
    """eth_* methods bound to a JSON-RPC client."""

    def __init__(self, client: "EthRpc"):
        self.client = client

    @property
    def config(self):
        return self.client.config

    def rpc(self, method: str, params: list[Any] | None = None) -> Any:
        return self.client.rpc(method, params)

    def call(
        self,
        to: str,
        method_signature: str,
        args: Sequence[Any] = (),
        block_number: str = "latest",
    ) -> str:
        """
        Call a contract method without creating a transaction.

        Args:
            to: Contract address
            method_signature: Canonical method signature, e.g. "totalSupply()"
            args: Arguments to encode with the call
            block_number: "latest" or a 0x-prefixed hex block number

        Returns:
            Raw hex result of eth_call

        Raises:
            ValueError: If block_number is neither "latest" nor hex
        """
        if block_number != "latest" and not is_hex(block_number):
            raise ValueError(
                f"Expected hex, got: {block_number} (type {type(block_number).__name__})"
            )

        data = encode_tx_data(method_signature, args)
        return self.rpc("eth_call", [{"to": to, "data": data}, block_number])

    def transaction(
        self,
        private_key: str | bytes,
        to: str | None = None,
        method_signature: str | None = None,
        args: Sequence[Any] = (),
        nonce: int | str | None = None,
        value: int | str = 0,
        gas_limit: int | str | None = None,
        gas_price: int | str | None = None,
        data: str | None = None,
    ) -> str:
        """
        Build, sign and send a legacy transaction.

        Nonce and gas price are fetched from the node when not given. The gas
        limit falls back to the configured default.

        Args:
            private_key: Sender's private key (hex or raw bytes)
            to: Recipient or contract address; None deploys a contract
            method_signature: Method to call; used to build data when data is None
            args: Method arguments
            nonce: Sender nonce
            value: Wei to send
            gas_limit: Gas limit
            gas_price: Gas price in wei
            data: Prebuilt transaction data

        Returns:
            Transaction hash

        Raises:
            ValueError: If neither data nor method_signature is given, or a
                method is called without a recipient
        """
        if data is None:
            if method_signature is None:
                raise ValueError("Either data or method_signature must be provided")
            if to is None:
                raise ValueError("to must be provided when calling a method")
            data = encode_tx_data(method_signature, args)

        key = normalize_hex_field(private_key)

        if nonce is None:
            nonce = self.get_transaction_count(private_to_address(key))
        if gas_price is None:
            gas_price = self.gas_price()

        tx = {
            "nonce": parse_hex_int(nonce),
            "gas": (
                parse_hex_int(gas_limit)
                if gas_limit is not None
                else self.config.default_gas_limit
            ),
            "gasPrice": parse_hex_int(gas_price),
            "value": parse_hex_int(value),
            "data": data,
        }
        if to is not None:
            tx["to"] = Web3.to_checksum_address(to)
        if self.config.chain_id is not None:
            tx["chainId"] = self.config.chain_id

        signed = Account.sign_transaction(tx, key)
        logger.info(f"Sending transaction with nonce {tx['nonce']} to {to}")

        return self.rpc(
            "eth_sendRawTransaction", [normalize_hex_string(signed.raw_transaction)]
        )

    def gas_price(self) -> str:
        """Get gas price in wei (hex quantity)."""
        return self.rpc("eth_gasPrice", [])

    def get_code(self, address: str) -> str:
        """Get code at an address."""
        return self.rpc("eth_getCode", [address, "latest"])

    def get_transaction_receipt(self, transaction_hash: str) -> dict[str, Any]:
        """Get a transaction receipt. Pending transactions raise RpcError."""
        return self.rpc("eth_getTransactionReceipt", [transaction_hash])

    def get_transaction_count(self, address: str, block: str = "latest") -> str:
        """Get number of transactions sent from an address (hex quantity)."""
        return self.rpc("eth_getTransactionCount", [address, block])

    def block_number(self) -> int:
        """Get number of the latest block."""
        return parse_hex_int(self.rpc("eth_blockNumber", []))

    def get_block(self, block_number: int) -> dict[str, Any]:
        """Get a block with full transactions; number and timestamp as int."""
        return _parse_block(self.rpc("eth_getBlockByNumber", [hex(block_number), True]))

    def get_logs(self, from_block: int, to_block: int) -> list[dict[str, Any]]:
        """Get all logs in the inclusive block range."""
        return self.rpc("eth_getLogs", [_format_log_options(from_block, to_block)])

    def get_blocks(self, from_block: int, to_block: int) -> list[dict[str, Any]]:
        """
        Fetch blocks [from_block, to_block) with their logs in one batch.

        Each block gets a "logs" list holding the logs emitted in it.

        Raises:
            BlockReconciliationError: If a log's block hash differs from the
                hash of the block fetched in the same batch
        """
        if to_block <= from_block:
            return []

        calls = [
            ("eth_getBlockByNumber", [hex(number), True])
            for number in range(from_block, to_block)
        ]
        calls.append(("eth_getLogs", [_format_log_options(from_block, to_block - 1)]))

        results = self.client.batch_results(calls)

        blocks = [_parse_block(block) for block in results[:-1]]
        for block in blocks:
            block["logs"] = []

        for log in results[-1]:
            index = parse_hex_int(log["blockNumber"]) - from_block
            if not 0 <= index < len(blocks):
                raise BlockReconciliationError(
                    f"Log from block {log['blockNumber']} is outside "
                    f"the requested range [{from_block}, {to_block})"
                )

            block = blocks[index]
            if log["blockHash"] != block["hash"]:
                raise BlockReconciliationError(
                    f"Error during fetch of logs. Log block hash ({log['blockHash']}) "
                    f"differs from block hash ({block['hash']})"
                )
            block["logs"].append(log)

        logger.info(
            f"Fetched {len(blocks)} blocks with {len(results[-1])} logs "
            f"from block {from_block}"
        )
        return blocks

    def get_blocks_from_array(self, block_numbers: Sequence[int]) -> list[dict[str, Any]]:
        """Fetch the given blocks, each with its logs, in one batch."""
        calls = []
        for number in block_numbers:
            calls.append(("eth_getBlockByNumber", [hex(number), True]))
            calls.append(("eth_getLogs", [_format_log_options(number, number)]))

        results = self.client.batch_results(calls)

        blocks = []
        for i in range(0, len(results) - 1, 2):
            block = _parse_block(results[i])
            block["logs"] = results[i + 1]
            blocks.append(block)

        return blocks

    def contract(self, abi: list[dict[str, Any]], address: str) -> Contract:
        """Bind a contract ABI to a deployed address."""
        return Contract(self, abi, address)
