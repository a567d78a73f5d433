"""
JSON-RPC client for Ethereum nodes.

Usage:
    from eth_rpc.client import EthRpc

    client = EthRpc(rpc_url="https://mainnet.infura.io/v3/<key>")
    raw = client.eth.call(to=token_address, method_signature="totalSupply()")
"""

from .contract import Contract, ContractFunction
from .eth import Eth
from .exceptions import BlockReconciliationError, RpcError
from .rpc import EthRpc

__all__ = [
    "BlockReconciliationError",
    "Contract",
    "ContractFunction",
    "Eth",
    "EthRpc",
    "RpcError",
]
