"""
eth-rpc

A lightweight client for Ethereum JSON-RPC endpoints. Builds call and
transaction payloads, signs and submits transactions, and decodes
ABI-encoded contract call results.
"""

__version__ = "0.1.0"
