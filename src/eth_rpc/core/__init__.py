"""
Shared helpers: hex normalization, address checks, ABI file loading,
logging setup and client configuration.
"""
