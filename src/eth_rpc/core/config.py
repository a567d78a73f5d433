"""
Client configuration management.

This module provides utilities for loading and validating client settings
from YAML files or environment variables. Gas and chain defaults live here
and are passed into the client explicitly; the ABI codec has no configuration.

Usage:
    from eth_rpc.core.config import ClientConfig

    config = ClientConfig.from_yaml("configs/client_config.yaml")
    print(config.rpc_url)  # http://localhost:8545
    print(config.default_gas_limit)  # 6721975
"""

import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

DEFAULT_RPC_URL = "http://localhost:8545"
DEFAULT_GAS_LIMIT = 0x6691B7
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


@dataclass
class RpcConfig:
    """JSON-RPC endpoint configuration."""

    endpoint: str = DEFAULT_RPC_URL
    timeout: int = 30  # seconds
    max_retries: int = 3
    backoff_factor: float = 2.0  # delay = backoff_factor ** attempt

    def __post_init__(self):
        """Validate endpoint settings."""
        if not self.endpoint or not self.endpoint.startswith(("http://", "https://")):
            raise ValueError(
                f"endpoint must be an http(s) URL, got {self.endpoint!r}"
            )
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")
        if self.max_retries < 1:
            raise ValueError(f"max_retries must be at least 1, got {self.max_retries}")
        if self.backoff_factor < 0:
            raise ValueError(
                f"backoff_factor must be non-negative, got {self.backoff_factor}"
            )


@dataclass
class TransactionConfig:
    """Defaults applied to outgoing transactions."""

    default_gas_limit: int = DEFAULT_GAS_LIMIT
    chain_id: int | None = None

    def __post_init__(self):
        """Validate transaction defaults."""
        if isinstance(self.default_gas_limit, str):
            self.default_gas_limit = int(self.default_gas_limit, 0)
        if self.default_gas_limit <= 0:
            raise ValueError(
                f"default_gas_limit must be positive, got {self.default_gas_limit}"
            )
        if self.chain_id is not None and self.chain_id <= 0:
            raise ValueError(f"chain_id must be positive, got {self.chain_id}")


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"
    format: str | None = None

    def __post_init__(self):
        """Validate logging level."""
        if self.level.upper() not in LOG_LEVELS:
            raise ValueError(f"level must be one of {LOG_LEVELS}, got {self.level}")


@dataclass
class ClientConfig:
    """Complete client configuration."""

    rpc: RpcConfig = field(default_factory=RpcConfig)
    transactions: TransactionConfig = field(default_factory=TransactionConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @property
    def rpc_url(self) -> str:
        """Get RPC endpoint URL."""
        return self.rpc.endpoint

    @property
    def default_gas_limit(self) -> int:
        """Get gas limit used when a transaction does not set one."""
        return self.transactions.default_gas_limit

    @property
    def chain_id(self) -> int | None:
        """Get chain ID for EIP-155 signing (None signs without replay protection)."""
        return self.transactions.chain_id

    @classmethod
    def from_yaml(cls, yaml_path: str | Path) -> "ClientConfig":
        """
        Load configuration from YAML file.

        Args:
            yaml_path: Path to YAML configuration file

        Returns:
            ClientConfig instance with loaded values

        Raises:
            FileNotFoundError: If YAML file doesn't exist
            ValueError: If YAML structure is invalid
            yaml.YAMLError: If YAML parsing fails
        """
        yaml_path = Path(yaml_path)

        if not yaml_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {yaml_path}")

        logger.info(f"Loading client configuration from {yaml_path}")

        with open(yaml_path, "r") as f:
            config_dict = yaml.safe_load(f)

        if not config_dict:
            raise ValueError(f"Empty or invalid YAML file: {yaml_path}")

        try:
            config = cls.from_dict(config_dict)
        except TypeError as e:
            raise ValueError(
                f"Invalid configuration structure in {yaml_path}: {e}"
            ) from e

        logger.debug(f"RPC endpoint: {config.rpc_url}")
        logger.debug(f"Default gas limit: {config.default_gas_limit}")
        return config

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> "ClientConfig":
        """
        Create configuration from dictionary.

        Args:
            config_dict: Dictionary with "rpc", "transactions" and "logging" sections

        Returns:
            ClientConfig instance
        """
        return cls(
            rpc=RpcConfig(**(config_dict.get("rpc") or {})),
            transactions=TransactionConfig(**(config_dict.get("transactions") or {})),
            logging=LoggingConfig(**(config_dict.get("logging") or {})),
        )

    @classmethod
    def from_env(cls) -> "ClientConfig":
        """
        Load configuration from environment variables.

        Reads ETH_RPC_URL, ETH_RPC_TIMEOUT, ETH_RPC_RETRIES, ETH_RPC_BACKOFF,
        ETH_DEFAULT_GAS_LIMIT, ETH_CHAIN_ID and ETH_LOG_LEVEL. Unset variables
        fall back to defaults.

        Raises:
            ValueError: If a variable holds an invalid value
        """
        chain_id = os.getenv("ETH_CHAIN_ID")

        return cls(
            rpc=RpcConfig(
                endpoint=os.getenv("ETH_RPC_URL", DEFAULT_RPC_URL).strip(),
                timeout=int(os.getenv("ETH_RPC_TIMEOUT", "30")),
                max_retries=int(os.getenv("ETH_RPC_RETRIES", "3")),
                backoff_factor=float(os.getenv("ETH_RPC_BACKOFF", "2.0")),
            ),
            transactions=TransactionConfig(
                default_gas_limit=int(
                    os.getenv("ETH_DEFAULT_GAS_LIMIT", str(DEFAULT_GAS_LIMIT)), 0
                ),
                chain_id=int(chain_id) if chain_id else None,
            ),
            logging=LoggingConfig(level=os.getenv("ETH_LOG_LEVEL", "INFO")),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary."""
        return asdict(self)

    def save_yaml(self, yaml_path: str | Path) -> None:
        """
        Save configuration to YAML file.

        Args:
            yaml_path: Path to save YAML file
        """
        yaml_path = Path(yaml_path)
        yaml_path.parent.mkdir(parents=True, exist_ok=True)

        with open(yaml_path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

        logger.info(f"Configuration saved to {yaml_path}")
