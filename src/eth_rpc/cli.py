"""
Command line interface for eth-rpc.

Usage:
    eth-rpc selector "transfer(address,uint256)"

    eth-rpc decode --types uint256,address 0x...

    eth-rpc call --to 0x... --method "balanceOf(address)" --arg 0x... \\
        --abi erc20 --rpc-url https://mainnet.infura.io/v3/<key>

RPC settings are read from configs/client_config.yaml when --config is given,
otherwise from ETH_RPC_* environment variables.
"""

import json
import logging
import sys
from pathlib import Path

import click
import yaml
from eth_abi.exceptions import EncodingError

from .abi.decoder import decode_raw_output
from .abi.encoder import encode_tx_data, method_selector
from .abi.exceptions import AbiError
from .client.exceptions import RpcError
from .client.rpc import EthRpc
from .core.config import ClientConfig
from .core.utils import get_method_output_parameters, load_abi, setup_logging

logger = logging.getLogger(__name__)


def load_config(config_path: Path | None = None) -> ClientConfig:
    """Load client configuration from YAML, or from the environment if no file is given."""
    if config_path is None:
        return ClientConfig.from_env()

    try:
        return ClientConfig.from_yaml(config_path)
    except yaml.YAMLError as e:
        logger.error(f"Invalid YAML in config file: {e}")
        sys.exit(1)


def parse_types(types: str) -> list[str]:
    """Split a comma-separated type list."""
    return [t.strip() for t in types.split(",") if t.strip()]


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(
        ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False
    ),
    default="WARNING",
    help="Logging level",
)
def main(log_level: str) -> None:
    """Ethereum JSON-RPC client and ABI codec."""
    setup_logging(level=log_level)


@main.command()
@click.argument("signature")
@click.option(
    "--arg",
    "args",
    multiple=True,
    help="Argument value (repeat for each parameter); prints full call data",
)
def selector(signature: str, args: tuple[str, ...]) -> None:
    """Print the method selector, or call data when arguments are given."""
    try:
        click.echo(encode_tx_data(signature, args) if args else method_selector(signature))
    except (AbiError, EncodingError, ValueError) as e:
        logger.error(f"Encoding failed: {e}")
        sys.exit(1)


@main.command()
@click.option(
    "--types",
    required=True,
    help="Comma-separated output types, e.g. uint256,address",
)
@click.argument("raw_output")
def decode(types: str, raw_output: str) -> None:
    """Decode ABI-encoded call output and print it as JSON."""
    try:
        values = decode_raw_output(parse_types(types), raw_output)
    except AbiError as e:
        logger.error(f"Decoding failed: {e}")
        sys.exit(1)

    click.echo(json.dumps(values))


@main.command()
@click.option("--to", required=True, help="Contract address")
@click.option(
    "--method", "method_signature", required=True, help='Signature, e.g. "totalSupply()"'
)
@click.option("--arg", "args", multiple=True, help="Argument value (repeatable)")
@click.option("--types", default=None, help="Comma-separated output types to decode")
@click.option(
    "--abi",
    default=None,
    help="ABI name (bundled) or path; output types are read from it",
)
@click.option(
    "--block", "block_number", default="latest", help="Block number (hex) or latest"
)
@click.option(
    "--rpc-url",
    default=None,
    help="Ethereum RPC endpoint URL (overrides config if provided)",
)
@click.option(
    "--config",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to client config YAML file",
)
def call(
    to: str,
    method_signature: str,
    args: tuple[str, ...],
    types: str | None,
    abi: str | None,
    block_number: str,
    rpc_url: str | None,
    config: Path | None,
) -> None:
    """Call a contract method and print the (decoded) result."""
    try:
        cfg = load_config(config)

        output_types = None
        if types:
            output_types = parse_types(types)
        elif abi:
            output_types = get_method_output_parameters(load_abi(abi), method_signature)

        client = EthRpc(config=cfg, rpc_url=rpc_url)
        raw = client.eth.call(
            to=to,
            method_signature=method_signature,
            args=args,
            block_number=block_number,
        )

        if output_types is None:
            click.echo(raw)
        else:
            click.echo(json.dumps(decode_raw_output(output_types, raw)))

    except FileNotFoundError as e:
        logger.error(f"ABI not found: {e}")
        sys.exit(1)
    except (AbiError, EncodingError, RpcError, ValueError) as e:
        logger.error(f"Call failed: {e}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
