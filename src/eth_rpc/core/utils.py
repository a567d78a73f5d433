"""
Utility functions for working with contract ABIs.

This module provides:
- ABI loading from JSON files
- Output type lookup for contract methods
- Logging setup for the command line
"""

import json
import logging
from pathlib import Path
from typing import Any, Iterator

logger = logging.getLogger(__name__)

DEFAULT_ABIS_DIR = Path(__file__).parent.parent / "abis"


def load_abi(abi_name: str, abis_dir: Path | None = None) -> list[dict[str, Any]]:
    """
    Load ABI from JSON file.

    Bundled ABIs live in the package's abis/ directory (erc20.json).
    A path to an existing file is loaded as-is.

    Args:
        abi_name: Name of ABI file (with or without .json extension), or a path
        abis_dir: Optional custom directory path. Defaults to the bundled ABIs

    Returns:
        ABI as list of dictionaries

    Raises:
        FileNotFoundError: If ABI file does not exist
        json.JSONDecodeError: If ABI file is not valid JSON

    Example:
        >>> erc20_abi = load_abi('erc20')
        >>> get_method_output_parameters(erc20_abi, 'decimals()')
        ['uint8']
    """
    candidate = Path(abi_name)
    if candidate.is_file():
        abi_path = candidate
    else:
        if abis_dir is None:
            abis_dir = DEFAULT_ABIS_DIR

        if not abi_name.endswith(".json"):
            abi_name += ".json"

        abi_path = abis_dir / abi_name

    if not abi_path.exists():
        raise FileNotFoundError(
            f"ABI file not found: {abi_path}. "
            f"Please ensure the ABI is saved in {abis_dir}"
        )

    try:
        with open(abi_path, "r") as f:
            abi = json.load(f)

        logger.debug(f"Loaded ABI from {abi_path}")
        return abi

    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in ABI file {abi_path}: {e}")
        raise


def _iter_output_types(contract_abi: list[dict[str, Any]], method: str) -> Iterator[str]:
    name = method.split("(")[0]
    for entry in contract_abi:
        if entry.get("name") == name:
            yield from (output["type"] for output in entry.get("outputs", []))


def get_method_output_parameters(
    contract_abi: list[dict[str, Any]], method: str
) -> list[str]:
    """
    Get the declared output types of a contract method.

    Overloads are not disambiguated: the outputs of every ABI entry sharing
    the method name are concatenated in declaration order.

    Args:
        contract_abi: Contract ABI (list of entries)
        method: Method name or signature, e.g. "balanceOf" or "balanceOf(address)"

    Returns:
        List of output type strings
    """
    return list(_iter_output_types(contract_abi, method))


def setup_logging(level: str = "INFO", log_format: str | None = None) -> None:
    """
    Configure logging for command line use.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Custom log format string. Uses default if None.
    """
    if log_format is None:
        log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format=log_format,
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Reduce noise from web3 and urllib3 loggers
    logging.getLogger("web3").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
